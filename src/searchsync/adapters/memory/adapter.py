"""In-memory backend — Process-local index for tests and local runs.

Documents are stored as JSON text so that what comes back is exactly what
a networked engine would return. Relevance is plain term frequency over
every string value in the document; ties keep insertion order.

``available`` can be switched off to make every call fail the way an
unreachable engine would.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

from searchsync.adapters.base.adapter import BackendHealth, IndexBackend, RawResults, SearchHit
from searchsync.adapters.base.exceptions import ConnectionError, DocumentNotFoundError

_TOKEN = re.compile(r"\w+")


def _tokens(text: str) -> list[str]:
    return _TOKEN.findall(text.lower())


def _strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _strings(item)
    elif isinstance(value, list):
        for item in value:
            yield from _strings(item)


class InMemoryBackend(IndexBackend):
    """Index backend holding documents in a dict per index.

    Args:
        available: Whether the backend starts reachable.
        **kwargs: Ignored; accepted so configuration can be shared with
            networked backends.
    """

    def __init__(self, available: bool = True, **kwargs: Any) -> None:
        self.available = available
        self._indices: dict[str, dict[str, str]] = {}

    @property
    def name(self) -> str:
        return "memory"

    async def initialize(self) -> None:
        self._check_available()

    async def shutdown(self) -> None:
        self._indices.clear()

    async def upsert(self, index: str, doc_id: str, document: dict[str, Any]) -> None:
        self._check_available()
        self._indices.setdefault(index, {})[doc_id] = json.dumps(document, separators=(",", ":"))

    async def delete(self, index: str, doc_id: str) -> None:
        self._check_available()
        try:
            del self._indices.get(index, {})[doc_id]
        except KeyError as e:
            raise DocumentNotFoundError(f"Document '{doc_id}' not found.") from e

    async def fetch(self, index: str, doc_id: str) -> dict[str, Any]:
        self._check_available()
        stored = self._indices.get(index, {}).get(doc_id)
        if stored is None:
            raise DocumentNotFoundError(f"Document '{doc_id}' not found.")
        return json.loads(stored)

    async def search(self, index: str, query: str, limit: int) -> RawResults:
        self._check_available()
        terms = set(_tokens(query))
        scored: list[dict[str, Any]] = []
        for doc_id, stored in self._indices.get(index, {}).items():
            source = json.loads(stored)
            words = [w for text in _strings(source) for w in _tokens(text)]
            score = float(sum(1 for w in words if w in terms))
            if score > 0:
                scored.append({"id": doc_id, "score": score, "source": source})

        # sorted() is stable, so equal scores keep insertion order
        ranked = sorted(scored, key=lambda hit: hit["score"], reverse=True)
        return RawResults(total_hits=len(ranked), documents=ranked[:limit])

    def map_hit(self, raw_hit: dict[str, Any]) -> SearchHit:
        return SearchHit(id=raw_hit["id"], score=raw_hit["score"], source=raw_hit["source"])

    async def health_check(self) -> BackendHealth:
        if not self.available:
            return BackendHealth(status="unhealthy", message="Backend marked unavailable")
        return BackendHealth(
            status="healthy",
            last_check=datetime.now(UTC).isoformat(),
            message=f"Indices: {len(self._indices)}",
        )

    def count(self, index: str) -> int:
        """Number of documents currently held in ``index``."""
        return len(self._indices.get(index, {}))

    def _check_available(self) -> None:
        if not self.available:
            raise ConnectionError("In-memory backend is unavailable.")
