"""MeiliSearch backend — Entity index storage on MeiliSearch.

This backend communicates via the official REST API using ``httpx``.
Each entity type maps to one MeiliSearch index whose primary key is
``id``. MeiliSearch applies writes asynchronously through tasks; pass
``wait_for_tasks=True`` to block until each write task has finished.

Usage::

    backend = MeiliSearchBackend(
        base_url="http://localhost:7700",
        api_key="your-master-key",
    )
    await backend.initialize()
    await backend.upsert("region", "1", {"id": 1, "regionName": "North"})
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx

from searchsync.adapters.base.adapter import BackendHealth, IndexBackend, RawResults, SearchHit
from searchsync.adapters.base.exceptions import (
    ConnectionError,
    DocumentNotFoundError,
    QueryError,
)

logger = logging.getLogger(__name__)


class MeiliSearchBackend(IndexBackend):
    """Index backend for MeiliSearch.

    Communicates with MeiliSearch via its `REST API`_ over HTTP.

    .. _REST API: https://www.meilisearch.com/docs/reference/api/overview

    Args:
        base_url: MeiliSearch instance URL, e.g. ``"http://localhost:7700"``.
        api_key: Master key or API key for authentication.
        timeout: HTTP request timeout in seconds.
        wait_for_tasks: Poll write tasks until they succeed or fail.
        task_poll_interval: Seconds between task status polls.
        task_timeout: Seconds to wait for a write task before giving up.
        **kwargs: Extra keyword arguments stored for future use.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:7700",
        api_key: str | None = None,
        timeout: float = 30.0,
        wait_for_tasks: bool = False,
        task_poll_interval: float = 0.1,
        task_timeout: float = 10.0,
        **kwargs: Any,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._wait_for_tasks = wait_for_tasks
        self._task_poll_interval = task_poll_interval
        self._task_timeout = task_timeout
        self._extra_kwargs = kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "meilisearch"

    async def initialize(self) -> None:
        """Create an ``httpx.AsyncClient`` and verify connection to MeiliSearch."""
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers=headers,
        )

        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            data = resp.json()
            if data.get("status") != "available":
                raise ConnectionError(f"MeiliSearch not available: {data}")
            logger.info("Connected to MeiliSearch at %s", self._base_url)
        except httpx.HTTPError as e:
            raise ConnectionError(f"Failed to connect to MeiliSearch: {e}") from e

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Documents ────────────────────────────────────────────────────────

    async def upsert(self, index: str, doc_id: str, document: dict[str, Any]) -> None:
        """Add or replace a document (``POST /indexes/{index}/documents``)."""
        client = self._require_client()
        try:
            resp = await client.post(
                f"/indexes/{index}/documents",
                params={"primaryKey": "id"},
                json=[document],
            )
            resp.raise_for_status()
            await self._await_task(resp)
        except httpx.HTTPError as e:
            raise self._translate(e, f"Failed to index document '{doc_id}'") from e

    async def delete(self, index: str, doc_id: str) -> None:
        """Delete a document. MeiliSearch accepts deletes of absent documents."""
        client = self._require_client()
        try:
            resp = await client.delete(f"/indexes/{index}/documents/{doc_id}")
            if resp.status_code == 404:
                raise DocumentNotFoundError(f"Document '{doc_id}' not found.")
            resp.raise_for_status()
            await self._await_task(resp)
        except httpx.HTTPError as e:
            raise self._translate(e, f"Failed to delete document '{doc_id}'") from e

    async def fetch(self, index: str, doc_id: str) -> dict[str, Any]:
        """Retrieve a single document by its primary key."""
        client = self._require_client()
        try:
            resp = await client.get(f"/indexes/{index}/documents/{doc_id}")
            if resp.status_code == 404:
                raise DocumentNotFoundError(f"Document '{doc_id}' not found.")
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise self._translate(e, "Failed to fetch document from MeiliSearch") from e

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, index: str, query: str, limit: int) -> RawResults:
        """Execute a search query using the ``/indexes/{index}/search`` endpoint."""
        client = self._require_client()

        payload: dict[str, Any] = {
            "q": query,
            "limit": limit,
            "offset": 0,
            "showRankingScore": True,
        }

        try:
            start = time.monotonic()
            resp = await client.post(f"/indexes/{index}/search", json=payload)
            if resp.status_code == 404:
                # Index is created lazily by the first write
                return RawResults()
            resp.raise_for_status()
            took_ms = int((time.monotonic() - start) * 1000)
        except httpx.HTTPError as e:
            raise self._translate(e, "MeiliSearch query failed") from e

        data = resp.json()
        hits = data.get("hits", [])
        return RawResults(
            total_hits=data.get("estimatedTotalHits", data.get("totalHits", len(hits))),
            documents=hits,
            metadata={"processing_time_ms": data.get("processingTimeMs", 0)},
            took_ms=took_ms,
        )

    def map_hit(self, raw_hit: dict[str, Any]) -> SearchHit:
        """Map a MeiliSearch hit to ``SearchHit``.

        MeiliSearch returns flat documents with engine metadata under
        underscore-prefixed keys (``_rankingScore``, ``_formatted``), which
        are stripped from the source.
        """
        return SearchHit(
            id=str(raw_hit.get("id", "")),
            score=raw_hit.get("_rankingScore", 0.0),
            source={k: v for k, v in raw_hit.items() if not k.startswith("_")},
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> BackendHealth:
        """Check MeiliSearch health."""
        if not self._client:
            return BackendHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            resp = await self._client.get("/health")
            latency_ms = int((time.monotonic() - start) * 1000)

            if resp.status_code == 200:
                status = resp.json().get("status", "unknown")
                return BackendHealth(
                    status="healthy" if status == "available" else "degraded",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"status: {status}",
                )
            return BackendHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"MeiliSearch returned HTTP {resp.status_code}",
            )
        except Exception as e:
            return BackendHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise ConnectionError("MeiliSearch client not initialized.")
        return self._client

    async def _await_task(self, resp: httpx.Response) -> None:
        """Poll the task enqueued by a write until it finishes, if configured to."""
        if not self._wait_for_tasks:
            return
        task_uid = resp.json().get("taskUid")
        if task_uid is None:
            return

        client = self._require_client()
        deadline = time.monotonic() + self._task_timeout
        while time.monotonic() < deadline:
            task = await client.get(f"/tasks/{task_uid}")
            task.raise_for_status()
            data = task.json()
            status = data.get("status")
            if status == "succeeded":
                return
            if status in ("failed", "canceled"):
                error = data.get("error") or {}
                raise QueryError(f"MeiliSearch task {task_uid} {status}: {error.get('message', 'unknown error')}")
            await asyncio.sleep(self._task_poll_interval)
        raise QueryError(f"MeiliSearch task {task_uid} did not finish within {self._task_timeout}s")

    @staticmethod
    def _translate(error: httpx.HTTPError, message: str) -> Exception:
        """Pick the backend exception type for an ``httpx`` error."""
        if isinstance(error, httpx.TransportError):
            return ConnectionError(f"{message}: {error}")
        return QueryError(f"{message}: {error}")
