"""OpenSearch backend — Entity index storage on OpenSearch (v2+).

OpenSearch is an AWS-maintained fork of Elasticsearch with a compatible
query DSL and API surface.  This backend uses ``opensearch-py`` (async)
and keeps one index per entity type, each document keyed by entity id.
Free-text queries use ``query_string`` so callers can use Lucene syntax.

Install the optional dependency::

    pip install searchsync[opensearch]
    # or: pip install opensearch-py
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

from searchsync.adapters.base.adapter import BackendHealth, IndexBackend, RawResults, SearchHit
from searchsync.adapters.base.exceptions import (
    ConfigurationError,
    ConnectionError,
    DocumentNotFoundError,
    QueryError,
)

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = ("ConnectionError", "ConnectionTimeout", "SSLError")


class OpenSearchBackend(IndexBackend):
    """Index backend for OpenSearch (v2+).

    Args:
        hosts: List of OpenSearch node URLs.
        username: Optional HTTP basic-auth username.
        password: Optional HTTP basic-auth password.
        verify_certs: Whether to verify TLS certificates.
        refresh: Refresh policy for writes (``False``, ``True`` or ``"wait_for"``).
        **kwargs: Additional keyword arguments forwarded to ``AsyncOpenSearch``.
    """

    def __init__(
        self,
        hosts: list[str] | None = None,
        username: str | None = None,
        password: str | None = None,
        verify_certs: bool = True,
        refresh: bool | str = False,
        **kwargs: Any,
    ) -> None:
        self._hosts = hosts or ["https://localhost:9200"]
        self._username = username
        self._password = password
        self._verify_certs = verify_certs
        self._refresh = refresh
        self._extra_kwargs = kwargs
        self._client: Any = None

    @property
    def name(self) -> str:
        return "opensearch"

    async def initialize(self) -> None:
        """Create and verify the ``AsyncOpenSearch`` client."""
        try:
            from opensearchpy import AsyncOpenSearch
        except ImportError as e:
            raise ConfigurationError(
                "opensearch-py package is required.  Install with: pip install searchsync[opensearch]"
            ) from e

        client_kwargs: dict[str, Any] = {
            "hosts": self._hosts,
            "verify_certs": self._verify_certs,
            "ssl_show_warn": False,
        }
        if self._username and self._password:
            client_kwargs["http_auth"] = (self._username, self._password)

        client_kwargs.update(self._extra_kwargs)

        try:
            self._client = AsyncOpenSearch(**client_kwargs)
            info = await self._client.info()
            version = info.get("version", {}).get("number", "unknown")
            cluster = info.get("cluster_name", "unknown")
            logger.info("Connected to OpenSearch cluster: %s (v%s)", cluster, version)
        except Exception as e:
            raise ConnectionError(f"Failed to connect to OpenSearch: {e}") from e

    async def shutdown(self) -> None:
        """Close the OpenSearch client."""
        if self._client:
            await self._client.close()
            self._client = None

    # ── Documents ────────────────────────────────────────────────────────

    async def upsert(self, index: str, doc_id: str, document: dict[str, Any]) -> None:
        """Index ``document`` under ``doc_id``, replacing any previous version."""
        client = self._require_client()
        try:
            await client.index(index=index, id=doc_id, body=document, refresh=self._refresh)
        except Exception as e:
            raise self._translate(e, f"Failed to index document '{doc_id}'") from e

    async def delete(self, index: str, doc_id: str) -> None:
        """Delete the document stored under ``doc_id``."""
        client = self._require_client()
        try:
            await client.delete(index=index, id=doc_id, refresh=self._refresh)
        except Exception as e:
            if "NotFoundError" in type(e).__name__:
                raise DocumentNotFoundError(f"Document '{doc_id}' not found.") from e
            raise self._translate(e, f"Failed to delete document '{doc_id}'") from e

    async def fetch(self, index: str, doc_id: str) -> dict[str, Any]:
        """Retrieve the ``_source`` of a single document."""
        client = self._require_client()
        try:
            response = await client.get(index=index, id=doc_id)
        except Exception as e:
            if "NotFoundError" in type(e).__name__:
                raise DocumentNotFoundError(f"Document '{doc_id}' not found.") from e
            raise self._translate(e, "Failed to fetch document") from e
        if not response.get("found", True):
            raise DocumentNotFoundError(f"Document '{doc_id}' not found.")
        return dict(response.get("_source", {}))

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, index: str, query: str, limit: int) -> RawResults:
        """Execute a ``query_string`` query against one index."""
        client = self._require_client()

        body: dict[str, Any] = {
            "query": {"query_string": {"query": query}},
            "size": limit,
            "_source": True,
        }

        try:
            start = time.monotonic()
            response = await client.search(index=index, body=body)
            took_ms = int((time.monotonic() - start) * 1000)
        except Exception as e:
            if "NotFoundError" in type(e).__name__:
                # Nothing has been indexed into this index yet
                return RawResults()
            raise self._translate(e, "OpenSearch query failed") from e

        hits = response.get("hits", {})
        total = hits.get("total", {})
        return RawResults(
            total_hits=total.get("value", 0) if isinstance(total, dict) else int(total),
            documents=list(hits.get("hits", [])),
            metadata={"took_os_ms": response.get("took", 0)},
            took_ms=took_ms,
        )

    def map_hit(self, raw_hit: dict[str, Any]) -> SearchHit:
        """Map an OpenSearch hit to ``SearchHit``."""
        return SearchHit(
            id=str(raw_hit.get("_id", "")),
            score=raw_hit.get("_score") or 0.0,
            source=raw_hit.get("_source", {}),
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> BackendHealth:
        """Check OpenSearch cluster health."""
        if not self._client:
            return BackendHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            health = await self._client.cluster.health()
            latency_ms = int((time.monotonic() - start) * 1000)

            status_map = {"green": "healthy", "yellow": "degraded", "red": "unhealthy"}

            return BackendHealth(
                status=status_map.get(health.get("status", "red"), "unhealthy"),
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Cluster: {health.get('cluster_name')}, Nodes: {health.get('number_of_nodes')}",
            )
        except Exception as e:
            return BackendHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require_client(self) -> Any:
        if not self._client:
            raise ConnectionError("OpenSearch client not initialized.")
        return self._client

    @staticmethod
    def _translate(error: Exception, message: str) -> Exception:
        """Pick the backend exception type for an ``opensearch-py`` error."""
        if type(error).__name__ in _TRANSPORT_ERRORS:
            return ConnectionError(f"{message}: {error}")
        return QueryError(f"{message}: {error}")
