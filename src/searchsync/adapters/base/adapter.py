"""Base index backend — Abstract interface for all search engine connectors.

Every search engine must implement this interface to hold entity documents.
The backend is responsible for:
  1. Upserting, fetching and deleting documents by id within a named index
  2. Executing free-text queries ranked by relevance
  3. Mapping raw hits to the standard ``SearchHit`` shape
  4. Reporting health status

Backends know nothing about entity types; they store and return plain
JSON documents produced by the codec.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class BackendHealth(BaseModel):
    """Health status of an index backend."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class SearchHit(BaseModel):
    """A single ranked hit, normalized across backends."""

    id: str = Field(description="Document identifier within its index")
    score: float = Field(default=0.0, description="Relevance score from the backend")
    source: dict[str, Any] = Field(default_factory=dict, description="Stored document")


class RawResults(BaseModel):
    """Raw search results from a backend before normalization."""

    total_hits: int = Field(default=0, description="Total number of matching documents")
    documents: list[dict[str, Any]] = Field(default_factory=list, description="Raw hit dicts, best first")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Backend-specific metadata")
    took_ms: int = Field(default=0, description="Backend query execution time in ms")


class IndexBackend(ABC):
    """Abstract base class for search engine backends.

    All backends must implement:
      - upsert() / delete() / fetch(): Document operations keyed by id
      - search(): Execute a free-text query and return raw results
      - map_hit(): Normalize a raw hit to ``SearchHit``
      - health_check(): Report backend health status

    A backend holds a single long-lived client handle shared by all callers
    and performs no locking of its own.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique backend name (e.g., 'opensearch', 'meilisearch')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create the client handle and verify connectivity.

        Called once before the backend is used.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """Close the client handle and release resources."""

    @abstractmethod
    async def upsert(self, index: str, doc_id: str, document: dict[str, Any]) -> None:
        """Create or overwrite the document stored under ``doc_id``.

        Args:
            index: Index name.
            doc_id: Document identifier.
            document: JSON-compatible document body.
        """

    @abstractmethod
    async def delete(self, index: str, doc_id: str) -> None:
        """Remove a document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def fetch(self, index: str, doc_id: str) -> dict[str, Any]:
        """Retrieve the stored document body for ``doc_id``.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def search(self, index: str, query: str, limit: int) -> RawResults:
        """Execute a free-text query.

        Args:
            index: Index name.
            query: Free-text query string.
            limit: Maximum number of hits to return.

        Returns:
            Raw hits ordered by relevance, best first.
        """

    @abstractmethod
    def map_hit(self, raw_hit: dict[str, Any]) -> SearchHit:
        """Map a raw backend hit to ``SearchHit``."""

    @abstractmethod
    async def health_check(self) -> BackendHealth:
        """Check the health of the search engine."""

    async def search_hits(self, index: str, query: str, limit: int) -> list[SearchHit]:
        """Search and normalize results in one step, preserving rank order."""
        raw = await self.search(index, query, limit)
        return [self.map_hit(doc) for doc in raw.documents]
