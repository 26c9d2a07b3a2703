"""Search index gateway — Entity-level operations on one search index.

The gateway binds a backend, a codec and an entity type together. It is
the only place where backend errors are translated into the domain
taxonomy:

  - connection and query failures become ``SearchUnavailable``
  - a missing document becomes ``None`` (get) or a no-op (delete)
  - codec errors propagate as ``MappingFailure`` untouched
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from searchsync.adapters.base.adapter import IndexBackend
from searchsync.adapters.base.exceptions import AdapterError, DocumentNotFoundError
from searchsync.codec.codec import DocumentCodec
from searchsync.exceptions import InvalidEntityError, SearchUnavailable
from searchsync.models.entity import DomainEntity

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=DomainEntity)

DEFAULT_QUERY_LIMIT = 100


class SearchIndexGateway(Generic[E]):
    """Index, fetch, delete and query entities of a single type.

    Args:
        backend: Initialized index backend. Shared, never closed here.
        codec: Document codec used in both directions.
        entity_type: Entity class stored in the index.
        index_name: Index to use. Defaults to ``entity_type.index_name()``.
        query_limit: Maximum hits returned by ``query``.
    """

    def __init__(
        self,
        backend: IndexBackend,
        codec: DocumentCodec,
        entity_type: type[E],
        index_name: str | None = None,
        query_limit: int = DEFAULT_QUERY_LIMIT,
    ) -> None:
        self.backend = backend
        self.codec = codec
        self.entity_type = entity_type
        self.index_name = index_name or entity_type.index_name()
        self.query_limit = query_limit

    async def index(self, entity: E) -> None:
        """Write or overwrite the index record for ``entity``."""
        if entity.id is None:
            raise InvalidEntityError(f"Cannot index a {self.entity_type.__name__} without an id")
        document = self.codec.encode(entity)
        try:
            await self.backend.upsert(self.index_name, str(entity.id), document)
        except AdapterError as e:
            raise SearchUnavailable(f"Indexing {self._ref(entity.id)} failed: {e}", operation="index") from e
        logger.debug("Indexed %s", self._ref(entity.id))

    async def delete(self, entity_id: int) -> None:
        """Remove the index record for ``entity_id``; an absent record is not an error."""
        try:
            await self.backend.delete(self.index_name, str(entity_id))
        except DocumentNotFoundError:
            logger.debug("No index record to delete for %s", self._ref(entity_id))
            return
        except AdapterError as e:
            raise SearchUnavailable(f"Deleting {self._ref(entity_id)} failed: {e}", operation="delete") from e
        logger.debug("Deleted index record for %s", self._ref(entity_id))

    async def get(self, entity_id: int) -> E | None:
        """Fetch one entity from the index, or ``None`` if it has no record."""
        try:
            source = await self.backend.fetch(self.index_name, str(entity_id))
        except DocumentNotFoundError:
            return None
        except AdapterError as e:
            raise SearchUnavailable(f"Fetching {self._ref(entity_id)} failed: {e}", operation="get") from e
        return self.codec.read_object(source, self.entity_type)

    async def query(self, text: str, limit: int | None = None) -> list[E]:
        """Free-text search, results in the engine's relevance order."""
        if not text or not text.strip():
            return []
        limit = self.query_limit if limit is None else limit
        try:
            hits = await self.backend.search_hits(self.index_name, text, limit)
        except AdapterError as e:
            raise SearchUnavailable(f"Query on index '{self.index_name}' failed: {e}", operation="query") from e
        return [self.codec.read_object(hit.source, self.entity_type) for hit in hits]

    def _ref(self, entity_id: object) -> str:
        return f"{self.entity_type.__name__}#{entity_id}"
