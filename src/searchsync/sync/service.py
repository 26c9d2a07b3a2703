"""Sync service — Orders writes across the primary store and the search index.

The primary store is the source of truth and the index is best effort:

  1. Every mutation is committed to the primary store first.
  2. Only then is the same change pushed to the search index.
  3. If the index write fails, the primary store change stands. The failure
     is logged and recorded as a ``Divergence`` and the caller receives a
     ``SyncResult`` with ``indexed=False``.

Whether an entity is indexed is not persisted anywhere; healing divergence
is left to an external reconciliation job. Read paths propagate index
errors unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from searchsync.exceptions import (
    EntityNotFoundError,
    InvalidEntityError,
    MappingFailure,
    SearchSyncError,
    SearchUnavailable,
)
from searchsync.gateway import SearchIndexGateway
from searchsync.models.entity import DomainEntity
from searchsync.observability.logging import get_logger
from searchsync.store.base import PrimaryStore
from searchsync.sync.divergence import Divergence, DivergenceLog

logger = get_logger(__name__)

E = TypeVar("E", bound=DomainEntity)


class SyncResult(BaseModel, Generic[E]):
    """Outcome of a write: the committed entity and whether the index followed."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entity: E | None = Field(default=None, description="Entity as committed by the primary store")
    indexed: bool = Field(description="Whether the index write succeeded")
    error: SearchSyncError | None = Field(default=None, description="Index-side failure, if any")


class SyncService(Generic[E]):
    """Create, update, delete and search entities of one type.

    Args:
        store: Primary store for the entity type.
        gateway: Search index gateway for the same entity type.
        divergence_log: Where failed index writes are recorded. A fresh
            log is created when omitted.
    """

    def __init__(
        self,
        store: PrimaryStore[E],
        gateway: SearchIndexGateway[E],
        divergence_log: DivergenceLog | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.divergence_log = divergence_log if divergence_log is not None else DivergenceLog()
        self._entity_name = gateway.entity_type.__name__

    # ── Writes ───────────────────────────────────────────────────────────

    async def create(self, entity: E) -> SyncResult[E]:
        """Persist a new entity, then index it."""
        logger.debug("create_requested", entity_type=self._entity_name)
        if entity.id is not None:
            raise InvalidEntityError(f"A new {self._entity_name.lower()} cannot already have an ID")
        saved = await self.store.save(entity)
        return await self._index(saved)

    async def update(self, entity: E) -> SyncResult[E]:
        """Persist changes to an existing entity, then re-index it."""
        logger.debug("update_requested", entity_type=self._entity_name, entity_id=entity.id)
        if entity.id is None:
            raise InvalidEntityError("Invalid id")
        saved = await self.store.save(entity)
        return await self._index(saved)

    async def delete(self, entity_id: int) -> SyncResult[E]:
        """Delete from the primary store, then drop the index record."""
        logger.debug("delete_requested", entity_type=self._entity_name, entity_id=entity_id)
        await self.store.delete(entity_id)
        try:
            await self.gateway.delete(entity_id)
        except (SearchUnavailable, MappingFailure) as e:
            self._diverged("delete", entity_id, e)
            return SyncResult(indexed=False, error=e)
        return SyncResult(indexed=True)

    # ── Reads ────────────────────────────────────────────────────────────

    async def get(self, entity_id: int) -> E | None:
        """Read one entity from the primary store."""
        return await self.store.find_by_id(entity_id)

    async def require(self, entity_id: int) -> E:
        """Like ``get``, but a missing entity raises ``EntityNotFoundError``."""
        entity = await self.store.find_by_id(entity_id)
        if entity is None:
            raise EntityNotFoundError(f"{self._entity_name} #{entity_id} not found")
        return entity

    async def find_all(self) -> Sequence[E]:
        """Read every entity from the primary store."""
        return await self.store.find_all()

    async def search(self, text: str) -> list[E]:
        """Free-text search against the index. Results may lag the primary store."""
        logger.debug("search_requested", entity_type=self._entity_name, query=text)
        return await self.gateway.query(text)

    # ── Helpers ──────────────────────────────────────────────────────────

    async def _index(self, saved: E) -> SyncResult[E]:
        try:
            await self.gateway.index(saved)
        except (SearchUnavailable, MappingFailure) as e:
            self._diverged("index", saved.id, e)
            return SyncResult(entity=saved, indexed=False, error=e)
        return SyncResult(entity=saved, indexed=True)

    def _diverged(self, operation: str, entity_id: int | None, error: SearchSyncError) -> None:
        logger.warning(
            "index_divergence",
            entity_type=self._entity_name,
            entity_id=entity_id,
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
        )
        self.divergence_log.record(
            Divergence(
                entity_type=self._entity_name,
                entity_id=entity_id,
                operation=operation,
                error_type=type(error).__name__,
                message=str(error),
            )
        )
