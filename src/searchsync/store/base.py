"""Primary store contract — The narrow interface the sync service depends on."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TypeVar

from searchsync.models.entity import DomainEntity

E = TypeVar("E", bound=DomainEntity)


class PrimaryStore(Protocol[E]):
    """Source of truth for entities of one type.

    Implementations assign identifiers on first save.
    """

    async def save(self, entity: E) -> E:
        """Insert or update ``entity`` and return the stored state, id included."""
        ...

    async def find_by_id(self, entity_id: int) -> E | None:
        """Return the entity with ``entity_id``, or ``None``."""
        ...

    async def find_all(self) -> Sequence[E]:
        """Return every stored entity."""
        ...

    async def delete(self, entity_id: int) -> None:
        """Remove the entity with ``entity_id``; absent ids are ignored."""
        ...
