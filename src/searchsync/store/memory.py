"""In-memory primary store with sequential identifiers."""

from __future__ import annotations

from typing import Generic, TypeVar

from searchsync.models.entity import DomainEntity

E = TypeVar("E", bound=DomainEntity)


class InMemoryStore(Generic[E]):
    """Dict-backed ``PrimaryStore``. Entities are copied in and out.

    New ids always come after the highest id ever saved, including ids
    supplied by the caller, and are never reused after a delete.
    """

    def __init__(self) -> None:
        self._rows: dict[int, E] = {}
        self._next_id = 1

    async def save(self, entity: E) -> E:
        stored = entity.model_copy(deep=True)
        if stored.id is None:
            stored.id = self._next_id
        self._next_id = max(self._next_id, stored.id + 1)
        self._rows[stored.id] = stored
        return stored.model_copy(deep=True)

    async def find_by_id(self, entity_id: int) -> E | None:
        row = self._rows.get(entity_id)
        return row.model_copy(deep=True) if row is not None else None

    async def find_all(self) -> list[E]:
        return [row.model_copy(deep=True) for row in self._rows.values()]

    async def delete(self, entity_id: int) -> None:
        self._rows.pop(entity_id, None)
