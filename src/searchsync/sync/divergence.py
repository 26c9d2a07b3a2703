"""Divergence records — Index writes that failed after the primary store committed.

Nothing here is durable. The log is what an external reconciliation job or
an operator reads to learn which index records are stale.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Divergence(BaseModel):
    """One failed index write for an entity the primary store already holds."""

    entity_type: str = Field(description="Entity class name")
    entity_id: int | None = Field(default=None, description="Primary store identifier")
    operation: str = Field(description="Index operation that failed: index, delete")
    error_type: str = Field(description="Exception class name, e.g. SearchUnavailable")
    message: str = Field(description="Error message")
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class DivergenceLog:
    """Bounded, in-process record of divergences, oldest dropped first."""

    def __init__(self, max_entries: int = 1000) -> None:
        self._entries: deque[Divergence] = deque(maxlen=max_entries)

    def record(self, divergence: Divergence) -> None:
        self._entries.append(divergence)

    def entries(self) -> list[Divergence]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Divergence]:
        return iter(list(self._entries))
