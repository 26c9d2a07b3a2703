"""Base domain entity — Identity-bearing record owned by the primary store.

Fields are snake_case in Python and camelCase in search documents, matching
the JSON the rest of the application exchanges.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class DomainEntity(BaseModel):
    """Typed record with a stable identifier.

    ``id`` stays ``None`` until the primary store persists the entity.
    Naive datetime fields are taken as UTC and stored timezone-aware.
    Subclasses may set ``search_index`` to override the search index name,
    which otherwise defaults to the lower-cased class name.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search_index: ClassVar[str | None] = None

    id: int | None = Field(default=None, description="Primary store identifier")

    @classmethod
    def index_name(cls) -> str:
        """Name of the search index holding this entity type."""
        return cls.search_index or cls.__name__.lower()

    @field_validator("*")
    @classmethod
    def _timestamps_in_utc(cls, value: Any) -> Any:
        # Naive timestamps are UTC, the same reading the codec gives them
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
