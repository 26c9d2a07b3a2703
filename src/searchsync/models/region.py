"""Region entity."""

from __future__ import annotations

from pydantic import Field

from searchsync.models.entity import DomainEntity


class Region(DomainEntity):
    """A geographic region opportunities are offered in."""

    region_name: str | None = Field(default=None, description="Display name of the region")
