"""Opportunity entity."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from searchsync.models.entity import DomainEntity


class Opportunity(DomainEntity):
    """A volunteering opportunity offered to onboarding candidates."""

    opportunity_title: str | None = Field(default=None, description="Short title shown in listings")
    opportunity_description: str | None = Field(default=None, description="Free-text description")
    weekly_time_commitment: int | None = Field(default=None, description="Expected hours per week")
    duration: int | None = Field(default=None, description="Duration in weeks")
    created_at: datetime | None = Field(default=None, description="When the opportunity was published")
    tags: list[str] = Field(default_factory=list, description="Associated tags or categories")
