"""Domain entities mirrored into the search index."""

from searchsync.models.entity import DomainEntity
from searchsync.models.opportunity import Opportunity
from searchsync.models.region import Region

__all__ = ["DomainEntity", "Opportunity", "Region"]
