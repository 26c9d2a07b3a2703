"""Base backend interface — Abstract classes for search engine connectors."""

from searchsync.adapters.base.adapter import BackendHealth, IndexBackend, RawResults, SearchHit
from searchsync.adapters.base.registry import BackendRegistry

__all__ = ["BackendHealth", "BackendRegistry", "IndexBackend", "RawResults", "SearchHit"]
