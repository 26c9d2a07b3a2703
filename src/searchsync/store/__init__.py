"""Primary store contract and reference implementation."""

from searchsync.store.base import PrimaryStore
from searchsync.store.memory import InMemoryStore

__all__ = ["InMemoryStore", "PrimaryStore"]
