"""Synchronization between the primary store and the search index."""

from searchsync.sync.divergence import Divergence, DivergenceLog
from searchsync.sync.service import SyncResult, SyncService

__all__ = ["Divergence", "DivergenceLog", "SyncResult", "SyncService"]
