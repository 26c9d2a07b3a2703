"""searchsync — Keeps a full-text search index in step with a primary store."""

__version__ = "0.1.0"
