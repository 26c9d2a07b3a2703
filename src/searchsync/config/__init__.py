"""Configuration loading."""

from searchsync.config.settings import Settings

__all__ = ["Settings"]
