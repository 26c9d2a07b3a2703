"""Domain-level exceptions raised by the codec, gateway and sync service."""

from __future__ import annotations


class SearchSyncError(Exception):
    """Base exception for searchsync errors."""


class MappingFailure(SearchSyncError):
    """Raised when an entity and a search document cannot be reconciled.

    Always carries the low-level error that caused it, both as ``cause``
    and as the chained ``__cause__``.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class SearchUnavailable(SearchSyncError):
    """Raised when the search backend cannot be reached or fails at transport level."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


class EntityNotFoundError(SearchSyncError):
    """Raised when a caller requires an entity that the store does not hold."""


class InvalidEntityError(SearchSyncError):
    """Raised when an entity violates an identifier precondition."""
