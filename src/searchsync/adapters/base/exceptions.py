"""Backend-specific exceptions."""


class AdapterError(Exception):
    """Base exception for backend errors."""


class ConnectionError(AdapterError):
    """Raised when the backend cannot be reached or is not initialized."""


class DocumentNotFoundError(AdapterError):
    """Raised when a requested document does not exist."""


class QueryError(AdapterError):
    """Raised when the backend rejects or fails a request."""


class ConfigurationError(AdapterError):
    """Raised when backend configuration is invalid."""
