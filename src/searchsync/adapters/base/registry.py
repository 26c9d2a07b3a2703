"""Backend Registry — Manages registration and creation of index backends.

The registry maps backend names to classes and creates initialized
instances from explicit configuration. It is an ordinary object: callers
build one and pass it around, there is no process-wide instance.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from searchsync.adapters.base.adapter import BackendHealth, IndexBackend

logger = logging.getLogger(__name__)

# Maps built-in backend names to (module_path, class_name) for lazy import
BUILTIN_BACKENDS: dict[str, tuple[str, str]] = {
    "opensearch": ("searchsync.adapters.opensearch.adapter", "OpenSearchBackend"),
    "meilisearch": ("searchsync.adapters.meilisearch.adapter", "MeiliSearchBackend"),
    "memory": ("searchsync.adapters.memory.adapter", "InMemoryBackend"),
}


class BackendNotFoundError(Exception):
    """Raised when a requested backend is not registered."""


class BackendRegistry:
    """Registry for index backend classes and their live instances.

    Example:
        >>> registry = BackendRegistry.with_builtins()
        >>> backend = await registry.initialize_backend("opensearch", hosts=[...])
        >>> health = await registry.health_check_all()
        >>> await registry.shutdown_all()
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[IndexBackend]] = {}
        self._instances: dict[str, IndexBackend] = {}

    @classmethod
    def with_builtins(cls) -> BackendRegistry:
        """Create a registry with every built-in backend registered."""
        registry = cls()
        for name, (module_path, class_name) in BUILTIN_BACKENDS.items():
            module = importlib.import_module(module_path)
            registry.register(name, getattr(module, class_name))
        return registry

    def register(self, name: str, backend_class: type[IndexBackend]) -> None:
        """Register a backend class.

        Args:
            name: Unique name for this backend type.
            backend_class: The backend class to register.
        """
        if name in self._classes:
            logger.warning("Overwriting existing backend registration: %s", name)
        self._classes[name] = backend_class
        logger.debug("Registered backend: %s", name)

    async def initialize_backend(self, name: str, **kwargs: Any) -> IndexBackend:
        """Create and initialize a backend instance.

        Args:
            name: The registered backend name.
            **kwargs: Configuration parameters passed to the backend constructor.

        Returns:
            The initialized backend instance.

        Raises:
            BackendNotFoundError: If no backend is registered under this name.
        """
        if name not in self._classes:
            raise BackendNotFoundError(
                f"No backend registered with name '{name}'. "
                f"Available backends: {self.registered_backends}"
            )

        backend = self._classes[name](**kwargs)
        await backend.initialize()
        self._instances[name] = backend
        logger.info("Initialized backend: %s", name)
        return backend

    async def health_check_all(self) -> dict[str, BackendHealth]:
        """Run health checks on all initialized backends."""
        results: dict[str, BackendHealth] = {}
        for name, backend in self._instances.items():
            try:
                results[name] = await backend.health_check()
            except Exception as e:
                results[name] = BackendHealth(status="unhealthy", message=str(e))
        return results

    async def shutdown_all(self) -> None:
        """Gracefully shut down all initialized backends."""
        for name, backend in self._instances.items():
            try:
                await backend.shutdown()
                logger.info("Shut down backend: %s", name)
            except Exception:
                logger.warning("Error shutting down backend: %s", name, exc_info=True)
        self._instances.clear()

    @property
    def registered_backends(self) -> list[str]:
        """List all registered backend names."""
        return list(self._classes.keys())
