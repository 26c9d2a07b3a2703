"""Bootstrap — Builds backends, gateways and sync services from settings.

All wiring is explicit: each function takes what it needs as arguments
and returns a new object. Nothing is cached at module level.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from searchsync.adapters.base.adapter import IndexBackend
from searchsync.adapters.base.registry import BackendRegistry
from searchsync.codec.codec import DocumentCodec
from searchsync.config.settings import BackendConfig, Settings
from searchsync.gateway import SearchIndexGateway
from searchsync.models import DomainEntity, Opportunity, Region
from searchsync.store.base import PrimaryStore
from searchsync.sync.divergence import DivergenceLog
from searchsync.sync.service import SyncService

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=DomainEntity)

ENTITY_TYPES: dict[str, type[DomainEntity]] = {
    Region.index_name(): Region,
    Opportunity.index_name(): Opportunity,
}

# Backends addressed by a single base URL rather than a host list
_URL_BACKENDS = {"meilisearch"}


def backend_kwargs(name: str, config: BackendConfig) -> dict[str, Any]:
    """Translate a ``BackendConfig`` into constructor keyword arguments."""
    kwargs: dict[str, Any] = {}
    if config.hosts:
        if name in _URL_BACKENDS:
            kwargs["base_url"] = config.hosts[0]
        else:
            kwargs["hosts"] = config.hosts
    if config.api_key:
        kwargs["api_key"] = config.api_key
    if config.username:
        kwargs["username"] = config.username
    if config.password:
        kwargs["password"] = config.password
    kwargs.update(config.extra)
    return kwargs


async def create_backend(settings: Settings, registry: BackendRegistry | None = None) -> IndexBackend:
    """Create and initialize the backend named by ``settings.search.backend``."""
    registry = registry or BackendRegistry.with_builtins()
    name = settings.search.backend
    config = settings.search.backends.get(name, BackendConfig())
    logger.info("Initializing search backend '%s'", name)
    return await registry.initialize_backend(name, **backend_kwargs(name, config))


def resolve_entity_type(name: str) -> type[DomainEntity]:
    """Look up an entity class by its index name (e.g. ``"region"``)."""
    try:
        return ENTITY_TYPES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown entity '{name}'. Known entities: {sorted(ENTITY_TYPES)}") from None


def build_gateway(backend: IndexBackend, entity_type: type[E], settings: Settings) -> SearchIndexGateway[E]:
    """Bind ``backend`` to the (prefixed) index of ``entity_type``."""
    return SearchIndexGateway(
        backend=backend,
        codec=DocumentCodec(settings.codec),
        entity_type=entity_type,
        index_name=f"{settings.search.index_prefix}{entity_type.index_name()}",
        query_limit=settings.search.query_limit,
    )


def build_service(
    store: PrimaryStore[E],
    backend: IndexBackend,
    entity_type: type[E],
    settings: Settings,
    divergence_log: DivergenceLog | None = None,
) -> SyncService[E]:
    """Assemble a ``SyncService`` for one entity type."""
    return SyncService(store, build_gateway(backend, entity_type, settings), divergence_log)
