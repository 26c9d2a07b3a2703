"""Shared test fixtures and configuration."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
import structlog

from searchsync.adapters.memory.adapter import InMemoryBackend
from searchsync.codec.codec import DocumentCodec
from searchsync.config.settings import Settings
from searchsync.gateway import SearchIndexGateway
from searchsync.models import Opportunity, Region
from searchsync.store.memory import InMemoryStore
from searchsync.sync.service import SyncService


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        search={"backend": "memory"},
    )


@pytest.fixture
def codec() -> DocumentCodec:
    return DocumentCodec()


@pytest.fixture
async def backend() -> InMemoryBackend:
    b = InMemoryBackend()
    await b.initialize()
    return b


@pytest.fixture
def opportunity_gateway(backend: InMemoryBackend, codec: DocumentCodec) -> SearchIndexGateway[Opportunity]:
    return SearchIndexGateway(backend, codec, Opportunity)


@pytest.fixture
def region_gateway(backend: InMemoryBackend, codec: DocumentCodec) -> SearchIndexGateway[Region]:
    return SearchIndexGateway(backend, codec, Region)


@pytest.fixture
def opportunity_store() -> InMemoryStore[Opportunity]:
    return InMemoryStore()


@pytest.fixture
def opportunity_service(
    opportunity_store: InMemoryStore[Opportunity],
    opportunity_gateway: SearchIndexGateway[Opportunity],
) -> SyncService[Opportunity]:
    return SyncService(opportunity_store, opportunity_gateway)


# ── Entity fixtures ──


@pytest.fixture
def sample_opportunity() -> Opportunity:
    """A persisted opportunity with every field populated."""
    return Opportunity(
        id=7,
        opportunity_title="Alpha Program",
        opportunity_description="Mentoring first-year students in the evening.",
        weekly_time_commitment=4,
        duration=12,
        created_at=datetime(2024, 6, 15, 9, 30, 12, 345678, tzinfo=UTC),
        tags=["mentoring", "education"],
    )


@pytest.fixture
def sample_region() -> Region:
    return Region(id=3, region_name="North Coast")
