"""Integration tests for OpenSearchBackend against a real OpenSearch instance."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from searchsync.adapters.base.exceptions import DocumentNotFoundError
from searchsync.adapters.opensearch.adapter import OpenSearchBackend
from searchsync.codec.codec import DocumentCodec
from searchsync.gateway import SearchIndexGateway
from searchsync.models import Opportunity, Region
from searchsync.store.memory import InMemoryStore
from searchsync.sync.service import SyncService

OPPORTUNITY_INDEX = "it-opportunity"
REGION_INDEX = "it-region"

pytestmark = [pytest.mark.integration, pytest.mark.asyncio, pytest.mark.opensearch]


@pytest.fixture
async def backend(opensearch_ready):
    b = OpenSearchBackend(hosts=[opensearch_ready], verify_certs=False, refresh="wait_for")
    await b.initialize()
    yield b
    await b.shutdown()


@pytest.fixture
def opportunities(backend) -> SearchIndexGateway[Opportunity]:
    return SearchIndexGateway(backend, DocumentCodec(), Opportunity, index_name=OPPORTUNITY_INDEX)


@pytest.fixture
def regions(backend) -> SearchIndexGateway[Region]:
    return SearchIndexGateway(backend, DocumentCodec(), Region, index_name=REGION_INDEX)


class TestOpenSearchHealth:
    async def test_health_check_returns_healthy(self, backend):
        health = await backend.health_check()
        assert health.status in ("healthy", "degraded")
        assert health.latency_ms >= 0


class TestOpenSearchDocuments:
    async def test_fetch_seeded_document(self, backend):
        doc = await backend.fetch(REGION_INDEX, "11")
        assert doc["regionName"] == "North Coast"

    async def test_fetch_nonexistent_document_raises(self, backend):
        with pytest.raises(DocumentNotFoundError):
            await backend.fetch(REGION_INDEX, "999")


class TestOpenSearchGateway:
    async def test_get_decodes_seeded_record(self, opportunities):
        opportunity = await opportunities.get(101)
        assert opportunity.opportunity_title == "Coastal Cleanup Crew"
        assert opportunity.created_at == datetime(2024, 6, 15, 9, 30, 12, 345678, tzinfo=UTC)

    async def test_get_wraps_scalar_tags(self, opportunities):
        opportunity = await opportunities.get(103)
        assert opportunity.tags == ["logistics"]

    async def test_query_matches_title_terms(self, opportunities):
        results = await opportunities.query("Homework")
        assert [o.id for o in results] == [102]

    async def test_query_no_match(self, opportunities):
        assert await opportunities.query("xyzzyspoon999qqq") == []

    async def test_index_get_delete(self, regions):
        region = Region(id=50, region_name="Harbour Flats")

        await regions.index(region)
        assert await regions.get(50) == region
        assert [r.id for r in await regions.query("Harbour")] == [50]

        await regions.delete(50)
        assert await regions.get(50) is None
        await regions.delete(50)


class TestOpenSearchSync:
    async def test_create_update_delete(self, regions):
        service = SyncService(InMemoryStore[Region](), regions)

        created = await service.create(Region(region_name="Pine Ridge"))
        assert created.indexed is True
        region_id = created.entity.id

        updated = await service.update(created.entity.model_copy(update={"region_name": "Pine Ridge East"}))
        assert updated.indexed is True
        assert (await regions.get(region_id)).region_name == "Pine Ridge East"

        deleted = await service.delete(region_id)
        assert deleted.indexed is True
        assert await regions.get(region_id) is None
        assert len(service.divergence_log) == 0
