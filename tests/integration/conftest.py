"""Integration test fixtures — Docker-based search engines with seed data.

Expects engines to be running, e.g.:
    docker run -d -p 9201:9200 -e discovery.type=single-node \
        -e DISABLE_SECURITY_PLUGIN=true opensearchproject/opensearch:2
    docker run -d -p 7700:7700 -e MEILI_MASTER_KEY=test-master-key getmeili/meilisearch:v1.8

Each engine's test indices are dropped and re-seeded on first use.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import pytest

OPENSEARCH_HOST = "http://localhost:9201"
MEILISEARCH_HOST = "http://localhost:7700"
MEILISEARCH_KEY = "test-master-key"

REGION_INDEX = "it-region"
OPPORTUNITY_INDEX = "it-opportunity"

# Documents as the codec writes them: camelCase keys, nanosecond timestamps
SEED_OPPORTUNITIES: list[dict[str, Any]] = [
    {
        "id": 101,
        "opportunityTitle": "Coastal Cleanup Crew",
        "opportunityDescription": "Collect litter along the shoreline every Saturday morning.",
        "weeklyTimeCommitment": 3,
        "duration": 8,
        "createdAt": 1718443812345678000,
        "tags": ["outdoor", "environment"],
    },
    {
        "id": 102,
        "opportunityTitle": "Evening Homework Club",
        "opportunityDescription": "Help primary school pupils with reading and maths.",
        "weeklyTimeCommitment": 2,
        "duration": 20,
        "createdAt": 1709251200000000000,
        "tags": ["education", "youth"],
    },
    {
        "id": 103,
        "opportunityTitle": "Food Bank Driver",
        "opportunityDescription": "Deliver parcels to households across the northern district.",
        "weeklyTimeCommitment": 5,
        "duration": 12,
        "createdAt": 1704067200000000000,
        # Stored by an older writer as a bare string
        "tags": "logistics",
    },
]

SEED_REGIONS: list[dict[str, Any]] = [
    {"id": 11, "regionName": "North Coast"},
    {"id": 12, "regionName": "Inland Valley"},
]


def _wait_for_service(url: str, timeout: float = 120.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=30)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(2)
    return False


# ── OpenSearch ──────────────────────────────────────────────────


async def _seed_opensearch(host: str) -> None:
    async with httpx.AsyncClient(base_url=host, timeout=30) as client:
        for index, docs in ((REGION_INDEX, SEED_REGIONS), (OPPORTUNITY_INDEX, SEED_OPPORTUNITIES)):
            await client.delete(f"/{index}", params={"ignore_unavailable": "true"})
            resp = await client.put(f"/{index}")
            resp.raise_for_status()

            for doc in docs:
                resp = await client.put(f"/{index}/_doc/{doc['id']}", json=doc)
                resp.raise_for_status()

            await client.post(f"/{index}/_refresh")


@pytest.fixture(scope="session")
def opensearch_ready():
    """Ensure OpenSearch is running and seeded."""
    if not _wait_for_service(OPENSEARCH_HOST):
        pytest.skip(f"OpenSearch not available at {OPENSEARCH_HOST}")
    asyncio.run(_seed_opensearch(OPENSEARCH_HOST))
    return OPENSEARCH_HOST


# ── MeiliSearch ─────────────────────────────────────────────────


async def _await_task(client: httpx.AsyncClient, response: httpx.Response) -> None:
    task_uid = response.json().get("taskUid")
    if task_uid is None:
        return
    for _ in range(60):
        t = await client.get(f"/tasks/{task_uid}")
        if t.json().get("status") in ("succeeded", "failed", "canceled"):
            return
        await asyncio.sleep(0.25)


async def _seed_meilisearch(host: str, api_key: str) -> None:
    headers = {"Authorization": f"Bearer {api_key}"}
    async with httpx.AsyncClient(base_url=host, timeout=30, headers=headers) as client:
        for index, docs in ((REGION_INDEX, SEED_REGIONS), (OPPORTUNITY_INDEX, SEED_OPPORTUNITIES)):
            await _await_task(client, await client.delete(f"/indexes/{index}"))

            resp = await client.post("/indexes", json={"uid": index, "primaryKey": "id"})
            resp.raise_for_status()
            await _await_task(client, resp)

            resp = await client.post(f"/indexes/{index}/documents", json=docs)
            resp.raise_for_status()
            await _await_task(client, resp)


@pytest.fixture(scope="session")
def meilisearch_ready():
    """Ensure MeiliSearch is running and seeded."""
    if not _wait_for_service(f"{MEILISEARCH_HOST}/health"):
        pytest.skip(f"MeiliSearch not available at {MEILISEARCH_HOST}")
    asyncio.run(_seed_meilisearch(MEILISEARCH_HOST, MEILISEARCH_KEY))
    return MEILISEARCH_HOST
