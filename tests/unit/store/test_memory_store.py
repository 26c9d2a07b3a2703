"""Tests for the in-memory primary store."""

from __future__ import annotations

from searchsync.models import Region
from searchsync.store.base import PrimaryStore
from searchsync.store.memory import InMemoryStore


class TestInMemoryStore:
    def test_satisfies_protocol(self) -> None:
        store: PrimaryStore[Region] = InMemoryStore()
        assert hasattr(store, "save")

    async def test_save_assigns_sequential_ids(self) -> None:
        store = InMemoryStore[Region]()
        first = await store.save(Region(region_name="North"))
        second = await store.save(Region(region_name="South"))
        assert (first.id, second.id) == (1, 2)

    async def test_save_does_not_mutate_argument(self) -> None:
        store = InMemoryStore[Region]()
        region = Region(region_name="North")
        await store.save(region)
        assert region.id is None

    async def test_save_with_id_replaces(self) -> None:
        store = InMemoryStore[Region]()
        saved = await store.save(Region(region_name="North"))
        await store.save(Region(id=saved.id, region_name="Far North"))
        assert (await store.find_by_id(saved.id)).region_name == "Far North"
        assert len(await store.find_all()) == 1

    async def test_explicit_id_advances_sequence(self) -> None:
        store = InMemoryStore[Region]()
        await store.save(Region(id=1, region_name="Imported"))
        created = await store.save(Region(region_name="New"))
        assert created.id == 2
        assert [r.region_name for r in await store.find_all()] == ["Imported", "New"]

    async def test_ids_not_reused_after_delete(self) -> None:
        store = InMemoryStore[Region]()
        first = await store.save(Region(region_name="North"))
        await store.delete(first.id)
        assert (await store.save(Region(region_name="South"))).id == first.id + 1

    async def test_returned_entities_are_copies(self) -> None:
        store = InMemoryStore[Region]()
        saved = await store.save(Region(region_name="North"))
        saved.region_name = "Changed"
        assert (await store.find_by_id(saved.id)).region_name == "North"

    async def test_delete_is_idempotent(self) -> None:
        store = InMemoryStore[Region]()
        saved = await store.save(Region(region_name="North"))
        await store.delete(saved.id)
        await store.delete(saved.id)
        assert await store.find_by_id(saved.id) is None
