"""Tests for joinery.core.memory: InMemoryCollection."""

import pytest

from joinery.core.errors import StorageError
from joinery.core.memory import InMemoryCollection
from joinery.core.protocols import Collection


@pytest.fixture
def coll():
    return InMemoryCollection("Account", key_field="extId", local_key_field="id")


class TestInMemoryCollection:
    def test_satisfies_protocol(self, coll):
        assert isinstance(coll, Collection)
        assert coll.get_key_field() == "extId"
        assert coll.get_local_key_field() == "id"

    def test_seed_records_get_local_keys(self):
        coll = InMemoryCollection("Account", records=[{"name": "Acme"}])
        (record,) = coll.all()
        assert record["_id"]

    @pytest.mark.asyncio
    async def test_insert_keeps_given_local_key(self, coll):
        stored = await coll.insert({"id": "P1", "name": "Acme"})
        assert stored["id"] == "P1"
        assert len(coll) == 1

    @pytest.mark.asyncio
    async def test_get_and_find(self, coll):
        await coll.insert({"id": "P1", "extId": "EXT-1"})
        await coll.insert({"id": "P2", "extId": "EXT-2"})
        assert (await coll.get({"extId": "EXT-2"}))["id"] == "P2"
        assert await coll.get({"extId": "EXT-3"}) is None
        assert len(await coll.find({})) == 2

    @pytest.mark.asyncio
    async def test_missing_field_matches_none(self, coll):
        await coll.insert({"id": "P1"})
        assert len(await coll.find({"extId": None})) == 1

    @pytest.mark.asyncio
    async def test_reads_are_copies(self, coll):
        await coll.insert({"id": "P1", "name": "Acme"})
        record = await coll.get({"id": "P1"})
        record["name"] = "Changed"
        assert (await coll.get({"id": "P1"}))["name"] == "Acme"

    @pytest.mark.asyncio
    async def test_update_nested_match(self, coll):
        await coll.insert({"id": "C1", "account": {"id": "P1", "name": "Acme"}})
        await coll.insert({"id": "C2", "account": {"id": "P2"}})
        count = await coll.update({"account.id": "P1"}, {"fk": "EXT-1"})
        assert count == 1
        assert (await coll.get({"id": "C1"}))["fk"] == "EXT-1"
        assert "fk" not in await coll.get({"id": "C2"})

    @pytest.mark.asyncio
    async def test_update_subdocument_equality(self, coll):
        await coll.insert({"id": "C1", "account": {"id": "P1", "name": "Acme"}})
        assert await coll.update({"account": {"name": "Acme", "id": "P1"}}, {"fk": "X"}) == 1
        assert await coll.update({"account": {"id": "P1"}}, {"fk": "Y"}) == 0

    @pytest.mark.asyncio
    async def test_delete(self, coll):
        await coll.insert({"id": "P1"})
        assert await coll.delete({"id": "P1"}) == 1
        assert len(coll) == 0


class TestEmbeddedLists:
    @pytest.mark.asyncio
    async def test_add_creates_list(self, coll):
        await coll.insert({"id": "P1", "extId": "EXT-1"})
        await coll.add_or_update_child_in_collection(
            {"extId": "EXT-1"}, "contacts", {"id": "C1", "lastName": "Lovelace"}, "id"
        )
        assert (await coll.get({"id": "P1"}))["contacts"] == [{"id": "C1", "lastName": "Lovelace"}]

    @pytest.mark.asyncio
    async def test_update_replaces_in_place(self, coll):
        await coll.insert({"id": "P1", "extId": "EXT-1", "contacts": [{"id": "C0"}, {"id": "C1", "lastName": "L"}]})
        await coll.add_or_update_child_in_collection(
            {"extId": "EXT-1"}, "contacts", {"id": "C1", "lastName": "Lovelace"}, "id"
        )
        assert (await coll.get({"id": "P1"}))["contacts"] == [
            {"id": "C0"},
            {"id": "C1", "lastName": "Lovelace"},
        ]

    @pytest.mark.asyncio
    async def test_no_matching_parent(self, coll):
        count = await coll.add_or_update_child_in_collection({"extId": "nope"}, "contacts", {"id": "C1"}, "id")
        assert count == 0

    @pytest.mark.asyncio
    async def test_non_list_field(self, coll):
        await coll.insert({"id": "P1", "extId": "EXT-1", "contacts": "oops"})
        with pytest.raises(StorageError):
            await coll.add_or_update_child_in_collection({"extId": "EXT-1"}, "contacts", {"id": "C1"}, "id")

    @pytest.mark.asyncio
    async def test_remove(self, coll):
        await coll.insert({"id": "P1", "extId": "EXT-1", "contacts": [{"id": "C1"}, {"id": "C2"}]})
        removed = await coll.remove_child_from_collection({"extId": "EXT-1"}, "contacts", {"id": "C1"})
        assert removed == 1
        assert (await coll.get({"id": "P1"}))["contacts"] == [{"id": "C2"}]

    @pytest.mark.asyncio
    async def test_remove_from_missing_list(self, coll):
        await coll.insert({"id": "P1", "extId": "EXT-1"})
        assert await coll.remove_child_from_collection({"extId": "EXT-1"}, "contacts", {"id": "C1"}) == 0
