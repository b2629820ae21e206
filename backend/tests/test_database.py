"""
ServiceNest Backend — Collection Accessor Unit Tests
=====================================================

What:  Tests for DocumentCollection, DocumentStore and the id/JSON helpers.
How:   Accessors run against the in-memory FakeCollection from conftest;
       the MongoDB client class is patched where the store builds one.

What we test:
    ✅ Identifier parsing (valid hex, malformed, wrong type)
    ✅ JSON conversion of ObjectId and datetime values
    ✅ Each accessor operation, including zero-match updates/deletes
    ✅ Driver errors surface as StoreError
    ✅ Store wiring from settings, ping and close
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, call, patch

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from servicenest.config import Settings
from servicenest.database import (
    DocumentCollection,
    DocumentStore,
    parse_object_id,
    to_json_document,
)
from servicenest.exceptions import InvalidIdentifierError, StoreError


class TestIdentifiers:

    def test_parse_valid_object_id(self):
        oid = ObjectId()
        assert parse_object_id(str(oid)) == oid

    @pytest.mark.parametrize("value", ["not-an-id", "123", "", "zzzzzzzzzzzzzzzzzzzzzzzz"])
    def test_parse_malformed_id_raises(self, value):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            parse_object_id(value)
        assert exc_info.value.message == "Invalid identifier"
        assert exc_info.value.context["value"] == value

    def test_parse_non_string_raises(self):
        with pytest.raises(InvalidIdentifierError):
            parse_object_id(12345)


class TestJsonDocument:

    def test_object_id_and_datetime_are_stringified(self):
        oid = ObjectId()
        created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        doc = to_json_document({"_id": oid, "title": "Plumbing", "createdAt": created})

        assert doc == {
            "_id": str(oid),
            "title": "Plumbing",
            "createdAt": "2024-05-01T12:30:00+00:00",
        }

    def test_nested_object_ids(self):
        ref = ObjectId()
        doc = to_json_document({"_id": ObjectId(), "refs": [ref], "meta": {"service": ref}})
        assert doc["refs"] == [str(ref)]
        assert doc["meta"]["service"] == str(ref)

    def test_none_passes_through(self):
        assert to_json_document(None) is None


class TestDocumentCollection:

    @pytest.fixture(autouse=True)
    def _collection(self, fake_collections):
        self.raw = fake_collections["services"]
        self.collection = DocumentCollection(self.raw, "services")

    @pytest.mark.asyncio
    async def test_insert_returns_generated_id(self):
        oid = await self.collection.insert_one({"title": "Plumbing"})
        assert isinstance(oid, ObjectId)
        assert self.raw.documents[oid]["title"] == "Plumbing"

    @pytest.mark.asyncio
    async def test_find_all_returns_every_document(self):
        await self.collection.insert_one({"n": 1})
        await self.collection.insert_one({"n": 2})
        docs = await self.collection.find_all()
        assert sorted(d["n"] for d in docs) == [1, 2]

    @pytest.mark.asyncio
    async def test_find_by_id(self):
        oid = await self.collection.insert_one({"title": "Gardening"})
        assert (await self.collection.find_by_id(oid))["title"] == "Gardening"
        assert await self.collection.find_by_id(ObjectId()) is None

    @pytest.mark.asyncio
    async def test_update_merges_fields(self):
        oid = await self.collection.insert_one({"title": "Old", "price": 10})
        result = await self.collection.update_by_id(oid, {"title": "New"})

        assert result.matchedCount == 1
        assert result.modifiedCount == 1
        assert result.upsertedId is None
        assert self.raw.documents[oid] == {"_id": oid, "title": "New", "price": 10}

    @pytest.mark.asyncio
    async def test_update_missing_id_matches_nothing(self):
        result = await self.collection.update_by_id(ObjectId(), {"title": "New"})
        assert result.matchedCount == 0
        assert result.modifiedCount == 0

    @pytest.mark.asyncio
    async def test_empty_update_skips_write(self):
        oid = await self.collection.insert_one({"title": "Same"})
        writes_before = self.raw.write_calls

        result = await self.collection.update_by_id(oid, {})

        assert result.matchedCount == 1
        assert result.modifiedCount == 0
        assert self.raw.write_calls == writes_before

    @pytest.mark.asyncio
    async def test_delete(self):
        oid = await self.collection.insert_one({"title": "Gone"})
        assert (await self.collection.delete_by_id(oid)).deletedCount == 1
        assert (await self.collection.delete_by_id(oid)).deletedCount == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "operation, args",
        [
            ("insert_one", ({"title": "x"},)),
            ("find_all", ()),
            ("find_by_id", (ObjectId(),)),
            ("update_by_id", (ObjectId(), {"title": "x"})),
            ("delete_by_id", (ObjectId(),)),
        ],
    )
    async def test_driver_errors_become_store_error(self, operation, args):
        self.raw.fail_with = ServerSelectionTimeoutError("no servers")

        with pytest.raises(StoreError) as exc_info:
            await getattr(self.collection, operation)(*args)

        assert exc_info.value.context["collection"] == "services"
        assert "no servers" in exc_info.value.context["error"]


    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "document",
        [{"count": 2**64}, {"bad\u0000key": 1}],
    )
    async def test_unencodable_insert_becomes_store_error(self, document):
        with pytest.raises(StoreError) as exc_info:
            await self.collection.insert_one(document)

        assert exc_info.value.context["collection"] == "services"
        assert self.raw.documents == {}

    @pytest.mark.asyncio
    async def test_unencodable_update_becomes_store_error(self):
        oid = await self.collection.insert_one({"title": "Plumbing"})
        with pytest.raises(StoreError):
            await self.collection.update_by_id(oid, {"price": 2**64})
        assert self.raw.documents[oid]["title"] == "Plumbing"


class TestDocumentStore:

    def test_from_settings_uses_one_database_per_collection(self):
        settings = Settings(
            _env_file=None,
            mongodb_uri="mongodb://db.internal:27017/",
            services_db="svc",
            bookings_db="bkg",
            messages_db="msg",
        )
        with patch("servicenest.database.AsyncMongoClient") as client_cls:
            store = DocumentStore.from_settings(settings)

        client = client_cls.return_value
        assert client_cls.call_args.args[0] == "mongodb://db.internal:27017/"
        assert client_cls.call_args.kwargs["tz_aware"] is True
        assert client.__getitem__.call_args_list == [call("svc"), call("bkg"), call("msg")]
        assert store.client is client
        assert (store.services.name, store.bookings.name, store.messages.name) == (
            "services",
            "bookings",
            "messages",
        )

    @pytest.mark.asyncio
    async def test_ping_success(self, store, fake_client):
        assert await store.ping() is True
        fake_client.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_ping_failure_returns_false(self, store, fake_client):
        fake_client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        assert await store.ping() is False

    @pytest.mark.asyncio
    async def test_close_closes_client(self, store, fake_client):
        await store.close()
        fake_client.close.assert_awaited_once()
