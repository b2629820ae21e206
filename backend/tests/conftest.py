"""
ServiceNest Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The MongoDB collections are replaced by FakeCollection, an in-memory
       object with the same coroutine methods the accessors call, and the
       identity provider by a StaticIdentityVerifier. Both are injected
       through create_app(), so no database or network is needed.

Fixture Hierarchy (all function-scoped):
    ├── fake_collections: {"services", "bookings", "messages"} → FakeCollection
    ├── fake_client: Mock MongoDB client (ping / close)
    ├── store: DocumentStore over the fakes
    ├── provider / customer: Verified identities
    ├── verifier: Token table for "provider-token" and "customer-token"
    ├── auth_headers / customer_headers: Authorization headers
    └── test_client: HTTPX AsyncClient talking to the app in-process
"""

import copy
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import bson
import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# Keep test output quiet and independent of a developer's .env
os.environ["LOG_LEVEL"] = "WARNING"

from servicenest.database import DocumentCollection, DocumentStore  # noqa: E402
from servicenest.models.identity import Identity  # noqa: E402
from servicenest.services.identity import StaticIdentityVerifier  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-memory stand-in for a driver collection
# ══════════════════════════════════════════════════════════════════════════


class FakeCursor:
    def __init__(self, collection: "FakeCollection", documents: List[Dict[str, Any]]):
        self._collection = collection
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        self._collection.check_failure()
        docs = [copy.deepcopy(d) for d in self._documents]
        return docs if length is None else docs[:length]


class FakeCollection:
    """
    Minimal async collection: documents keyed by _id, filters by _id only.
    Writes are BSON-encoded first, so unencodable values fail as they would
    in the driver.

    Set ``fail_with`` to an exception to make every operation raise it.
    """

    def __init__(self):
        self.documents: Dict[Any, Dict[str, Any]] = {}
        self.fail_with: Optional[Exception] = None
        self.write_calls = 0

    def check_failure(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _matches(self, filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not filter:
            return list(self.documents.values())
        doc = self.documents.get(filter.get("_id"))
        return [doc] if doc is not None else []

    async def insert_one(self, document: Dict[str, Any]):
        self.check_failure()
        bson.encode(document)
        self.write_calls += 1
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = copy.deepcopy(document)
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)

    def find(self, filter: Optional[Dict[str, Any]] = None) -> FakeCursor:
        return FakeCursor(self, self._matches(filter or {}))

    async def find_one(self, filter: Dict[str, Any], projection: Optional[Dict[str, Any]] = None):
        self.check_failure()
        matches = self._matches(filter)
        if not matches:
            return None
        doc = copy.deepcopy(matches[0])
        if projection:
            doc = {key: value for key, value in doc.items() if key in projection or key == "_id"}
        return doc

    async def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]):
        self.check_failure()
        bson.encode(update)
        self.write_calls += 1
        matches = self._matches(filter)
        modified = 0
        if matches:
            doc = matches[0]
            changes = update["$set"]
            if any(doc.get(key) != value or key not in doc for key, value in changes.items()):
                doc.update(copy.deepcopy(changes))
                modified = 1
        return SimpleNamespace(
            matched_count=len(matches),
            modified_count=modified,
            upserted_id=None,
            acknowledged=True,
        )

    async def delete_one(self, filter: Dict[str, Any]):
        self.check_failure()
        self.write_calls += 1
        matches = self._matches(filter)
        if matches:
            del self.documents[matches[0]["_id"]]
        return SimpleNamespace(deleted_count=len(matches), acknowledged=True)


# ══════════════════════════════════════════════════════════════════════════
# Store & identity fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fake_collections() -> Dict[str, FakeCollection]:
    return {
        "services": FakeCollection(),
        "bookings": FakeCollection(),
        "messages": FakeCollection(),
    }


@pytest.fixture
def fake_client():
    """Mock MongoDB client whose ping succeeds."""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = AsyncMock()
    return client


@pytest.fixture
def store(fake_client, fake_collections) -> DocumentStore:
    return DocumentStore(
        client=fake_client,
        services=DocumentCollection(fake_collections["services"], "services"),
        bookings=DocumentCollection(fake_collections["bookings"], "bookings"),
        messages=DocumentCollection(fake_collections["messages"], "messages"),
    )


@pytest.fixture
def provider() -> Identity:
    return Identity(uid="uid-provider", email="pat@example.com", name="Pat Provider")


@pytest.fixture
def customer() -> Identity:
    """A caller without a display name (name falls back to the email)."""
    return Identity(uid="uid-customer", email="casey@example.com")


@pytest.fixture
def verifier(provider, customer) -> StaticIdentityVerifier:
    return StaticIdentityVerifier({"provider-token": provider, "customer-token": customer})


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer provider-token"}


@pytest.fixture
def customer_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer customer-token"}


@pytest_asyncio.fixture
async def test_client(store, verifier):
    """
    HTTPX AsyncClient routed straight into a fresh app instance.

    ASGITransport does not run the lifespan, so the injected store and
    verifier are used as-is and nothing connects to MongoDB or Firebase.
    """
    from servicenest.main import create_app

    app = create_app(store=store, verifier=verifier)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
