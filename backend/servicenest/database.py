"""
ServiceNest Backend — Document Store Access
============================================

What:  The shared MongoDB client, one thin accessor per collection, and the
       FastAPI dependency that hands the store to route handlers.
How:   A single AsyncMongoClient is created at startup and reused by every
       request. Each DocumentCollection wraps one driver collection and
       exposes the five operations the API needs, translating driver errors
       into StoreError.
Who:   DocumentStore is built in main.py's lifespan (or injected by tests);
       the domain services call the accessors.

Concurrency:
    The driver pools connections and serializes nothing on our side. There
    are no transactions, retries or extra locks: a failed operation surfaces
    immediately as StoreError (HTTP 500).

Identifiers:
    Documents are keyed by ObjectId under "_id". Path parameters are parsed
    with parse_object_id(), which raises InvalidIdentifierError (HTTP 400)
    instead of letting bson.errors.InvalidId escape.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from bson import ObjectId
from bson.errors import BSONError, InvalidId
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from servicenest.config import Settings
from servicenest.exceptions import InvalidIdentifierError, StoreError
from servicenest.schemas.results import DeleteResult, UpdateResult

logger = logging.getLogger(__name__)

SERVICES_COLLECTION = "services"
BOOKINGS_COLLECTION = "bookings"
MESSAGES_COLLECTION = "messages"

# Driver failures plus values BSON cannot encode (NUL in keys, ints over 8 bytes)
_STORE_ERRORS = (PyMongoError, BSONError, OverflowError)


def parse_object_id(value: str) -> ObjectId:
    """Turn a path parameter into an ObjectId or raise InvalidIdentifierError."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdentifierError(value)


def to_json_document(document: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Convert a stored document into JSON-ready data.

    ObjectIds (including "_id") become hex strings and datetimes become
    ISO-8601 strings. None passes through so a missing document is `null`.
    """
    if document is None:
        return None
    return jsonable_encoder(dict(document), custom_encoder={ObjectId: str})


class DocumentCollection:
    """
    Accessor for one collection of free-form documents.

    Operations:
        insert_one()    → generated ObjectId
        find_all()      → every document, unordered, unbounded
        find_by_id()    → document or None
        update_by_id()  → UpdateResult ($set merge of the given fields)
        delete_by_id()  → DeleteResult

    Args:
        collection: An async driver collection (pymongo AsyncCollection, or
                    any object with the same coroutine methods).
        name:       Collection name used in log messages.
    """

    def __init__(self, collection: Any, name: str):
        self._collection = collection
        self.name = name

    async def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        try:
            result = await self._collection.insert_one(document)
        except _STORE_ERRORS as e:
            self._log_failure("insert_one", e)
            raise StoreError(context={"collection": self.name, "error": str(e)})
        return result.inserted_id

    async def find_all(self) -> List[Dict[str, Any]]:
        try:
            return await self._collection.find({}).to_list(length=None)
        except _STORE_ERRORS as e:
            self._log_failure("find", e)
            raise StoreError(context={"collection": self.name, "error": str(e)})

    async def find_by_id(self, document_id: ObjectId) -> Optional[Dict[str, Any]]:
        try:
            return await self._collection.find_one({"_id": document_id})
        except _STORE_ERRORS as e:
            self._log_failure("find_one", e)
            raise StoreError(context={"collection": self.name, "error": str(e)})

    async def update_by_id(self, document_id: ObjectId, fields: Dict[str, Any]) -> UpdateResult:
        """
        Merge `fields` into the document with the given id.

        MongoDB rejects an empty $set, so an empty patch skips the write and
        only reports whether the id matched.
        """
        try:
            if not fields:
                existing = await self._collection.find_one(
                    {"_id": document_id}, projection={"_id": 1}
                )
                return UpdateResult(matchedCount=int(existing is not None), modifiedCount=0)

            result = await self._collection.update_one({"_id": document_id}, {"$set": fields})
        except _STORE_ERRORS as e:
            self._log_failure("update_one", e)
            raise StoreError(context={"collection": self.name, "error": str(e)})

        return UpdateResult(
            acknowledged=result.acknowledged,
            matchedCount=result.matched_count,
            modifiedCount=result.modified_count,
            upsertedCount=int(result.upserted_id is not None),
            upsertedId=str(result.upserted_id) if result.upserted_id is not None else None,
        )

    async def delete_by_id(self, document_id: ObjectId) -> DeleteResult:
        try:
            result = await self._collection.delete_one({"_id": document_id})
        except _STORE_ERRORS as e:
            self._log_failure("delete_one", e)
            raise StoreError(context={"collection": self.name, "error": str(e)})
        return DeleteResult(acknowledged=result.acknowledged, deletedCount=result.deleted_count)

    def _log_failure(self, operation: str, error: Exception) -> None:
        logger.error("%s on '%s' failed: %s", operation, self.name, error)


class DocumentStore:
    """
    Owns the shared database client and the three collection accessors.

    Lifecycle:
        from_settings()  → create the client (no I/O yet)
        ping()           → round-trip to the server; used at startup and by /health
        close()          → release pooled connections on shutdown
    """

    def __init__(
        self,
        client: Any,
        services: DocumentCollection,
        bookings: DocumentCollection,
        messages: DocumentCollection,
    ):
        self.client = client
        self.services = services
        self.bookings = bookings
        self.messages = messages

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        client = AsyncMongoClient(
            settings.database_uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=settings.db_server_selection_timeout * 1000,
            tz_aware=True,
        )
        return cls(
            client=client,
            services=DocumentCollection(
                client[settings.services_db][SERVICES_COLLECTION], SERVICES_COLLECTION
            ),
            bookings=DocumentCollection(
                client[settings.bookings_db][BOOKINGS_COLLECTION], BOOKINGS_COLLECTION
            ),
            messages=DocumentCollection(
                client[settings.messages_db][MESSAGES_COLLECTION], MESSAGES_COLLECTION
            ),
        )

    async def ping(self) -> bool:
        """True when the server answers a ping; never raises."""
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("Database ping failed: %s", e)
            return False

    async def close(self) -> None:
        await self.client.close()


# ── Dependency ────────────────────────────────────────────────────────────
def get_store(request: Request) -> DocumentStore:
    """
    FastAPI dependency returning the store attached to the running app.

    Example usage in a route:
        @router.get("/services")
        async def list_services(store: DocumentStore = Depends(get_store)):
            ...
    """
    return request.app.state.store
