"""
ServiceNest Backend — Service Catalog
======================================

What:  Operations on the `services` collection (offerings published by providers).
How:   Stamps the verified provider identity and creation time on insert,
       strips server-controlled fields from update patches, and converts
       stored documents to JSON-ready dicts.
Who:   Called by routes/services.py.

Access rules (enforced by the routes):
    create / update / delete → verified identity required
    list / get               → public
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from servicenest.database import DocumentCollection, parse_object_id, to_json_document
from servicenest.exceptions import StoreError
from servicenest.models import documents as fields
from servicenest.models.identity import Identity
from servicenest.schemas.results import DeleteResult, InsertResult, UpdateResult

logger = logging.getLogger(__name__)

# Never accepted from a client, on create or on update
_SERVER_FIELDS = (
    fields.ID,
    fields.CREATED_AT,
    fields.PROVIDER_EMAIL,
    fields.PROVIDER_NAME,
)


class ServiceCatalog:
    """
    Business operations for Service documents.

    Stateless apart from the collection handle; one instance per request is fine.
    """

    def __init__(self, collection: DocumentCollection):
        self.collection = collection

    async def create(self, payload: Optional[Mapping[str, Any]], provider: Identity) -> InsertResult:
        """
        Insert a Service on behalf of the verified provider.

        providerEmail/providerName come from the identity even when the
        client sent its own values for them.

        Raises:
            StoreError: Insert failed (message "Failed to add service").
        """
        document = fields.client_fields(payload, _SERVER_FIELDS)
        document.update(
            {
                fields.PROVIDER_EMAIL: provider.email,
                fields.PROVIDER_NAME: provider.display_name,
                fields.CREATED_AT: datetime.now(timezone.utc),
            }
        )
        try:
            inserted_id = await self.collection.insert_one(document)
        except StoreError as e:
            raise StoreError(message="Failed to add service", context=e.context)

        logger.info("Service %s created by %s", inserted_id, provider.email)
        return InsertResult(insertedId=str(inserted_id))

    async def list_all(self) -> List[Dict[str, Any]]:
        return [to_json_document(doc) for doc in await self.collection.find_all()]

    async def get(self, service_id: str) -> Optional[Dict[str, Any]]:
        """The Service with this id, or None."""
        return to_json_document(await self.collection.find_by_id(parse_object_id(service_id)))

    async def update(self, service_id: str, patch: Optional[Mapping[str, Any]]) -> UpdateResult:
        """
        Merge-patch a Service. Fields not in the patch are left unchanged.

        _id, createdAt and the provider fields are dropped from the patch.
        Unknown ids give matchedCount=0.
        """
        oid = parse_object_id(service_id)
        result = await self.collection.update_by_id(oid, fields.client_fields(patch, _SERVER_FIELDS))
        logger.info(
            "Service %s update: matched=%d modified=%d",
            service_id, result.matchedCount, result.modifiedCount,
        )
        return result

    async def delete(self, service_id: str) -> DeleteResult:
        result = await self.collection.delete_by_id(parse_object_id(service_id))
        logger.info("Service %s delete: deleted=%d", service_id, result.deletedCount)
        return result
