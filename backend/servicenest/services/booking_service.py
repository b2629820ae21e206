"""
ServiceNest Backend — Booking Service
======================================

What:  Operations on the `bookings` collection.
How:   New bookings get the verified customer identity, a creation time and
       serviceStatus "pending". Afterwards only serviceStatus can change,
       through update_status().
Who:   Called by routes/bookings.py; every route requires a verified identity.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from servicenest.database import DocumentCollection, parse_object_id, to_json_document
from servicenest.exceptions import StoreError
from servicenest.models import documents as fields
from servicenest.models.identity import Identity
from servicenest.schemas.results import InsertResult, UpdateResult

logger = logging.getLogger(__name__)


class BookingService:
    """Business operations for Booking documents."""

    def __init__(self, collection: DocumentCollection):
        self.collection = collection

    async def create(self, payload: Optional[Mapping[str, Any]], customer: Identity) -> InsertResult:
        """
        Insert a Booking for the verified customer.

        Client values for the customer fields, createdAt or serviceStatus are
        overwritten; the status always starts as "pending".

        Raises:
            StoreError: Insert failed (message "Failed to save booking").
        """
        document = fields.client_fields(payload)
        document.update(
            {
                fields.CUSTOMER_EMAIL: customer.email,
                fields.CUSTOMER_NAME: customer.display_name,
                fields.CREATED_AT: datetime.now(timezone.utc),
                fields.SERVICE_STATUS: fields.STATUS_PENDING,
            }
        )
        try:
            inserted_id = await self.collection.insert_one(document)
        except StoreError as e:
            raise StoreError(message="Failed to save booking", context=e.context)

        logger.info("Booking %s created by %s", inserted_id, customer.email)
        return InsertResult(insertedId=str(inserted_id))

    async def list_all(self) -> List[Dict[str, Any]]:
        return [to_json_document(doc) for doc in await self.collection.find_all()]

    async def update_status(self, booking_id: str, status: Any) -> UpdateResult:
        """
        Set serviceStatus on one booking; no other field is touched.

        The value is not checked against a list of statuses. A booking id
        that does not exist gives matchedCount=0.
        """
        oid = parse_object_id(booking_id)
        result = await self.collection.update_by_id(oid, {fields.SERVICE_STATUS: status})
        logger.info(
            "Booking %s status -> %r: matched=%d modified=%d",
            booking_id, status, result.matchedCount, result.modifiedCount,
        )
        return result
