"""
ServiceNest Backend — Message Service

Contact messages: anyone may post one, only signed-in users may read them.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from servicenest.database import DocumentCollection, to_json_document
from servicenest.exceptions import StoreError
from servicenest.models import documents as fields
from servicenest.schemas.results import InsertResult

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, collection: DocumentCollection):
        self.collection = collection

    async def create(self, payload: Optional[Mapping[str, Any]]) -> InsertResult:
        """Store the message as sent, plus createdAt."""
        document = fields.client_fields(payload, (fields.ID, fields.CREATED_AT))
        document[fields.CREATED_AT] = datetime.now(timezone.utc)
        try:
            inserted_id = await self.collection.insert_one(document)
        except StoreError as e:
            raise StoreError(message="Failed to save message", context=e.context)

        logger.info("Message %s stored", inserted_id)
        return InsertResult(insertedId=str(inserted_id))

    async def list_all(self) -> List[Dict[str, Any]]:
        return [to_json_document(doc) for doc in await self.collection.find_all()]
