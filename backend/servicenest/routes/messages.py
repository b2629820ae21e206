"""
ServiceNest Backend — Message Route Handlers

POST /messages is open to anyone (contact form); GET /messages needs a token.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends

from servicenest.database import DocumentStore, get_store
from servicenest.schemas.results import ErrorResponse, InsertResult
from servicenest.security import require_identity
from servicenest.services.message_service import MessageService

router = APIRouter(prefix="/messages", tags=["Messages"])


def get_message_service(store: DocumentStore = Depends(get_store)) -> MessageService:
    return MessageService(store.messages)


@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses={500: {"description": "Insert failed", "model": ErrorResponse}},
    summary="Send a message",
)
async def create_message(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    messages: MessageService = Depends(get_message_service),
) -> InsertResult:
    return await messages.create(payload)


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
    dependencies=[Depends(require_identity)],
    summary="List all messages",
)
async def list_messages(
    messages: MessageService = Depends(get_message_service),
) -> List[Dict[str, Any]]:
    return await messages.list_all()
