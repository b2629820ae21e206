"""
ServiceNest Backend — Booking Route Handlers
=============================================

Routes (all require a verified identity):
    POST  /bookings        → 201 InsertResult
    GET   /bookings        → 200 [document]
    PATCH /bookings/{id}   → 200 UpdateResult (serviceStatus only)
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends

from servicenest.database import DocumentStore, get_store
from servicenest.models.identity import Identity
from servicenest.schemas.results import (
    BookingStatusUpdate,
    ErrorResponse,
    InsertResult,
    UpdateResult,
)
from servicenest.security import require_identity
from servicenest.services.booking_service import BookingService

# Every booking route is protected
router = APIRouter(
    prefix="/bookings",
    tags=["Bookings"],
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
)


def get_booking_service(store: DocumentStore = Depends(get_store)) -> BookingService:
    return BookingService(store.bookings)


@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses={500: {"description": "Insert failed", "model": ErrorResponse}},
    summary="Book a service",
    description=(
        "Stores the request body as a new booking for the caller. customerEmail, "
        "customerName and createdAt come from the server; serviceStatus starts as 'pending'."
    ),
)
async def create_booking(
    identity: Identity = Depends(require_identity),
    payload: Optional[Dict[str, Any]] = Body(default=None),
    bookings: BookingService = Depends(get_booking_service),
) -> InsertResult:
    return await bookings.create(payload, identity)


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    dependencies=[Depends(require_identity)],
    summary="List all bookings",
)
async def list_bookings(
    bookings: BookingService = Depends(get_booking_service),
) -> List[Dict[str, Any]]:
    return await bookings.list_all()


@router.patch(
    "/{booking_id}",
    response_model=UpdateResult,
    responses={400: {"description": "Malformed identifier", "model": ErrorResponse}},
    summary="Change a booking's status",
)
async def update_booking_status(
    booking_id: str,
    identity: Identity = Depends(require_identity),
    update: Optional[BookingStatusUpdate] = Body(default=None),
    bookings: BookingService = Depends(get_booking_service),
) -> UpdateResult:
    status = update.serviceStatus if update is not None else None
    return await bookings.update_status(booking_id, status)
