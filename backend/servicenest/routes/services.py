"""
ServiceNest Backend — Service Route Handlers
=============================================

What:  CRUD endpoints for the `services` collection.
How:   Each handler resolves the caller (when required), calls one
       ServiceCatalog method and returns its result unchanged.

Routes:
    POST   /services        auth    → 201 InsertResult
    GET    /services        public  → 200 [document]
    GET    /services/{id}   public  → 200 document | null
    PUT    /services/{id}   auth    → 200 UpdateResult
    DELETE /services/{id}   auth    → 200 DeleteResult
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends

from servicenest.database import DocumentStore, get_store
from servicenest.models.identity import Identity
from servicenest.schemas.results import DeleteResult, ErrorResponse, InsertResult, UpdateResult
from servicenest.security import require_identity
from servicenest.services.service_catalog import ServiceCatalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])

_AUTH_RESPONSES = {401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}}
_ID_RESPONSES = {400: {"description": "Malformed identifier", "model": ErrorResponse}}


def get_service_catalog(store: DocumentStore = Depends(get_store)) -> ServiceCatalog:
    return ServiceCatalog(store.services)


@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses={**_AUTH_RESPONSES, 500: {"description": "Insert failed", "model": ErrorResponse}},
    summary="Publish a service",
    description=(
        "Stores the request body as a new service. providerEmail, providerName and "
        "createdAt are set by the server from the verified caller."
    ),
)
async def create_service(
    identity: Identity = Depends(require_identity),
    payload: Optional[Dict[str, Any]] = Body(default=None),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> InsertResult:
    return await catalog.create(payload, identity)


@router.get("", response_model=List[Dict[str, Any]], summary="List all services")
async def list_services(
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> List[Dict[str, Any]]:
    return await catalog.list_all()


@router.get(
    "/{service_id}",
    response_model=Optional[Dict[str, Any]],
    responses=_ID_RESPONSES,
    summary="Get a service by id",
    description="Returns the service, or null when no service has this id.",
)
async def get_service(
    service_id: str,
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> Optional[Dict[str, Any]]:
    return await catalog.get(service_id)


@router.put(
    "/{service_id}",
    response_model=UpdateResult,
    responses={**_AUTH_RESPONSES, **_ID_RESPONSES},
    summary="Update a service",
    description=(
        "Sets the given fields and leaves the others unchanged. _id, createdAt and the "
        "provider fields cannot be changed."
    ),
)
async def update_service(
    service_id: str,
    identity: Identity = Depends(require_identity),
    payload: Optional[Dict[str, Any]] = Body(default=None),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> UpdateResult:
    logger.debug("Service %s update requested by %s", service_id, identity.email)
    return await catalog.update(service_id, payload)


@router.delete(
    "/{service_id}",
    response_model=DeleteResult,
    responses={**_AUTH_RESPONSES, **_ID_RESPONSES},
    summary="Delete a service",
)
async def delete_service(
    service_id: str,
    identity: Identity = Depends(require_identity),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> DeleteResult:
    logger.debug("Service %s delete requested by %s", service_id, identity.email)
    return await catalog.delete(service_id)
