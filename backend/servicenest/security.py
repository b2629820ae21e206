"""
ServiceNest Backend — Bearer Token Gate
========================================

What:  FastAPI dependencies that protect routes with a verified identity.
How:   HTTPBearer extracts the token from "Authorization: Bearer <token>";
       the configured IdentityVerifier checks it. Any failure raises
       UnauthorizedError, which the global handler turns into
       401 {"message": "Unauthorized"} before the route body runs.

Usage:
    @router.post("/services")
    async def create_service(identity: Identity = Depends(require_identity)):
        ...
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from servicenest.exceptions import UnauthorizedError
from servicenest.models.identity import Identity
from servicenest.services.identity import IdentityVerifier

logger = logging.getLogger(__name__)

# auto_error=False: a missing or non-Bearer header yields None instead of
# FastAPI's own 403, so the 401 body stays {"message": "Unauthorized"}
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Identity provider ID token sent as 'Authorization: Bearer <token>'",
)


def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.verifier


async def require_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    """
    Resolve the verified caller or reject the request.

    The identity is also stored on request.state.identity for middleware
    and handlers that do not take it as a parameter.

    Raises:
        UnauthorizedError: Header missing/malformed or token rejected.
    """
    if credentials is None or not credentials.credentials:
        logger.info("Rejected %s %s: missing bearer token", request.method, request.url.path)
        raise UnauthorizedError(reason="missing bearer token")

    identity = await verifier.verify(credentials.credentials)
    request.state.identity = identity
    return identity
