"""
ServiceNest Backend — Identity Verification
============================================

What:  The token verification capability and its Firebase implementation.
How:   IdentityVerifier is the abstract contract, verify(token) -> Identity
       or UnauthorizedError. FirebaseIdentityVerifier delegates every check
       (signature, expiry, issuer, audience) to the Firebase Admin SDK.
Who:   One verifier is created at startup and stored on app.state; the
       require_identity dependency in security.py calls it per request.

Nothing is parsed, checked or cached locally. Each request pays one call
into the SDK (which itself caches Google's public signing certificates).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError
from starlette.concurrency import run_in_threadpool

from servicenest.config import Settings
from servicenest.exceptions import UnauthorizedError
from servicenest.models.identity import Identity

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "servicenest"


class IdentityVerifier(ABC):
    """
    Abstract interface for bearer-token verification.

    Contract:
        - verify() returns the caller Identity for a valid token
        - every rejection (malformed, expired, revoked, unverifiable) raises
          UnauthorizedError; provider-specific errors never escape
        - close() releases whatever the implementation initialized
    """

    @abstractmethod
    async def verify(self, token: str) -> Identity:
        """
        Verify an opaque bearer token.

        Raises:
            UnauthorizedError: The token was rejected for any reason.
        """
        ...

    def close(self) -> None:
        """Release provider resources. Default: nothing to release."""


class FirebaseIdentityVerifier(IdentityVerifier):
    """
    Verifies Firebase ID tokens with the Firebase Admin SDK.

    The SDK call is blocking (it may fetch signing certificates over HTTP),
    so it runs in Starlette's thread pool to keep the event loop free.

    Args:
        app:           An initialized firebase_admin App.
        check_revoked: Also ask Firebase whether the session was revoked
                       (one extra network round trip per request).
    """

    def __init__(self, app: Any, check_revoked: bool = False):
        self._app = app
        self.check_revoked = check_revoked

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseIdentityVerifier":
        """
        Initialize a named Firebase app from the service-account settings.

        Raises:
            ValueError: Credentials are incomplete or the private key is not
                        a valid PEM key.
        """
        settings.validate_required_for_production()
        credential = credentials.Certificate(settings.firebase_credentials())
        app = firebase_admin.initialize_app(credential, name=FIREBASE_APP_NAME)
        logger.info("Firebase Admin initialized for project %s", settings.firebase_project_id)
        return cls(app)

    async def verify(self, token: str) -> Identity:
        try:
            claims: Dict[str, Any] = await run_in_threadpool(
                auth.verify_id_token, token, app=self._app, check_revoked=self.check_revoked
            )
        except (FirebaseError, ValueError) as e:
            logger.warning("Token verification failed: %s", e)
            raise UnauthorizedError(reason=type(e).__name__)

        identity = Identity.from_claims(claims)
        logger.debug("Verified caller uid=%s", identity.uid)
        return identity

    def close(self) -> None:
        firebase_admin.delete_app(self._app)
        logger.info("Firebase Admin app deleted")


class StaticIdentityVerifier(IdentityVerifier):
    """
    Verifier backed by a fixed token → Identity table.

    Lets the API run against fixed credentials (tests, local demos).
    Unknown tokens are rejected like any invalid token.
    """

    def __init__(self, tokens: Optional[Dict[str, Identity]] = None):
        self.tokens: Dict[str, Identity] = dict(tokens or {})

    async def verify(self, token: str) -> Identity:
        identity = self.tokens.get(token)
        if identity is None:
            logger.warning("Token verification failed: unknown token")
            raise UnauthorizedError(reason="unknown token")
        return identity
