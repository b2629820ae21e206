"""
ServiceNest Backend — Verified Caller Identity
===============================================

What:  The caller identity produced by a successful token verification.
Who:   Created by IdentityVerifier implementations; read by the domain
       services to stamp providerEmail/customerEmail on new documents.

An Identity only ever comes from the identity provider's decoded token,
never from a request body.
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class Identity(BaseModel):
    """
    Verified caller.

    Attributes:
        uid:    Provider user id (the token subject)
        email:  Caller email; None for accounts without one (e.g. phone sign-in)
        name:   Display name, if the provider has one
    """

    model_config = ConfigDict(frozen=True)

    uid: str
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        """Display name, falling back to the email when the provider has none."""
        return self.name or self.email

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Identity":
        """Build from decoded ID-token claims (uid/sub, email, name)."""
        return cls(
            uid=str(claims.get("uid") or claims.get("sub") or ""),
            email=claims.get("email"),
            name=claims.get("name"),
        )
