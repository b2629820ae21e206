"""
ServiceNest Backend — Document Field Names
===========================================

What:  Names of the server-controlled fields on stored documents, and the
       helper that removes them from client input.

Documents are otherwise schemaless: any key a client sends is stored as-is.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

ID = "_id"
CREATED_AT = "createdAt"

# Service
PROVIDER_EMAIL = "providerEmail"
PROVIDER_NAME = "providerName"

# Booking
CUSTOMER_EMAIL = "customerEmail"
CUSTOMER_NAME = "customerName"
SERVICE_STATUS = "serviceStatus"
STATUS_PENDING = "pending"


def client_fields(
    payload: Optional[Mapping[str, Any]], reserved: Iterable[str] = (ID,)
) -> Dict[str, Any]:
    """Copy of the client payload without the reserved keys."""
    reserved = set(reserved)
    return {key: value for key, value in (payload or {}).items() if key not in reserved}
