"""
ServiceNest Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the few failure modes the API has.
How:   Each exception carries a client-safe message and an optional context
       dict. Global handlers registered in main.py turn them into JSON
       responses of the form {"message": "..."}.
Who:   Raised by the identity dependency, the collection accessors and the
       domain services; caught by the global handlers.

Exception Hierarchy:
    ServiceNestError (base)
    ├── UnauthorizedError          → 401 Unauthorized
    ├── ValidationError            → 400 Bad Request
    │   └── InvalidIdentifierError → 400 Bad Request
    └── StoreError                 → 500 Internal Server Error

A missing document is not an error: reads return null and writes report
zero matched/deleted documents.
"""

from typing import Any, Dict, Optional


class ServiceNestError(Exception):
    """
    Base exception for all ServiceNest application errors.

    Attributes:
        message:  Client-facing description (safe to return in the response)
        context:  Extra debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class UnauthorizedError(ServiceNestError):
    """
    Raised when a protected route is called without a valid bearer token.

    When:    Authorization header missing, not a Bearer credential, or the
             identity provider rejected the token (expired, revoked, forged).
    HTTP:    401 Unauthorized, body {"message": "Unauthorized"}

    The message is always the same string so clients cannot tell a missing
    token from a rejected one. The reason goes into ``context`` for the logs.
    """

    def __init__(
        self,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if reason:
            ctx["reason"] = reason
        super().__init__(message="Unauthorized", context=ctx)
        self.reason = reason


class ValidationError(ServiceNestError):
    """Client input the server refuses to pass to the store. HTTP 400."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidIdentifierError(ValidationError):
    """
    Raised when a path identifier is not a well-formed document id.

    What:    ``/services/not-an-id`` cannot be turned into an ObjectId.
    HTTP:    400 Bad Request, body {"message": "Invalid identifier"}
    """

    def __init__(self, value: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["value"] = value
        super().__init__(message="Invalid identifier", field="id", context=ctx)
        self.value = value


class StoreError(ServiceNestError):
    """
    Raised when a document store operation fails.

    What:    Insert, find, update or delete raised a driver error (connection
             lost, write rejected, server selection timeout).
    HTTP:    500 Internal Server Error

    The driver error is kept in ``context`` and logged server-side. Clients
    only see the message, which callers may override with an operation
    specific one ("Failed to add service").
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
