"""
ServiceNest Backend — Pydantic Response Schemas
================================================

What:  Pydantic models for the fixed-shape parts of the API contract.
How:   FastAPI serializes these and documents them in the OpenAPI schema.

Documents themselves are free-form (any fields the client sent plus the
server-stamped ones) and are returned as plain JSON objects. Only the write
results, the status patch body and the error/health payloads have a schema.

Write results keep the camelCase keys of the MongoDB driver results that
clients of this API already parse (insertedId, matchedCount, ...).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Write results
# ══════════════════════════════════════════════════════════════════════════


class InsertResult(BaseModel):
    """Returned with 201 by every create route."""

    acknowledged: bool = Field(default=True, description="Write acknowledged by the server")
    insertedId: str = Field(description="Generated document identifier (24 hex chars)")


class UpdateResult(BaseModel):
    """
    Returned by PUT /services/{id} and PATCH /bookings/{id}.

    matchedCount is 0 when no document has the id; that is still a 200.
    """

    acknowledged: bool = Field(default=True)
    matchedCount: int = Field(description="Documents matching the id (0 or 1)")
    modifiedCount: int = Field(description="Documents actually changed (0 or 1)")
    upsertedCount: int = Field(default=0)
    upsertedId: Optional[str] = Field(default=None)


class DeleteResult(BaseModel):
    """Returned by DELETE /services/{id}. deletedCount is 0 for unknown ids."""

    acknowledged: bool = Field(default=True)
    deletedCount: int = Field(description="Documents removed (0 or 1)")


# ══════════════════════════════════════════════════════════════════════════
# Request bodies
# ══════════════════════════════════════════════════════════════════════════


class BookingStatusUpdate(BaseModel):
    """
    Body of PATCH /bookings/{id}.

    Only serviceStatus is read; every other key is ignored. The value is
    stored as given (no enum), and an absent key stores null.
    """

    model_config = ConfigDict(extra="ignore")

    serviceStatus: Any = Field(default=None, description="New status, e.g. 'completed'")


# ══════════════════════════════════════════════════════════════════════════
# Error & health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """Every error body: a single human-readable message."""

    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
