"""
GreenLog Backend — Shared Response Schemas
============================================

What:  Response envelopes reused by every router.
Why:   The browser client branches on `success` before reading anything
       else, so every endpoint answers with the same outer shape.
Who:   Used as `response_model` by route handlers and by the global
       exception handlers in main.py (ErrorResponse).

Row format:
    Tabular results are returned as lists of positional values
    ([[1, "Ericson", "Ho"], ...]), in table column order, rather than as
    objects. The client renders them straight into HTML tables.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    """Returned by every mutation (initiate, populate, insert, update, delete)."""
    success: bool = Field(default=True, description="Always true; failures use ErrorResponse")


class DataResponse(BaseModel):
    """
    What:  Plain table dump.
    Who:   Returned by the fetch-all endpoints (GET /appusers, /tasks, ...).
    """
    data: List[List[Any]] = Field(description="Rows as positional value lists")


class ReportResponse(BaseModel):
    """Aggregation rows, e.g. [["Daily", 3], ["Weekly", 1]]."""
    success: bool = True
    data: List[List[Any]] = Field(description="Result rows")


class CountResponse(BaseModel):
    success: bool = True
    count: int = Field(description="Number of matching rows")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all failures.
    Why:   Clients need one structure to parse errors programmatically.

    Fields:
        error: Machine-readable code (validation_error, not_found,
               constraint_violation, database_unavailable, server_error)
        message: Human-readable description for display
        details: Optional extra context (e.g. which field failed validation)
        request_id: Correlation ID for finding this request in server logs

    Example:
        {
            "success": false,
            "error": "constraint_violation",
            "message": "User is already assigned to this task.",
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Service and database status.
    Who:   Returned by GET /health for monitoring probes.
    """
    status: str = Field(description="Overall status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    pool: str = Field(description="Connection pool state as reported by SQLAlchemy")
    uptime_seconds: float = Field(description="Seconds since service started")


# Shared by every router's `responses=` table for OpenAPI docs.
ERROR_RESPONSES = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    409: {"description": "Constraint violation", "model": ErrorResponse},
    500: {"description": "Database error", "model": ErrorResponse},
    503: {"description": "Database unavailable", "model": ErrorResponse},
}
