"""
GreenLog Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the failure kinds a request can hit.
Why:   Callers (routes, tests) must be able to tell "no rows" apart from
       "query failed", and a connectivity failure apart from a rejected write.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) turn them into
       `{"success": false, ...}` JSON responses with the right status code.
Who:   Raised by the Database wrapper and the services; caught by global handlers.

Exception Hierarchy:
    GreenLogError (base)
    ├── ValidationError              → 400 Bad Request (client can fix)
    ├── NotFoundError                → 404 Not Found
    └── DatabaseError                → 500 Internal Server Error
        ├── ConnectivityError        → 503 Service Unavailable (retry later)
        └── ConstraintViolationError → 409 Conflict
"""

from typing import Any, Dict, Optional


class GreenLogError(Exception):
    """
    Base exception for all GreenLog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(self.message)


class ValidationError(GreenLogError):
    """
    Raised when client input fails validation.

    When:  Unknown table or column in a projection, a non-numeric ID in a
           search query string.
    HTTP:  400 Bad Request
    """

    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(GreenLogError):
    """
    Raised when the target of a request does not exist.

    When:  An update or delete matched no row; columns requested for an
           unknown table.
    HTTP:  404 Not Found
    """

    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(GreenLogError):
    """
    Raised when a database operation fails.

    Security Note:
        The message returned to the client is always generic. The SQL,
        constraint names and driver messages go to the server log only.
    """

    error_code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConnectivityError(DatabaseError):
    """
    Raised when no usable connection could be obtained or it broke mid-query.

    When:  Pool never initialized, pool exhausted past its timeout, network
           failure, database restarted.
    HTTP:  503 Service Unavailable
    """

    error_code = "database_unavailable"

    def __init__(
        self,
        message: str = "The database is currently unreachable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConstraintViolationError(DatabaseError):
    """
    Raised when the database rejects a write because of its constraints.

    When:  Duplicate primary key, missing foreign key, or a User–Task link
           that already exists.
    HTTP:  409 Conflict

    Attributes:
        unique: True when the violation was a duplicate key (as opposed to a
                foreign-key or check failure).
    """

    error_code = "constraint_violation"

    def __init__(
        self,
        message: str = "The change conflicts with existing data.",
        unique: bool = False,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.unique = unique
