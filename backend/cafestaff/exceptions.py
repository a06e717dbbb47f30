"""
CafeStaff Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error kinds the API reports.
Why:   Services raise these; global handlers in main.py turn them into
       structured JSON responses with the right HTTP status code.
How:   Each exception carries a user-facing message and an optional context
       dict (logged server-side, only returned where it is safe).

Exception Hierarchy:
    CafeStaffError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    ├── ConflictError     → 409 Conflict (uniqueness violation, retry)
    ├── StorageError      → 500 Internal Server Error (transaction rolled back)
    └── AssetError        → 500 Internal Server Error (logo store failure)

AssetError is also used as a non-fatal warning: when a logo cannot be
reclaimed after a committed transaction, services log it and return it in
the operation result instead of raising.
"""

from typing import Any, Dict, Optional


class CafeStaffError(Exception):
    """
    Base exception for all CafeStaff application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not always returned)
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CafeStaffError):
    """
    Raised when client input fails a business validation rule.

    When:    Empty required field, unsupported logo type, oversized upload.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types) are still rejected by FastAPI
    with its own 422 response before reaching the services.
    """

    error_code = "validation_error"

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


class NotFoundError(CafeStaffError):
    """
    Raised when a referenced cafe, employee or logo does not exist.

    HTTP:    404 Not Found
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
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(CafeStaffError):
    """
    Raised when a write violates a uniqueness constraint.

    When:    A generated employee ID collides on every attempt, or two
             concurrent requests race to create the same employee's
             assignment.
    HTTP:    409 Conflict

    The request had no effect; the caller may retry it.
    """

    error_code = "conflict"

    def __init__(
        self,
        message: str = "The request conflicts with the current state. Please retry.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(CafeStaffError):
    """
    Raised when a database operation or transaction fails.

    HTTP:    500 Internal Server Error

    The enclosing transaction has been rolled back by the time this reaches
    the caller. The client only ever sees the generic message; the wrapped
    error type lives in `context` and is logged server-side.
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AssetError(CafeStaffError):
    """
    Raised when the logo asset store cannot read, write or delete a file.

    HTTP:    500 Internal Server Error (when it aborts an upload)

    When the failure happens while reclaiming an old logo after a committed
    transaction, services report it as a warning instead of raising.
    """

    error_code = "asset_error"

    def __init__(
        self,
        message: str = "Logo storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
