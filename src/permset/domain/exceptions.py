"""Domain exceptions with stable error codes."""

from typing import Any

ERROR_MESSAGES: dict[str, str] = {
    # Database constraint errors
    "CONSTRAINT_VIOLATION": "Database constraint violation",
    "DATABASE_ERROR": "Database operation failed",
    "DUPLICATE_ENTRY": "Duplicate entry",
    # System errors
    "INTERNAL_SERVER_ERROR": "Internal server error",
    "INVALID_JSON_FORMAT": "Invalid JSON format",
    "INVALID_TEMPLATE_STRING": "Invalid template string - contains invalid placeholders",
    # Resource not found errors
    "PERMISSION_NOT_FOUND": "Permission not found",
    "PERMISSION_SET_NOT_FOUND": "Permission set not found",
    # Validation errors
    "VALIDATION_FAILED": "Validation failed",
    # Session and organization context
    "INVALID_SESSION": "Valid session required for authorization",
    "INVALID_ORGANIZATION_CONTEXT": (
        "Active organization context required for member-only authorization mode"
    ),
}


class PermsetError(Exception):
    """Base exception for permset.

    Every error carries a stable ``code`` (a key of ``ERROR_MESSAGES``) and a
    human-readable message. Raw store error text never ends up in ``message``.
    """

    code = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message or ERROR_MESSAGES.get(self.code, self.code)
        self.field = field
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Structured error body."""
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.field:
            body["field"] = self.field
        return body


class NotFound(PermsetError):
    """Permission or permission set does not exist."""

    code = "PERMISSION_NOT_FOUND"


class Conflict(PermsetError):
    """Duplicate entry or constraint violation."""

    code = "DUPLICATE_ENTRY"


class ValidationFailed(PermsetError):
    """Input has the wrong shape."""

    code = "VALIDATION_FAILED"


class DatabaseError(PermsetError):
    """Unclassified store failure."""

    code = "DATABASE_ERROR"


class InternalError(PermsetError):
    """Unexpected failure while processing rules."""

    code = "INTERNAL_SERVER_ERROR"


class Unauthorized(PermsetError):
    """No resolvable session."""

    code = "INVALID_SESSION"


class Forbidden(PermsetError):
    """Session lacks the organization context the mode requires."""

    code = "INVALID_ORGANIZATION_CONTEXT"
