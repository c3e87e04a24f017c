"""Error Hierarchy — typed, categorized exceptions for all content-sync failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Errors raised before commit leave no Event behind (the transaction rolls back)
    - to_response() produces the REST envelope {"errors": {...}}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ContentSyncError base: FastAPI global handler catches all
    - ErrorContext as dataclass: carries job/request parameters for the error reporter
    - Downstream 4xx responses keep the store's own status (DownstreamRequestError),
      transport failures are always 500 (DownstreamTransportError)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    content_id: str | None = None
    locale: str | None = None
    store: str | None = None
    debug_info: dict[str, Any] | None = None


class ContentSyncError(Exception):
    """Base exception for all content-sync errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def details(self) -> dict:
        """Extra fields merged into the response body. Subclasses override."""
        return {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.content_id:
            body["content_id"] = self.context.content_id
        body.update(self.details())
        return {"errors": body}


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(ContentSyncError):
    """Request content failed a domain rule. Nothing is written."""
    def __init__(
        self,
        message: str,
        fields: dict[str, list[str]] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 422,
        )
        self.fields = fields or {}

    def details(self) -> dict:
        return {"fields": self.fields} if self.fields else {}


class ConcurrencyConflictError(ContentSyncError):
    """Caller's previous_version does not match the document lock_counter."""
    def __init__(
        self, expected: int, actual: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"A lock-version conflict occurred. The 'previous_version' you've sent "
            f"({expected}) is not the same as the current lock version of the "
            f"edition ({actual}).",
            "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.expected = expected
        self.actual = actual

    def details(self) -> dict:
        return {"fields": {"previous_version": [
            f"does not match (expected {self.actual})",
        ]}}


class PathReservationConflictError(ContentSyncError):
    """base_path is already reserved by another publishing application."""
    def __init__(
        self, base_path: str, owner: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"base path {base_path} is already reserved by {owner}",
            "PATH_RESERVATION_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 422,
        )
        self.base_path = base_path
        self.owner = owner

    def details(self) -> dict:
        return {"fields": {"base_path": [self.message]}}


class EntityNotFoundError(ContentSyncError):
    """Requested content item does not resolve."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class PaginationConfigError(ContentSyncError):
    """Invalid keyset pagination parameters."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PAGINATION_CONFIG_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Downstream Errors ──────────────────────────────────────────

class InvalidStateError(ContentSyncError):
    """Edition is in a state that the target sink must never receive."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "DOWNSTREAM_INVALID_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 500,
        )


class DownstreamTransportError(ContentSyncError):
    """Sink unreachable, timed out, or answered with a 5xx."""
    def __init__(
        self, store: str, message: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.store = store
        super().__init__(
            f"{store} unavailable: {message}",
            "DOWNSTREAM_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.store = store

    def details(self) -> dict:
        return {"store": self.store}


class DownstreamRequestError(ContentSyncError):
    """Sink rejected the payload with a 4xx. Status is passed through."""
    def __init__(
        self,
        store: str,
        status_code: int,
        body: Any = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.store = store
        super().__init__(
            f"{store} rejected the request with status {status_code}",
            "DOWNSTREAM_REJECTED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, status_code,
        )
        self.store = store
        self.body = body

    def details(self) -> dict:
        return {"store": self.store, "downstream_response": self.body}


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ContentSyncError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
