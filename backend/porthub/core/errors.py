"""Error Hierarchy — typed, categorized rejections for all PortHub failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Rejections (400-level) are surfaced to the caller and never retried
    - DeliveryFailure is never surfaced to end users — logged and absorbed
    - PersistenceFailure is fatal for the operation in progress (503)
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PortHubError base: one global handler, one error shape
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    """High-level error categories — one per rejection kind."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    STATE_CONFLICT = "state_conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DELIVERY = "delivery"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    job_number: str | None = None
    account_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class PortHubError(Exception):
    """Base exception for all PortHub errors."""

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

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "job_number": self.context.job_number,
                    "account_id": self.context.account_id,
                },
            }
        }


# ─── Rejections (400-level) ─────────────────────────────────────

class ValidationRejection(PortHubError):
    """Malformed or missing required input."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class AuthorizationRejection(PortHubError):
    """Acting account lacks the role or relationship the operation needs."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_AUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class StateConflictRejection(PortHubError):
    """The transition's precondition no longer holds. Caller must re-read state."""
    def __init__(
        self, message: str, current_status: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        if ctx.user_message is None:
            ctx.user_message = "This job is no longer available for that action."
        super().__init__(
            message, "STATE_CONFLICT", ErrorCategory.STATE_CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.current_status = current_status


class NotFoundRejection(PortHubError):
    """Requested job or account does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DeliveryFailure(PortHubError):
    """Notification delivery or external probe failed. Never user-facing."""
    def __init__(self, message: str, target: str, context: ErrorContext | None = None):
        super().__init__(
            f"Delivery to {target} failed: {message}",
            "DELIVERY_FAILED", ErrorCategory.DELIVERY,
            ErrorSeverity.WARNING, context, 502,
        )
        self.target = target


class PersistenceFailure(PortHubError):
    """Database operation failed. Nothing is assumed committed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        if ctx.user_message is None:
            ctx.user_message = "Something went wrong. Try again."
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_FAILURE", ErrorCategory.PERSISTENCE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation
