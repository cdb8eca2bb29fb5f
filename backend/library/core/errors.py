"""Error Hierarchy - typed, categorized exceptions for every lending failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation errors are raised before any database access
    - Conflict errors (duplicates, missing references, business rules) are 4xx and recoverable
    - Infrastructure errors (DatabaseError) are 5xx and wrap the driver exception via __cause__
    - to_response() produces the REST envelope; no internal details in user-facing messages

Design Decisions:
    - Single hierarchy with LibraryError base: the API's global handler catches all
    - ConflictError groups every rule a resubmission cannot fix without changing state
    - ErrorContext carries the rollback failure, if any, next to the original cause
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
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    entity_id: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    rollback_error: str | None = None


class LibraryError(Exception):
    """Base exception for all library errors."""

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
                    "operation": self.context.operation,
                    "entity_id": self.context.entity_id,
                },
            }
        }


# ─── Validation Errors (400) ────────────────────────────────────

class InputValidationError(LibraryError):
    """Caller input is missing or malformed."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


# ─── Conflict Errors (404/409) ──────────────────────────────────

class ConflictError(LibraryError):
    """Request is well-formed but contradicts the stored state."""
    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        category: ErrorCategory = ErrorCategory.CONFLICT,
        context: ErrorContext | None = None,
        http_status: int = 409,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.WARNING, context, http_status,
        )


class ResourceNotFoundError(ConflictError):
    """Requested or referenced entity does not exist."""
    def __init__(
        self, resource_type: str, resource_id: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateValueError(ConflictError):
    """A unique attribute (email, isbn) is already taken."""
    def __init__(self, field: str, value: str, context: ErrorContext | None = None):
        super().__init__(
            f"A record with {field} '{value}' already exists",
            "DUPLICATE_VALUE", context=context,
        )
        self.field = field
        self.value = value


class BusinessRuleError(ConflictError):
    """Generic lending rule violation."""
    def __init__(
        self, message: str, code: str = "BUSINESS_RULE_VIOLATION",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE, context,
        )


class BookUnavailableError(BusinessRuleError):
    """Book is already out on an open loan."""
    def __init__(self, book_id: int, title: str, context: ErrorContext | None = None):
        super().__init__(
            f"Book '{title}' is not available for loan",
            "BOOK_UNAVAILABLE", context,
        )
        self.book_id = book_id


class InvalidLoanTransitionError(BusinessRuleError):
    """Requested lifecycle move is not legal from the loan's current state."""
    def __init__(
        self, loan_id: int, current: str, action: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot {action} loan {loan_id} in state {current}",
            "INVALID_LOAN_TRANSITION", context,
        )
        self.loan_id = loan_id
        self.current = current
        self.action = action


class OpenLoansError(BusinessRuleError):
    """Entity cannot be deleted while ACTIVE/OVERDUE loans reference it."""
    def __init__(
        self, resource_type: str, resource_id: int, open_loans: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' has {open_loans} open loan(s)",
            "OPEN_LOANS_EXIST", context,
        )
        self.open_loans = open_loans


class IntegrityConflictError(ConflictError):
    """The store rejected a write on a unique or check constraint."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Integrity constraint violated", "INTEGRITY_CONFLICT", context=context,
        )


# ─── Infrastructure Errors (503) ────────────────────────────────

class DatabaseError(LibraryError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation
