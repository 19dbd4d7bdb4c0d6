"""Structured exception hierarchy for consistent error handling.

Every error raised by CoreTax code derives from ``CoreTaxError``. The API
layer maps each subclass to one HTTP status code (see
``coretax.api.middleware.error_handler``), so services only need to raise the
error that describes what went wrong:

- ``ValidationError``: malformed or missing input (400)
- ``AuthenticationError``: no identity or an invalid one (401)
- ``AuthorizationError``: identity present but role/ownership insufficient (403)
- ``NotFoundError``: the resource does not exist (404)
- ``ConflictError``: the current state disallows the operation (400)
- ``InvalidActionError``: unknown bulk or sync action tag (400)
- ``UnexpectedError``: anything else, surfaced as a generic 500

Each error carries a severity, optional structured context, the original
cause, and a fingerprint used to group similar errors in log aggregation.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes returned in the ``error_code`` field."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or missing data."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """No identity was supplied, or it could not be verified."""

    FORBIDDEN = "FORBIDDEN"
    """The caller is identified but may not perform this operation."""

    CONFLICT = "CONFLICT"
    """The resource's current state does not allow the operation."""

    INVALID_ACTION = "INVALID_ACTION"
    """The requested action tag is not part of the resource's vocabulary."""


class Severity(Enum):
    """Severity levels used for log levels and alerting."""

    LOW = "LOW"
    """Expected errors caused by user input."""

    MEDIUM = "MEDIUM"
    """Errors that affect a single operation."""

    HIGH = "HIGH"
    """Security relevant errors or failures of critical functionality."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention."""


class CoreTaxError(Exception):
    """Base exception class for all CoreTax exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint from the error type and where it was raised.

        Returns:
            str: A hash string for error grouping
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "coretax/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether this error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Whether this error should trigger alerts (HIGH or CRITICAL)."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(CoreTaxError):
    """Raised when input is missing or malformed."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class NotFoundError(CoreTaxError):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class AuthenticationError(CoreTaxError):
    """Raised when the caller has no identity or it cannot be verified."""

    def __init__(
        self,
        message: str = "Unauthorized",
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class AuthorizationError(CoreTaxError):
    """Raised when an identified caller lacks the role or ownership required."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: str | ErrorCode = ErrorCode.FORBIDDEN,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)


class ConflictError(CoreTaxError):
    """Raised when a record's state does not allow the requested operation.

    Covers disallowed status transitions, state-dependent deletion and
    uniqueness violations such as duplicate account numbers.
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.CONFLICT,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class InvalidActionError(CoreTaxError):
    """Raised for an action tag outside a resource's action vocabulary."""

    def __init__(
        self,
        action: str,
        allowed: list[str] | None = None,
        error_code: str | ErrorCode = ErrorCode.INVALID_ACTION,
    ) -> None:
        context: dict[str, Any] = {"action": action}
        if allowed is not None:
            context["allowed_actions"] = allowed
        super().__init__(error_code, "Invalid action", Severity.LOW, context)


class UnexpectedError(CoreTaxError):
    """Wraps an unanticipated failure so it is logged and surfaced as a 500."""

    def __init__(
        self,
        message: str = "Internal server error",
        error_code: str | ErrorCode = ErrorCode.INTERNAL_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.CRITICAL, context, cause)
