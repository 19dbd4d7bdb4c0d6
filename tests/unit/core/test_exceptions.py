"""Unit tests for the exception hierarchy."""

import pytest

from coretax.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    CoreTaxError,
    ErrorCode,
    InvalidActionError,
    NotFoundError,
    Severity,
    UnexpectedError,
    ValidationError,
)


@pytest.mark.unit
class TestCoreTaxError:
    def test_accepts_enum_or_string_code(self) -> None:
        assert CoreTaxError(ErrorCode.CONFLICT, "x").error_code == "CONFLICT"
        assert CoreTaxError("CUSTOM", "x").error_code == "CUSTOM"

    def test_str_and_repr(self) -> None:
        error = CoreTaxError("CUSTOM", "Broken", context={"id": 3})

        assert str(error) == "[CUSTOM] Broken"
        assert repr(error) == (
            "CoreTaxError(error_code='CUSTOM', message='Broken', "
            "severity=MEDIUM, context={'id': 3})"
        )

    def test_cause_is_chained(self) -> None:
        cause = ValueError("bad")
        error = CoreTaxError("CUSTOM", "Broken", cause=cause)

        assert error.cause is cause
        assert error.__cause__ is cause

    def test_fingerprint_is_stable_per_raise_site(self) -> None:
        first, second = (CoreTaxError("CUSTOM", f"msg {i}") for i in range(2))

        assert len(first.fingerprint) == 16
        assert first.fingerprint == second.fingerprint

    def test_fingerprint_differs_per_error_type(self) -> None:
        assert NotFoundError("x").fingerprint != ConflictError("x").fingerprint


@pytest.mark.unit
class TestSubclasses:
    @pytest.mark.parametrize(
        ("error", "code", "severity"),
        [
            (ValidationError("x"), "VALIDATION_ERROR", Severity.LOW),
            (NotFoundError("x"), "NOT_FOUND", Severity.LOW),
            (AuthenticationError(), "UNAUTHORIZED", Severity.HIGH),
            (AuthorizationError(), "FORBIDDEN", Severity.MEDIUM),
            (ConflictError("x"), "CONFLICT", Severity.LOW),
            (InvalidActionError("x"), "INVALID_ACTION", Severity.LOW),
            (UnexpectedError(), "INTERNAL_ERROR", Severity.CRITICAL),
        ],
    )
    def test_codes_and_severity(
        self, error: CoreTaxError, code: str, severity: Severity
    ) -> None:
        assert isinstance(error, CoreTaxError)
        assert error.error_code == code
        assert error.severity is severity

    def test_default_messages(self) -> None:
        assert AuthenticationError().message == "Unauthorized"
        assert AuthorizationError().message == "Access denied"
        assert UnexpectedError().message == "Internal server error"

    def test_invalid_action_context(self) -> None:
        error = InvalidActionError("FLY", ["DELETE", "EXPORT"])

        assert error.message == "Invalid action"
        assert error.context == {"action": "FLY", "allowed_actions": ["DELETE", "EXPORT"]}

    @pytest.mark.parametrize(
        ("error", "expected", "alert"),
        [
            (ValidationError("x"), True, False),
            (AuthorizationError(), True, False),
            (AuthenticationError(), False, True),
            (UnexpectedError(), False, True),
        ],
    )
    def test_expected_and_alerting(
        self, error: CoreTaxError, expected: bool, alert: bool
    ) -> None:
        assert error.is_expected is expected
        assert error.should_alert is alert
