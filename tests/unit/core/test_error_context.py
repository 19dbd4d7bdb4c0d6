"""Unit tests for redaction of sensitive data in logged context."""

import pytest

from coretax.core.constants import REDACTED
from coretax.core.error_context import (
    is_sensitive_field,
    sanitize_dict,
    sanitize_error_context,
    sanitize_headers,
)
from coretax.core.exceptions import ConflictError


@pytest.mark.unit
class TestSensitiveFields:
    @pytest.mark.parametrize(
        "name",
        ["password", "accessToken", "API_KEY", "npwp", "nik", "account_number", "Authorization"],
    )
    def test_sensitive(self, name: str) -> None:
        assert is_sensitive_field(name)

    @pytest.mark.parametrize("name", ["title", "tax_type", "status"])
    def test_not_sensitive(self, name: str) -> None:
        assert not is_sensitive_field(name)


@pytest.mark.unit
class TestSanitize:
    def test_nested_values_are_redacted(self) -> None:
        data = {
            "user": {"email": "a@coretax.id", "password": "x"},
            "items": [{"token": "t"}, {"title": "ok"}],
            "npwp": "01.234.567.8-901.000",
        }

        assert sanitize_dict(data) == {
            "user": {"email": "a@coretax.id", "password": REDACTED},
            "items": [{"token": REDACTED}, {"title": "ok"}],
            "npwp": REDACTED,
        }

    def test_headers(self) -> None:
        headers = {"Authorization": "Bearer abc", "Accept": "application/json"}

        assert sanitize_headers(headers) == {
            "Authorization": REDACTED,
            "Accept": "application/json",
        }

    def test_error_context_includes_sanitized_attributes(self) -> None:
        error = ConflictError("Account number already exists", context={"account_number": "123"})

        context = sanitize_error_context(error, {"request_path": "/api/bank-integrations"})

        assert context["error_type"] == "ConflictError"
        assert context["request_path"] == "/api/bank-integrations"
        assert context["error_attributes"]["context"] == {"account_number": REDACTED}
        assert "stack_trace" not in context["error_attributes"]
