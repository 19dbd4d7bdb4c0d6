"""Redaction of sensitive values before errors and requests are logged.

Field names are matched against a default pattern (passwords, tokens, keys)
and the configurable ``LogConfig.sensitive_fields`` list, which also covers
taxpayer identifiers such as NPWP and NIK. Only logged copies are redacted;
the original data is never modified.
"""

from __future__ import annotations

import re
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from coretax.core.config import get_settings
from coretax.core.constants import REDACTED, SENSITIVE_HEADERS

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|authorization|"
    r"credential|private[_-]?key|access[_-]?key|session|pin|cvv|card[_-]?number)",
    re.IGNORECASE,
)

MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> tuple[str, ...]:
    return tuple(f.lower() for f in get_settings().log_config.sensitive_fields)


def is_sensitive_field(field_name: str) -> bool:
    """Check whether a field name indicates sensitive data."""
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True
    field_lower = field_name.lower()
    return any(sensitive in field_lower for sensitive in _get_sensitive_fields())


def is_sensitive_header(header_name: str) -> bool:
    return header_name.lower() in SENSITIVE_HEADERS


def sanitize_value(value: Any, field_name: str = "", depth: int = 0) -> Any:  # noqa: ANN401
    """Redact ``value`` if its field name is sensitive, recursing into containers."""
    if depth > MAX_DEPTH:
        return REDACTED
    if field_name and is_sensitive_field(field_name):
        return REDACTED
    if isinstance(value, dict):
        return {k: sanitize_value(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return type(value)(sanitize_value(item, "", depth + 1) for item in value)
    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    return {k: REDACTED if is_sensitive_header(k) else v for k, v in headers.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Create a sanitized context dict for logging ``error``.

    Args:
        error: The exception being logged.
        context: Additional request context (sanitized too).

    Returns:
        dict[str, Any]: Context safe to pass to the logger.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        error_context.update(sanitize_dict(context))

    # Stack traces are logged separately by loguru
    error_attrs = {
        k: v
        for k, v in vars(error).items()
        if not k.startswith("_") and k not in {"stack_trace", "cause"}
    }
    if error_attrs:
        error_context["error_attributes"] = sanitize_dict(error_attrs)

    return error_context
