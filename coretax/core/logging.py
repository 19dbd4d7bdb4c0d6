"""Structured logging built on Loguru.

Every record goes through one sink whose formatter is chosen from
``LogConfig.log_formatter_type``:

- **console**: human-readable with inline context (development)
- **json**: generic structured format (self-hosted)
- **gcp**: Google Cloud Logging structured format
- **aws**: CloudWatch Logs Insights friendly format

Request-scoped fields are attached without service code having to pass them:
the correlation id with ``logger.contextualize`` by the request context
middleware, and the acting user and role by a patcher reading
``RequestContext`` once the authorization dependency has resolved the caller.
Standard library loggers (uvicorn, SQLAlchemy) are routed through
``InterceptHandler``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final, cast

import orjson
from loguru import logger

from coretax.core.config import get_settings
from coretax.core.context import RequestContext

if TYPE_CHECKING:
    from coretax.core.config import Settings

type LogRecord = dict[str, Any]
type FormatterFunc = Callable[[LogRecord], str]


class _LoggingState:
    """Tracks whether logging has been configured for this process."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()

DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Shown first, in this order, by the console formatter
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "actor_id",
    "actor_role",
    "method",
    "path",
    "status_code",
    "duration_ms",
)


def add_actor_context(record: LogRecord) -> None:
    """Loguru patcher adding the authenticated actor, when there is one."""
    actor = RequestContext.get_actor()
    if actor is not None:
        record["extra"].setdefault("actor_id", actor.user_id)
        record["extra"].setdefault("actor_role", actor.role)


def _escape(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str:
    if field == "correlation_id" and len(str(value)) > CORRELATION_ID_DISPLAY_LENGTH:
        value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        value = f"{value}ms"
    elif field == "status_code":
        match str(value)[:1]:
            case "2":
                value = f"<green>{value}</green>"
            case "3":
                value = f"<yellow>{value}</yellow>"
            case "4":
                value = f"<red>{value}</red>"
            case "5":
                value = f"<red><bold>{value}</bold></red>"
    return _escape(value)


def _format_extra_field(key: str, value: object) -> str:
    str_value = str(value)
    if key in get_settings().log_config.sensitive_fields:
        str_value = "[REDACTED]"
    elif len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def _format_context_fields(extra: dict[str, Any]) -> list[str]:
    """Render priority fields first, then everything else dimmed."""
    parts = [
        f"<yellow>{_format_priority_field(field, extra[field])}</yellow>"
        for field in PRIORITY_FIELDS
        if extra.get(field) is not None
    ]
    parts.extend(
        f"<dim>{_format_extra_field(key, value)}</dim>"
        for key, value in extra.items()
        if key not in PRIORITY_FIELDS and not key.startswith("_") and value is not None
    )
    return parts


def format_console_with_context(record: LogRecord) -> str:
    """Format a record for the console with all context fields inline."""
    try:
        parts = [
            f"<green>{record['time'].strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan>",
        ]

        context_parts = _format_context_fields(record.get("extra", {}))
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        parts.append(_escape(record.get("message", "")))

        if record.get("exception"):
            parts.append("\n{exception}")

        return " | ".join(parts) + "\n"
    except (AttributeError, TypeError, ValueError, KeyError):
        return DEFAULT_LOG_FORMAT + "\n"


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller that originated the logged message
        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            if frame.f_back is None:
                break
            frame = frame.f_back
            depth += 1

        extra: dict[str, Any] = {}
        if record.name == "uvicorn.access" and hasattr(record, "scope"):
            scope = record.scope
            extra["method"] = scope.get("method", "")
            extra["path"] = scope.get("path", "")
            headers = dict(scope.get("headers", []))
            if correlation_id := headers.get(b"x-correlation-id", b"").decode():
                extra["correlation_id"] = correlation_id

        logger.opt(depth=depth, exception=record.exc_info).bind(**extra).log(
            level, record.getMessage()
        )


def _base_entry(record: LogRecord) -> dict[str, Any]:
    return {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }


def _public_extra(record: LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.get("extra", {}).items() if not k.startswith("_")}


def _dumps(entry: dict[str, Any]) -> str:
    return orjson.dumps(entry, default=str).decode() + "\n"


def serialize_for_json(record: LogRecord) -> str:
    """Format a record as a flat JSON object."""
    log_entry = _base_entry(record)
    log_entry.update(_public_extra(record))

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return _dumps(log_entry)


GCP_SEVERITY: Final[dict[str, str]] = {
    "TRACE": "DEBUG",
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "SUCCESS": "INFO",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL",
}


def serialize_for_gcp(record: LogRecord) -> str:
    """Format a record for Google Cloud Logging structured ingestion."""
    settings = get_settings()
    extra = _public_extra(record)

    log_entry: dict[str, Any] = {
        "severity": GCP_SEVERITY.get(record["level"].name, "INFO"),
        "message": record["message"],
        "timestamp": record["time"].isoformat(),
        "serviceContext": {
            "service": settings.app_name,
            "version": settings.app_version,
        },
    }

    labels = {"function": record["function"], "line": str(record["line"])}
    if correlation_id := extra.pop("correlation_id", None):
        log_entry["logging.googleapis.com/trace"] = correlation_id
    if request_id := extra.pop("request_id", None):
        labels["request_id"] = request_id
    log_entry["logging.googleapis.com/labels"] = labels

    if extra:
        log_entry["jsonPayload"] = extra

    if record.get("exception") or record["level"].name in {"ERROR", "CRITICAL"}:
        log_entry["logging.googleapis.com/sourceLocation"] = {
            "file": record["file"].path,
            "line": str(record["line"]),
            "function": record["function"],
        }

    return _dumps(log_entry)


def serialize_for_aws(record: LogRecord) -> str:
    """Format a record for CloudWatch Logs Insights."""
    log_entry = _base_entry(record)
    extra = _public_extra(record)

    if correlation_id := extra.pop("correlation_id", None):
        log_entry["traceId"] = correlation_id
    if request_id := extra.pop("request_id", None):
        log_entry["requestId"] = request_id
    for key, value in extra.items():
        log_entry.setdefault(key, value)

    if exc := record.get("exception"):
        log_entry["error"] = {
            "type": exc.type.__name__ if exc.type else None,
            "message": str(exc.value) if exc.value else None,
        }

    return _dumps(log_entry)


LOG_FORMATTERS: dict[str, FormatterFunc] = {
    "json": serialize_for_json,
    "gcp": serialize_for_gcp,
    "aws": serialize_for_aws,
}


def setup_logging(settings: Settings) -> None:
    """Configure Loguru and route standard library logging through it.

    Safe to call more than once; only the first call has an effect.
    """
    if _state.configured:
        return

    logger.remove()
    logger.configure(patcher=cast("Any", add_actor_context))

    formatter_type = settings.log_config.log_formatter_type or "console"
    formatter = LOG_FORMATTERS.get(formatter_type)

    if formatter is None:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:

        def structured_sink(message: Any) -> None:
            sys.stdout.write(formatter(message.record))
            sys.stdout.flush()

        logger.add(
            structured_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    if settings.log_config.enable_sql_logging:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True
