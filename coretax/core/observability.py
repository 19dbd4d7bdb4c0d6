"""OpenTelemetry tracing with pluggable exporters.

In development spans are written through Loguru so they follow the logging
configuration; elsewhere they are shipped to an OTLP collector.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Final

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from coretax.core.constants import TRACING_EXCLUDED_URLS
from coretax.core.context import RequestContext

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from fastapi import FastAPI

    from coretax.core.config import Settings

SERVICE_NAME_KEY: Final[str] = "service.name"
SERVICE_VERSION_KEY: Final[str] = "service.version"
ENVIRONMENT_KEY: Final[str] = "deployment.environment"
NOISY_SPANS: Final[frozenset[str]] = frozenset(
    {"connect", "http send", "http receive", "cursor.execute"}
)


class LoguruSpanExporter(SpanExporter):
    """Span exporter that writes finished spans as Loguru debug records."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        for span in spans:
            span_context = span.get_span_context()
            if not span_context or span.name in NOISY_SPANS:
                continue

            attributes = dict(span.attributes or {})
            duration_ms = None
            if span.end_time and span.start_time:
                duration_ms = (span.end_time - span.start_time) // 1_000_000

            logger.bind(
                trace_id=f"0x{span_context.trace_id:032x}",
                span_id=f"0x{span_context.span_id:016x}",
                correlation_id=attributes.get(
                    "correlation_id", RequestContext.get_correlation_id()
                ),
                span_name=span.name,
                duration_ms=duration_ms,
                attributes=attributes,
                status=span.status.status_code.name,
            ).debug("Trace span completed: {}", span.name)

        return SpanExportResult.SUCCESS


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    """Build the exporter named by ``observability_config.exporter_type``."""
    match settings.observability_config.exporter_type:
        case "console":
            logger.info("Using Loguru span exporter")
            return LoguruSpanExporter()
        case "otlp":
            endpoint = (
                settings.observability_config.exporter_endpoint
                or "http://localhost:4317"
            )
            logger.info("Using OTLP exporter at {}", endpoint)
            return OTLPSpanExporter(
                endpoint=endpoint,
                insecure=settings.environment == "development",
            )
        case _:
            logger.info("Trace export disabled")
            return None


@lru_cache(maxsize=1)
def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def setup_tracing(settings: Settings) -> None:
    """Install the global tracer provider, sampled per configuration."""
    if not settings.observability_config.enable_tracing:
        logger.info("Tracing disabled by configuration")
        return

    resource = Resource.create(
        {
            SERVICE_NAME_KEY: settings.app_name,
            SERVICE_VERSION_KEY: settings.app_version,
            ENVIRONMENT_KEY: settings.environment,
        }
    )
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(settings.observability_config.trace_sample_rate),
    )

    if exporter := get_span_exporter(settings):
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(tracer_provider)

    logger.info(
        "Tracing configured",
        exporter_type=settings.observability_config.exporter_type,
        sample_rate=settings.observability_config.trace_sample_rate,
    )


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """Instrument FastAPI and SQLAlchemy when tracing is enabled."""
    if not settings.observability_config.enable_tracing:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=TRACING_EXCLUDED_URLS,
        server_request_hook=add_correlation_id_to_span,
    )
    SQLAlchemyInstrumentor().instrument(enable_commenter=True)

    logger.info("Application instrumented for tracing")


def add_correlation_id_to_span(span: trace.Span, scope: dict[str, Any]) -> None:
    """Server request hook copying the correlation id onto the request span."""
    _ = scope
    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute("correlation_id", correlation_id)


@contextmanager
def trace_operation(
    name: str, **attributes: str | int | float | bool
) -> Generator[trace.Span]:
    """Trace a block as a child span carrying request and actor context.

    Example:
        >>> with trace_operation("tax.calculate", tax_type="PPH_21"):
        ...     result = calculate_tax(inputs)
    """
    span = get_tracer(__name__).start_span(name)

    for key, value in attributes.items():
        span.set_attribute(key, str(value))
    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute("correlation_id", correlation_id)
    if actor := RequestContext.get_actor():
        span.set_attribute("actor.id", actor.user_id)
        span.set_attribute("actor.role", actor.role)

    with trace.use_span(span, end_on_exit=True):
        yield span
