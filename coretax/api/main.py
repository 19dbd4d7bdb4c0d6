"""FastAPI application factory for the CoreTax API.

``create_app`` wires, in order:

1. logging and tracing, configured from ``Settings``;
2. exception handlers mapping ``CoreTaxError`` subclasses to status codes;
3. middleware (security headers, request context, request logging);
4. the operational endpoints ``/``, ``/health`` and ``/info``;
5. the resource routers under ``Settings.api_prefix``.

Middleware run in reverse order of registration, so security headers are
applied outermost and request logging sees the correlation id.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from loguru import logger

from coretax.api.dependencies import AppSettings
from coretax.api.middleware.error_handler import register_exception_handlers
from coretax.api.middleware.request_context import RequestContextMiddleware
from coretax.api.middleware.request_logging import RequestLoggingMiddleware
from coretax.api.middleware.security_headers import SecurityHeadersMiddleware
from coretax.api.routers import build_api_router
from coretax.api.utils.responses import ORJSONResponse
from coretax.core.config import Settings, get_settings
from coretax.core.logging import setup_logging
from coretax.core.observability import instrument_app, setup_tracing
from coretax.infrastructure.database.session import (
    check_database_connection,
    close_database,
    pool_metrics,
)
from coretax.infrastructure.sync import get_sync_scheduler


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Verify the database on startup and release connections on shutdown.

    Raises:
        RuntimeError: If the database cannot be reached at startup.
    """
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    # Deferred syncs have no persistence; whatever is still waiting is dropped
    pending = get_sync_scheduler().pending
    if pending:
        logger.warning("Dropping {} pending bank sync operations", pending)
    await close_database()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to build the app from; ``get_settings()`` when omitted.

    Returns:
        FastAPI: The configured application.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_exception_handlers(application)

    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(SecurityHeadersMiddleware)

    @application.get("/", tags=["operations"])
    async def root() -> dict[str, str]:
        return {
            "message": f"{settings.app_name} API",
            "docs": settings.docs_url or "",
        }

    @application.get("/health", tags=["operations"])
    async def health() -> dict[str, Any]:
        """Liveness plus database reachability.

        A failed database check reports ``degraded`` rather than failing the
        probe, so the process is not restarted for a database outage.
        """
        is_healthy, error_msg = await check_database_connection()
        if not is_healthy:
            logger.warning("Database health check failed: {}", error_msg)
            return {"status": "degraded", "database": False}

        metrics = pool_metrics()
        logger.bind(metric_type="db.pool.health", **metrics).debug(
            "Database pool health check"
        )
        return {"status": "healthy", "database": True, "pool": metrics}

    @application.get("/info", tags=["operations"])
    async def info(app_settings: AppSettings) -> dict[str, Any]:
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
            "api_prefix": app_settings.api_prefix,
        }

    application.include_router(build_api_router(), prefix=settings.api_prefix)

    instrument_app(application, settings)

    return application


app = create_app()
