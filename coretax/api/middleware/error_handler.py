"""Global exception handlers for the FastAPI application.

Every error leaves the API as the same JSON envelope. ``CoreTaxError``
subclasses are mapped to a status code by ``STATUS_BY_ERROR``; request
validation failures become 400 responses with field-level details; anything
unanticipated is logged with its traceback and surfaced as a generic 500.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from coretax.api.constants import HTTP_500_INTERNAL_SERVER_ERROR
from coretax.api.schemas.errors import ErrorResponse, ServiceInfo
from coretax.api.utils.responses import ORJSONResponse
from coretax.core.config import Settings, get_settings
from coretax.core.context import RequestContext, generate_request_id
from coretax.core.error_context import sanitize_error_context
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

STATUS_BY_ERROR: dict[type[CoreTaxError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_400_BAD_REQUEST,
    InvalidActionError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnexpectedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_service_info(settings: Settings) -> ServiceInfo:
    """Create ServiceInfo from application settings."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: CoreTaxError) -> int:
    """Resolve the HTTP status for an application error, walking its MRO."""
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def coretax_error_handler(request: Request, exc: Exception) -> Response:
    """Handle CoreTaxError exceptions.

    Converts CoreTaxError instances to ErrorResponse with full context,
    ensuring sensitive data is sanitized before it is logged.

    Args:
        request: The FastAPI request that caused the exception
        exc: The CoreTaxError exception to handle

    Returns:
        Response: ORJSONResponse with error details

    Raises:
        TypeError: If exc is not a CoreTaxError instance
    """
    if not isinstance(exc, CoreTaxError):
        raise TypeError(f"Expected CoreTaxError, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()
    status_code = status_code_for(exc)

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
            "status_code": status_code,
        },
    )

    log = logger.error if exc.should_alert else logger.warning
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        correlation_id=correlation_id,
        **error_context,
    )

    debug_info = None
    if settings.environment == "development":
        debug_info = {
            "stack_trace": exc.stack_trace,
            "error_context": exc.context if exc.context else {},
            "exception_type": type(exc).__name__,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    error_response = ErrorResponse(
        error=exc.message,
        error_code=exc.error_code,
        message=exc.message,
        details=exc.context if exc.context else None,
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=exc.severity.value,
        service_info=get_service_info(settings),
        debug_info=debug_info,
    )

    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Converts validation errors to a 400 ErrorResponse with field-level details.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    # ['body', 'grossIncome'] -> 'grossIncome'
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:] if loc != "__root__")
        if not field_name:
            field_name = "root"
        field_errors.setdefault(field_name, []).append(
            error.get("msg", "Invalid value")
        )

    error_context = sanitize_error_context(
        exc,
        {
            "path": str(request.url.path),
            "method": request.method,
            "validation_errors": field_errors,
        },
    )

    logger.warning(
        "Request validation failed",
        correlation_id=correlation_id,
        status_code=status.HTTP_400_BAD_REQUEST,
        **error_context,
    )

    first_field = next(iter(field_errors), "root")
    message = f"Validation failed: {first_field}: {field_errors[first_field][0]}"

    error_response = ErrorResponse(
        error=message,
        error_code=ErrorCode.VALIDATION_ERROR.value,
        message=message,
        details={"validation_errors": field_errors},
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=Severity.LOW.value,
        service_info=get_service_info(settings),
    )

    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response.model_dump(mode="json"),
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException (404 for unknown routes, 405, ...).

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    error_code = ErrorCode.INTERNAL_ERROR.value
    severity = Severity.MEDIUM

    match exc.status_code:
        case status.HTTP_400_BAD_REQUEST:
            error_code = ErrorCode.VALIDATION_ERROR.value
            severity = Severity.LOW
        case status.HTTP_401_UNAUTHORIZED:
            error_code = ErrorCode.UNAUTHORIZED.value
            severity = Severity.HIGH
        case status.HTTP_403_FORBIDDEN:
            error_code = ErrorCode.FORBIDDEN.value
        case status.HTTP_404_NOT_FOUND:
            error_code = ErrorCode.NOT_FOUND.value
            severity = Severity.LOW
        case code if code >= HTTP_500_INTERNAL_SERVER_ERROR:
            severity = Severity.HIGH

    error_context = sanitize_error_context(
        exc,
        {
            "status": exc.status_code,
            "method": request.method,
            "path": str(request.url.path),
            "detail": exc.detail,
        },
    )

    logger.warning(
        "HTTP exception",
        correlation_id=correlation_id,
        **error_context,
    )

    error_response = ErrorResponse(
        error=str(exc.detail),
        error_code=error_code,
        message=str(exc.detail),
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=severity.value,
        service_info=get_service_info(settings),
    )

    return ORJSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unanticipated exceptions.

    Logs the full traceback and answers with a generic 500. Internal details
    are hidden from clients in production.
    """
    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )

    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=correlation_id,
        **error_context,
    )

    if settings.environment == "production":
        message = "Internal server error"
        details = None
        debug_info = None
    else:
        message = f"Internal server error: {type(exc).__name__}"
        details = {"error": str(exc), "type": type(exc).__name__}
        debug_info = {
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "error_context": {
                "error_message": str(exc),
                "error_args": list(exc.args),
            },
            "exception_type": type(exc).__name__,
        }

    error_response = ErrorResponse(
        error=message,
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message=message,
        details=details,
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=Severity.CRITICAL.value,
        service_info=get_service_info(settings),
        debug_info=debug_info,
    )

    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(CoreTaxError, coretax_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
