"""Security headers added to every response."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from coretax.api.constants import DEFAULT_HSTS_MAX_AGE


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add nosniff, frame denial, referrer policy and (optionally) HSTS headers.

    Args:
        app: The ASGI application to wrap.
        hsts_enabled: Whether to include the HSTS header.
        hsts_max_age: Max age for HSTS in seconds.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        hsts_enabled: bool = True,
        hsts_max_age: int = DEFAULT_HSTS_MAX_AGE,
    ) -> None:
        super().__init__(app)
        self.hsts_enabled = hsts_enabled
        self.hsts_value = f"max-age={hsts_max_age}; includeSubDomains"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if self.hsts_enabled:
            response.headers["Strict-Transport-Security"] = self.hsts_value

        return response
