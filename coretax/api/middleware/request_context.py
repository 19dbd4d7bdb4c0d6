"""Correlation id propagation.

The correlation id is taken from ``X-Correlation-ID`` or generated, stored in
``RequestContext`` and bound to every log record emitted while the request is
handled. It is echoed back on the response.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from coretax.api.constants import CORRELATION_ID_HEADER
from coretax.core.context import RequestContext, generate_correlation_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Set up and tear down the request context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)

        try:
            with logger.contextualize(correlation_id=correlation_id):
                response = await call_next(request)
                response.headers[CORRELATION_ID_HEADER] = correlation_id
                return response
        finally:
            RequestContext.clear()
