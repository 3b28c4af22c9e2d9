# backend/portfolio_ledger/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

For every request the middleware:
1. Takes the correlation ID from X-Correlation-ID, then X-Request-ID,
   or generates a UUID4
2. Stores it (with the request method and path) in the request context
3. Echoes it back in the X-Correlation-ID response header

Client Usage:
    curl -H "X-Correlation-ID: trade-42" http://localhost:8000/transactions/buy ...
"""

import logging
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portfolio_ledger.utils.context import (
    set_correlation_id,
    clear_correlation_id,
    set_request_context,
    clear_request_context,
)

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to each request and its log records."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = self._get_correlation_id(request)

        set_correlation_id(correlation_id)
        set_request_context("method", request.method)
        set_request_context("path", request.url.path)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()
            clear_request_context()

    @staticmethod
    def _get_correlation_id(request: Request) -> str:
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header)
            if value:
                return value
        return str(uuid.uuid4())
