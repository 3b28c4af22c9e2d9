# backend/portfolio_ledger/middleware/rate_limit.py
"""
Rate limiting for the ledger API using slowapi.

Clients are keyed by IP address. X-Forwarded-For / X-Real-IP are honoured
only when the immediate peer is a trusted proxy (or TRUST_PROXY_HEADERS is
set), so clients cannot spoof their own key.

Limits are defined in services/constants.py and can be disabled entirely
with RATE_LIMIT_ENABLED=false (the test suite does this).

Usage:
    from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_WRITE

    @router.post("/buy")
    @limiter.limit(RATE_LIMIT_WRITE)
    def buy(request: Request, ...):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from portfolio_ledger.config import settings
from portfolio_ledger.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_WRITE,
    RATE_LIMIT_ANALYTICS,
    RATE_LIMIT_HEALTH,
)

logger = logging.getLogger(__name__)

# Seconds clients are asked to wait after a 429
RETRY_AFTER_SECONDS = 60


def _is_trusted_proxy(request: Request) -> bool:
    if settings.trust_proxy_headers:
        return True
    return get_remote_address(request) in settings.trusted_proxy_ips


def _get_client_ip(request: Request) -> str:
    """
    Resolve the client address used as the rate limit key.

    Forwarded headers are read only from trusted proxies; the first entry of
    X-Forwarded-For is the original client.
    """
    if _is_trusted_proxy(request):
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return get_remote_address(request)


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

# In-memory storage: one limiter per process
limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Return 429 in the standard error body with a Retry-After header."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_WRITE",
    "RATE_LIMIT_ANALYTICS",
    "RATE_LIMIT_HEALTH",
]
