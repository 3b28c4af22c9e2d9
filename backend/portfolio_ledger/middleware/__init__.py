# backend/portfolio_ledger/middleware/__init__.py
"""
ASGI middleware for the Portfolio Ledger API.

- Correlation ID tracking for request tracing
- Rate limiting (slowapi)

Usage:
    from portfolio_ledger.middleware import CorrelationIdMiddleware, limiter

    app.add_middleware(CorrelationIdMiddleware)
    app.state.limiter = limiter
"""

from portfolio_ledger.middleware.correlation import CorrelationIdMiddleware
from portfolio_ledger.middleware.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_WRITE,
    RATE_LIMIT_ANALYTICS,
    RATE_LIMIT_HEALTH,
)

__all__ = [
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_WRITE",
    "RATE_LIMIT_ANALYTICS",
    "RATE_LIMIT_HEALTH",
]
