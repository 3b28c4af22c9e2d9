# backend/portfolio_ledger/utils/context.py
"""
Request-scoped context for the ledger API.

Holds the correlation ID and a small amount of request metadata (method,
path) in ``contextvars`` so that log records emitted anywhere during a
request, including inside the transaction engine, can be tied back to it.

Usage:
    from portfolio_ledger.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")      # middleware
    get_correlation_id()               # anywhere else -> "abc-123"
"""

from contextvars import ContextVar
from typing import Any

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_request_context_var: ContextVar[dict[str, Any] | None] = ContextVar("request_context", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    """Return the current request's correlation ID, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)


# =============================================================================
# REQUEST METADATA
# =============================================================================

def get_request_context() -> dict[str, Any]:
    """Return a copy of the request metadata (empty outside a request)."""
    return dict(_request_context_var.get() or {})


def set_request_context(key: str, value: Any) -> None:
    ctx = dict(_request_context_var.get() or {})
    ctx[key] = value
    _request_context_var.set(ctx)


def clear_request_context() -> None:
    _request_context_var.set(None)
