# backend/portfolio_ledger/utils/__init__.py
"""
Cross-cutting utilities for the Portfolio Ledger API.

- logging: Logging setup with correlation ID support
- context: Request-scoped context (correlation ID, path)
- financial: Fixed-precision Decimal arithmetic
- date_utils: Date parsing, validation and range generation
- sql: LIKE pattern escaping

Usage:
    from portfolio_ledger.utils import setup_logging, get_correlation_id
    from portfolio_ledger.utils.financial import round_currency
    from portfolio_ledger.utils.date_utils import parse_date_range
"""

from portfolio_ledger.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    get_request_context,
    set_request_context,
    clear_request_context,
)
from portfolio_ledger.utils.logging import setup_logging, get_logger
from portfolio_ledger.utils.sql import escape_like_pattern

__all__ = [
    "setup_logging",
    "get_logger",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "get_request_context",
    "set_request_context",
    "clear_request_context",
    "escape_like_pattern",
]
