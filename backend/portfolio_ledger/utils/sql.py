# backend/portfolio_ledger/utils/sql.py
"""
SQL helpers for building safe search filters.

Usage:
    from portfolio_ledger.utils.sql import escape_like_pattern

    pattern = f"%{escape_like_pattern(search)}%"
    query = query.where(Asset.name.ilike(pattern, escape="\\\\"))
"""

LIKE_ESCAPE_CHAR = "\\"


def escape_like_pattern(value: str) -> str:
    """
    Escape LIKE wildcards so user input matches literally.

    Example:
        >>> escape_like_pattern("CASH_001")
        'CASH\\\\_001'
    """
    # Backslash first: it is the escape character itself
    return (
        value
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
