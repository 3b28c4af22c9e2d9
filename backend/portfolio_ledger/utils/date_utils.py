# backend/portfolio_ledger/utils/date_utils.py
"""
Date utility functions for the ledger and analysis services.

All API dates are calendar dates in ``YYYY-MM-DD`` form. This module parses
and validates them, generates inclusive date ranges for replay, and formats
dates for storage and responses.

Usage:
    from portfolio_ledger.utils.date_utils import parse_date_range, iter_dates

    start, end = parse_date_range("2024-01-01", "2024-01-31")
    for day in iter_dates(start, end):
        ...
"""

import re
from collections.abc import Iterator
from datetime import date, datetime, timedelta

from portfolio_ledger.services.exceptions import InvalidDateRangeError, ValidationError

DATE_FORMAT = "%Y-%m-%d"
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def get_current_date() -> date:
    """Today's date (module-level so tests can patch it)."""
    return date.today()


def is_valid_date_format(value: str | None) -> bool:
    """
    Check that a string is ``YYYY-MM-DD`` and names a real calendar date.

    Example:
        >>> is_valid_date_format("2024-02-29")
        True
        >>> is_valid_date_format("2023-02-29")
        False
    """
    if not value or not _DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def parse_date(value: str | date, field: str = "date") -> date:
    """
    Parse a ``YYYY-MM-DD`` string (or pass a date through).

    Raises:
        ValidationError: If the value is missing or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_valid_date_format(value):
        raise ValidationError(
            f"Invalid {field}: '{value}'. Expected format YYYY-MM-DD",
            field=field,
        )
    return datetime.strptime(value, DATE_FORMAT).date()


def format_date(value: date | datetime) -> str:
    """Format a date as ``YYYY-MM-DD`` (safe for MySQL DATE columns)."""
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(DATE_FORMAT)


def validate_date_range(start: str | None, end: str | None) -> list[str]:
    """
    Collect problems with an optional date range without raising.

    Either bound may be omitted; present bounds must be well-formed and
    ordered.

    Returns:
        List of error messages (empty when the range is valid)
    """
    errors: list[str] = []
    if start and not is_valid_date_format(start):
        errors.append("Invalid start date format, expected YYYY-MM-DD")
    if end and not is_valid_date_format(end):
        errors.append("Invalid end date format, expected YYYY-MM-DD")
    if not errors and start and end and start > end:
        errors.append("Start date cannot be later than end date")
    return errors


def parse_date_range(start: str | date, end: str | date) -> tuple[date, date]:
    """
    Parse and order-check a required inclusive date range.

    Raises:
        ValidationError: If either bound is missing or malformed
        InvalidDateRangeError: If start is after end
    """
    if start is None or start == "":
        raise ValidationError("start_date is required", field="start_date")
    if end is None or end == "":
        raise ValidationError("end_date is required", field="end_date")

    start_date = parse_date(start, "start_date")
    end_date = parse_date(end, "end_date")
    if start_date > end_date:
        raise InvalidDateRangeError(start_date, end_date)
    return start_date, end_date


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (0 when equal)."""
    return (end - start).days


def trailing_window(days: int, today: date | None = None) -> tuple[date, date]:
    """The inclusive window ``[today - days, today]``."""
    end = today or get_current_date()
    return end - timedelta(days=days), end
