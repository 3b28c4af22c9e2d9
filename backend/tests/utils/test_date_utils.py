# tests/utils/test_date_utils.py
"""
Tests for date parsing, validation and range helpers.
"""

from datetime import date, datetime

import pytest

from portfolio_ledger.services.exceptions import InvalidDateRangeError, ValidationError
from portfolio_ledger.utils.date_utils import (
    is_valid_date_format,
    parse_date,
    format_date,
    validate_date_range,
    parse_date_range,
    iter_dates,
    days_between,
    trailing_window,
)


class TestIsValidDateFormat:
    @pytest.mark.parametrize("value", ["2024-01-02", "2024-02-29", "1999-12-31"])
    def test_valid(self, value):
        assert is_valid_date_format(value) is True

    @pytest.mark.parametrize(
        "value",
        [None, "", "2024-1-2", "2024/01/02", "02-01-2024", "2023-02-29", "2024-13-01", "not-a-date"],
    )
    def test_invalid(self, value):
        assert is_valid_date_format(value) is False


class TestParseDate:
    def test_parses_string(self):
        assert parse_date("2024-01-02") == date(2024, 1, 2)

    def test_passes_date_through(self):
        assert parse_date(date(2024, 1, 2)) == date(2024, 1, 2)

    def test_datetime_truncated(self):
        assert parse_date(datetime(2024, 1, 2, 15, 30)) == date(2024, 1, 2)

    def test_malformed_raises_with_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_date("2024-1-2", "start_date")
        assert exc_info.value.field == "start_date"
        assert "YYYY-MM-DD" in exc_info.value.message


class TestFormatDate:
    def test_format_date(self):
        assert format_date(date(2024, 1, 2)) == "2024-01-02"
        assert format_date(datetime(2024, 1, 2, 8, 0)) == "2024-01-02"


class TestValidateDateRange:
    def test_both_missing_is_valid(self):
        assert validate_date_range(None, None) == []

    def test_single_bound_is_valid(self):
        assert validate_date_range("2024-01-01", None) == []
        assert validate_date_range(None, "2024-01-01") == []

    def test_malformed_bounds_reported(self):
        errors = validate_date_range("2024-1-1", "bad")
        assert len(errors) == 2

    def test_inverted_range_reported(self):
        assert validate_date_range("2024-02-01", "2024-01-01") == [
            "Start date cannot be later than end date"
        ]


class TestParseDateRange:
    def test_valid_range(self):
        assert parse_date_range("2024-01-01", "2024-01-03") == (date(2024, 1, 1), date(2024, 1, 3))

    def test_same_day_range(self):
        assert parse_date_range("2024-01-01", "2024-01-01") == (date(2024, 1, 1), date(2024, 1, 1))

    @pytest.mark.parametrize("start,end,field", [(None, "2024-01-01", "start_date"), ("2024-01-01", "", "end_date")])
    def test_missing_bound(self, start, end, field):
        with pytest.raises(ValidationError) as exc_info:
            parse_date_range(start, end)
        assert exc_info.value.field == field

    def test_inverted_range(self):
        with pytest.raises(InvalidDateRangeError):
            parse_date_range("2024-01-03", "2024-01-01")

    def test_inverted_range_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_date_range("2024-01-03", "2024-01-01")


class TestRanges:
    def test_iter_dates_inclusive_without_gaps(self):
        days = list(iter_dates(date(2024, 2, 27), date(2024, 3, 1)))
        assert days == [
            date(2024, 2, 27),
            date(2024, 2, 28),
            date(2024, 2, 29),
            date(2024, 3, 1),
        ]

    def test_iter_dates_single_day(self):
        assert list(iter_dates(date(2024, 1, 1), date(2024, 1, 1))) == [date(2024, 1, 1)]

    def test_iter_dates_empty_when_inverted(self):
        assert list(iter_dates(date(2024, 1, 2), date(2024, 1, 1))) == []

    def test_days_between(self):
        assert days_between(date(2024, 1, 1), date(2024, 1, 31)) == 30

    def test_trailing_window(self):
        assert trailing_window(7, today=date(2024, 1, 10)) == (date(2024, 1, 3), date(2024, 1, 10))
