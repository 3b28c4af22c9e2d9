# tests/utils/test_financial.py
"""
Tests for fixed-precision financial arithmetic.
"""

from decimal import Decimal

import pytest

from portfolio_ledger.utils.financial import (
    to_decimal,
    round_currency,
    round_quantity,
    round_price,
    round_percentage,
    calculate_total,
    add_currency,
    subtract_currency,
    add_quantity,
    subtract_quantity,
    percentage_of,
    weighted_average_price,
    is_valid_currency,
    is_valid_quantity,
    has_sufficient_funds,
)


class TestToDecimal:
    """Tests for to_decimal conversion."""

    def test_float_goes_through_str(self):
        """0.1 should not carry binary float noise."""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_passthrough(self):
        value = Decimal("1.23")
        assert to_decimal(value) is value

    def test_int_and_str(self):
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("2.50") == Decimal("2.50")

    @pytest.mark.parametrize("value", ["abc", "", True])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


class TestRounding:
    """Tests for the rounding helpers (half-up)."""

    def test_round_currency_half_up(self):
        assert round_currency("2.675") == Decimal("2.68")
        assert round_currency("1.005") == Decimal("1.01")
        assert round_currency("-1.005") == Decimal("-1.01")

    def test_round_currency_float_input(self):
        """Float input is rounded from its shortest repr."""
        assert round_currency(0.1 + 0.2) == Decimal("0.30")

    def test_round_quantity_six_decimals(self):
        assert round_quantity("0.1234565") == Decimal("0.123457")
        assert round_quantity("100") == Decimal("100.000000")

    def test_round_price_four_decimals(self):
        assert round_price("10.12345") == Decimal("10.1235")

    def test_round_percentage(self):
        assert round_percentage("33.3333") == Decimal("33.33")


class TestArithmetic:
    """Tests for add/subtract/total helpers."""

    def test_calculate_total(self):
        """Scenario: 50 units at 10.00 cost 500.00."""
        assert calculate_total(Decimal("10.00"), Decimal("50")) == Decimal("500.00")

    def test_calculate_total_rounds_once(self):
        assert calculate_total("0.3333", "3") == Decimal("1.00")

    def test_add_and_subtract_currency(self):
        assert add_currency("0.10", "0.20") == Decimal("0.30")
        assert subtract_currency("10000", "500") == Decimal("9500.00")

    def test_add_and_subtract_quantity(self):
        assert add_quantity("100", "50") == Decimal("150.000000")
        assert subtract_quantity("0.3", "0.1") == Decimal("0.200000")

    def test_rounding_drift_bound(self):
        """N currency operations drift at most N half-cents from the exact sum."""
        total = Decimal("0")
        exact = Decimal("0")
        step = Decimal("0.333")
        n = 300
        for _ in range(n):
            total = add_currency(total, step)
            exact += step
        assert abs(total - exact) <= Decimal("0.005") * n


class TestPercentageOf:
    """Tests for zero-guarded percentages."""

    def test_basic(self):
        assert percentage_of(Decimal("250"), Decimal("1000")) == Decimal("25.00")

    def test_zero_whole_returns_zero(self):
        result = percentage_of(Decimal("0"), Decimal("0"))
        assert result == Decimal("0")
        assert result.is_finite()

    def test_rounds_to_two_decimals(self):
        assert percentage_of(1, 3) == Decimal("33.33")


class TestWeightedAveragePrice:
    """Tests for volume-weighted average price."""

    def test_average(self):
        # 10 @ 10 + 30 @ 20 = 700 over 40 units
        assert weighted_average_price(Decimal("700"), Decimal("40")) == Decimal("17.50")

    def test_no_quantity_returns_none(self):
        assert weighted_average_price(Decimal("0"), Decimal("0")) is None


class TestValidation:
    """Tests for currency/quantity validity checks."""

    @pytest.mark.parametrize("value", [Decimal("0"), Decimal("10.5"), 3, "7"])
    def test_valid_currency(self, value):
        assert is_valid_currency(value) is True

    @pytest.mark.parametrize("value", [None, Decimal("-0.01"), float("nan"), float("inf"), "x"])
    def test_invalid_currency(self, value):
        assert is_valid_currency(value) is False

    @pytest.mark.parametrize("value", [Decimal("0.000001"), 1, "2.5"])
    def test_valid_quantity(self, value):
        assert is_valid_quantity(value) is True

    @pytest.mark.parametrize(
        "value", [None, 0, Decimal("-1"), float("nan"), float("inf"), float("-inf"), "abc"]
    )
    def test_invalid_quantity(self, value):
        assert is_valid_quantity(value) is False


class TestComparisons:
    """Tests for rounded comparisons."""

    def test_has_sufficient_funds_exact(self):
        assert has_sufficient_funds(Decimal("500.00"), Decimal("500.00")) is True

    def test_has_sufficient_funds_ignores_representation_noise(self):
        """0.1 + 0.2 as float must still cover 0.30."""
        assert has_sufficient_funds(0.1 + 0.2, Decimal("0.30")) is True

    def test_has_sufficient_funds_short(self):
        assert has_sufficient_funds(Decimal("499.99"), Decimal("500.00")) is False
