# tests/services/test_holding_analysis.py
"""
Tests for HoldingAnalysisService (asset holding analysis and daily cash balance).
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from portfolio_ledger.models import TransactionType
from portfolio_ledger.services.analysis import HoldingAnalysisService
from portfolio_ledger.services.exceptions import (
    ValidationError,
    InvalidDateRangeError,
    AssetNotFoundError,
    SettlementAccountNotFoundError,
)
from portfolio_ledger.services.ledger import TransactionEngine
from tests.conftest import create_asset, create_price, post


@pytest.fixture
def service() -> HoldingAnalysisService:
    return HoldingAnalysisService()


class TestAssetHoldingAnalysis:
    """Tests for get_asset_holding_analysis()."""

    def test_three_day_window(self, db, service, stock):
        """Initial 5, IN 10 on the middle day: [5,5] -> [5,15] -> [15,15]."""
        post(db, stock, "5", date(2024, 1, 1))
        post(db, stock, "10", date(2024, 1, 3), price="10")

        result = service.get_asset_holding_analysis(db, stock.id, "2024-01-02", "2024-01-04")
        timeline = result.holding_analysis

        assert timeline.initial_holding == Decimal("5")
        assert timeline.final_holding == Decimal("15")
        assert timeline.total_change == Decimal("10")
        assert [(d.holding_start, d.holding_end) for d in timeline.daily_analysis] == [
            (Decimal("5"), Decimal("5")),
            (Decimal("5"), Decimal("15")),
            (Decimal("15"), Decimal("15")),
        ]

        middle = timeline.daily_analysis[1]
        assert middle.has_transactions is True
        assert middle.transactions_count == 1
        assert middle.transactions[0].type == "IN"
        assert middle.transactions[0].total_value == Decimal("100.00")

        assert result.analysis_period.days == 3
        assert result.summary.transactions_count == 1
        assert result.asset_info.code == "AAPL"
        assert result.asset_info.asset_type_name == "Stock"
        assert result.asset_info.unit == "shares"

    def test_initial_holding_is_not_current_quantity(self, db, service, stock):
        post(db, stock, "5", date(2024, 1, 1))
        post(db, stock, "100", date(2024, 3, 1))

        result = service.get_asset_holding_analysis(db, stock.id, "2024-01-10", "2024-01-12")

        assert result.holding_analysis.initial_holding == Decimal("5")
        assert result.holding_analysis.final_holding == Decimal("5")

    def test_no_prior_entries_seed_is_zero(self, db, service, stock):
        result = service.get_asset_holding_analysis(db, stock.id, "2024-01-01", "2024-01-01")
        assert result.holding_analysis.initial_holding == Decimal("0")

    def test_market_value_only_on_priced_days(self, db, service, stock):
        """Absent price means absent market value; no fill from other days."""
        post(db, stock, "10", date(2024, 1, 1))
        create_price(db, stock, date(2024, 1, 2), "12.3456")

        days = service.get_asset_holding_analysis(
            db, stock.id, "2024-01-01", "2024-01-03"
        ).holding_analysis.daily_analysis

        assert days[0].price is None and days[0].market_value is None
        assert days[1].price == Decimal("12.3456")
        assert days[1].market_value == Decimal("123.46")
        assert days[2].price is None and days[2].market_value is None

    def test_price_data_points(self, db, service, stock):
        for day in (1, 2, 5):
            create_price(db, stock, date(2024, 1, day), "10")

        result = service.get_asset_holding_analysis(db, stock.id, "2024-01-01", "2024-01-03")

        assert result.summary.price_data_points == 2

    def test_period_summary_vwap(self, db, service, stock):
        post(db, stock, "10", date(2024, 1, 1), price="10")
        post(db, stock, "30", date(2024, 1, 2), price="20")
        post(db, stock, "5", date(2024, 1, 3), TransactionType.OUT, price="30")

        summary = service.get_asset_holding_analysis(
            db, stock.id, "2024-01-01", "2024-01-03"
        ).holding_analysis.period_summary

        assert summary.total_buy_transactions == 2
        assert summary.total_sell_transactions == 1
        assert summary.total_buy_quantity == Decimal("40")
        assert summary.total_sell_quantity == Decimal("5")
        assert summary.average_buy_price == Decimal("17.50")
        assert summary.average_sell_price == Decimal("30.00")

    def test_period_summary_without_sells(self, db, service, stock):
        post(db, stock, "10", date(2024, 1, 1), price="10")

        summary = service.get_asset_holding_analysis(
            db, stock.id, "2024-01-01", "2024-01-01"
        ).holding_analysis.period_summary

        assert summary.average_sell_price is None
        assert summary.total_sell_quantity == Decimal("0")

    def test_replay_matches_current_quantity(self, db, service, stock, funded_cash):
        """Replaying up to today ends at Asset.quantity."""
        engine = TransactionEngine()
        today = date.today()
        start = today - timedelta(days=20)
        for offset, price in [(2, "10"), (5, "11"), (9, "12")]:
            create_price(db, stock, start + timedelta(days=offset), price)

        engine.buy(db, stock.id, Decimal("30"), start + timedelta(days=2))
        engine.sell(db, stock.id, Decimal("12.5"), start + timedelta(days=5))
        engine.buy(db, stock.id, Decimal("3"), start + timedelta(days=9))

        result = service.get_asset_holding_analysis(db, stock.id, start, today)

        db.refresh(stock)
        assert result.holding_analysis.final_holding == stock.quantity

    def test_summary_variant_omits_daily_detail(self, db, service, stock):
        post(db, stock, "5", date(2024, 1, 1))
        post(db, stock, "10", date(2024, 1, 3))

        summary = service.get_asset_holding_summary(db, stock.id, "2024-01-02", "2024-01-04")

        assert summary.initial_holding == Decimal("5")
        assert summary.final_holding == Decimal("15")
        assert summary.total_change == Decimal("10")
        assert not hasattr(summary, "holding_analysis")

    def test_missing_asset_id(self, db, service):
        with pytest.raises(ValidationError) as exc_info:
            service.get_asset_holding_analysis(db, None, "2024-01-01", "2024-01-02")
        assert exc_info.value.field == "asset_id"

    @pytest.mark.parametrize("start,end", [("2024-1-1", "2024-01-02"), ("2024-01-01", None)])
    def test_bad_dates(self, db, service, stock, start, end):
        with pytest.raises(ValidationError):
            service.get_asset_holding_analysis(db, stock.id, start, end)

    def test_inverted_range(self, db, service, stock):
        with pytest.raises(InvalidDateRangeError):
            service.get_asset_holding_analysis(db, stock.id, "2024-01-05", "2024-01-01")

    def test_window_too_long(self, db, service, stock):
        with pytest.raises(ValidationError) as exc_info:
            service.get_asset_holding_analysis(db, stock.id, "2000-01-01", "2024-01-01")
        assert exc_info.value.field == "end_date"

    def test_dates_validated_before_asset_lookup(self, db, service):
        with pytest.raises(InvalidDateRangeError):
            service.get_asset_holding_analysis(db, 999, "2024-01-05", "2024-01-01")

    def test_unknown_asset(self, db, service):
        with pytest.raises(AssetNotFoundError):
            service.get_asset_holding_analysis(db, 999, "2024-01-01", "2024-01-02")


class TestDailyCashBalance:
    """Tests for get_daily_cash_balance()."""

    def test_trailing_window(self, db, service, stock, funded_cash):
        create_price(db, stock, date(2024, 1, 2), "10.00")
        TransactionEngine().buy(db, stock.id, Decimal("50"), date(2024, 1, 2))

        report = service.get_daily_cash_balance(db, days=3, today=date(2024, 1, 3))

        assert report.analysis_period.start_date == date(2023, 12, 31)
        assert report.analysis_period.end_date == date(2024, 1, 3)
        assert report.analysis_period.actual_days == 4
        assert report.initial_holding == Decimal("0")
        assert report.final_holding == Decimal("9500.00")
        assert report.total_change == Decimal("9500.00")

        balances = {b.date: b for b in report.daily_balances}
        assert balances[date(2024, 1, 1)].holding_end == Decimal("10000.00")
        assert balances[date(2024, 1, 2)].daily_change == Decimal("-500.00")
        assert balances[date(2024, 1, 2)].transactions[0].type == "OUT"
        assert balances[date(2024, 1, 3)].has_transactions is False

        assert report.summary.total_in_amount == Decimal("10000.00")
        assert report.summary.total_out_amount == Decimal("500.00")
        assert report.summary.total_transactions == 2
        assert report.summary.days_with_activity == 2
        assert report.asset_info.is_settlement_account is True

    def test_seed_from_before_window(self, db, service, funded_cash):
        report = service.get_daily_cash_balance(db, days=1, today=date(2024, 2, 1))

        assert report.initial_holding == Decimal("10000.00")
        assert report.final_holding == Decimal("10000.00")
        assert report.summary.total_transactions == 0

    def test_default_window_from_settings(self, db, service, funded_cash):
        report = service.get_daily_cash_balance(db, today=date(2024, 2, 1))
        assert report.analysis_period.days == 30

    @pytest.mark.parametrize("days", [0, -1, 3651])
    def test_days_out_of_range(self, db, service, funded_cash, days):
        with pytest.raises(ValidationError) as exc_info:
            service.get_daily_cash_balance(db, days=days)
        assert exc_info.value.field == "days"

    def test_without_settlement_account(self, db, service, stock):
        with pytest.raises(SettlementAccountNotFoundError):
            service.get_daily_cash_balance(db, days=7)

    def test_uses_flagged_account_not_lowest_id(self, db, service, cash_type):
        create_asset(db, cash_type, code="PETTY")
        flagged = create_asset(db, cash_type, code="CASH001", is_settlement_account=True)

        report = service.get_daily_cash_balance(db, days=1, today=date(2024, 1, 1))

        assert report.asset_info.id == flagged.id
