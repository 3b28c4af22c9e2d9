# backend/portfolio_ledger/services/analysis/service.py
"""
Holding Analysis Service - read-only reconstruction of historical holdings.

Entry points:
- get_asset_holding_analysis(): day-by-day holding, flows and market value
- get_asset_holding_summary(): same computation without per-day detail
- get_daily_cash_balance(): trailing-window replay of the settlement account

Algorithm (per asset and inclusive window):
1. Seed = stored holding of the latest entry strictly before start_date (0 if none)
2. Fetch the window's entries in (transaction_date, id) order and its prices
3. Replay every calendar day (see replay.py)
4. market_value = price on that exact date × ending holding, else None
5. Period summary with volume-weighted average buy/sell prices

Reads take no locks and see whatever the database isolation level provides
(read committed or better assumed).

Usage:
    from portfolio_ledger.services.analysis import HoldingAnalysisService

    service = HoldingAnalysisService()
    analysis = service.get_asset_holding_analysis(db, 3, "2024-01-01", "2024-01-31")
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from portfolio_ledger.config import settings
from portfolio_ledger.models import Asset, Transaction, TransactionType
from portfolio_ledger.services.analysis.replay import ReplayDay, replay_holdings, final_holding
from portfolio_ledger.services.analysis.types import (
    AssetInfo,
    AnalysisPeriod,
    TransactionDetail,
    DailyHolding,
    PeriodSummary,
    HoldingTimeline,
    AnalysisSummary,
    HoldingAnalysis,
    HoldingSummary,
    CashMovement,
    DailyCashBalance,
    CashFlowSummary,
    CashBalanceReport,
)
from portfolio_ledger.services.constants import MIN_CASH_BALANCE_DAYS, MAX_CASH_BALANCE_DAYS
from portfolio_ledger.services.exceptions import (
    AssetNotFoundError,
    SettlementAccountNotFoundError,
    ValidationError,
)
from portfolio_ledger.services.ledger import store
from portfolio_ledger.utils.date_utils import (
    parse_date_range,
    days_between,
    trailing_window,
)
from portfolio_ledger.utils.financial import (
    ZERO,
    round_quantity,
    round_price,
    round_currency,
    calculate_total,
    add_currency,
    add_quantity,
    subtract_quantity,
    weighted_average_price,
)

logger = logging.getLogger(__name__)


class HoldingAnalysisService:
    """
    Reconstructs point-in-time holdings by replaying the ledger.

    Stateless; safe to share across requests.
    """

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_asset_holding_analysis(
            self,
            db: Session,
            asset_id: int | None,
            start_date: str | date | None,
            end_date: str | date | None,
    ) -> HoldingAnalysis:
        """
        Full day-by-day holding analysis for one asset.

        Args:
            db: Database session
            asset_id: Asset to analyse
            start_date: First day, ``YYYY-MM-DD`` (inclusive)
            end_date: Last day, ``YYYY-MM-DD`` (inclusive)

        Raises:
            ValidationError: Missing/malformed input or window too long
            InvalidDateRangeError: start_date after end_date
            AssetNotFoundError: Unknown asset
        """
        asset, start, end = self._validate_request(db, asset_id, start_date, end_date)

        logger.info(f"Analysing holdings of asset {asset.id} from {start} to {end}")

        initial = round_quantity(store.holding_before(db, asset.id, start))
        transactions = store.transactions_in_range(db, asset.id, start, end)
        price_map = store.prices_in_range(db, asset.id, start, end)

        days = replay_holdings(initial, transactions, start, end)
        final = final_holding(days, initial)
        total_change = subtract_quantity(final, initial)

        daily = [self._daily_holding(day, price_map.get(day.day)) for day in days]
        period_summary = self._period_summary(transactions)

        return HoldingAnalysis(
            asset_info=self._asset_info(asset),
            analysis_period=self._period(start, end),
            holding_analysis=HoldingTimeline(
                initial_holding=initial,
                final_holding=final,
                total_change=total_change,
                daily_analysis=daily,
                period_summary=period_summary,
            ),
            summary=AnalysisSummary(
                initial_holding=initial,
                final_holding=final,
                total_change=total_change,
                transactions_count=len(transactions),
                price_data_points=len(price_map),
            ),
        )

    def get_asset_holding_summary(
            self,
            db: Session,
            asset_id: int | None,
            start_date: str | date | None,
            end_date: str | date | None,
    ) -> HoldingSummary:
        """Summary-only variant of get_asset_holding_analysis (no per-day detail)."""
        analysis = self.get_asset_holding_analysis(db, asset_id, start_date, end_date)
        timeline = analysis.holding_analysis
        return HoldingSummary(
            asset_info=analysis.asset_info,
            analysis_period=analysis.analysis_period,
            initial_holding=timeline.initial_holding,
            final_holding=timeline.final_holding,
            total_change=timeline.total_change,
            period_summary=timeline.period_summary,
            summary=analysis.summary,
        )

    def get_daily_cash_balance(
            self,
            db: Session,
            days: int | None = None,
            today: date | None = None,
    ) -> CashBalanceReport:
        """
        Daily balance of the settlement account over ``[today - days, today]``.

        Args:
            db: Database session
            days: Window length (default: settings.default_cash_balance_days)
            today: Window end (default: current date)

        Raises:
            ValidationError: days outside the accepted range
            SettlementAccountNotFoundError: No cash account configured
        """
        if days is None:
            days = settings.default_cash_balance_days
        if not MIN_CASH_BALANCE_DAYS <= days <= MAX_CASH_BALANCE_DAYS:
            raise ValidationError(
                f"days must be between {MIN_CASH_BALANCE_DAYS} and {MAX_CASH_BALANCE_DAYS}",
                field="days",
            )

        cash = store.get_settlement_account(db)
        if cash is None:
            raise SettlementAccountNotFoundError()

        start, end = trailing_window(days, today)
        logger.info(f"Building daily cash balance for account {cash.id} from {start} to {end}")

        initial = round_currency(store.holding_before(db, cash.id, start))
        transactions = store.transactions_in_range(db, cash.id, start, end)
        replayed = replay_holdings(initial, transactions, start, end)

        total_in = ZERO
        total_out = ZERO
        balances: list[DailyCashBalance] = []
        for day in replayed:
            movements = [
                CashMovement(
                    id=txn.id,
                    type=txn.transaction_type.value,
                    quantity=round_currency(txn.quantity),
                    description=txn.description,
                    transaction_date=txn.transaction_date,
                )
                for txn in day.transactions
            ]
            for txn in day.transactions:
                if txn.transaction_type == TransactionType.IN:
                    total_in = add_currency(total_in, txn.quantity)
                else:
                    total_out = add_currency(total_out, txn.quantity)

            balances.append(
                DailyCashBalance(
                    date=day.day,
                    holding_start=round_currency(day.holding_start),
                    holding_end=round_currency(day.holding_end),
                    daily_change=round_currency(day.change),
                    transactions=movements,
                    transactions_count=len(movements),
                    has_transactions=day.has_transactions,
                )
            )

        final = round_currency(final_holding(replayed, initial))

        return CashBalanceReport(
            asset_info=self._asset_info(cash),
            analysis_period=AnalysisPeriod(
                start_date=start,
                end_date=end,
                days=days,
                actual_days=len(balances),
            ),
            initial_holding=initial,
            final_holding=final,
            total_change=round_currency(final - initial),
            daily_balances=balances,
            summary=CashFlowSummary(
                total_in_amount=total_in,
                total_out_amount=total_out,
                total_transactions=len(transactions),
                days_with_activity=sum(1 for day in replayed if day.has_transactions),
            ),
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _validate_request(
            self,
            db: Session,
            asset_id: int | None,
            start_date: str | date | None,
            end_date: str | date | None,
    ) -> tuple[Asset, date, date]:
        """Validate input before touching the ledger."""
        if asset_id is None:
            raise ValidationError("asset_id is required", field="asset_id")

        start, end = parse_date_range(start_date, end_date)

        span = days_between(start, end) + 1
        if span > settings.max_analysis_days:
            raise ValidationError(
                f"Analysis window of {span} days exceeds the maximum of "
                f"{settings.max_analysis_days} days",
                field="end_date",
            )

        asset = db.get(Asset, asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset, start, end

    @staticmethod
    def _period(start: date, end: date) -> AnalysisPeriod:
        return AnalysisPeriod(start_date=start, end_date=end, days=days_between(start, end) + 1)

    @staticmethod
    def _asset_info(asset: Asset) -> AssetInfo:
        asset_type = asset.asset_type
        return AssetInfo(
            id=asset.id,
            name=asset.name,
            code=asset.code,
            asset_type_id=asset.asset_type_id,
            asset_type_name=asset_type.name if asset_type else None,
            unit=asset_type.unit if asset_type else None,
            quantity=round_quantity(asset.quantity),
            description=asset.description,
            is_settlement_account=asset.is_settlement_account,
        )

    @staticmethod
    def _transaction_detail(txn: Transaction) -> TransactionDetail:
        return TransactionDetail(
            id=txn.id,
            type=txn.transaction_type.value,
            quantity=round_quantity(txn.quantity),
            price=round_price(txn.price),
            total_value=calculate_total(txn.price, txn.quantity),
            description=txn.description,
            transaction_date=txn.transaction_date,
        )

    def _daily_holding(self, day: ReplayDay, price: Decimal | None) -> DailyHolding:
        details = [self._transaction_detail(txn) for txn in day.transactions]
        return DailyHolding(
            date=day.day,
            holding_start=day.holding_start,
            holding_end=day.holding_end,
            change=day.change,
            transactions=details,
            price=round_price(price) if price is not None else None,
            market_value=calculate_total(price, day.holding_end) if price is not None else None,
            has_transactions=day.has_transactions,
            transactions_count=len(details),
        )

    @staticmethod
    def _period_summary(transactions: list[Transaction]) -> PeriodSummary:
        buy_count = sell_count = 0
        buy_qty = sell_qty = ZERO
        buy_value = sell_value = ZERO

        for txn in transactions:
            total = calculate_total(txn.price, txn.quantity)
            if txn.transaction_type == TransactionType.IN:
                buy_count += 1
                buy_qty = add_quantity(buy_qty, txn.quantity)
                buy_value = add_currency(buy_value, total)
            else:
                sell_count += 1
                sell_qty = add_quantity(sell_qty, txn.quantity)
                sell_value = add_currency(sell_value, total)

        return PeriodSummary(
            total_buy_transactions=buy_count,
            total_sell_transactions=sell_count,
            total_buy_quantity=buy_qty,
            total_sell_quantity=sell_qty,
            average_buy_price=weighted_average_price(buy_value, buy_qty) if buy_count else None,
            average_sell_price=weighted_average_price(sell_value, sell_qty) if sell_count else None,
        )
