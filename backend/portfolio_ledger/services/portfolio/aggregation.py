# backend/portfolio_ledger/services/portfolio/aggregation.py
"""
Portfolio Aggregation Service - cross-asset valuation and ledger reports.

Entry points:
- asset_totals_by_type(): value per normalized asset type on a date
- transactions_by_type(): ledger of one asset type with IN/OUT totals
- dashboard_summary(): headline value and P&L figures
- total_assets_history(): total value over the most recent price dates

Prices:
    "Latest price on or before a date" is resolved for all assets in one
    query (store.latest_prices_on_or_before). An asset without any such
    price is valued at 0, except the settlement account, which is cash and
    is valued at a unit price of 1 when it has no price rows.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy import select, and_
from sqlalchemy.orm import Session, joinedload

from portfolio_ledger.config import settings
from portfolio_ledger.models import Asset, AssetType, Transaction, TransactionType, PriceDaily
from portfolio_ledger.services.exceptions import AssetTypeNotFoundError, ValidationError
from portfolio_ledger.services.ledger import store
from portfolio_ledger.services.portfolio.types import (
    AssetValue,
    TypeBucket,
    TotalsSummary,
    AssetTotalsByType,
    DateRange,
    TypeTransaction,
    FlowSummary,
    TransactionsByType,
    DashboardSummary,
    HistoryPoint,
)
from portfolio_ledger.utils.date_utils import (
    get_current_date,
    parse_date,
    validate_date_range,
)
from portfolio_ledger.utils.financial import (
    ZERO,
    round_currency,
    round_quantity,
    round_price,
    calculate_total,
    add_currency,
    add_quantity,
    subtract_currency,
    subtract_quantity,
    percentage_of,
    weighted_average_price,
)

logger = logging.getLogger(__name__)

SETTLEMENT_UNIT_PRICE = Decimal("1")


class PortfolioAggregationService:
    """Read-only aggregation across all assets."""

    # =========================================================================
    # ASSET TOTALS BY TYPE
    # =========================================================================

    def asset_totals_by_type(self, db: Session, on_date: str | date | None = None) -> AssetTotalsByType:
        """
        Value every asset with a positive holding and bucket by asset type.

        Every known asset type appears as a bucket, including empty ones.
        Bucket percentages are zero-guarded: an empty portfolio yields 0 for
        every bucket.

        Raises:
            ValidationError: Malformed date
        """
        valuation_date = parse_date(on_date, "date") if on_date else get_current_date()

        buckets: dict[str, TypeBucket] = {}
        for asset_type in db.scalars(select(AssetType).order_by(AssetType.name)).all():
            buckets[asset_type.type_key] = TypeBucket(type_name=asset_type.name, unit=asset_type.unit)

        assets = db.scalars(
            select(Asset)
            .options(joinedload(Asset.asset_type))
            .where(Asset.quantity > 0)
            .order_by(Asset.id)
        ).all()

        prices = store.latest_prices_on_or_before(db, valuation_date, [a.id for a in assets])

        grand_total = ZERO
        for asset in assets:
            price = self._valuation_price(asset, prices.get(asset.id))
            value = calculate_total(price, asset.quantity)

            asset_type = asset.asset_type
            bucket = buckets.get(asset_type.type_key)
            if bucket is None:
                bucket = TypeBucket(type_name=asset_type.name, unit=None)
                buckets[asset_type.type_key] = bucket

            bucket.count += 1
            bucket.total_price = add_currency(bucket.total_price, value)
            bucket.assets.append(
                AssetValue(
                    id=asset.id,
                    name=asset.name,
                    code=asset.code,
                    quantity=round_quantity(asset.quantity),
                    price=round_price(price),
                    value_usd=value,
                )
            )
            grand_total = add_currency(grand_total, value)

        for bucket in buckets.values():
            bucket.total_price = round_currency(bucket.total_price)
            bucket.percentage = percentage_of(bucket.total_price, grand_total)

        logger.debug(
            f"Asset totals on {valuation_date}: {len(assets)} assets, total {grand_total}"
        )

        return AssetTotalsByType(
            date=valuation_date,
            total_value_usd=grand_total,
            asset_types=buckets,
            summary=TotalsSummary(total_assets=len(assets), total_value_usd=grand_total),
        )

    # =========================================================================
    # TRANSACTIONS BY TYPE
    # =========================================================================

    def transactions_by_type(
            self,
            db: Session,
            asset_type_id: int,
            start_date: str | None = None,
            end_date: str | None = None,
    ) -> TransactionsByType:
        """
        Ledger entries of every asset of one type, newest first.

        Both date bounds are optional and inclusive.

        Raises:
            ValidationError: Non-positive id, malformed or inverted dates
            AssetTypeNotFoundError: Unknown asset type
        """
        if asset_type_id <= 0:
            raise ValidationError(
                f"Invalid asset_type_id: {asset_type_id}", field="asset_type_id"
            )

        errors = validate_date_range(start_date, end_date)
        if errors:
            raise ValidationError("; ".join(errors), field="date_range")
        start = parse_date(start_date, "start_date") if start_date else None
        end = parse_date(end_date, "end_date") if end_date else None

        asset_type = db.get(AssetType, asset_type_id)
        if asset_type is None:
            raise AssetTypeNotFoundError(asset_type_id)

        conditions = [Asset.asset_type_id == asset_type_id]
        if start is not None:
            conditions.append(Transaction.transaction_date >= start)
        if end is not None:
            conditions.append(Transaction.transaction_date <= end)

        rows = db.execute(
            select(Transaction, Asset)
            .join(Asset, Transaction.asset_id == Asset.id)
            .where(and_(*conditions))
            .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        ).all()

        in_qty = out_qty = ZERO
        in_value = out_value = ZERO
        entries: list[TypeTransaction] = []
        for txn, asset in rows:
            total = calculate_total(txn.price, txn.quantity)
            if txn.transaction_type == TransactionType.IN:
                in_qty = add_quantity(in_qty, txn.quantity)
                in_value = add_currency(in_value, total)
            else:
                out_qty = add_quantity(out_qty, txn.quantity)
                out_value = add_currency(out_value, total)

            entries.append(
                TypeTransaction(
                    id=txn.id,
                    asset_id=asset.id,
                    asset_name=asset.name,
                    asset_code=asset.code,
                    transaction_type=txn.transaction_type.value,
                    quantity=round_quantity(txn.quantity),
                    price=round_price(txn.price),
                    total_value=total,
                    holding=round_quantity(txn.holding),
                    transaction_date=txn.transaction_date,
                    description=txn.description,
                )
            )

        return TransactionsByType(
            asset_type_id=asset_type.id,
            asset_type_name=asset_type.name,
            date_range=DateRange(start, end) if (start or end) else None,
            total_transactions=len(entries),
            transactions=entries,
            summary=FlowSummary(
                total_in_quantity=in_qty,
                total_out_quantity=out_qty,
                net_quantity=subtract_quantity(in_qty, out_qty),
                total_in_value=in_value,
                total_out_value=out_value,
                net_value=subtract_currency(in_value, out_value),
            ),
        )

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def dashboard_summary(self, db: Session) -> DashboardSummary:
        """
        Headline value and P&L of current holdings.

        Today's P&L compares current holdings valued at each asset's latest
        price against the same holdings at each asset's latest price before
        the most recent price date in the system.
        """
        latest_dates = store.recent_price_dates(db, limit=2)
        latest_date = latest_dates[0] if latest_dates else None
        previous_date = latest_dates[1] if len(latest_dates) > 1 else None

        assets = db.scalars(select(Asset).order_by(Asset.id)).all()
        asset_ids = [a.id for a in assets]

        current_prices = (
            store.latest_prices_on_or_before(db, latest_date, asset_ids) if latest_date else {}
        )
        previous_prices = (
            store.latest_prices_on_or_before(db, previous_date, asset_ids) if previous_date else {}
        )
        avg_buy_prices = self._average_buy_prices(db)

        total_value = ZERO
        cost_basis = ZERO
        previous_value = ZERO
        for asset in assets:
            total_value = add_currency(
                total_value,
                calculate_total(self._valuation_price(asset, current_prices.get(asset.id)), asset.quantity),
            )
            if previous_date is not None:
                previous_value = add_currency(
                    previous_value,
                    calculate_total(self._valuation_price(asset, previous_prices.get(asset.id)), asset.quantity),
                )
            avg_price = avg_buy_prices.get(asset.id)
            if asset.quantity > 0 and avg_price is not None:
                cost_basis = add_currency(cost_basis, calculate_total(avg_price, asset.quantity))

        total_pl = subtract_currency(total_value, cost_basis)
        if total_value > 0 and previous_value > 0:
            today_pl = subtract_currency(total_value, previous_value)
        else:
            today_pl = round_currency(ZERO)

        return DashboardSummary(
            total_asset_value=total_value,
            total_profit_loss=total_pl,
            today_profit_loss=today_pl,
            total_profit_loss_percentage=percentage_of(total_pl, cost_basis),
            today_profit_loss_percentage=percentage_of(today_pl, previous_value),
            latest_price_date=latest_date,
            previous_price_date=previous_date,
        )

    def total_assets_history(self, db: Session, points: int | None = None) -> list[HistoryPoint]:
        """
        Total portfolio value on each of the most recent price dates, oldest first.

        Holdings are taken as of each date (stored holding of the latest entry
        on or before it) and valued at that date's price.
        """
        points = points or settings.history_points
        dates = sorted(store.recent_price_dates(db, limit=points))
        if not dates:
            return []

        holdings = self._holdings_on_dates(db, dates)
        price_rows = db.execute(
            select(PriceDaily.asset_id, PriceDaily.date, PriceDaily.price)
            .where(PriceDaily.date.in_(dates))
        ).all()
        price_map = {(row.asset_id, row.date): row.price for row in price_rows}

        settlement = store.get_settlement_account(db)
        settlement_id = settlement.id if settlement is not None else None

        history: list[HistoryPoint] = []
        for day in dates:
            total = ZERO
            for asset_id, holding in holdings[day].items():
                price = price_map.get((asset_id, day))
                if price is None and asset_id == settlement_id:
                    price = SETTLEMENT_UNIT_PRICE
                if price is None or holding <= 0:
                    continue
                total = add_currency(total, calculate_total(price, holding))
            history.append(HistoryPoint(date=day, total_asset_value=total))
        return history

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _valuation_price(asset: Asset, latest: tuple[date, Decimal] | None) -> Decimal:
        if latest is not None:
            return latest[1]
        if asset.is_settlement_account:
            return SETTLEMENT_UNIT_PRICE
        return ZERO

    @staticmethod
    def _average_buy_prices(db: Session) -> dict[int, Decimal]:
        """Volume-weighted average IN price per asset over the whole ledger."""
        totals: dict[int, list[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
        rows = db.execute(
            select(Transaction.asset_id, Transaction.quantity, Transaction.price)
            .where(Transaction.transaction_type == TransactionType.IN)
        ).all()
        for row in rows:
            acc = totals[row.asset_id]
            acc[0] += row.quantity * row.price
            acc[1] += row.quantity

        result: dict[int, Decimal] = {}
        for asset_id, (value, qty) in totals.items():
            avg = weighted_average_price(value, qty)
            if avg is not None:
                result[asset_id] = avg
        return result

    @staticmethod
    def _holdings_on_dates(db: Session, dates: list[date]) -> dict[date, dict[int, Decimal]]:
        """
        Holding of every asset at the end of each date (rolling state).

        Entries are read once, in ledger order, and applied as the sorted
        dates advance.
        """
        rows = db.execute(
            select(Transaction.asset_id, Transaction.transaction_date, Transaction.holding)
            .where(Transaction.transaction_date <= dates[-1])
            .order_by(Transaction.transaction_date, Transaction.id)
        ).all()

        state: dict[int, Decimal] = {}
        snapshots: dict[date, dict[int, Decimal]] = {}
        index = 0
        for day in dates:
            while index < len(rows) and rows[index].transaction_date <= day:
                state[rows[index].asset_id] = rows[index].holding
                index += 1
            snapshots[day] = dict(state)
        return snapshots
