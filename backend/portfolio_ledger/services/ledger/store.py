# backend/portfolio_ledger/services/ledger/store.py
"""
Ledger Store - query primitives over assets, transactions and daily prices.

Every function takes the caller's Session and performs reads only; writes
and commit/rollback are owned by the transaction engine and the catalog
service. Ordering of one asset's ledger is always (transaction_date, id).

Row locks:
    ``lock_assets`` issues SELECT ... FOR UPDATE in ascending id order so two
    writers touching the same asset and cash rows serialize without
    deadlocking. SQLite ignores FOR UPDATE.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select, and_, or_, func
from sqlalchemy.orm import Session

from portfolio_ledger.models import Asset, Transaction, PriceDaily

logger = logging.getLogger(__name__)

_LEDGER_ORDER = (Transaction.transaction_date, Transaction.id)


# =============================================================================
# ASSETS
# =============================================================================

def lock_assets(db: Session, asset_ids: list[int]) -> dict[int, Asset]:
    """
    Load and row-lock assets for the rest of the current transaction.

    Returns:
        dict mapping asset_id -> Asset (missing ids are absent)
    """
    if not asset_ids:
        return {}
    query = (
        select(Asset)
        .where(Asset.id.in_(sorted(set(asset_ids))))
        .order_by(Asset.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {asset.id: asset for asset in db.scalars(query).all()}


def get_settlement_account(db: Session) -> Asset | None:
    """The asset flagged as the cash settlement account (lowest id if several)."""
    query = (
        select(Asset)
        .where(Asset.is_settlement_account.is_(True))
        .order_by(Asset.id)
        .limit(1)
    )
    return db.scalar(query)


# =============================================================================
# TRANSACTIONS
# =============================================================================

def transactions_in_range(
        db: Session,
        asset_id: int,
        start_date: date,
        end_date: date,
) -> list[Transaction]:
    """All transactions of an asset dated within [start_date, end_date], in ledger order."""
    query = (
        select(Transaction)
        .where(
            and_(
                Transaction.asset_id == asset_id,
                Transaction.transaction_date >= start_date,
                Transaction.transaction_date <= end_date,
            )
        )
        .order_by(*_LEDGER_ORDER)
    )
    return list(db.scalars(query).all())


def holding_before(db: Session, asset_id: int, day: date) -> Decimal:
    """
    Holding of an asset at the start of ``day``.

    This is the stored holding of the latest transaction strictly before
    ``day``, or 0 when the asset had no earlier activity.
    """
    query = (
        select(Transaction.holding)
        .where(
            and_(
                Transaction.asset_id == asset_id,
                Transaction.transaction_date < day,
            )
        )
        .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        .limit(1)
    )
    holding = db.scalar(query)
    return holding if holding is not None else Decimal("0")


def holding_as_of(db: Session, asset_id: int, day: date) -> Decimal:
    """Holding of an asset at the end of ``day`` (0 before its first transaction)."""
    query = (
        select(Transaction.holding)
        .where(
            and_(
                Transaction.asset_id == asset_id,
                Transaction.transaction_date <= day,
            )
        )
        .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        .limit(1)
    )
    holding = db.scalar(query)
    return holding if holding is not None else Decimal("0")


def previous_transaction(db: Session, txn: Transaction) -> Transaction | None:
    """The entry immediately before ``txn`` in its asset's ledger."""
    query = (
        select(Transaction)
        .where(
            and_(
                Transaction.asset_id == txn.asset_id,
                or_(
                    Transaction.transaction_date < txn.transaction_date,
                    and_(
                        Transaction.transaction_date == txn.transaction_date,
                        Transaction.id < txn.id,
                    ),
                ),
            )
        )
        .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        .limit(1)
    )
    return db.scalar(query)


def transactions_after(db: Session, txn: Transaction) -> list[Transaction]:
    """Every entry after ``txn`` in its asset's ledger, in order."""
    query = (
        select(Transaction)
        .where(
            and_(
                Transaction.asset_id == txn.asset_id,
                Transaction.id != txn.id,
                or_(
                    Transaction.transaction_date > txn.transaction_date,
                    and_(
                        Transaction.transaction_date == txn.transaction_date,
                        Transaction.id > txn.id,
                    ),
                ),
            )
        )
        .order_by(*_LEDGER_ORDER)
    )
    return list(db.scalars(query).all())


def transactions_dated_after(db: Session, asset_id: int, day: date) -> list[Transaction]:
    """Entries of an asset dated strictly after ``day``, in ledger order."""
    query = (
        select(Transaction)
        .where(
            and_(
                Transaction.asset_id == asset_id,
                Transaction.transaction_date > day,
            )
        )
        .order_by(*_LEDGER_ORDER)
    )
    return list(db.scalars(query).all())


def count_transactions(db: Session, asset_id: int) -> int:
    return db.scalar(
        select(func.count(Transaction.id)).where(Transaction.asset_id == asset_id)
    ) or 0


# =============================================================================
# PRICES
# =============================================================================

def price_on(db: Session, asset_id: int, day: date) -> Decimal | None:
    """Price of an asset on exactly ``day`` (no fallback)."""
    query = select(PriceDaily.price).where(
        and_(PriceDaily.asset_id == asset_id, PriceDaily.date == day)
    )
    return db.scalar(query)


def prices_in_range(
        db: Session,
        asset_id: int,
        start_date: date,
        end_date: date,
) -> dict[date, Decimal]:
    """date -> price for every price row of an asset within the inclusive range."""
    query = (
        select(PriceDaily.date, PriceDaily.price)
        .where(
            and_(
                PriceDaily.asset_id == asset_id,
                PriceDaily.date >= start_date,
                PriceDaily.date <= end_date,
            )
        )
        .order_by(PriceDaily.date)
    )
    price_map = {row.date: row.price for row in db.execute(query)}
    logger.debug(
        f"Fetched {len(price_map)} price records for asset {asset_id} "
        f"({start_date} to {end_date})"
    )
    return price_map


def latest_prices_on_or_before(
        db: Session,
        day: date,
        asset_ids: list[int] | None = None,
) -> dict[int, tuple[date, Decimal]]:
    """
    Latest price on or before ``day`` for each asset, in one query.

    Returns:
        dict mapping asset_id -> (price_date, price); assets with no price
        on or before ``day`` are absent
    """
    latest = (
        select(
            PriceDaily.asset_id.label("asset_id"),
            func.max(PriceDaily.date).label("max_date"),
        )
        .where(PriceDaily.date <= day)
        .group_by(PriceDaily.asset_id)
    )
    if asset_ids is not None:
        if not asset_ids:
            return {}
        latest = latest.where(PriceDaily.asset_id.in_(asset_ids))
    latest_sq = latest.subquery()

    query = select(PriceDaily.asset_id, PriceDaily.date, PriceDaily.price).join(
        latest_sq,
        and_(
            PriceDaily.asset_id == latest_sq.c.asset_id,
            PriceDaily.date == latest_sq.c.max_date,
        ),
    )
    return {row.asset_id: (row.date, row.price) for row in db.execute(query)}


def recent_price_dates(db: Session, limit: int, on_or_before: date | None = None) -> list[date]:
    """The ``limit`` most recent distinct price dates, newest first."""
    query = select(PriceDaily.date).distinct()
    if on_or_before is not None:
        query = query.where(PriceDaily.date <= on_or_before)
    query = query.order_by(PriceDaily.date.desc()).limit(limit)
    return list(db.scalars(query).all())
