# backend/portfolio_ledger/services/ledger/service.py
"""
Transaction Engine - the only writer of ledger entries and asset holdings.

Operations:
- record_transaction(): manual IN/OUT entry
- buy() / sell(): trade an asset against the settlement (cash) account
- delete_transaction(): remove an entry and repair holdings
- list_transactions() / get_transaction(): ledger reads

Holding invariant:
    Asset.quantity always equals the ``holding`` of the asset's latest entry
    in (transaction_date, id) order. Every entry stores the balance after
    itself; that stored value is the source of truth for replay.

Atomicity:
    Each mutating operation runs in one unit of work. Affected asset rows
    are locked (SELECT ... FOR UPDATE) first; any ServiceError or storage
    failure rolls back every write in the unit before propagating.

Back-dated entries and non-latest deletes:
    Entries after the insertion/deletion point get their stored holding
    recomputed from their predecessor. If any recomputed holding would be
    negative the whole operation is rejected.

Usage:
    from portfolio_ledger.services.ledger import TransactionEngine

    engine = TransactionEngine()
    result = engine.buy(db, asset_id=3, quantity=Decimal("50"), trade_date=date(2024, 1, 2))
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_ledger.models import Asset, Transaction, TransactionType
from portfolio_ledger.services.exceptions import (
    ServiceError,
    ValidationError,
    AssetNotFoundError,
    TransactionNotFoundError,
    SettlementAccountNotFoundError,
    InsufficientHoldingError,
    InsufficientFundsError,
    PriceNotFoundError,
    ReferentialConflictError,
    StorageError,
)
from portfolio_ledger.services.ledger import store
from portfolio_ledger.services.ledger.types import TradeResult, DeletionResult
from portfolio_ledger.utils.financial import (
    ZERO,
    round_quantity,
    round_price,
    round_currency,
    calculate_total,
    is_valid_quantity,
    is_valid_currency,
    has_sufficient_funds,
    to_decimal,
)

logger = logging.getLogger(__name__)

# Cash moves at a unit price of 1
CASH_UNIT_PRICE = Decimal("1")

ShortfallFactory = Callable[[int, Decimal, Decimal], ServiceError]


def _insufficient_holding(asset_id: int, available: Decimal, requested: Decimal) -> ServiceError:
    return InsufficientHoldingError(asset_id, available, requested)


def _insufficient_funds(asset_id: int, available: Decimal, requested: Decimal) -> ServiceError:
    return InsufficientFundsError(available, requested)


class TransactionEngine:
    """
    Validates and applies ledger mutations.

    Stateless; one instance is shared by all requests (see dependencies.py).
    Each public method receives the request's Session and owns its
    commit/rollback.
    """

    # =========================================================================
    # PUBLIC API - MUTATIONS
    # =========================================================================

    def record_transaction(
            self,
            db: Session,
            asset_id: int,
            transaction_type: TransactionType | str,
            quantity: Decimal | int | float | str,
            price: Decimal | int | float | str,
            transaction_date: date,
            description: str | None = None,
    ) -> Transaction:
        """
        Append one manual IN/OUT entry and update the asset's holding.

        Args:
            db: Database session
            asset_id: Asset to post against
            transaction_type: IN or OUT
            quantity: Strictly positive quantity
            price: Unit price at transaction time (non-negative)
            transaction_date: Ledger date of the entry
            description: Free text

        Returns:
            The created Transaction (holding = balance after the entry)

        Raises:
            ValidationError: Bad type, quantity or price
            AssetNotFoundError: Asset does not exist
            InsufficientHoldingError: OUT would take the holding below zero
            StorageError: Database failure (rolled back)
        """
        txn_type = self._parse_type(transaction_type)
        qty = self._validated_quantity(quantity)
        unit_price = self._validated_price(price)

        with self._unit_of_work(db, "record transaction"):
            asset = self._lock_one(db, asset_id)
            txn = self._post_entry(
                db,
                asset,
                txn_type,
                qty,
                unit_price,
                transaction_date,
                description,
                _insufficient_holding,
            )

        logger.info(
            f"Recorded {txn_type.value} {qty} for asset {asset_id} on {transaction_date}, "
            f"holding now {txn.holding}"
        )
        return txn

    def buy(
            self,
            db: Session,
            asset_id: int,
            quantity: Decimal | int | float | str,
            trade_date: date,
            description: str | None = None,
    ) -> TradeResult:
        """
        Buy an asset at its price on ``trade_date``, paying from the cash account.

        Raises:
            ValidationError: Bad quantity, a trade value that rounds to 0.00,
                or the asset is the cash account
            AssetNotFoundError / SettlementAccountNotFoundError
            PriceNotFoundError: No price row on exactly ``trade_date``
            InsufficientFundsError: Cash balance below total cost
        """
        qty = self._validated_quantity(quantity)

        with self._unit_of_work(db, "buy asset"):
            asset, cash = self._lock_trade_accounts(db, asset_id)

            price = self._exact_price(db, asset.id, trade_date)
            cost = self._trade_amount(price, qty, asset.id, trade_date)

            if not has_sufficient_funds(cash.quantity, cost):
                logger.warning(
                    f"Buy rejected for asset {asset_id}: cost {cost} exceeds cash {cash.quantity}"
                )
                raise InsufficientFundsError(round_currency(cash.quantity), cost)

            txn = self._post_entry(
                db, asset, TransactionType.IN, qty, price, trade_date,
                description or f"Buy {asset.code}",
                _insufficient_holding,
            )
            cash_txn = self._post_entry(
                db, cash, TransactionType.OUT, cost, CASH_UNIT_PRICE, trade_date,
                f"Payment for {asset.code} purchase",
                _insufficient_funds,
            )
            result = TradeResult(
                transaction=txn,
                cash_transaction=cash_txn,
                amount=cost,
                cash_balance=round_currency(cash.quantity),
            )

        logger.info(
            f"Bought {qty} of asset {asset_id} at {price} on {trade_date}: "
            f"cost {result.amount}, cash {result.cash_balance}"
        )
        return result

    def sell(
            self,
            db: Session,
            asset_id: int,
            quantity: Decimal | int | float | str,
            trade_date: date,
            description: str | None = None,
    ) -> TradeResult:
        """
        Sell an asset at its price on ``trade_date``, crediting the cash account.

        Raises:
            ValidationError: Bad quantity, a trade value that rounds to 0.00,
                or the asset is the cash account
            AssetNotFoundError / SettlementAccountNotFoundError
            InsufficientHoldingError: Holding below requested quantity
            PriceNotFoundError: No price row on exactly ``trade_date``
        """
        qty = self._validated_quantity(quantity)

        with self._unit_of_work(db, "sell asset"):
            asset, cash = self._lock_trade_accounts(db, asset_id)

            # Early exit on the current holding; a back-dated sell is checked
            # against the holding on trade_date by _post_entry.
            if asset.quantity < qty:
                logger.warning(
                    f"Sell rejected for asset {asset_id}: holding {asset.quantity} < {qty}"
                )
                raise InsufficientHoldingError(asset.id, asset.quantity, qty)

            price = self._exact_price(db, asset.id, trade_date)
            proceeds = self._trade_amount(price, qty, asset.id, trade_date)

            txn = self._post_entry(
                db, asset, TransactionType.OUT, qty, price, trade_date,
                description or f"Sell {asset.code}",
                _insufficient_holding,
            )
            cash_txn = self._post_entry(
                db, cash, TransactionType.IN, proceeds, CASH_UNIT_PRICE, trade_date,
                f"Proceeds from {asset.code} sale",
                _insufficient_funds,
            )
            result = TradeResult(
                transaction=txn,
                cash_transaction=cash_txn,
                amount=proceeds,
                cash_balance=round_currency(cash.quantity),
            )

        logger.info(
            f"Sold {qty} of asset {asset_id} at {price} on {trade_date}: "
            f"proceeds {result.amount}, cash {result.cash_balance}"
        )
        return result

    def delete_transaction(self, db: Session, transaction_id: int) -> DeletionResult:
        """
        Delete a ledger entry and repair the asset's holdings.

        Deleting the latest entry rolls the asset back to its predecessor's
        holding (0 if none). Deleting an earlier entry also recomputes the
        stored holding of every later entry.

        Raises:
            TransactionNotFoundError: No such entry
            ReferentialConflictError: A later entry's holding would go negative
        """
        with self._unit_of_work(db, "delete transaction"):
            txn = db.get(Transaction, transaction_id)
            if txn is None:
                raise TransactionNotFoundError(transaction_id)

            asset = self._lock_one(db, txn.asset_id)

            previous = store.previous_transaction(db, txn)
            later = store.transactions_after(db, txn)

            running = previous.holding if previous is not None else ZERO
            for entry in later:
                running = round_quantity(running + entry.signed_quantity)
                if running < ZERO:
                    raise ReferentialConflictError(
                        f"Cannot delete transaction {transaction_id}: holding of "
                        f"transaction {entry.id} on {entry.transaction_date} would become {running}",
                        resource_type="Transaction",
                        resource_id=transaction_id,
                    )
                entry.holding = running

            asset.quantity = running
            db.delete(txn)

            result = DeletionResult(
                transaction_id=transaction_id,
                asset_id=asset.id,
                was_latest=not later,
                asset_quantity=running,
                recomputed_transactions=len(later),
            )

        logger.info(
            f"Deleted transaction {transaction_id} of asset {result.asset_id}; "
            f"holding now {result.asset_quantity}, {result.recomputed_transactions} later entries recomputed"
        )
        return result

    # =========================================================================
    # PUBLIC API - READS
    # =========================================================================

    def get_transaction(self, db: Session, transaction_id: int) -> Transaction:
        txn = db.get(Transaction, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        return txn

    def list_transactions(
            self,
            db: Session,
            skip: int,
            limit: int,
            asset_id: int | None = None,
    ) -> tuple[list[Transaction], int]:
        """
        One page of the ledger in (transaction_date, id) order.

        Returns:
            (transactions, total matching count)
        """
        query = select(Transaction)
        count_query = select(func.count(Transaction.id))
        if asset_id is not None:
            query = query.where(Transaction.asset_id == asset_id)
            count_query = count_query.where(Transaction.asset_id == asset_id)

        total = db.scalar(count_query) or 0
        items = db.scalars(
            query.order_by(Transaction.transaction_date, Transaction.id)
            .offset(skip)
            .limit(limit)
        ).all()
        return list(items), total

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @contextmanager
    def _unit_of_work(self, db: Session, operation: str) -> Iterator[None]:
        """Commit on success; roll back and re-raise on any failure."""
        try:
            yield
            db.commit()
        except ServiceError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Storage failure during '{operation}'", exc_info=True)
            raise StorageError(operation) from exc

    def _post_entry(
            self,
            db: Session,
            asset: Asset,
            txn_type: TransactionType,
            quantity: Decimal,
            price: Decimal,
            txn_date: date,
            description: str | None,
            shortfall: ShortfallFactory,
    ) -> Transaction:
        """
        Insert one entry for a locked asset and bring its holdings up to date.

        An entry dated on or after every existing one starts from
        ``asset.quantity``. A back-dated entry starts from the holding at the
        end of its date and rewrites the holding of every later entry.
        """
        later = store.transactions_dated_after(db, asset.id, txn_date)
        base = store.holding_as_of(db, asset.id, txn_date) if later else asset.quantity

        signed = quantity if txn_type == TransactionType.IN else -quantity
        new_holding = round_quantity(base + signed)
        if new_holding < ZERO:
            logger.warning(
                f"Rejected {txn_type.value} {quantity} for asset {asset.id}: holding {base}"
            )
            raise shortfall(asset.id, base, quantity)

        txn = Transaction(
            asset_id=asset.id,
            transaction_type=txn_type,
            quantity=quantity,
            price=price,
            transaction_date=txn_date,
            holding=new_holding,
            description=description,
        )
        db.add(txn)
        db.flush()

        running = new_holding
        for entry in later:
            running = round_quantity(running + entry.signed_quantity)
            if running < ZERO:
                logger.warning(
                    f"Rejected back-dated {txn_type.value} for asset {asset.id}: "
                    f"transaction {entry.id} would hold {running}"
                )
                raise shortfall(asset.id, round_quantity(running - signed), quantity)
            entry.holding = running

        if later:
            logger.debug(f"Recomputed holding of {len(later)} later entries for asset {asset.id}")

        asset.quantity = running
        return txn

    def _lock_one(self, db: Session, asset_id: int) -> Asset:
        asset = store.lock_assets(db, [asset_id]).get(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def _lock_trade_accounts(self, db: Session, asset_id: int) -> tuple[Asset, Asset]:
        """Lock the traded asset and the settlement account together."""
        settlement = store.get_settlement_account(db)
        if settlement is None:
            raise SettlementAccountNotFoundError()
        if settlement.id == asset_id:
            raise ValidationError(
                "The settlement account cannot be bought or sold", field="asset_id"
            )

        locked = store.lock_assets(db, [asset_id, settlement.id])
        if asset_id not in locked:
            raise AssetNotFoundError(asset_id)
        return locked[asset_id], locked[settlement.id]

    def _exact_price(self, db: Session, asset_id: int, trade_date: date) -> Decimal:
        price = store.price_on(db, asset_id, trade_date)
        if price is None:
            logger.warning(f"No price for asset {asset_id} on {trade_date}")
            raise PriceNotFoundError(asset_id, trade_date)
        return round_price(price)

    @staticmethod
    def _trade_amount(price: Decimal, qty: Decimal, asset_id: int, trade_date: date) -> Decimal:
        """Cash leg of a trade; must be a positive amount at currency precision."""
        amount = calculate_total(price, qty)
        if amount <= ZERO:
            logger.warning(
                f"Trade rejected for asset {asset_id}: {qty} at {price} on {trade_date} "
                f"rounds to cash amount {amount}"
            )
            raise ValidationError(
                f"Trade value of {qty} at {price} rounds to {amount}; "
                f"the cash amount must be greater than 0",
                field="quantity",
            )
        return amount

    @staticmethod
    def _parse_type(value: TransactionType | str) -> TransactionType:
        try:
            return TransactionType(value)
        except ValueError as exc:
            raise ValidationError(
                f"Invalid transaction_type '{value}'. Valid options: IN, OUT",
                field="transaction_type",
            ) from exc

    @staticmethod
    def _validated_quantity(value: Decimal | int | float | str) -> Decimal:
        if not is_valid_quantity(value):
            raise ValidationError(
                f"Quantity must be a finite number greater than 0, got {value}",
                field="quantity",
            )
        qty = round_quantity(to_decimal(value))
        if qty <= ZERO:
            raise ValidationError(
                f"Quantity {value} rounds to zero at 6 decimal places",
                field="quantity",
            )
        return qty

    @staticmethod
    def _validated_price(value: Decimal | int | float | str) -> Decimal:
        if not is_valid_currency(value):
            raise ValidationError(
                f"Price must be a finite number of at least 0, got {value}",
                field="price",
            )
        return round_price(to_decimal(value))
