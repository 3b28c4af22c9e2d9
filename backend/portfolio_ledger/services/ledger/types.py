# backend/portfolio_ledger/services/ledger/types.py
"""
Result types returned by the transaction engine.

Plain dataclasses, not Pydantic schemas; the HTTP layer serializes them
through app schemas in portfolio_ledger/schemas/transactions.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_ledger.models import Transaction


@dataclass(frozen=True)
class TradeResult:
    """
    Outcome of a buy or sell.

    Attributes:
        transaction: Ledger entry for the traded asset
        cash_transaction: Offsetting entry on the settlement account
        amount: Total cost (buy) or total proceeds (sell), currency-rounded
        cash_balance: Settlement account balance after the trade
    """

    transaction: Transaction
    cash_transaction: Transaction
    amount: Decimal
    cash_balance: Decimal


@dataclass(frozen=True)
class DeletionResult:
    """
    Outcome of deleting a ledger entry.

    Attributes:
        transaction_id: Id of the deleted entry
        asset_id: Asset whose ledger changed
        was_latest: True if the entry was the asset's most recent one
        asset_quantity: Asset holding after the delete
        recomputed_transactions: Number of later entries whose holding was rewritten
    """

    transaction_id: int
    asset_id: int
    was_latest: bool
    asset_quantity: Decimal
    recomputed_transactions: int
