# backend/portfolio_ledger/schemas/transactions.py
"""
Pydantic schemas for ledger entries and trades.

Manual entries (POST /transactions) take an explicit type and price.
Trades (POST /transactions/buy, /sell) only take a quantity and date; the
price is the asset's closing price on exactly that date and the cash leg is
posted against the settlement account.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from portfolio_ledger.models import TransactionType
from portfolio_ledger.schemas.common import JsonDate, JsonDecimal
from portfolio_ledger.utils.financial import calculate_total


# =============================================================================
# REQUESTS
# =============================================================================

class TransactionCreate(BaseModel):
    """
    Manual ledger entry.

    Example:
        {"asset_id": 2, "transaction_type": "IN", "quantity": "100",
         "price": "10.00", "transaction_date": "2024-01-02"}
    """

    asset_id: int = Field(..., gt=0)
    transaction_type: TransactionType = Field(..., description="IN adds to the holding, OUT removes from it")
    quantity: Decimal = Field(..., gt=0, max_digits=20, decimal_places=6)
    price: Decimal = Field(..., ge=0, max_digits=20, decimal_places=4)
    transaction_date: dt.date
    description: str | None = Field(default=None, max_length=1000)


class TradeRequest(BaseModel):
    """Buy or sell request; the unit price comes from price_daily."""

    asset_id: int = Field(..., gt=0)
    quantity: Decimal = Field(..., gt=0, max_digits=20, decimal_places=6)
    date: dt.date = Field(..., description="Trade date (YYYY-MM-DD); a price must exist for it")
    description: str | None = Field(default=None, max_length=1000)


# =============================================================================
# RESPONSES
# =============================================================================

class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_id: int
    transaction_type: TransactionType
    quantity: JsonDecimal
    price: JsonDecimal
    transaction_date: JsonDate
    holding: JsonDecimal = Field(..., description="Asset holding after this entry")
    description: str | None = None
    create_date: dt.datetime

    @computed_field
    @property
    def total_value(self) -> JsonDecimal:
        return calculate_total(self.price, self.quantity)


class BuyResponse(BaseModel):
    transaction: TransactionResponse
    total_cost: JsonDecimal
    remaining_cash: JsonDecimal


class SellResponse(BaseModel):
    transaction: TransactionResponse
    total_received: JsonDecimal
    new_cash_balance: JsonDecimal


class TransactionDeleteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    transaction_id: int
    asset_id: int
    was_latest: bool
    asset_quantity: JsonDecimal = Field(..., description="Asset holding after the delete")
    recomputed_transactions: int = Field(
        ...,
        description="Later entries whose stored holding was recomputed",
    )
