# backend/portfolio_ledger/schemas/prices.py
"""Pydantic schemas for daily prices."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from portfolio_ledger.schemas.common import JsonDate, JsonDecimal


class PriceUpsert(BaseModel):
    """Creates the (asset_id, date) price or overwrites it if it exists."""

    asset_id: int = Field(..., gt=0)
    date: dt.date = Field(..., description="Price date (YYYY-MM-DD)", examples=["2024-01-02"])
    price: Decimal = Field(
        ...,
        ge=0,
        max_digits=20,
        decimal_places=4,
        description="Closing price",
        examples=["10.00", "187.1234"],
    )


class PriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_id: int
    date: JsonDate
    price: JsonDecimal
    create_date: dt.datetime
