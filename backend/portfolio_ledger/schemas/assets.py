# backend/portfolio_ledger/schemas/assets.py
"""
Pydantic schemas for assets.

``quantity`` is read-only: it is the holding maintained by the transaction
engine and cannot be sent on create or update.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_ledger.schemas.common import JsonDecimal


class AssetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Apple Inc."])
    code: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Unique business code",
        examples=["AAPL", "CASH001"],
    )
    asset_type_id: int = Field(..., gt=0)
    description: str | None = Field(default=None, max_length=1000)
    is_settlement_account: bool = Field(
        default=False,
        description="Mark as the cash account that buy/sell trades settle against (at most one)",
    )

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Trim whitespace and uppercase."""
        v = v.strip().upper()
        if not v:
            raise ValueError("code cannot be blank")
        return v


class AssetUpdate(BaseModel):
    """Only name, code and description can change."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    code: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=1000)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip().upper()


class AssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    asset_type_id: int
    asset_type_name: str | None = None
    unit: str | None = None
    quantity: JsonDecimal
    description: str | None = None
    is_settlement_account: bool
    create_date: datetime
