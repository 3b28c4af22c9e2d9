# backend/portfolio_ledger/schemas/portfolio.py
"""
Pydantic schemas for portfolio aggregation and dashboard responses.

The asset-totals report keeps its established camelCase wire names
(totalValueUSD, assetTypes, typeName, ...) through field aliases;
everything else is snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field

from portfolio_ledger.schemas.common import JsonDate, JsonDecimal


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# =============================================================================
# ASSET TOTALS BY TYPE
# =============================================================================

class AssetValueResponse(_FromAttributes):
    id: int
    name: str
    code: str
    quantity: JsonDecimal
    price: JsonDecimal
    value_usd: JsonDecimal = Field(..., alias="valueUSD")


class TypeBucketResponse(_FromAttributes):
    type_name: str = Field(..., alias="typeName")
    unit: str | None
    count: int
    total_price: JsonDecimal = Field(..., alias="totalPrice")
    percentage: JsonDecimal
    assets: list[AssetValueResponse]


class TotalsSummaryResponse(_FromAttributes):
    total_assets: int = Field(..., alias="totalAssets")
    total_value_usd: JsonDecimal = Field(..., alias="totalValueUSD")


class AssetTotalsByTypeResponse(_FromAttributes):
    date: JsonDate
    total_value_usd: JsonDecimal = Field(..., alias="totalValueUSD")
    asset_types: dict[str, TypeBucketResponse] = Field(..., alias="assetTypes")
    summary: TotalsSummaryResponse


# =============================================================================
# TRANSACTIONS BY TYPE
# =============================================================================

class DateRangeResponse(_FromAttributes):
    start_date: JsonDate | None
    end_date: JsonDate | None


class TypeTransactionResponse(_FromAttributes):
    id: int
    asset_id: int
    asset_name: str
    asset_code: str
    transaction_type: str
    quantity: JsonDecimal
    price: JsonDecimal
    total_value: JsonDecimal
    holding: JsonDecimal
    transaction_date: JsonDate
    description: str | None


class FlowSummaryResponse(_FromAttributes):
    total_in_quantity: JsonDecimal
    total_out_quantity: JsonDecimal
    net_quantity: JsonDecimal
    total_in_value: JsonDecimal
    total_out_value: JsonDecimal
    net_value: JsonDecimal


class TransactionsByTypeResponse(_FromAttributes):
    asset_type_id: int
    asset_type_name: str
    date_range: DateRangeResponse | None
    total_transactions: int
    transactions: list[TypeTransactionResponse]
    summary: FlowSummaryResponse


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardSummaryResponse(_FromAttributes):
    total_asset_value: JsonDecimal
    total_profit_loss: JsonDecimal
    today_profit_loss: JsonDecimal
    total_profit_loss_percentage: JsonDecimal
    today_profit_loss_percentage: JsonDecimal
    latest_price_date: JsonDate | None
    previous_price_date: JsonDate | None


class HistoryPointResponse(_FromAttributes):
    date: JsonDate
    total_asset_value: JsonDecimal
