# backend/portfolio_ledger/services/portfolio/types.py
"""
Result types for cross-asset aggregation.

Currency values are rounded to 2 decimals, quantities to 6, prices to 4 and
percentages to 2. Field names are snake_case; the API schemas map the
asset-totals report to its camelCase wire names.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


# =============================================================================
# ASSET TOTALS BY TYPE
# =============================================================================

@dataclass(frozen=True)
class AssetValue:
    id: int
    name: str
    code: str
    quantity: Decimal
    price: Decimal
    value_usd: Decimal


@dataclass
class TypeBucket:
    """
    Aggregated value of one asset type.

    ``unit`` is None only for assets whose type was not among the known
    asset types when the report started.
    """

    type_name: str
    unit: str | None
    count: int = 0
    total_price: Decimal = Decimal("0")
    percentage: Decimal = Decimal("0")
    assets: list[AssetValue] = field(default_factory=list)


@dataclass(frozen=True)
class TotalsSummary:
    total_assets: int
    total_value_usd: Decimal


@dataclass
class AssetTotalsByType:
    date: date
    total_value_usd: Decimal
    asset_types: dict[str, TypeBucket]
    summary: TotalsSummary


# =============================================================================
# TRANSACTIONS BY TYPE
# =============================================================================

@dataclass(frozen=True)
class DateRange:
    start_date: date | None
    end_date: date | None


@dataclass(frozen=True)
class TypeTransaction:
    id: int
    asset_id: int
    asset_name: str
    asset_code: str
    transaction_type: str
    quantity: Decimal
    price: Decimal
    total_value: Decimal
    holding: Decimal
    transaction_date: date
    description: str | None


@dataclass(frozen=True)
class FlowSummary:
    """IN vs OUT totals; net = IN - OUT."""

    total_in_quantity: Decimal
    total_out_quantity: Decimal
    net_quantity: Decimal
    total_in_value: Decimal
    total_out_value: Decimal
    net_value: Decimal


@dataclass
class TransactionsByType:
    asset_type_id: int
    asset_type_name: str
    date_range: DateRange | None
    total_transactions: int
    transactions: list[TypeTransaction]
    summary: FlowSummary


# =============================================================================
# DASHBOARD
# =============================================================================

@dataclass(frozen=True)
class DashboardSummary:
    """
    Portfolio headline figures.

    Attributes:
        total_asset_value: Σ holding × latest price
        total_profit_loss: total_asset_value minus Σ holding × average buy price
        today_profit_loss: Change versus the previous price date
        total_profit_loss_percentage: P&L over cost basis, 0 when cost is 0
        today_profit_loss_percentage: Day change over previous value, 0 when that is 0
        latest_price_date: Most recent price date in the system
        previous_price_date: Price date before latest_price_date
    """

    total_asset_value: Decimal
    total_profit_loss: Decimal
    today_profit_loss: Decimal
    total_profit_loss_percentage: Decimal
    today_profit_loss_percentage: Decimal
    latest_price_date: date | None
    previous_price_date: date | None


@dataclass(frozen=True)
class HistoryPoint:
    date: date
    total_asset_value: Decimal
