# backend/portfolio_ledger/services/analysis/types.py
"""
Result types for the holding analysis service.

Dataclasses with Decimal values already rounded to their contract precision
(quantity 6, price 4, currency 2). API serialization lives in
portfolio_ledger/schemas/analysis.py.

Type Hierarchy:
    AssetInfo           - Asset identity with its type name and unit
    AnalysisPeriod      - Inclusive date window
    TransactionDetail   - One ledger entry inside a day
    DailyHolding        - One day of replayed holding + valuation
    PeriodSummary       - IN/OUT counts, quantities and VWAP prices
    HoldingTimeline     - Initial/final holding, days, period summary
    HoldingAnalysis     - Full asset holding analysis
    HoldingSummary      - Same without per-day detail
    CashMovement        - One cash account entry
    DailyCashBalance    - One day of the cash report
    CashFlowSummary     - Cash in/out totals
    CashBalanceReport   - Trailing daily cash balance
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


# =============================================================================
# SHARED
# =============================================================================

@dataclass(frozen=True)
class AssetInfo:
    id: int
    name: str
    code: str
    asset_type_id: int
    asset_type_name: str | None
    unit: str | None
    quantity: Decimal
    description: str | None
    is_settlement_account: bool


@dataclass(frozen=True)
class AnalysisPeriod:
    """
    Attributes:
        days: Number of calendar days in the window (inclusive)
        actual_days: Days actually replayed (cash report only)
    """

    start_date: date
    end_date: date
    days: int
    actual_days: int | None = None


# =============================================================================
# ASSET HOLDING ANALYSIS
# =============================================================================

@dataclass(frozen=True)
class TransactionDetail:
    id: int
    type: str
    quantity: Decimal
    price: Decimal
    total_value: Decimal
    description: str | None
    transaction_date: date


@dataclass
class DailyHolding:
    """
    One day of the analysis.

    ``price`` and ``market_value`` are None when there is no price row for
    that exact date; no fill from neighbouring days is applied.
    """

    date: date
    holding_start: Decimal
    holding_end: Decimal
    change: Decimal
    transactions: list[TransactionDetail]
    price: Decimal | None
    market_value: Decimal | None
    has_transactions: bool
    transactions_count: int


@dataclass(frozen=True)
class PeriodSummary:
    """
    Buy/sell activity within the window.

    average_buy_price / average_sell_price are volume-weighted
    (Σ price × qty / Σ qty) and None when that side had no entries.
    """

    total_buy_transactions: int
    total_sell_transactions: int
    total_buy_quantity: Decimal
    total_sell_quantity: Decimal
    average_buy_price: Decimal | None
    average_sell_price: Decimal | None


@dataclass
class HoldingTimeline:
    initial_holding: Decimal
    final_holding: Decimal
    total_change: Decimal
    daily_analysis: list[DailyHolding]
    period_summary: PeriodSummary


@dataclass(frozen=True)
class AnalysisSummary:
    initial_holding: Decimal
    final_holding: Decimal
    total_change: Decimal
    transactions_count: int
    price_data_points: int


@dataclass
class HoldingAnalysis:
    asset_info: AssetInfo
    analysis_period: AnalysisPeriod
    holding_analysis: HoldingTimeline
    summary: AnalysisSummary


@dataclass
class HoldingSummary:
    asset_info: AssetInfo
    analysis_period: AnalysisPeriod
    initial_holding: Decimal
    final_holding: Decimal
    total_change: Decimal
    period_summary: PeriodSummary
    summary: AnalysisSummary


# =============================================================================
# DAILY CASH BALANCE
# =============================================================================

@dataclass(frozen=True)
class CashMovement:
    id: int
    type: str
    quantity: Decimal
    description: str | None
    transaction_date: date


@dataclass
class DailyCashBalance:
    date: date
    holding_start: Decimal
    holding_end: Decimal
    daily_change: Decimal
    transactions: list[CashMovement]
    transactions_count: int
    has_transactions: bool


@dataclass(frozen=True)
class CashFlowSummary:
    total_in_amount: Decimal
    total_out_amount: Decimal
    total_transactions: int
    days_with_activity: int


@dataclass
class CashBalanceReport:
    asset_info: AssetInfo
    analysis_period: AnalysisPeriod
    initial_holding: Decimal
    final_holding: Decimal
    total_change: Decimal
    daily_balances: list[DailyCashBalance] = field(default_factory=list)
    summary: CashFlowSummary | None = None
