# backend/portfolio_ledger/schemas/analysis.py
"""
Pydantic schemas for holding analysis responses.

Mirrors the dataclasses in services/analysis/types.py; built with
``model_validate(result, from_attributes=True)``.
"""

from pydantic import BaseModel, ConfigDict

from portfolio_ledger.schemas.common import JsonDate, JsonDecimal


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class AssetInfoResponse(_FromAttributes):
    id: int
    name: str
    code: str
    asset_type_id: int
    asset_type_name: str | None
    unit: str | None
    quantity: JsonDecimal
    description: str | None
    is_settlement_account: bool


class AnalysisPeriodResponse(_FromAttributes):
    start_date: JsonDate
    end_date: JsonDate
    days: int
    actual_days: int | None = None


class TransactionDetailResponse(_FromAttributes):
    id: int
    type: str
    quantity: JsonDecimal
    price: JsonDecimal
    total_value: JsonDecimal
    description: str | None
    transaction_date: JsonDate


class DailyHoldingResponse(_FromAttributes):
    date: JsonDate
    holding_start: JsonDecimal
    holding_end: JsonDecimal
    change: JsonDecimal
    transactions: list[TransactionDetailResponse]
    price: JsonDecimal | None
    market_value: JsonDecimal | None
    has_transactions: bool
    transactions_count: int


class PeriodSummaryResponse(_FromAttributes):
    total_buy_transactions: int
    total_sell_transactions: int
    total_buy_quantity: JsonDecimal
    total_sell_quantity: JsonDecimal
    average_buy_price: JsonDecimal | None
    average_sell_price: JsonDecimal | None


class HoldingTimelineResponse(_FromAttributes):
    initial_holding: JsonDecimal
    final_holding: JsonDecimal
    total_change: JsonDecimal
    daily_analysis: list[DailyHoldingResponse]
    period_summary: PeriodSummaryResponse


class AnalysisSummaryResponse(_FromAttributes):
    initial_holding: JsonDecimal
    final_holding: JsonDecimal
    total_change: JsonDecimal
    transactions_count: int
    price_data_points: int


class HoldingAnalysisResponse(_FromAttributes):
    asset_info: AssetInfoResponse
    analysis_period: AnalysisPeriodResponse
    holding_analysis: HoldingTimelineResponse
    summary: AnalysisSummaryResponse


class HoldingSummaryResponse(_FromAttributes):
    asset_info: AssetInfoResponse
    analysis_period: AnalysisPeriodResponse
    initial_holding: JsonDecimal
    final_holding: JsonDecimal
    total_change: JsonDecimal
    period_summary: PeriodSummaryResponse
    summary: AnalysisSummaryResponse


# =============================================================================
# DAILY CASH BALANCE
# =============================================================================

class CashMovementResponse(_FromAttributes):
    id: int
    type: str
    quantity: JsonDecimal
    description: str | None
    transaction_date: JsonDate


class DailyCashBalanceResponse(_FromAttributes):
    date: JsonDate
    holding_start: JsonDecimal
    holding_end: JsonDecimal
    daily_change: JsonDecimal
    transactions: list[CashMovementResponse]
    transactions_count: int
    has_transactions: bool


class CashFlowSummaryResponse(_FromAttributes):
    total_in_amount: JsonDecimal
    total_out_amount: JsonDecimal
    total_transactions: int
    days_with_activity: int


class CashBalanceResponse(_FromAttributes):
    asset_info: AssetInfoResponse
    analysis_period: AnalysisPeriodResponse
    initial_holding: JsonDecimal
    final_holding: JsonDecimal
    total_change: JsonDecimal
    daily_balances: list[DailyCashBalanceResponse]
    summary: CashFlowSummaryResponse | None = None
