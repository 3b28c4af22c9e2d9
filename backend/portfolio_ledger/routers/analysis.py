# backend/portfolio_ledger/routers/analysis.py
"""
Holding analysis endpoints.

- GET /analysis/asset-holding           - Day-by-day holding and valuation of one asset
- GET /analysis/asset-holding/summary   - Same window, summary only
- GET /analysis/daily-cash-balance      - Trailing daily balance of the cash account
- GET /analysis/asset-totals-by-type    - Portfolio value bucketed by asset type

Dates are ``YYYY-MM-DD`` strings parsed by the services, so malformed or
missing dates surface as 400 ValidationError responses.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from portfolio_ledger.database import get_db
from portfolio_ledger.dependencies import get_analysis_service, get_aggregation_service
from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS
from portfolio_ledger.schemas.analysis import (
    HoldingAnalysisResponse,
    HoldingSummaryResponse,
    CashBalanceResponse,
)
from portfolio_ledger.schemas.common import SuccessResponse
from portfolio_ledger.schemas.portfolio import AssetTotalsByTypeResponse
from portfolio_ledger.services.analysis import HoldingAnalysisService
from portfolio_ledger.services.portfolio import PortfolioAggregationService

router = APIRouter(
    prefix="/analysis",
    tags=["Analysis"],
)


@router.get(
    "/asset-holding",
    response_model=SuccessResponse[HoldingAnalysisResponse],
    summary="Asset holding analysis",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_asset_holding(
        request: Request,
        asset_id: int | None = Query(default=None, description="Asset to analyse"),
        start_date: str | None = Query(default=None, description="First day (YYYY-MM-DD)"),
        end_date: str | None = Query(default=None, description="Last day (YYYY-MM-DD)"),
        db: Session = Depends(get_db),
        service: HoldingAnalysisService = Depends(get_analysis_service),
) -> SuccessResponse[HoldingAnalysisResponse]:
    """
    Replay the ledger of one asset over ``[start_date, end_date]``.

    Every calendar day is reported, including days without activity. The
    initial holding is the holding of the last entry before ``start_date``.
    ``price`` and ``market_value`` are null on days without a price row.
    """
    analysis = service.get_asset_holding_analysis(db, asset_id, start_date, end_date)
    return SuccessResponse(
        data=HoldingAnalysisResponse.model_validate(analysis, from_attributes=True)
    )


@router.get(
    "/asset-holding/summary",
    response_model=SuccessResponse[HoldingSummaryResponse],
    summary="Asset holding summary",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_asset_holding_summary(
        request: Request,
        asset_id: int | None = Query(default=None),
        start_date: str | None = Query(default=None),
        end_date: str | None = Query(default=None),
        db: Session = Depends(get_db),
        service: HoldingAnalysisService = Depends(get_analysis_service),
) -> SuccessResponse[HoldingSummaryResponse]:
    summary = service.get_asset_holding_summary(db, asset_id, start_date, end_date)
    return SuccessResponse(
        data=HoldingSummaryResponse.model_validate(summary, from_attributes=True)
    )


@router.get(
    "/daily-cash-balance",
    response_model=SuccessResponse[CashBalanceResponse],
    summary="Daily cash balance",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_daily_cash_balance(
        request: Request,
        days: int | None = Query(default=None, description="Trailing window length in days"),
        db: Session = Depends(get_db),
        service: HoldingAnalysisService = Depends(get_analysis_service),
) -> SuccessResponse[CashBalanceResponse]:
    """Balance of the settlement account for each day of ``[today - days, today]``."""
    report = service.get_daily_cash_balance(db, days)
    return SuccessResponse(
        data=CashBalanceResponse.model_validate(report, from_attributes=True)
    )


@router.get(
    "/asset-totals-by-type",
    response_model=SuccessResponse[AssetTotalsByTypeResponse],
    summary="Asset totals by type",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_asset_totals_by_type(
        request: Request,
        on_date: str | None = Query(default=None, alias="date", description="Valuation date (default: today)"),
        db: Session = Depends(get_db),
        service: PortfolioAggregationService = Depends(get_aggregation_service),
) -> SuccessResponse[AssetTotalsByTypeResponse]:
    """
    Value every asset with a positive holding at its latest price on or
    before ``date`` and bucket the values by asset type.
    """
    totals = service.asset_totals_by_type(db, on_date)
    return SuccessResponse(
        data=AssetTotalsByTypeResponse.model_validate(totals, from_attributes=True)
    )
