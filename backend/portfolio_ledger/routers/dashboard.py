# backend/portfolio_ledger/routers/dashboard.py
"""
Dashboard endpoints ({code, message, data} envelope).

- GET /dashboard/summary                - Total value and P&L at the latest prices
- GET /dashboard/total-assets-history   - Portfolio value on recent price dates
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from portfolio_ledger.database import get_db
from portfolio_ledger.dependencies import get_aggregation_service
from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS
from portfolio_ledger.routers.responses import code_error_response
from portfolio_ledger.schemas.common import CodeResponse
from portfolio_ledger.schemas.portfolio import DashboardSummaryResponse, HistoryPointResponse
from portfolio_ledger.services.constants import MAX_HISTORY_POINTS
from portfolio_ledger.services.exceptions import ServiceError
from portfolio_ledger.services.portfolio import PortfolioAggregationService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.get(
    "/summary",
    response_model=CodeResponse[DashboardSummaryResponse],
    summary="Dashboard summary",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_dashboard_summary(
        request: Request,
        db: Session = Depends(get_db),
        service: PortfolioAggregationService = Depends(get_aggregation_service),
):
    """
    Headline figures for the current holdings.

    - **total_profit_loss**: value minus cost at the volume-weighted average buy price
    - **today_profit_loss**: change since the previous price date
    """
    try:
        summary = service.dashboard_summary(db)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Dashboard summary retrieved",
        data=DashboardSummaryResponse.model_validate(summary, from_attributes=True),
    )


@router.get(
    "/total-assets-history",
    response_model=CodeResponse[list[HistoryPointResponse]],
    summary="Total assets history",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_total_assets_history(
        request: Request,
        points: int | None = Query(
            default=None,
            ge=1,
            le=MAX_HISTORY_POINTS,
            description="Number of most recent price dates (default from settings)",
        ),
        db: Session = Depends(get_db),
        service: PortfolioAggregationService = Depends(get_aggregation_service),
):
    try:
        history = service.total_assets_history(db, points)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Total assets history retrieved",
        data=[HistoryPointResponse.model_validate(p, from_attributes=True) for p in history],
    )
