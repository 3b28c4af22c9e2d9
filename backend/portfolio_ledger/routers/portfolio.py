# backend/portfolio_ledger/routers/portfolio.py
"""
Portfolio endpoints.

- GET /portfolio/transactions-by-type/{asset_type_id} - Ledger entries of one asset type
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from portfolio_ledger.database import get_db
from portfolio_ledger.dependencies import get_aggregation_service
from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS
from portfolio_ledger.schemas.common import SuccessResponse
from portfolio_ledger.schemas.portfolio import TransactionsByTypeResponse
from portfolio_ledger.services.portfolio import PortfolioAggregationService

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)


@router.get(
    "/transactions-by-type/{asset_type_id}",
    response_model=SuccessResponse[TransactionsByTypeResponse],
    summary="Transactions by asset type",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_transactions_by_type(
        request: Request,
        asset_type_id: int,
        start_date: str | None = Query(default=None, description="Inclusive lower bound (YYYY-MM-DD)"),
        end_date: str | None = Query(default=None, description="Inclusive upper bound (YYYY-MM-DD)"),
        db: Session = Depends(get_db),
        service: PortfolioAggregationService = Depends(get_aggregation_service),
) -> SuccessResponse[TransactionsByTypeResponse]:
    """
    Entries of every asset of the type, newest first, with IN/OUT totals.

    Net quantity and net value are IN minus OUT.
    """
    report = service.transactions_by_type(db, asset_type_id, start_date, end_date)
    return SuccessResponse(
        data=TransactionsByTypeResponse.model_validate(report, from_attributes=True)
    )
