# backend/portfolio_ledger/routers/transactions.py
"""
Ledger endpoints.

Trades ({success, data} envelope, 201):
- POST /transactions/buy    - Buy at the asset's price on the trade date, paid from cash
- POST /transactions/sell   - Sell at the asset's price on the trade date, credited to cash

Ledger CRUD ({code, message, data} envelope):
- GET    /transactions        - Paginated ledger in (transaction_date, id) order
- POST   /transactions        - Manual IN/OUT entry
- GET    /transactions/{id}   - Get one entry
- DELETE /transactions/{id}   - Delete an entry and repair later holdings

Every mutation runs inside one database transaction in TransactionEngine;
a rejected request leaves the ledger untouched.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from portfolio_ledger.database import get_db
from portfolio_ledger.dependencies import get_transaction_engine
from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_WRITE
from portfolio_ledger.routers.responses import code_error_response
from portfolio_ledger.schemas.common import CodeResponse, SuccessResponse
from portfolio_ledger.schemas.pagination import PaginatedData, PaginationMeta, page_offset
from portfolio_ledger.schemas.transactions import (
    TransactionCreate,
    TradeRequest,
    TransactionResponse,
    BuyResponse,
    SellResponse,
    TransactionDeleteResponse,
)
from portfolio_ledger.services.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from portfolio_ledger.services.exceptions import ServiceError
from portfolio_ledger.services.ledger import TransactionEngine

router = APIRouter(
    prefix="/transactions",
    tags=["Transactions"],
)


# =============================================================================
# TRADES
# =============================================================================

@router.post(
    "/buy",
    response_model=SuccessResponse[BuyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Buy an asset",
)
@limiter.limit(RATE_LIMIT_WRITE)
def buy_asset(
        request: Request,
        payload: TradeRequest,
        db: Session = Depends(get_db),
        engine: TransactionEngine = Depends(get_transaction_engine),
) -> SuccessResponse[BuyResponse]:
    """
    Buy ``quantity`` units at the asset's closing price on ``date``.

    Fails with 400 when there is no price for that exact date or the cash
    account cannot cover the cost.
    """
    result = engine.buy(
        db,
        asset_id=payload.asset_id,
        quantity=payload.quantity,
        trade_date=payload.date,
        description=payload.description,
    )
    return SuccessResponse(
        data=BuyResponse(
            transaction=TransactionResponse.model_validate(result.transaction),
            total_cost=result.amount,
            remaining_cash=result.cash_balance,
        )
    )


@router.post(
    "/sell",
    response_model=SuccessResponse[SellResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Sell an asset",
)
@limiter.limit(RATE_LIMIT_WRITE)
def sell_asset(
        request: Request,
        payload: TradeRequest,
        db: Session = Depends(get_db),
        engine: TransactionEngine = Depends(get_transaction_engine),
) -> SuccessResponse[SellResponse]:
    """Fails with 400 when the holding is smaller than ``quantity`` or there is no price."""
    result = engine.sell(
        db,
        asset_id=payload.asset_id,
        quantity=payload.quantity,
        trade_date=payload.date,
        description=payload.description,
    )
    return SuccessResponse(
        data=SellResponse(
            transaction=TransactionResponse.model_validate(result.transaction),
            total_received=result.amount,
            new_cash_balance=result.cash_balance,
        )
    )


# =============================================================================
# LEDGER CRUD
# =============================================================================

@router.get(
    "",
    response_model=CodeResponse[PaginatedData[TransactionResponse]],
    summary="List transactions",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_transactions(
        request: Request,
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        asset_id: int | None = Query(default=None, gt=0, description="Filter by asset"),
        db: Session = Depends(get_db),
        engine: TransactionEngine = Depends(get_transaction_engine),
):
    try:
        items, total = engine.list_transactions(
            db,
            skip=page_offset(page, page_size),
            limit=page_size,
            asset_id=asset_id,
        )
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Transactions retrieved",
        data=PaginatedData(
            items=[TransactionResponse.model_validate(t) for t in items],
            pagination=PaginationMeta.create(total, page, page_size),
        ),
    )


@router.post(
    "",
    response_model=CodeResponse[TransactionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Record a manual transaction",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_transaction(
        request: Request,
        payload: TransactionCreate,
        db: Session = Depends(get_db),
        engine: TransactionEngine = Depends(get_transaction_engine),
):
    """
    Append an IN or OUT entry for one asset.

    - **IN** adds ``quantity`` to the holding
    - **OUT** removes it; rejected with 400 if the holding would go negative

    Back-dated entries also recompute the holding of every later entry.
    """
    try:
        txn = engine.record_transaction(
            db,
            asset_id=payload.asset_id,
            transaction_type=payload.transaction_type,
            quantity=payload.quantity,
            price=payload.price,
            transaction_date=payload.transaction_date,
            description=payload.description,
        )
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_201_CREATED,
        message="Transaction created",
        data=TransactionResponse.model_validate(txn),
    )


@router.get(
    "/{transaction_id}",
    response_model=CodeResponse[TransactionResponse],
    summary="Get a transaction",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_transaction(
        request: Request,
        transaction_id: int,
        db: Session = Depends(get_db),
        engine: TransactionEngine = Depends(get_transaction_engine),
):
    try:
        txn = engine.get_transaction(db, transaction_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Transaction retrieved",
        data=TransactionResponse.model_validate(txn),
    )


@router.delete(
    "/{transaction_id}",
    response_model=CodeResponse[TransactionDeleteResponse],
    summary="Delete a transaction",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_transaction(
        request: Request,
        transaction_id: int,
        db: Session = Depends(get_db),
        engine: TransactionEngine = Depends(get_transaction_engine),
):
    """
    Delete a ledger entry.

    The asset's holding rolls back to the previous entry's holding, and the
    stored holding of every later entry is recomputed. Rejected with 409 if
    that would make any later holding negative.
    """
    try:
        result = engine.delete_transaction(db, transaction_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Transaction deleted",
        data=TransactionDeleteResponse.model_validate(result, from_attributes=True),
    )
