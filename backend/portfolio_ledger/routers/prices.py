# backend/portfolio_ledger/routers/prices.py
"""
Daily price endpoints.

- GET    /price-daily        - Paginated list, newest date first (optional asset_id)
- POST   /price-daily        - Upsert the price of an asset on a date
- GET    /price-daily/{id}   - Get one price row
- DELETE /price-daily/{id}   - Delete a price row

There is at most one price per (asset_id, date): POST answers 201 when it
creates the row and 200 when it overwrites an existing one.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from portfolio_ledger.database import get_db
from portfolio_ledger.dependencies import get_catalog_service
from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_WRITE
from portfolio_ledger.routers.responses import code_error_response
from portfolio_ledger.schemas.common import CodeResponse
from portfolio_ledger.schemas.pagination import PaginatedData, PaginationMeta, page_offset
from portfolio_ledger.schemas.prices import PriceUpsert, PriceResponse
from portfolio_ledger.services.catalog import CatalogService
from portfolio_ledger.services.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from portfolio_ledger.services.exceptions import ServiceError

router = APIRouter(
    prefix="/price-daily",
    tags=["Prices"],
)


@router.get(
    "",
    response_model=CodeResponse[PaginatedData[PriceResponse]],
    summary="List daily prices",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_prices(
        request: Request,
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        asset_id: int | None = Query(default=None, gt=0, description="Filter by asset"),
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        rows, total = catalog.list_prices(
            db,
            skip=page_offset(page, page_size),
            limit=page_size,
            asset_id=asset_id,
        )
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Prices retrieved",
        data=PaginatedData(
            items=[PriceResponse.model_validate(r) for r in rows],
            pagination=PaginationMeta.create(total, page, page_size),
        ),
    )


@router.post(
    "",
    response_model=CodeResponse[PriceResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create or update a daily price",
    responses={200: {"description": "Existing price for the date was updated"}},
)
@limiter.limit(RATE_LIMIT_WRITE)
def upsert_price(
        request: Request,
        response: Response,
        payload: PriceUpsert,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        record, created = catalog.upsert_price(
            db,
            asset_id=payload.asset_id,
            price_date=payload.date,
            price=payload.price,
        )
    except ServiceError as exc:
        return code_error_response(exc)

    if created:
        return CodeResponse(
            code=status.HTTP_201_CREATED,
            message="Price created",
            data=PriceResponse.model_validate(record),
        )

    response.status_code = status.HTTP_200_OK
    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Price updated",
        data=PriceResponse.model_validate(record),
    )


@router.get(
    "/{price_id}",
    response_model=CodeResponse[PriceResponse],
    summary="Get a daily price",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_price(
        request: Request,
        price_id: int,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        record = catalog.get_price(db, price_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Price retrieved",
        data=PriceResponse.model_validate(record),
    )


@router.delete(
    "/{price_id}",
    response_model=CodeResponse[None],
    summary="Delete a daily price",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_price(
        request: Request,
        price_id: int,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        catalog.delete_price(db, price_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(code=status.HTTP_200_OK, message="Price deleted", data=None)
