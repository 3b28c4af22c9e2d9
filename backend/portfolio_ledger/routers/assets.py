# backend/portfolio_ledger/routers/assets.py
"""
Asset endpoints.

- GET    /assets        - Paginated list (optional asset_type_id / search filters)
- POST   /assets        - Register an asset (holding starts at 0)
- GET    /assets/{id}   - Get one asset
- PUT    /assets/{id}   - Update name/code/description
- DELETE /assets/{id}   - Delete (409 while it has transactions)

The holding (``quantity``) is read-only here; only the transaction
endpoints change it. Responses use the {code, message, data} envelope.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from portfolio_ledger.database import get_db
from portfolio_ledger.dependencies import get_catalog_service
from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_WRITE
from portfolio_ledger.routers.responses import code_error_response
from portfolio_ledger.schemas.assets import AssetCreate, AssetUpdate, AssetResponse
from portfolio_ledger.schemas.common import CodeResponse
from portfolio_ledger.schemas.pagination import PaginatedData, PaginationMeta, page_offset
from portfolio_ledger.services.catalog import CatalogService
from portfolio_ledger.services.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from portfolio_ledger.services.exceptions import ServiceError

router = APIRouter(
    prefix="/assets",
    tags=["Assets"],
)


@router.get(
    "",
    response_model=CodeResponse[PaginatedData[AssetResponse]],
    summary="List assets",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_assets(
        request: Request,
        page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
        page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        asset_type_id: int | None = Query(default=None, gt=0, description="Filter by asset type"),
        search: str | None = Query(default=None, max_length=100, description="Match name or code"),
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    """Each item carries its asset type name and unit."""
    try:
        assets, total = catalog.list_assets(
            db,
            skip=page_offset(page, page_size),
            limit=page_size,
            asset_type_id=asset_type_id,
            search=search,
        )
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Assets retrieved",
        data=PaginatedData(
            items=[AssetResponse.model_validate(a) for a in assets],
            pagination=PaginationMeta.create(total, page, page_size),
        ),
    )


@router.post(
    "",
    response_model=CodeResponse[AssetResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create an asset",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_asset(
        request: Request,
        payload: AssetCreate,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Register a new asset.

    - **code**: Unique business code (normalized to uppercase)
    - **asset_type_id**: Must reference an existing asset type (404 otherwise)
    - **is_settlement_account**: At most one asset may carry this flag
    """
    try:
        asset = catalog.create_asset(
            db,
            name=payload.name,
            code=payload.code,
            asset_type_id=payload.asset_type_id,
            description=payload.description,
            is_settlement_account=payload.is_settlement_account,
        )
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_201_CREATED,
        message="Asset created",
        data=AssetResponse.model_validate(asset),
    )


@router.get(
    "/{asset_id}",
    response_model=CodeResponse[AssetResponse],
    summary="Get an asset",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_asset(
        request: Request,
        asset_id: int,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        asset = catalog.get_asset(db, asset_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Asset retrieved",
        data=AssetResponse.model_validate(asset),
    )


@router.put(
    "/{asset_id}",
    response_model=CodeResponse[AssetResponse],
    summary="Update an asset",
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_asset(
        request: Request,
        asset_id: int,
        payload: AssetUpdate,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        asset = catalog.update_asset(db, asset_id, **payload.model_dump(exclude_unset=True))
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Asset updated",
        data=AssetResponse.model_validate(asset),
    )


@router.delete(
    "/{asset_id}",
    response_model=CodeResponse[None],
    summary="Delete an asset",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_asset(
        request: Request,
        asset_id: int,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    """Rejected with 409 while the asset has ledger entries; its prices are removed with it."""
    try:
        catalog.delete_asset(db, asset_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(code=status.HTTP_200_OK, message="Asset deleted", data=None)
