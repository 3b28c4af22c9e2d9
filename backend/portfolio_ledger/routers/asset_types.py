# backend/portfolio_ledger/routers/asset_types.py
"""
Asset type endpoints.

- GET    /asset-types        - List all asset types
- POST   /asset-types        - Create an asset type
- GET    /asset-types/{id}   - Get one asset type
- PUT    /asset-types/{id}   - Update name/unit/description
- DELETE /asset-types/{id}   - Delete (409 while assets still use it)

Responses use the {code, message, data} envelope.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from portfolio_ledger.database import get_db
from portfolio_ledger.dependencies import get_catalog_service
from portfolio_ledger.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_WRITE
from portfolio_ledger.routers.responses import code_error_response
from portfolio_ledger.schemas.asset_types import (
    AssetTypeCreate,
    AssetTypeUpdate,
    AssetTypeResponse,
)
from portfolio_ledger.schemas.common import CodeResponse
from portfolio_ledger.services.catalog import CatalogService
from portfolio_ledger.services.exceptions import ServiceError

router = APIRouter(
    prefix="/asset-types",
    tags=["Asset Types"],
)


@router.get(
    "",
    response_model=CodeResponse[list[AssetTypeResponse]],
    summary="List asset types",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_asset_types(
        request: Request,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        asset_types = catalog.list_asset_types(db)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Asset types retrieved",
        data=[AssetTypeResponse.model_validate(t) for t in asset_types],
    )


@router.post(
    "",
    response_model=CodeResponse[AssetTypeResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create an asset type",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_asset_type(
        request: Request,
        payload: AssetTypeCreate,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    """Names are unique; a duplicate name returns 409."""
    try:
        asset_type = catalog.create_asset_type(
            db,
            name=payload.name,
            unit=payload.unit,
            description=payload.description,
        )
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_201_CREATED,
        message="Asset type created",
        data=AssetTypeResponse.model_validate(asset_type),
    )


@router.get(
    "/{asset_type_id}",
    response_model=CodeResponse[AssetTypeResponse],
    summary="Get an asset type",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_asset_type(
        request: Request,
        asset_type_id: int,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        asset_type = catalog.get_asset_type(db, asset_type_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Asset type retrieved",
        data=AssetTypeResponse.model_validate(asset_type),
    )


@router.put(
    "/{asset_type_id}",
    response_model=CodeResponse[AssetTypeResponse],
    summary="Update an asset type",
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_asset_type(
        request: Request,
        asset_type_id: int,
        payload: AssetTypeUpdate,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        asset_type = catalog.update_asset_type(
            db, asset_type_id, **payload.model_dump(exclude_unset=True)
        )
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(
        code=status.HTTP_200_OK,
        message="Asset type updated",
        data=AssetTypeResponse.model_validate(asset_type),
    )


@router.delete(
    "/{asset_type_id}",
    response_model=CodeResponse[None],
    summary="Delete an asset type",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_asset_type(
        request: Request,
        asset_type_id: int,
        db: Session = Depends(get_db),
        catalog: CatalogService = Depends(get_catalog_service),
):
    """Rejected with 409 while any asset still belongs to the type."""
    try:
        catalog.delete_asset_type(db, asset_type_id)
    except ServiceError as exc:
        return code_error_response(exc)

    return CodeResponse(code=status.HTTP_200_OK, message="Asset type deleted", data=None)
