# backend/portfolio_ledger/routers/responses.py
"""
Shared helpers for mapping service errors to HTTP responses.

Analysis and trading routes let ServiceError subclasses propagate to the
global handlers in main.py ({success: false, ...}). CRUD and dashboard
routes catch them and answer in their own envelope:

    {"code": 404, "message": "Asset with id 7 not found", "data": null}
"""

import logging

from fastapi import status
from fastapi.responses import JSONResponse

from portfolio_ledger.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    ReferentialConflictError,
    StorageError,
)

logger = logging.getLogger(__name__)


def status_for(exc: ServiceError) -> int:
    """HTTP status code for a service exception."""
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, BusinessRuleError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ReferentialConflictError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_details(exc: ServiceError) -> dict | None:
    """Structured context for the error body (None if there is nothing to add)."""
    if isinstance(exc, StorageError):
        return None

    details = {}
    for attr in ("field", "resource_type", "resource_id", "asset_id", "available", "requested", "required"):
        value = getattr(exc, attr, None)
        if value is not None:
            details[attr] = str(value) if not isinstance(value, (int, str)) else value
    return details or None


def code_error_response(exc: ServiceError) -> JSONResponse:
    """Render a service error in the {code, message, data} envelope."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={"code": status_code, "message": exc.message, "data": None},
    )
