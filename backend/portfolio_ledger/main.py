# backend/portfolio_ledger/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_ledger import __version__
from portfolio_ledger.config import settings
from portfolio_ledger.database import get_db, init_db, check_database_health
from portfolio_ledger.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_HEALTH,
)
from portfolio_ledger.routers import (
    asset_types_router,
    assets_router,
    prices_router,
    transactions_router,
    analysis_router,
    portfolio_router,
    dashboard_router,
)
from portfolio_ledger.routers.responses import error_details
from portfolio_ledger.schemas.errors import ErrorDetail, ValidationErrorDetail
from portfolio_ledger.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    ReferentialConflictError,
    StorageError,
)
from portfolio_ledger.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()


# =============================================================================
# APPLICATION SETUP
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema is created from the models; no migrations are managed
    init_db()
    logger.info(f"{settings.app_name} started ({settings.environment})")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Portfolio ledger: transactions, holding replay and portfolio aggregation",
    version=__version__,
    lifespan=lifespan,
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

# Attach limiter to app state (required by slowapi)
app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)

# Extracts/generates correlation IDs and echoes them in response headers
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Analysis and trading routes let service exceptions propagate here.
# CRUD routes catch them locally and answer in the {code, message, data}
# envelope instead (see routers/responses.py).
# Handlers are resolved by MRO, so the most specific one wins.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _error_response(status_code: int, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details=error_details(exc),
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle malformed or missing input (400)."""
    logger.warning(f"Validation error: {exc}")
    return _error_response(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing assets, asset types, transactions and prices (404)."""
    logger.warning(f"Not found: {exc}")
    return _error_response(404, exc)


@app.exception_handler(BusinessRuleError)
async def business_rule_handler(request: Request, exc: BusinessRuleError) -> JSONResponse:
    """Handle insufficient holding/funds and missing trade prices (400)."""
    logger.warning(f"Business rule violation: {exc}")
    return _error_response(400, exc)


@app.exception_handler(ReferentialConflictError)
async def conflict_handler(request: Request, exc: ReferentialConflictError) -> JSONResponse:
    """Handle writes blocked by dependent rows or duplicate keys (409)."""
    logger.warning(f"Conflict: {exc}")
    return _error_response(409, exc)


def _storage_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="StorageError",
            message="An internal storage error occurred",
            details=None,
        ).model_dump(),
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle database failures (500). Detail was logged where the failure happened."""
    logger.error(f"Storage error during '{exc.operation}'")
    return _storage_error_response()


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database failures on read paths, which do not wrap them (500)."""
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return _storage_error_response()


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and disallowed methods keep the standard error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error="HTTPError",
            message=str(exc.detail),
            details=None,
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors with consistent format.

    Returned as 400 so malformed bodies, path values and query values share
    the status of service-level validation failures.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=400,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(asset_types_router)  # /asset-types/*
app.include_router(assets_router)  # /assets/*
app.include_router(prices_router)  # /price-daily/*
app.include_router(transactions_router)  # /transactions/*
app.include_router(analysis_router)  # /analysis/*
app.include_router(portfolio_router)  # /portfolio/*
app.include_router(dashboard_router)  # /dashboard/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """API root - returns basic application info."""
    return {
        "message": f"Welcome to {settings.app_name}!",
        "version": __version__,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request):
    """
    Health check with database status.

    - 200: Database reachable
    - 503: Database unreachable; do not route traffic here
    """
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "checks": {"database": database},
    }
    if not healthy:
        return JSONResponse(status_code=503, content=body)
    return body


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """Liveness probe: succeeds whenever the process is running."""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def readiness_check(request: Request, db: Session = Depends(get_db)):
    """
    Readiness probe.

    Returns 503 while the database is unavailable.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "error": "Database unavailable",
            },
        )
    return {"status": "ready"}
