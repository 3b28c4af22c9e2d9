# backend/portfolio_ledger/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

Organized by domain:
- common: JSON-number decimals, success and code envelopes
- errors: Error response formats
- pagination: Page metadata for list endpoints
- asset_types / assets / prices: Catalog CRUD
- transactions: Manual entries, buy/sell trades, deletes
- analysis: Holding analysis and daily cash balance
- portfolio: Asset totals by type, transactions by type, dashboard

Usage:
    from portfolio_ledger.schemas import AssetCreate, AssetResponse
    from portfolio_ledger.schemas import SuccessResponse, CodeResponse
"""

from portfolio_ledger.schemas.common import JsonDecimal, SuccessResponse, CodeResponse
from portfolio_ledger.schemas.errors import ErrorDetail, ValidationErrorDetail
from portfolio_ledger.schemas.pagination import PaginationMeta, PaginatedData, page_offset
from portfolio_ledger.schemas.asset_types import (
    AssetTypeCreate,
    AssetTypeUpdate,
    AssetTypeResponse,
)
from portfolio_ledger.schemas.assets import AssetCreate, AssetUpdate, AssetResponse
from portfolio_ledger.schemas.prices import PriceUpsert, PriceResponse
from portfolio_ledger.schemas.transactions import (
    TransactionCreate,
    TradeRequest,
    TransactionResponse,
    BuyResponse,
    SellResponse,
    TransactionDeleteResponse,
)
from portfolio_ledger.schemas.analysis import (
    HoldingAnalysisResponse,
    HoldingSummaryResponse,
    CashBalanceResponse,
)
from portfolio_ledger.schemas.portfolio import (
    AssetTotalsByTypeResponse,
    TransactionsByTypeResponse,
    DashboardSummaryResponse,
    HistoryPointResponse,
)

__all__ = [
    # Common
    "JsonDecimal",
    "SuccessResponse",
    "CodeResponse",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # Pagination
    "PaginationMeta",
    "PaginatedData",
    "page_offset",
    # Catalog
    "AssetTypeCreate",
    "AssetTypeUpdate",
    "AssetTypeResponse",
    "AssetCreate",
    "AssetUpdate",
    "AssetResponse",
    "PriceUpsert",
    "PriceResponse",
    # Transactions
    "TransactionCreate",
    "TradeRequest",
    "TransactionResponse",
    "BuyResponse",
    "SellResponse",
    "TransactionDeleteResponse",
    # Analysis
    "HoldingAnalysisResponse",
    "HoldingSummaryResponse",
    "CashBalanceResponse",
    # Portfolio
    "AssetTotalsByTypeResponse",
    "TransactionsByTypeResponse",
    "DashboardSummaryResponse",
    "HistoryPointResponse",
]
