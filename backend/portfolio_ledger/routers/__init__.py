# backend/portfolio_ledger/routers/__init__.py
"""
API routers for the Portfolio Ledger API.

Each router handles a specific domain:
- asset_types / assets / prices: Catalog CRUD
- transactions: Manual ledger entries, buy/sell trades, deletes
- analysis: Holding replay, daily cash balance, asset totals by type
- portfolio: Transactions by asset type
- dashboard: Headline value, P&L and value history
"""

from portfolio_ledger.routers.analysis import router as analysis_router
from portfolio_ledger.routers.asset_types import router as asset_types_router
from portfolio_ledger.routers.assets import router as assets_router
from portfolio_ledger.routers.dashboard import router as dashboard_router
from portfolio_ledger.routers.portfolio import router as portfolio_router
from portfolio_ledger.routers.prices import router as prices_router
from portfolio_ledger.routers.transactions import router as transactions_router

__all__ = [
    "asset_types_router",
    "assets_router",
    "prices_router",
    "transactions_router",
    "analysis_router",
    "portfolio_router",
    "dashboard_router",
]
