# backend/portfolio_ledger/dependencies.py
"""
Dependency injection for FastAPI services.

Services are stateless, so one instance of each is shared across all
requests. They are created lazily on first use to avoid import-time side
effects.

Usage in routers:
    from portfolio_ledger.dependencies import get_transaction_engine

    @router.post("/buy")
    def buy(engine: TransactionEngine = Depends(get_transaction_engine)):
        ...
"""

import logging
from functools import lru_cache

from portfolio_ledger.services.analysis import HoldingAnalysisService
from portfolio_ledger.services.catalog import CatalogService
from portfolio_ledger.services.ledger import TransactionEngine
from portfolio_ledger.services.portfolio import PortfolioAggregationService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================

@lru_cache(maxsize=1)
def get_catalog_service() -> CatalogService:
    logger.debug("Initializing singleton CatalogService")
    return CatalogService()


@lru_cache(maxsize=1)
def get_transaction_engine() -> TransactionEngine:
    """
    Get the singleton TransactionEngine.

    All ledger writes go through this instance; nothing else in the API
    writes Asset.quantity or Transaction.holding.
    """
    logger.debug("Initializing singleton TransactionEngine")
    return TransactionEngine()


@lru_cache(maxsize=1)
def get_analysis_service() -> HoldingAnalysisService:
    logger.debug("Initializing singleton HoldingAnalysisService")
    return HoldingAnalysisService()


@lru_cache(maxsize=1)
def get_aggregation_service() -> PortfolioAggregationService:
    logger.debug("Initializing singleton PortfolioAggregationService")
    return PortfolioAggregationService()
