# backend/portfolio_ledger/services/portfolio/__init__.py
"""
Cross-asset aggregation.

Architecture:
    portfolio/
    ├── __init__.py       # Package exports
    ├── types.py          # Result dataclasses
    └── aggregation.py    # PortfolioAggregationService
"""

from portfolio_ledger.services.portfolio.aggregation import PortfolioAggregationService

__all__ = ["PortfolioAggregationService"]
