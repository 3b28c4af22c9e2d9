# backend/portfolio_ledger/__init__.py
"""Multi-asset portfolio ledger with holding reconstruction and valuation analysis."""

__version__ = "0.1.0"
