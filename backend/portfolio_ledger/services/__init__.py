# backend/portfolio_ledger/services/__init__.py
"""
Service layer for ledger and analysis logic.

Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain exceptions from services/exceptions.py
- Receive database sessions as parameters (not via Depends)

Architecture:
    services/
    ├── __init__.py          # This file
    ├── exceptions.py        # Domain exceptions
    ├── constants.py         # Business constants and rate limits
    ├── catalog.py           # Asset types, assets, daily prices (CRUD)
    ├── ledger/              # Transaction engine + ledger store
    ├── analysis/            # Holding reconstruction (replay) and reports
    └── portfolio/           # Cross-asset aggregation and dashboard

Usage:
    from portfolio_ledger.services.ledger import TransactionEngine
    from portfolio_ledger.services.analysis import HoldingAnalysisService
    from portfolio_ledger.services.portfolio import PortfolioAggregationService
"""
