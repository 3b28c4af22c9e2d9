# backend/portfolio_ledger/services/analysis/__init__.py
"""
Holding reconstruction & analysis.

Architecture:
    analysis/
    ├── __init__.py     # Package exports
    ├── replay.py       # Pure day-by-day replay (no I/O)
    ├── types.py        # Result dataclasses
    └── service.py      # HoldingAnalysisService (asset analysis, cash report)
"""

from portfolio_ledger.services.analysis.replay import ReplayDay, replay_holdings
from portfolio_ledger.services.analysis.service import HoldingAnalysisService

__all__ = [
    "HoldingAnalysisService",
    "ReplayDay",
    "replay_holdings",
]
