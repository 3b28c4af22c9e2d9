# backend/portfolio_ledger/services/ledger/__init__.py
"""
Ledger package: transaction engine and its storage primitives.

Architecture:
    ledger/
    ├── __init__.py     # Package exports
    ├── store.py        # Read primitives and row locks (Ledger Store)
    ├── types.py        # TradeResult, DeletionResult
    └── service.py      # TransactionEngine (all ledger writes)

Usage:
    from portfolio_ledger.services.ledger import TransactionEngine
"""

from portfolio_ledger.services.ledger.service import TransactionEngine
from portfolio_ledger.services.ledger.types import TradeResult, DeletionResult

__all__ = [
    "TransactionEngine",
    "TradeResult",
    "DeletionResult",
]
