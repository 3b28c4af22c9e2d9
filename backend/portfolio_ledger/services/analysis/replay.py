# backend/portfolio_ledger/services/analysis/replay.py
"""
Holding replay over a calendar date range.

Reconstructs an asset's day-by-day holding from a seed value and the
asset's ledger entries within the range, using the rolling state pattern:
dates and entries are both sorted, so each entry is visited once
(O(D + T) for D days and T entries).

A day's ending holding is the stored ``holding`` of the last entry applied
that day rather than ``start + change``. Under a consistent ledger both are
equal; if they ever differ the stored value wins, so replay always agrees
with the ledger.

This module does no I/O; callers fetch entries through the ledger store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from portfolio_ledger.utils.date_utils import iter_dates
from portfolio_ledger.utils.financial import ZERO, round_quantity

if TYPE_CHECKING:
    from portfolio_ledger.models import Transaction


@dataclass
class ReplayDay:
    """
    One calendar day of replayed state.

    Attributes:
        day: Calendar date
        holding_start: Holding carried over from the previous day
        holding_end: Holding after the day's last entry
        change: Signed sum of the day's entry quantities
        transactions: The day's entries in ledger order
    """

    day: date
    holding_start: Decimal
    holding_end: Decimal
    change: Decimal = ZERO
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def has_transactions(self) -> bool:
        return bool(self.transactions)


def replay_holdings(
        initial_holding: Decimal,
        transactions: list[Transaction],
        start_date: date,
        end_date: date,
) -> list[ReplayDay]:
    """
    Replay ledger entries over every date in [start_date, end_date].

    Args:
        initial_holding: Holding at the start of ``start_date`` (the seed)
        transactions: Entries dated within the range, in (transaction_date, id) order
        start_date: First day (inclusive)
        end_date: Last day (inclusive)

    Returns:
        One ReplayDay per calendar date, no gaps

    Example:
        Seed 5, one IN of 10 on the middle of three days:
        [(5, 5), (5, 15), (15, 15)] as (holding_start, holding_end)
    """
    days: list[ReplayDay] = []
    running = round_quantity(initial_holding)

    txn_index = 0
    num_txns = len(transactions)

    for current in iter_dates(start_date, end_date):
        day = ReplayDay(day=current, holding_start=running, holding_end=running)

        while txn_index < num_txns:
            txn = transactions[txn_index]
            if txn.transaction_date > current:
                break
            # Entries before the range are folded into the seed by the caller
            if txn.transaction_date == current:
                day.transactions.append(txn)
                day.change = round_quantity(day.change + txn.signed_quantity)
                day.holding_end = round_quantity(txn.holding)
            txn_index += 1

        running = day.holding_end
        days.append(day)

    return days


def final_holding(days: list[ReplayDay], initial_holding: Decimal) -> Decimal:
    """Ending holding of the last replayed day (the seed for an empty range)."""
    if not days:
        return round_quantity(initial_holding)
    return days[-1].holding_end
