"""
Ordering Policy

Records are ordered by `timestamp`, most recent first.

The sort is stable: records with equal timestamps keep their existing
relative order, so a record just inserted at the front stays ahead of an
equal-timestamp peer, and sorting an already sorted collection changes
nothing.
"""

from datetime import datetime
from typing import Iterable

from expense_tracker.models.expense import Expense


def recency_key(expense: Expense) -> datetime:
    return expense.timestamp


def sort_by_recency(expenses: Iterable[Expense]) -> tuple[Expense, ...]:
    """Return the records in descending timestamp order."""
    return tuple(sorted(expenses, key=recency_key, reverse=True))


def is_sorted(expenses: Iterable[Expense]) -> bool:
    """Check that every record is at least as recent as the next one."""
    records = list(expenses)
    return all(
        earlier.timestamp >= later.timestamp
        for earlier, later in zip(records, records[1:])
    )
