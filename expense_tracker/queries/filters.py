"""
Filter Engine

Narrows the canonical collection to what the user asked to see:
first by calendar month, then by free text.

Month keys are computed straight from the record's calendar date
(`YYYY-MM`); no timezone is involved, so a record dated the 31st never
drifts into the next month.
"""

from datetime import date
from typing import Iterable, Optional

from expense_tracker.models.expense import Expense


def month_key(day: date) -> str:
    """`YYYY-MM` key for a calendar date."""
    return f"{day.year:04d}-{day.month:02d}"


def current_month_key(today: Optional[date] = None) -> str:
    """Month key used as the default selection."""
    return month_key(today or date.today())


def matches_month(expense: Expense, month: str) -> bool:
    if expense.date is None:
        return False
    return month_key(expense.date) == month


def matches_text(expense: Expense, query: str) -> bool:
    """
    Case-insensitive substring match on title, category or note.

    `query` must already be lowercased.
    """
    return (
        query in expense.title.lower()
        or query in expense.category.lower()
        or query in expense.note.lower()
    )


def filter_expenses(
    expenses: Iterable[Expense],
    month: Optional[str] = None,
    query: str = "",
) -> tuple[Expense, ...]:
    """
    Get the visible subset of the collection.

    Args:
        expenses: The full canonical collection
        month: Selected `YYYY-MM` key; None or empty disables the month filter
        query: Free text; blank matches everything

    Returns:
        Matching records, in collection order
    """
    filtered = tuple(expenses)

    if month:
        filtered = tuple(e for e in filtered if matches_month(e, month))

    q = (query or "").strip().lower()
    if q:
        filtered = tuple(e for e in filtered if matches_text(e, q))

    return filtered


def available_months(expenses: Iterable[Expense]) -> list[str]:
    """
    Distinct month keys across the whole collection, most recent first.

    Always computed from the entire collection, never the filtered subset.
    """
    months = {month_key(e.date) for e in expenses if e.date is not None}
    return sorted(months, reverse=True)
