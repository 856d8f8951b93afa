"""
Aggregator

Reduces the visible records into chart-ready series and a total.

Everything is recomputed from scratch on each call; the collection is
small enough that incremental bookkeeping buys nothing.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from expense_tracker.models.expense import GENERAL_CATEGORY, Expense
from expense_tracker.models.state import ChartSeries, SpendingSummary


def category_label(expense: Expense) -> str:
    """Trimmed category; blank categories fold into General."""
    return (expense.category or "").strip() or GENERAL_CATEGORY


def aggregate_by_category(expenses: Iterable[Expense]) -> ChartSeries:
    """
    Sum amounts per category.

    Labels keep first-seen order (dicts preserve insertion order).
    """
    groups: dict[str, Decimal] = {}
    for expense in expenses:
        key = category_label(expense)
        groups[key] = groups.get(key, Decimal("0")) + expense.amount

    return ChartSeries(
        labels=list(groups.keys()),
        values=list(groups.values()),
    )


def aggregate_by_day(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> ChartSeries:
    """
    Sum amounts per calendar day, labels ascending.

    A record without a date counts towards `today`.
    """
    fallback = (today or date.today()).isoformat()

    groups: dict[str, Decimal] = {}
    for expense in expenses:
        key = expense.date.isoformat() if expense.date else fallback
        groups[key] = groups.get(key, Decimal("0")) + expense.amount

    labels = sorted(groups)
    return ChartSeries(
        labels=labels,
        values=[groups[label] for label in labels],
    )


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    """Sum of amounts, computed independently of any grouping."""
    return sum((expense.amount for expense in expenses), Decimal("0"))


def summarize(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> SpendingSummary:
    """Build every aggregation the dashboard shows."""
    records = list(expenses)
    return SpendingSummary(
        total=total_amount(records),
        count=len(records),
        by_category=aggregate_by_category(records),
        by_day=aggregate_by_day(records, today=today),
    )
