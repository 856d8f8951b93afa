"""Ordering, filtering and aggregation over canonical records."""

from expense_tracker.queries.aggregation import (
    aggregate_by_category,
    aggregate_by_day,
    summarize,
    total_amount,
)
from expense_tracker.queries.dashboard import build_dashboard
from expense_tracker.queries.filters import (
    available_months,
    current_month_key,
    filter_expenses,
    month_key,
)
from expense_tracker.queries.ordering import is_sorted, sort_by_recency

__all__ = [
    "aggregate_by_category",
    "aggregate_by_day",
    "available_months",
    "build_dashboard",
    "current_month_key",
    "filter_expenses",
    "is_sorted",
    "month_key",
    "sort_by_recency",
    "summarize",
    "total_amount",
]
