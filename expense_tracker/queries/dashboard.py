"""
Dashboard View

Pure projection of AppState into what the UI renders.
"""

from datetime import date
from typing import Optional

from expense_tracker.models.state import AppState, DashboardView
from expense_tracker.queries.aggregation import summarize
from expense_tracker.queries.filters import available_months, filter_expenses


def build_dashboard(state: AppState, today: Optional[date] = None) -> DashboardView:
    visible = filter_expenses(
        state.expenses,
        month=state.selected_month,
        query=state.search_text,
    )
    return DashboardView(
        visible=visible,
        available_months=available_months(state.expenses),
        summary=summarize(visible, today=today),
    )
