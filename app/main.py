"""
Streamlit Frontend for Expense Tracker

Track, filter, and edit your spending.

DESIGN PRINCIPLES:
1. One page: month selector, search, add form, list, two charts
2. Every change goes through the reconciliation controller
3. Errors are shown in a banner and never stop the page
4. Charts always reflect exactly the records in the list

The controller lives in st.session_state so each browser session keeps
its own in-memory collection across Streamlit reruns.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

import plotly.graph_objects as go
import streamlit as st

from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.models.expense import Expense
from expense_tracker.models.state import ChartSeries
from expense_tracker.orchestrator import ReconciliationController, create_app_components
from expense_tracker.validation import DraftValidationError, DraftValidator


CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "INR": "₹"}
PIE_COLORS = ['#0ea5e9', '#22c55e', '#f97316', '#a78bfa', '#ef4444', '#14b8a6', '#f59e0b']


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💵",
    layout="wide",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def format_currency(value: Decimal) -> str:
    currency = get_settings().app.currency
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{value:,.2f}"


def format_date(day: date) -> str:
    return day.strftime("%b %d, %Y").replace(" 0", " ")


def format_month(key: str) -> str:
    year, month = key.split("-")
    return date(int(year), int(month), 1).strftime("%B %Y")


def get_controller() -> ReconciliationController:
    """Get or create this session's controller, loading on first use."""
    if "controller" not in st.session_state:
        controller = create_app_components()
        with st.spinner("Loading expenses..."):
            run_async(controller.load())
        st.session_state.controller = controller
    return st.session_state.controller


def main():
    """Main application entry point."""
    controller = get_controller()

    if controller.state.error:
        st.error(controller.state.error)

    st.title("💵 Expense Tracker")
    st.caption("Track, filter, and edit your spending")

    render_sidebar(controller)
    render_filters(controller)
    view = controller.dashboard()

    col_form, col_list = st.columns([1, 2])
    with col_form:
        render_add_form(controller)
    with col_list:
        st.metric("Total", format_currency(view.summary.total))
        render_expense_list(controller, view.visible)

    st.markdown("---")
    col_pie, col_bar = st.columns(2)
    with col_pie:
        st.subheader("By category")
        render_category_chart(view.summary.by_category)
    with col_bar:
        st.subheader("Spending over time")
        render_daily_chart(view.summary.by_day)


def render_sidebar(controller: ReconciliationController):
    """Connection status and a manual reload."""
    with st.sidebar:
        st.markdown("### Connection Status")

        status = validate_all_settings()
        sections = [
            ("Expense API", "expense_api"),
            ("Application", "app"),
        ]
        for name, key in sections:
            if status.get(key, False):
                st.success(f"✅ {name} - Configured")
            else:
                error = status.get(f"{key}_error", "Not configured")
                st.error(f"❌ {name} - {error}")

        if st.button("🔄 Reload expenses"):
            with st.spinner("Loading expenses..."):
                run_async(controller.load())
            st.rerun()

        st.markdown("---")
        st.markdown(
            "To point the app at another backend, create a `.env` file. "
            "See `.env.example` for the available variables."
        )


def render_filters(controller: ReconciliationController):
    """Month selector and search box."""
    state = controller.state
    months = controller.dashboard().available_months
    if state.selected_month and state.selected_month not in months:
        months = [state.selected_month] + months

    col_search, col_month = st.columns([2, 1])
    with col_search:
        search = st.text_input(
            "Search",
            value=state.search_text,
            placeholder="Search title, category or note",
        )
        controller.set_search(search)
    with col_month:
        if months:
            month = st.selectbox(
                "Filter by month",
                options=months,
                index=months.index(state.selected_month) if state.selected_month in months else 0,
                format_func=format_month,
            )
            controller.select_month(month)


def _expense_form_fields(prefix: str, initial: Optional[Expense] = None) -> dict:
    """Shared inputs for the add and edit forms."""
    categories = [""] + get_settings().app.categories_list
    current = initial.category if initial else ""
    if current not in categories:
        categories.append(current)

    return {
        "title": st.text_input(
            "Title",
            value=initial.title if initial else "",
            placeholder="e.g., Groceries",
            key=f"{prefix}_title",
        ),
        "category": st.selectbox(
            "Category",
            options=categories,
            index=categories.index(current),
            format_func=lambda c: c or "Select category",
            key=f"{prefix}_category",
        ),
        "amount": st.number_input(
            "Amount",
            value=float(initial.amount) if initial else 0.0,
            min_value=0.0,
            step=0.01,
            format="%.2f",
            key=f"{prefix}_amount",
        ),
        "date": st.date_input(
            "Date",
            value=initial.date if initial else date.today(),
            key=f"{prefix}_date",
        ),
        "note": st.text_input(
            "Note",
            value=initial.note if initial else "",
            placeholder="Optional",
            key=f"{prefix}_note",
        ),
    }


def render_add_form(controller: ReconciliationController):
    """The add-expense form."""
    st.subheader("Add expense")
    validator = DraftValidator()

    with st.form("add_expense", clear_on_submit=True):
        fields = _expense_form_fields("add")
        submitted = st.form_submit_button("Add Expense", type="primary")

    if submitted:
        try:
            draft = validator.validate(fields)
        except DraftValidationError as e:
            st.warning(validator.get_user_friendly_summary(e))
            return
        run_async(controller.create(draft))
        st.rerun()


def render_expense_list(controller: ReconciliationController, expenses: tuple):
    """One card per visible expense, with edit and delete actions."""
    if not expenses:
        st.info("No expenses for this month yet.")
        return

    validator = DraftValidator()

    for expense in expenses:
        with st.container(border=True):
            if controller.state.editing_id == expense.id:
                fields = _expense_form_fields(f"edit_{expense.id}", initial=expense)
                col_save, col_cancel = st.columns(2)
                if col_save.button("Save", key=f"save_{expense.id}", type="primary"):
                    try:
                        draft = validator.validate(fields)
                    except DraftValidationError as e:
                        st.warning(validator.get_user_friendly_summary(e))
                    else:
                        run_async(controller.update(expense.id, draft))
                        st.rerun()
                if col_cancel.button("Cancel", key=f"cancel_{expense.id}"):
                    controller.cancel_edit()
                    st.rerun()
                continue

            col_info, col_amount, col_actions = st.columns([3, 1, 1])
            with col_info:
                st.markdown(f"**{expense.title}**")
                st.caption(f"{expense.category} · {format_date(expense.date)}")
                if expense.note:
                    with st.expander("Notes"):
                        st.write(expense.note)
            col_amount.markdown(f"**{format_currency(expense.amount)}**")
            with col_actions:
                if st.button("Edit", key=f"edit_btn_{expense.id}"):
                    controller.begin_edit(expense.id)
                    st.rerun()
                if st.button("Delete", key=f"delete_{expense.id}"):
                    run_async(controller.delete(expense.id))
                    st.rerun()


def render_category_chart(series: ChartSeries):
    if not series.labels:
        st.caption("Nothing to chart.")
        return
    figure = go.Figure(go.Pie(
        labels=series.labels,
        values=[float(v) for v in series.values],
        marker=dict(colors=PIE_COLORS, line=dict(color="#ffffff", width=2)),
    ))
    figure.update_layout(legend=dict(orientation="h"), margin=dict(t=10, b=10))
    st.plotly_chart(figure, use_container_width=True)


def render_daily_chart(series: ChartSeries):
    if not series.labels:
        st.caption("Nothing to chart.")
        return
    figure = go.Figure(go.Bar(
        x=series.labels,
        y=[float(v) for v in series.values],
        name="Amount",
        marker_color="rgba(15, 23, 42, 0.7)",
    ))
    figure.update_layout(showlegend=False, margin=dict(t=10, b=10))
    figure.update_xaxes(type="category", tickangle=-45)
    st.plotly_chart(figure, use_container_width=True)


if __name__ == "__main__":
    main()
