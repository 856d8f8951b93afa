"""Shared fixtures: a fixed ingest moment, raw backend records, and a
controller wired to the in-memory service."""

import datetime as dt
from decimal import Decimal
from typing import Optional

import pytest

from expense_tracker.models.expense import Expense
from expense_tracker.models.state import AppState
from expense_tracker.orchestrator import ReconciliationController
from expense_tracker.services.remote import InMemoryExpenseService


NOW = dt.datetime(2024, 3, 15, 12, 0, tzinfo=dt.timezone.utc)


def make_expense(
    expense_id,
    day: dt.date,
    amount="10",
    title: str = "Expense",
    category: str = "Food",
    note: str = "",
    timestamp: Optional[dt.datetime] = None,
) -> Expense:
    """Build a canonical record directly, bypassing the normalizer."""
    return Expense(
        id=expense_id,
        title=title,
        category=category,
        amount=Decimal(str(amount)),
        date=day,
        timestamp=timestamp or dt.datetime(day.year, day.month, day.day, 12, tzinfo=dt.timezone.utc),
        note=note,
    )


@pytest.fixture
def now() -> dt.datetime:
    return NOW


@pytest.fixture
def raw_records() -> list:
    return [
        {
            "id": 2,
            "title": "Bus pass",
            "category": "Transport",
            "amount": "30",
            "expenseDate": "2024-03-01T00:00:00",
            "timeStamp": "2024-03-01T08:00:00Z",
        },
        {
            "id": 1,
            "title": "Groceries",
            "category": "Food",
            "amount": 42.5,
            "expenseDate": "2024-03-02",
            "timestamp": "2024-03-02T09:00:00Z",
            "note": "weekly shop",
        },
        {
            "id": 3,
            "title": "Cinema",
            "category": "Entertainment",
            "amount": 12,
            "expenseDate": "2024-02-20",
            "timestamp": "2024-02-20T20:00:00Z",
            "note": None,
        },
        {"title": "No identifier", "amount": 5},
    ]


@pytest.fixture
def service(raw_records) -> InMemoryExpenseService:
    return InMemoryExpenseService(records=raw_records)


@pytest.fixture
def controller(service, now) -> ReconciliationController:
    return ReconciliationController(
        service=service,
        state=AppState(selected_month="2024-03"),
        clock=lambda: now,
    )


@pytest.fixture
def expense_factory():
    return make_expense
