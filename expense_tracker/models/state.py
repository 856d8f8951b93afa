"""
Application State Models

DESIGN DECISION: Everything the UI needs to remember between interactions
lives in one explicit AppState object. Pure functions read it; only the
reconciliation controller writes to it.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from expense_tracker.models.expense import Expense, ExpenseId


MONTH_KEY_PATTERN = r"^\d{4}-\d{2}$"


def _this_month() -> str:
    return dt.date.today().strftime("%Y-%m")


class AppState(BaseModel):
    """
    Process-lifetime client state.

    The collection is a tuple and is only ever replaced wholesale, so a
    reader never observes a partially rebuilt collection.
    """

    expenses: tuple[Expense, ...] = Field(
        default=(),
        description="Canonical records, most recent first"
    )
    search_text: str = Field(
        default="",
        description="Free-text filter"
    )
    selected_month: Optional[str] = Field(
        default_factory=_this_month,
        pattern=MONTH_KEY_PATTERN,
        description="Selected YYYY-MM month key; None shows every month"
    )
    editing_id: Optional[ExpenseId] = Field(
        default=None,
        description="Record currently open for editing"
    )
    loading: bool = Field(
        default=False,
        description="Initial load in progress"
    )
    error: Optional[str] = Field(
        default=None,
        description="Most recent error message, cleared by any success"
    )

    def find(self, expense_id: ExpenseId) -> Optional[Expense]:
        """Get a record by identifier."""
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        return None


# =============================================================================
# MUTATION TRACKING
# =============================================================================

class MutationStatus(str, Enum):
    """Lifecycle of a single create/update/delete request."""
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    APPLIED = "applied"
    FAILED = "failed"


class MutationTicket(BaseModel):
    """
    One mutation request and where it is in its lifecycle.

    Tickets are independent: two in-flight tickets never coordinate.
    """

    request_id: UUID = Field(default_factory=uuid4)
    operation: str = Field(
        ...,
        pattern="^(create|update|delete)$"
    )
    expense_id: Optional[ExpenseId] = None
    status: MutationStatus = MutationStatus.IDLE
    started_at: Optional[dt.datetime] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == MutationStatus.APPLIED


# =============================================================================
# CHART / SUMMARY MODELS
# =============================================================================

class ChartSeries(BaseModel):
    """Label/value pairs ready for a chart; values align with labels."""

    labels: list[str] = Field(default_factory=list)
    values: list[Decimal] = Field(default_factory=list)


class SpendingSummary(BaseModel):
    """Aggregations over the visible records."""

    total: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    by_category: ChartSeries = Field(default_factory=ChartSeries)
    by_day: ChartSeries = Field(default_factory=ChartSeries)


class DashboardView(BaseModel):
    """Everything the UI renders for the current state."""

    visible: tuple[Expense, ...] = ()
    available_months: list[str] = Field(default_factory=list)
    summary: SpendingSummary = Field(default_factory=SpendingSummary)
