"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the client must conform to these schemas.
"""

from expense_tracker.models.expense import (
    GENERAL_CATEGORY,
    UNTITLED,
    Ack,
    Expense,
    ExpenseDraft,
    ExpenseId,
    ExpensePayload,
    FullRecord,
    MutationResult,
    ValidationIssue,
)
from expense_tracker.models.state import (
    AppState,
    ChartSeries,
    DashboardView,
    MutationStatus,
    MutationTicket,
    SpendingSummary,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "GENERAL_CATEGORY",
    "UNTITLED",
    "Ack",
    "Expense",
    "ExpenseDraft",
    "ExpenseId",
    "ExpensePayload",
    "FullRecord",
    "MutationResult",
    "ValidationIssue",
    # State models
    "AppState",
    "ChartSeries",
    "DashboardView",
    "MutationStatus",
    "MutationTicket",
    "SpendingSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
