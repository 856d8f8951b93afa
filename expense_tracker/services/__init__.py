"""Services package."""

from expense_tracker.services.remote import (
    ExpenseServiceError,
    ExpenseServiceInterface,
    HttpExpenseService,
    InMemoryExpenseService,
    NotFoundError,
    ServiceConnectionError,
    ServiceResponseError,
    classify_response,
)

__all__ = [
    "ExpenseServiceError",
    "ExpenseServiceInterface",
    "HttpExpenseService",
    "InMemoryExpenseService",
    "NotFoundError",
    "ServiceConnectionError",
    "ServiceResponseError",
    "classify_response",
]
