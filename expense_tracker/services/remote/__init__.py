"""
Remote Service Package

Provides the abstract interface to the expense store and its
implementations: the REST API client and an in-memory stand-in.
"""

from expense_tracker.services.remote.interface import (
    ExpenseServiceError,
    ExpenseServiceInterface,
    NotFoundError,
    ServiceConnectionError,
    ServiceResponseError,
    classify_response,
)
from expense_tracker.services.remote.http_client import HttpExpenseService
from expense_tracker.services.remote.memory import InMemoryExpenseService

__all__ = [
    # Interface
    "ExpenseServiceInterface",
    "classify_response",
    # Exceptions
    "ExpenseServiceError",
    "NotFoundError",
    "ServiceConnectionError",
    "ServiceResponseError",
    # Implementations
    "HttpExpenseService",
    "InMemoryExpenseService",
]
