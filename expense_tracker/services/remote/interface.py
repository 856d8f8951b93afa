"""
Abstract Remote Service Interface

DESIGN DECISION: The client talks to the record-keeping service through an
abstract interface. This allows us to:
1. Swap the REST backend without touching reconciliation logic
2. Use an in-memory service for tests and offline demos
3. Keep response-shape sniffing in ONE place (the boundary)

Create and update return a tagged MutationResult (FullRecord | Ack) so the
controller never has to guess whether a response is an entity.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from expense_tracker.models.expense import (
    Ack,
    ExpenseId,
    ExpensePayload,
    FullRecord,
    MutationResult,
)
from expense_tracker.normalization import extract_identifier


class ExpenseServiceInterface(ABC):
    """
    Abstract interface for the remote expense store.

    Any implementation (REST API, in-memory, ...) must implement these
    four operations.
    """

    @abstractmethod
    async def list_expenses(self) -> list[Any]:
        """
        Get every stored record.

        Returns:
            Raw records as returned by the backend (not normalized)

        Raises:
            ExpenseServiceError: If the listing fails
        """
        pass

    @abstractmethod
    async def create_expense(self, payload: ExpensePayload) -> MutationResult:
        """
        Create a record.

        Returns:
            FullRecord if the service echoed the entity, Ack otherwise

        Raises:
            ExpenseServiceError: If the create fails
        """
        pass

    @abstractmethod
    async def update_expense(
        self,
        expense_id: ExpenseId,
        payload: ExpensePayload,
    ) -> MutationResult:
        """
        Replace every field of an existing record.

        Returns:
            FullRecord if the service echoed the entity, Ack otherwise

        Raises:
            ExpenseServiceError: If the update fails
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: ExpenseId) -> None:
        """
        Delete a record.

        Raises:
            ExpenseServiceError: If the delete fails
        """
        pass


def classify_response(body: Any) -> MutationResult:
    """
    Decide whether a create/update response is an entity or an ack.

    Only a JSON object carrying a recognizable identifier is an entity.
    """
    if isinstance(body, dict) and extract_identifier(body) is not None:
        return FullRecord(record=body)
    if body is None or body == "":
        return Ack()
    return Ack(detail=body if isinstance(body, str) else str(body))


class ExpenseServiceError(Exception):
    """Base exception for remote service operations."""

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


class ServiceConnectionError(ExpenseServiceError):
    """Could not reach the remote service."""
    pass


class ServiceResponseError(ExpenseServiceError):
    """The service answered with an error status or an unusable body."""
    pass


class NotFoundError(ServiceResponseError):
    """Record not found in the remote store."""
    pass
