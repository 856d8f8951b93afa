"""
In-Memory Remote Service

Behaves like the REST backend without a network: used by the test suite
and by the UI when no backend is configured.

It can be told to answer mutations with bare acknowledgements instead of
entities, and to fail a given operation, so every branch of the
reconciliation controller can be exercised.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from expense_tracker.models.expense import (
    Ack,
    ExpenseId,
    ExpensePayload,
    FullRecord,
    MutationResult,
)
from expense_tracker.services.remote.interface import (
    ExpenseServiceError,
    ExpenseServiceInterface,
    NotFoundError,
)


class InMemoryExpenseService(ExpenseServiceInterface):
    """
    Dict-backed stand-in for the expense REST API.

    Stored records use the backend's wire field names (expenseDate,
    timestamp) so the normalizer sees the same shapes it would in
    production.
    """

    def __init__(
        self,
        records: Optional[Iterable[dict[str, Any]]] = None,
        echo_entities: bool = True,
    ):
        """
        Args:
            records: Initial raw records (copied as-is, even malformed ones)
            echo_entities: Answer create/update with the stored entity;
                           False answers with a plain acknowledgement
        """
        self._records: list[Any] = [
            dict(r) if isinstance(r, dict) else r for r in (records or [])
        ]
        self.echo_entities = echo_entities
        self.failures: dict[str, ExpenseServiceError] = {}
        self.calls: list[str] = []
        self._next_id = 1 + max(
            (
                r["id"] for r in self._records
                if isinstance(r, dict) and isinstance(r.get("id"), int)
            ),
            default=0,
        )

    def fail(self, operation: str, error: Optional[ExpenseServiceError] = None) -> None:
        """Make every later call of `operation` raise `error`."""
        self.failures[operation] = error or ExpenseServiceError(f"{operation} failed")

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def _index_of(self, expense_id: ExpenseId) -> int:
        for idx, record in enumerate(self._records):
            if isinstance(record, dict) and record.get("id") == expense_id:
                return idx
        raise NotFoundError(f"Expense not found: {expense_id}", status_code=404)

    def _respond(self, record: dict[str, Any], message: str) -> MutationResult:
        if self.echo_entities:
            return FullRecord(record=dict(record))
        return Ack(detail=message)

    async def list_expenses(self) -> list[Any]:
        self._enter("list")
        return [dict(r) if isinstance(r, dict) else r for r in self._records]

    async def create_expense(self, payload: ExpensePayload) -> MutationResult:
        self._enter("create")
        record = payload.to_wire()
        record["id"] = self._next_id
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._next_id += 1
        self._records.append(record)
        return self._respond(record, "Expense added successfully")

    async def update_expense(
        self,
        expense_id: ExpenseId,
        payload: ExpensePayload,
    ) -> MutationResult:
        self._enter("update")
        idx = self._index_of(expense_id)
        record = payload.to_wire()
        record["id"] = expense_id
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._records[idx] = record
        return self._respond(record, "Expense updated successfully")

    async def delete_expense(self, expense_id: ExpenseId) -> None:
        self._enter("delete")
        del self._records[self._index_of(expense_id)]
