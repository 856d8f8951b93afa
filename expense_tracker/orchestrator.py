"""
Reconciliation Controller for Expense Tracker

This module ties the remote service to the local state and defines the
flows for:
1. Load (list → normalize → sort → replace)
2. Create (submit → merge echoed entity, or reload when only acknowledged)
3. Update (submit → merge echoed entity, or synthesize from the submission)
4. Delete (submit → remove by identifier)

DESIGN DECISION: The controller is the ONLY code that writes to AppState's
collection. Everything it writes is already normalized and sorted, and the
collection is always replaced with a single assignment.

Concurrent mutations are not coordinated. Each one only touches its own
identifier, and state is only written after the awaited remote call
returns, so interleaved requests cannot corrupt each other.
"""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.config import get_settings
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseId,
    ExpensePayload,
    FullRecord,
)
from expense_tracker.models.state import (
    MONTH_KEY_PATTERN,
    AppState,
    DashboardView,
    MutationStatus,
    MutationTicket,
)
from expense_tracker.normalization import normalize_records, normalize_response
from expense_tracker.queries import build_dashboard, sort_by_recency
from expense_tracker.services.remote import (
    ExpenseServiceError,
    ExpenseServiceInterface,
    HttpExpenseService,
    InMemoryExpenseService,
)


LOAD_ERROR_MESSAGE = "Failed to load expenses. Please check if the backend is running."
CREATE_ERROR_MESSAGE = "Failed to add expense. Please try again."
DELETE_ERROR_MESSAGE = "Failed to delete expense. Please try again."
UPDATE_ERROR_PREFIX = "Failed to update expense"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unique_by_id(expenses: Iterable[Expense]) -> list[Expense]:
    """Keep the first record seen for each identifier."""
    seen = set()
    unique = []
    for expense in expenses:
        if expense.id in seen:
            continue
        seen.add(expense.id)
        unique.append(expense)
    return unique


class ReconciliationController:
    """
    Owns the application state and keeps it in step with the remote store.

    Every mutation returns a MutationTicket that went
    idle → in_flight → applied | failed.

    GUARANTEES:
    - A failed mutation leaves the collection exactly as it was
    - Any success clears the previously surfaced error
    - The collection is in descending timestamp order after every change
    - No two records share an identifier
    """

    def __init__(
        self,
        service: ExpenseServiceInterface,
        state: Optional[AppState] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._service = service
        self.state = state or AppState()
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock or _utcnow
        self._in_flight: dict[UUID, MutationTicket] = {}

    @property
    def in_flight(self) -> list[MutationTicket]:
        """Mutations that have been sent and not answered yet."""
        return list(self._in_flight.values())

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _replace_all(self, raws: list[Any]) -> int:
        """Normalize a full listing and swap it in. Returns records kept."""
        expenses = _unique_by_id(normalize_records(raws, now=self._clock()))
        self.state.expenses = sort_by_recency(expenses)

        self._audit_logger.log_expenses_loaded(
            count=len(expenses),
            dropped=len(raws) - len(expenses),
        )
        return len(expenses)

    async def load(self) -> bool:
        """
        Load the whole collection from the remote service.

        On failure the collection is cleared and the load error is shown.

        Returns:
            True if the collection was loaded
        """
        self.state.loading = True
        try:
            raws = await self._service.list_expenses()
        except ExpenseServiceError as e:
            self.state.expenses = ()
            self.state.error = LOAD_ERROR_MESSAGE
            self._audit_logger.log_load_failed(error_message=str(e))
            return False
        finally:
            self.state.loading = False

        self._replace_all(raws)
        self.state.error = None
        return True

    # -------------------------------------------------------------------------
    # Mutation bookkeeping
    # -------------------------------------------------------------------------

    def _begin(self, operation: str, expense_id: Optional[ExpenseId] = None) -> MutationTicket:
        ticket = MutationTicket(operation=operation, expense_id=expense_id)
        ticket.status = MutationStatus.IN_FLIGHT
        ticket.started_at = self._clock()
        self._in_flight[ticket.request_id] = ticket
        return ticket

    def _applied(self, ticket: MutationTicket) -> MutationTicket:
        self._in_flight.pop(ticket.request_id, None)
        ticket.status = MutationStatus.APPLIED
        self.state.error = None
        return ticket

    def _failed(
        self,
        ticket: MutationTicket,
        message: str,
        error: ExpenseServiceError,
    ) -> MutationTicket:
        self._in_flight.pop(ticket.request_id, None)
        ticket.status = MutationStatus.FAILED
        ticket.error_message = message
        self.state.error = message

        self._audit_logger.log_mutation_failed(
            operation=ticket.operation,
            error_message=str(error),
            correlation_id=ticket.request_id,
            expense_id=str(ticket.expense_id) if ticket.expense_id is not None else None,
        )
        return ticket

    @staticmethod
    def _submitted(draft: ExpenseDraft) -> dict[str, Any]:
        """Draft fields under canonical names, used to fill response gaps."""
        return {
            "title": draft.title,
            "category": draft.category,
            "amount": draft.amount,
            "date": draft.date,
            "note": draft.note,
        }

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create(self, draft: ExpenseDraft) -> MutationTicket:
        """
        Create an expense.

        If the service echoes the entity it is merged in at the front;
        a bare acknowledgement triggers a full reload instead, since only
        the service knows the new identifier.
        """
        ticket = self._begin("create")
        payload = ExpensePayload.from_draft(draft)

        try:
            result = await self._service.create_expense(payload)

            if isinstance(result, FullRecord):
                expense = normalize_response(
                    result.record,
                    self._submitted(draft),
                    now=self._clock(),
                )
                others = tuple(e for e in self.state.expenses if e.id != expense.id)
                self.state.expenses = sort_by_recency((expense,) + others)

                ticket.expense_id = expense.id
                self._audit_logger.log_expense_created(
                    expense_id=str(expense.id),
                    title=expense.title,
                    amount=str(expense.amount),
                    correlation_id=ticket.request_id,
                )
            else:
                raws = await self._service.list_expenses()
                count = self._replace_all(raws)
                self._audit_logger.log_create_reloaded(
                    count=count,
                    correlation_id=ticket.request_id,
                )
        except ExpenseServiceError as e:
            return self._failed(ticket, CREATE_ERROR_MESSAGE, e)

        return self._applied(ticket)

    async def update(self, expense_id: ExpenseId, draft: ExpenseDraft) -> MutationTicket:
        """
        Replace every field of an expense.

        The updated record keeps `expense_id` whatever the response says.
        Without a backend instant it is stamped with the current time and
        moves to the top of the list.
        """
        ticket = self._begin("update", expense_id)
        payload = ExpensePayload.from_draft(draft, expense_id=expense_id)

        try:
            result = await self._service.update_expense(expense_id, payload)
        except ExpenseServiceError as e:
            message = f"{UPDATE_ERROR_PREFIX}: {e.detail or e}"
            return self._failed(ticket, message, e)

        authoritative = isinstance(result, FullRecord)
        response = dict(result.record) if authoritative else {}
        response["id"] = expense_id

        updated = normalize_response(response, self._submitted(draft), now=self._clock())
        self.state.expenses = sort_by_recency(
            updated if e.id == expense_id else e
            for e in self.state.expenses
        )

        if self.state.editing_id == expense_id:
            self.state.editing_id = None

        self._audit_logger.log_expense_updated(
            expense_id=str(expense_id),
            authoritative=authoritative,
            correlation_id=ticket.request_id,
        )
        return self._applied(ticket)

    async def delete(self, expense_id: ExpenseId) -> MutationTicket:
        """Delete an expense; the remaining order is untouched."""
        ticket = self._begin("delete", expense_id)

        try:
            await self._service.delete_expense(expense_id)
        except ExpenseServiceError as e:
            return self._failed(ticket, DELETE_ERROR_MESSAGE, e)

        self.state.expenses = tuple(e for e in self.state.expenses if e.id != expense_id)

        self._audit_logger.log_expense_deleted(
            expense_id=str(expense_id),
            correlation_id=ticket.request_id,
        )
        return self._applied(ticket)

    # -------------------------------------------------------------------------
    # UI state
    # -------------------------------------------------------------------------

    def begin_edit(self, expense_id: ExpenseId) -> None:
        self.state.editing_id = expense_id

    def cancel_edit(self) -> None:
        self.state.editing_id = None

    def set_search(self, text: str) -> None:
        self.state.search_text = text or ""

    def select_month(self, month: Optional[str]) -> None:
        """Select a `YYYY-MM` month; None or "" shows every month."""
        if month and not re.match(MONTH_KEY_PATTERN, month):
            raise ValueError(f"Invalid month key: {month!r}")
        self.state.selected_month = month or None

    def dashboard(self) -> DashboardView:
        return build_dashboard(self.state, today=self._clock().astimezone().date())


def create_app_components(
    use_remote: Optional[bool] = None,
) -> ReconciliationController:
    """
    Factory function to create the controller with its collaborators.

    Args:
        use_remote: Talk to the REST API. Defaults to the `use_remote`
                    setting; False uses the in-memory service.

    Returns:
        A controller with an empty state (call load() next)
    """
    app_settings = get_settings().app
    configure_logging(
        level=app_settings.log_level,
        json_output=not app_settings.debug_mode,
    )
    logger = structlog.get_logger(__name__)

    if use_remote is None:
        use_remote = app_settings.use_remote

    service: ExpenseServiceInterface
    if use_remote:
        try:
            service = HttpExpenseService()
        except ValidationError as e:
            # Remote not configured - continue without it
            logger.warning("remote_service_not_configured", error=str(e))
            service = InMemoryExpenseService()
    else:
        service = InMemoryExpenseService()

    return ReconciliationController(service=service, audit_logger=AuditLogger())
