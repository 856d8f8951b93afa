"""
Audit Logger

DESIGN DECISION: Every load and mutation is logged as a structured event.
This provides:
1. Traceability of what the client asked the remote service to do
2. Debugging capability when responses are ambiguous
3. Correlation of all events belonging to one mutation request
"""

import logging
import sys
from typing import Any, Callable, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    JSON lines in production; human-readable console output when
    json_output is False (debug mode).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes each AuditEvent as one structured log line at a level
    matching its severity. The `log_*` helpers never raise: an event that
    cannot be built is reported and dropped, so auditing cannot undo a
    change that was already applied.
    """

    def __init__(self, logger_name: str = "expense_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def _emit(self, build: Callable[..., AuditEvent], **fields: Any) -> None:
        try:
            event = build(**fields)
        except ValidationError as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_event_invalid",
                builder=build.__name__,
                error=str(e),
            )
            return
        self.log(event)

    def log_expenses_loaded(self, count: int, dropped: int) -> None:
        self._emit(AuditEventBuilder.expenses_loaded, count=count, dropped=dropped)
        if dropped:
            self._emit(AuditEventBuilder.records_dropped, dropped=dropped)

    def log_load_failed(self, error_message: str) -> None:
        self._emit(AuditEventBuilder.load_failed, error_message=error_message)

    def log_expense_created(
        self,
        expense_id: str,
        title: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        self._emit(
            AuditEventBuilder.expense_created,
            expense_id=expense_id,
            title=title,
            amount=amount,
            correlation_id=correlation_id,
        )

    def log_create_reloaded(self, count: int, correlation_id: UUID) -> None:
        self._emit(
            AuditEventBuilder.create_reloaded,
            count=count,
            correlation_id=correlation_id,
        )

    def log_expense_updated(
        self,
        expense_id: str,
        authoritative: bool,
        correlation_id: UUID,
    ) -> None:
        self._emit(
            AuditEventBuilder.expense_updated,
            expense_id=expense_id,
            authoritative=authoritative,
            correlation_id=correlation_id,
        )

    def log_expense_deleted(self, expense_id: str, correlation_id: UUID) -> None:
        self._emit(
            AuditEventBuilder.expense_deleted,
            expense_id=expense_id,
            correlation_id=correlation_id,
        )

    def log_mutation_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: UUID,
        expense_id: Optional[str] = None,
    ) -> None:
        self._emit(
            AuditEventBuilder.mutation_failed,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
            expense_id=expense_id,
        )
