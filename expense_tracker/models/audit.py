"""
Audit Models for Expense Tracker

Every load and every mutation against the remote service produces an
audit event. This provides:
1. Traceability of what the client did to the remote store
2. Debugging information when the backend misbehaves
3. A record of which responses were non-authoritative

DESIGN DECISION: Audit events are emitted as structured log lines only.
The client keeps no local persistence.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loading
    EXPENSES_LOADED = "expenses_loaded"
    LOAD_FAILED = "load_failed"
    RECORDS_DROPPED = "records_dropped"

    # Mutations
    EXPENSE_CREATED = "expense_created"
    CREATE_RELOADED = "create_reloaded"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    MUTATION_FAILED = "mutation_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant client action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context
    entity_id: Optional[str] = Field(
        default=None,
        description="Expense identifier this event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Request ID of the mutation that produced this event"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expenses_loaded(count=12, dropped=0)
        event = AuditEventBuilder.expense_deleted(expense_id, correlation_id)
    """

    @staticmethod
    def expenses_loaded(count: int, dropped: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            description=f"Loaded {count} expenses",
            details={
                "count": count,
                "dropped": dropped,
            },
        )

    @staticmethod
    def load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            description="Failed to load expenses",
            error_message=error_message,
        )

    @staticmethod
    def records_dropped(dropped: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_DROPPED,
            severity=AuditSeverity.WARNING,
            description=f"Dropped {dropped} records without an identifier",
            details={
                "dropped": dropped,
            },
        )

    @staticmethod
    def expense_created(
        expense_id: str,
        title: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense created: {amount}",
            details={
                "title": title,
                "amount": amount,
            },
        )

    @staticmethod
    def create_reloaded(count: int, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CREATE_RELOADED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Create response had no identifier, reloaded all expenses",
            details={
                "count": count,
            },
        )

    @staticmethod
    def expense_updated(
        expense_id: str,
        authoritative: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Expense updated",
            details={
                "authoritative": authoritative,
            },
        )

    @staticmethod
    def expense_deleted(expense_id: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Expense deleted",
        )

    @staticmethod
    def mutation_failed(
        operation: str,
        error_message: str,
        correlation_id: UUID,
        expense_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Failed to {operation} expense",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )
