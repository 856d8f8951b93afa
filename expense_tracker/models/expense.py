"""
Core Data Models for Expense Tracker

These models define the schemas for all data flowing through the client.
They are designed to:
1. Give every canonical record a fully-defaulted, immutable shape
2. Validate user submissions before they reach the remote service
3. Make the remote service's dual response shape explicit

DESIGN DECISION: Raw backend records are NOT validated against these models
directly. They go through the normalizer first, which applies defaults and
fallbacks; the models here describe what comes out the other side.
"""

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


UNTITLED = "Untitled"
GENERAL_CATEGORY = "General"

# Identifiers are opaque: the backend may hand out integers or strings.
ExpenseId = Union[int, str]


# =============================================================================
# CANONICAL RECORD
# =============================================================================

class Expense(BaseModel):
    """
    A canonical expense record.

    CRITICAL: Every record in the in-memory collection is one of these.
    Instances are frozen; "editing" a record means replacing it.

    `date` is when the money was spent (a calendar day, no timezone).
    `timestamp` is only used to order records by recency.
    """
    model_config = ConfigDict(frozen=True)

    id: ExpenseId = Field(
        ...,
        description="Identifier assigned by the remote service"
    )
    title: str = Field(
        default=UNTITLED,
        min_length=1,
        description="Short description of the expense"
    )
    category: str = Field(
        default=GENERAL_CATEGORY,
        description="Free-text category"
    )
    amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount spent"
    )
    date: dt.date = Field(
        ...,
        description="Calendar day the expense occurred"
    )
    timestamp: dt.datetime = Field(
        ...,
        description="Timezone-aware UTC instant used for ordering"
    )
    note: str = Field(
        default="",
        description="Optional free-text note"
    )

    @field_validator('timestamp')
    @classmethod
    def require_aware_timestamp(cls, v: dt.datetime) -> dt.datetime:
        """Ordering compares instants, so naive values are not allowed."""
        if v.tzinfo is None:
            raise ValueError("timestamp must be timezone-aware")
        return v


# =============================================================================
# USER SUBMISSIONS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    Fields a user submits when adding or editing an expense.

    Stricter than Expense: the amount must be positive and a title is
    required. A draft never carries an identifier.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Title (required)"
    )
    category: str = Field(
        default=GENERAL_CATEGORY,
        max_length=100,
        description="Category, General when left blank"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent (must be positive)"
    )
    date: dt.date = Field(
        default_factory=dt.date.today,
        description="Day the expense occurred"
    )
    note: str = Field(
        default="",
        max_length=1000,
        description="Optional note"
    )

    @field_validator('category', mode='before')
    @classmethod
    def blank_category_is_general(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return GENERAL_CATEGORY
        return v

    @field_validator('note', mode='before')
    @classmethod
    def none_note_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


# =============================================================================
# REMOTE SERVICE BOUNDARY
# =============================================================================

class ExpensePayload(BaseModel):
    """
    Body sent to the remote service on create and update.

    The occurrence date travels as `expenseDate` to match the backend DTO.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[ExpenseId] = None
    title: str
    category: str
    amount: Decimal
    note: str = ""
    occurred_on: dt.date = Field(..., serialization_alias="expenseDate")

    @field_serializer('amount')
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)

    @classmethod
    def from_draft(
        cls,
        draft: ExpenseDraft,
        expense_id: Optional[ExpenseId] = None,
    ) -> "ExpensePayload":
        return cls(
            id=expense_id,
            title=draft.title,
            category=draft.category,
            amount=draft.amount,
            note=draft.note,
            occurred_on=draft.date,
        )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready body; `id` is omitted on create."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FullRecord(BaseModel):
    """The service echoed back an entity carrying a recognizable identifier."""
    kind: Literal["full"] = "full"
    record: dict[str, Any]


class Ack(BaseModel):
    """The service only acknowledged the request (no usable entity)."""
    kind: Literal["ack"] = "ack"
    detail: Optional[str] = None


MutationResult = Annotated[
    Union[FullRecord, Ack],
    Field(discriminator="kind"),
]


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in a user submission."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
