"""
Record Normalizer

Turns raw records from the remote service into canonical Expense objects.

DESIGN DECISION: The backend's field names are not stable (several DTO
versions are in the wild), so every field that may arrive under more than
one name is listed ONCE in FIELD_SOURCES, in priority order. Nothing else
in the client reads raw field names.

A source only counts when its value can be used: a present but garbled
value is skipped and the next source is tried.

Normalization never fails for a record that carries an identifier:
missing or malformed values fall back to defaults.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from expense_tracker.models.expense import (
    GENERAL_CATEGORY,
    UNTITLED,
    Expense,
    ExpenseId,
)


# Accepted source names per field, checked in order.
# A record without a backend instant is ordered by its date source.
FIELD_SOURCES: dict[str, tuple[str, ...]] = {
    "id": ("id", "expenseId"),
    "date": ("expenseDate", "date"),
    "timestamp": ("timestamp", "timeStamp"),
}

ZERO = Decimal("0")

RawRecord = Union[Mapping[str, Any], Expense]


class MissingIdentifierError(ValueError):
    """A raw record has no recognizable identifier."""
    pass


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _as_mapping(raw: RawRecord) -> Mapping[str, Any]:
    if isinstance(raw, Expense):
        return raw.model_dump()
    return raw


def first_usable(
    raw: Mapping[str, Any],
    field: str,
    coerce: Callable[[Any], Any],
) -> tuple[Any, Any]:
    """
    First source of a field whose value coerces.

    Returns:
        (raw value, coerced value), or (None, None) if no source is usable
    """
    for name in FIELD_SOURCES[field]:
        value = raw.get(name)
        if not _is_present(value):
            continue
        coerced = coerce(value)
        if coerced is not None:
            return value, coerced
    return None, None


def _as_identifier(value: Any) -> Optional[ExpenseId]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, (int, str)):
        return value
    return None


def extract_identifier(raw: Any) -> Optional[ExpenseId]:
    """
    Get the recognizable identifier of a raw record.

    Returns None for anything that is not a mapping, and for identifiers
    that are missing, blank or of an unusable type.
    """
    if isinstance(raw, Expense):
        return raw.id
    if not isinstance(raw, Mapping):
        return None
    return first_usable(raw, "id", _as_identifier)[1]


# =============================================================================
# FIELD COERCION
# =============================================================================

def coerce_text(value: Any, default: str) -> str:
    if not _is_present(value):
        return default
    return value if isinstance(value, str) else str(value)


def coerce_amount(value: Any) -> Decimal:
    """
    Coerce numeric-like input to a non-negative Decimal.

    Missing, non-numeric, non-finite and negative values become 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount


def coerce_date(value: Any) -> Optional[dt.date]:
    """
    Coerce to a calendar date.

    A time component is cut off, never converted: "2024-01-31T23:30:00-05:00"
    is January 31st whatever the local timezone is.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip().split("T")[0].split(" ")[0]
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            return None
    return None


def _to_utc(moment: dt.datetime) -> Optional[dt.datetime]:
    """UTC equivalent, or None when it falls outside the datetime range."""
    try:
        # Naive values are local wall-clock time.
        if moment.tzinfo is None:
            moment = moment.astimezone()
        return moment.astimezone(dt.timezone.utc)
    except (OverflowError, ValueError, OSError):
        return None


def coerce_instant(value: Any) -> Optional[dt.datetime]:
    """
    Coerce to a timezone-aware UTC instant.

    Accepts datetimes, dates (local midnight), ISO-8601 strings and epoch
    milliseconds. Values that cannot be represented in UTC give None.
    """
    if isinstance(value, dt.datetime):
        return _to_utc(value)
    if isinstance(value, dt.date):
        return _to_utc(dt.datetime(value.year, value.month, value.day))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return dt.datetime.fromtimestamp(value / 1000, tz=dt.timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _to_utc(dt.datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


# =============================================================================
# NORMALIZATION
# =============================================================================

def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _ingest_moment(now: Optional[dt.datetime]) -> dt.datetime:
    return (_to_utc(now) if now else None) or _utcnow()


def normalize_record(
    raw: RawRecord,
    now: Optional[dt.datetime] = None,
) -> Expense:
    """
    Normalize one raw record into a canonical Expense.

    Args:
        raw: Mapping from the remote service, or an Expense
        now: The ingest moment (defaults to the current instant)

    Returns:
        The canonical record

    Raises:
        MissingIdentifierError: If the record has no recognizable identifier
    """
    expense_id = extract_identifier(raw)
    if expense_id is None:
        raise MissingIdentifierError(f"Record has no identifier: {raw!r}")

    source = _as_mapping(raw)
    now = _ingest_moment(now)

    date_source, occurred_on = first_usable(source, "date", coerce_date)
    _, instant = first_usable(source, "timestamp", coerce_instant)

    # Backend instant, then the record's own date, then the ingest moment
    timestamp = (
        instant
        or (coerce_instant(date_source) if occurred_on else None)
        or (coerce_instant(occurred_on) if occurred_on else None)
        or now
    )

    return Expense(
        id=expense_id,
        title=coerce_text(source.get("title"), UNTITLED),
        category=coerce_text(source.get("category"), GENERAL_CATEGORY),
        amount=coerce_amount(source.get("amount")),
        date=occurred_on or now.astimezone().date(),
        timestamp=timestamp,
        note=coerce_text(source.get("note"), ""),
    )


def normalize_records(
    raws: Iterable[Any],
    now: Optional[dt.datetime] = None,
) -> list[Expense]:
    """
    Normalize a listing, dropping every record without an identifier.

    Input order is preserved; sorting is the caller's job.
    """
    now = now or _utcnow()
    return [
        normalize_record(raw, now=now)
        for raw in raws
        if extract_identifier(raw) is not None
    ]


def _usable_echo(key: str, value: Any) -> bool:
    """Whether an echoed value may replace the submitted one."""
    if not _is_present(value):
        return False
    if key == "amount":
        # Submissions are always positive; a zero echo carries nothing.
        return coerce_amount(value) != ZERO
    if key in FIELD_SOURCES["date"]:
        return coerce_date(value) is not None
    if key in FIELD_SOURCES["timestamp"]:
        return coerce_instant(value) is not None
    return True


def normalize_response(
    response: Mapping[str, Any],
    submitted: Mapping[str, Any],
    now: Optional[dt.datetime] = None,
) -> Expense:
    """
    Normalize a create/update response, filling gaps from the submission.

    Fields the response omits, or echoes in an unusable form, take the
    submitted value. A response without a usable backend instant is
    stamped with `now`, which makes the record the most recent one.

    Args:
        response: Entity echoed back by the remote service
        submitted: Canonical field names (title, category, amount, date, note)
                   as sent by the client
        now: Ingest moment
    """
    now = _ingest_moment(now)

    merged: dict[str, Any] = dict(submitted)
    for key, value in response.items():
        if _usable_echo(key, value):
            merged[key] = value

    if first_usable(response, "timestamp", coerce_instant)[1] is None:
        merged["timestamp"] = now

    return normalize_record(merged, now=now)
