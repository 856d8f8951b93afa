"""Record normalization package."""

from expense_tracker.normalization.normalizer import (
    FIELD_SOURCES,
    MissingIdentifierError,
    coerce_amount,
    coerce_date,
    coerce_instant,
    extract_identifier,
    normalize_record,
    normalize_records,
    normalize_response,
)

__all__ = [
    "FIELD_SOURCES",
    "MissingIdentifierError",
    "coerce_amount",
    "coerce_date",
    "coerce_instant",
    "extract_identifier",
    "normalize_record",
    "normalize_records",
    "normalize_response",
]
