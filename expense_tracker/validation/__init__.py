"""Submission validation package."""

from expense_tracker.validation.validator import DraftValidationError, DraftValidator

__all__ = ["DraftValidationError", "DraftValidator"]
