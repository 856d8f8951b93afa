"""
Draft Validation

Checks what the user typed into the add/edit form before anything is sent
to the remote service.

IMPORTANT: Validation NEVER silently fixes issues (apart from a blank
category becoming General). A missing title or a non-positive amount is
reported back so the form can show it.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from pydantic import ValidationError

from expense_tracker.models.expense import ExpenseDraft, ValidationIssue


class DraftValidationError(ValueError):
    """A submission did not pass validation."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))


class DraftValidator:
    """
    Validates add/edit form submissions.

    Produces ExpenseDraft objects, or raises DraftValidationError
    listing every problem found.
    """

    def _check_fields(self, form: Mapping[str, Any]) -> list[ValidationIssue]:
        issues = []

        title = form.get("title")
        if title is None or not str(title).strip():
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Please enter a title",
            ))

        amount = form.get("amount")
        try:
            value = Decimal(str(amount).strip()) if amount is not None else None
        except InvalidOperation:
            value = None

        if value is None or not value.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount must be a number",
            ))
        elif value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than zero",
            ))

        return issues

    def validate(self, form: Mapping[str, Any]) -> ExpenseDraft:
        """
        Validate a submission.

        Args:
            form: Raw form values (title, category, amount, date, note)

        Returns:
            The validated draft

        Raises:
            DraftValidationError: If any field is invalid
        """
        issues = self._check_fields(form)
        if issues:
            raise DraftValidationError(issues)

        try:
            return ExpenseDraft(**{k: v for k, v in form.items() if v is not None})
        except ValidationError as e:
            raise DraftValidationError([
                ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "form",
                    issue_type=error["type"],
                    message=error["msg"],
                )
                for error in e.errors()
            ])

    def get_user_friendly_summary(self, error: DraftValidationError) -> str:
        """Short message for the form."""
        if len(error.issues) == 1:
            return error.issues[0].message
        return "Please fix the following: " + ", ".join(
            issue.message.lower() for issue in error.issues
        )
