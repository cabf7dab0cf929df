"""
User Input Validation

DESIGN DECISION: Every user operation is validated BEFORE the state is
touched. An operation either passes and is applied in full, or it is
rejected with the list of issues and nothing changes.

Checks:
- Amounts: present, numeric, finite, greater than zero
- Account names: not blank
- Transactions: the target account exists
- Automation rules: account exists, description present, weekly rules
  have at least one weekday in range 0-6

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the UI can show them to the user.
"""

import math
from typing import Any, Iterable, Optional

from src.models.ledger import (
    AppState,
    Frequency,
    ValidationIssue,
    ValidationResult,
)


class InvalidInputError(ValueError):
    """Raised when an operation is rejected by validation."""

    def __init__(self, operation: str, result: ValidationResult):
        self.operation = operation
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"{operation} rejected: {messages}")


def coerce_amount(raw: Any) -> Optional[float]:
    """
    Parse a user-supplied amount.

    Returns None when the value is missing, not numeric, or not finite.
    Booleans are not amounts.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip().replace(",", "")
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


class InputValidator:
    """Validates user input for ledger and automation operations."""

    def _validate_amount(self, raw: Any) -> list[ValidationIssue]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter an amount",
                severity="error",
            )]

        value = coerce_amount(raw)
        if value is None:
            return [ValidationIssue(
                field="amount",
                issue_type="not_numeric",
                message=f"Amount must be a number, got {raw!r}",
                severity="error",
            )]
        if value <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than zero",
                severity="error",
            )]
        return []

    def _validate_account_exists(self, state: AppState, account_id: Optional[str]) -> list[ValidationIssue]:
        if not account_id:
            return [ValidationIssue(
                field="account_id",
                issue_type="missing",
                message="Please choose an account",
                severity="error",
            )]
        if state.find_account(account_id) is None:
            return [ValidationIssue(
                field="account_id",
                issue_type="unknown_account",
                message=f"Account {account_id} does not exist",
                severity="error",
            )]
        return []

    def validate_account_name(self, name: Optional[str]) -> ValidationResult:
        issues = []
        if not name or not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Account name cannot be empty",
                severity="error",
            ))
        elif len(name.strip()) > 100:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message="Account name must be at most 100 characters",
                severity="error",
            ))
        return ValidationResult(issues=issues)

    def validate_transaction(
        self,
        state: AppState,
        account_id: Optional[str],
        amount: Any,
    ) -> ValidationResult:
        issues = self._validate_account_exists(state, account_id)
        issues.extend(self._validate_amount(amount))
        return ValidationResult(issues=issues)

    def validate_rule(
        self,
        state: AppState,
        account_id: Optional[str],
        amount: Any,
        description: Optional[str],
        frequency: Frequency,
        exclude_weekends: bool = True,
        weekdays: Iterable[int] = (),
    ) -> ValidationResult:
        """
        Validate the fields of a new automation rule.

        Weekly rules need at least one weekday; exclude_weekends only
        applies to daily rules and is ignored (with a warning) on weekly ones.
        """
        issues = self._validate_account_exists(state, account_id)
        issues.extend(self._validate_amount(amount))

        if not description or not description.strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Please describe the rule",
                severity="error",
            ))
        elif len(description.strip()) > 200:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message="Description must be at most 200 characters",
                severity="error",
            ))

        days = list(weekdays or ())
        out_of_range = [d for d in days if not isinstance(d, int) or not 0 <= d <= 6]
        if out_of_range:
            issues.append(ValidationIssue(
                field="weekdays",
                issue_type="out_of_range",
                message=f"Weekdays must be numbers 0 (Sunday) to 6 (Saturday), got {out_of_range}",
                severity="error",
            ))

        if frequency is Frequency.WEEKLY:
            if not days:
                issues.append(ValidationIssue(
                    field="weekdays",
                    issue_type="missing",
                    message="Weekly rules need at least one weekday",
                    severity="error",
                ))
            if exclude_weekends:
                issues.append(ValidationIssue(
                    field="exclude_weekends",
                    issue_type="ignored",
                    message="Excluding weekends has no effect on weekly rules",
                    severity="warning",
                ))

        return ValidationResult(issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Note:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
