"""
Core Data Models for Money Keeper

These models define the strict schemas for the application state.
They are designed to:
1. Enforce type safety at runtime
2. Be immutable, so every change produces a new value
3. Round-trip through the persisted JSON snapshot unchanged

DESIGN DECISION: Field names are snake_case in Python and camelCase on the
persistence boundary (aliases). The aliases match the snapshot shape written
by earlier versions, so old data loads without a rename step.

Length and blank-text limits on user input are enforced by
src.validation, not here: the models must accept every record earlier
versions were able to store.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# Weekday numbers run 0 (Sunday) to 6 (Saturday).
WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
WEEKEND_DAYS = frozenset({0, 6})


def weekday_number(day: date) -> int:
    """Weekday of a calendar date, 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def generate_id() -> str:
    """Opaque unique identifier for accounts, transactions and rules."""
    return uuid4().hex


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money movement."""
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"

    @property
    def sign(self) -> int:
        return 1 if self is TransactionType.DEPOSIT else -1

    @property
    def label(self) -> str:
        return "deposit" if self is TransactionType.DEPOSIT else "withdraw"


class Frequency(str, Enum):
    """How often an automation rule is evaluated for firing."""
    DAILY = "daily"
    WEEKLY = "weekly"


class ThemeMode(str, Enum):
    NORMAL = "normal"
    CYBERPUNK = "cyberpunk"


_STATE_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    str_strip_whitespace=True,
)


# =============================================================================
# LEDGER MODELS
# =============================================================================

class Account(BaseModel):
    """
    A money account.

    The balance is a running total maintained only by applied
    transactions; it is never recomputed from history.
    """
    model_config = _STATE_CONFIG

    id: str = Field(default_factory=generate_id, min_length=1)
    name: str = Field(..., min_length=1)
    balance: float = 0.0
    color_tag: str = Field(default="blue", alias="color")


class Transaction(BaseModel):
    """
    A single deposit or withdrawal.

    Immutable once created. Transactions are only ever appended, or
    removed together with their account.
    """
    model_config = _STATE_CONFIG

    id: str = Field(default_factory=generate_id, min_length=1)
    account_id: str = Field(..., min_length=1, alias="accountId")
    kind: TransactionType = Field(..., alias="type")
    amount: float = Field(..., gt=0)
    occurred_at: datetime = Field(..., alias="date")
    note: str = ""
    is_automated: bool = Field(default=False, alias="isAuto")

    @field_validator("occurred_at")
    @classmethod
    def to_local_naive(cls, v: datetime) -> datetime:
        """Older snapshots stored UTC ISO strings; keep everything local and naive."""
        if v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @property
    def signed_amount(self) -> float:
        return self.kind.sign * self.amount


class AutomationRule(BaseModel):
    """
    A recurring deposit or withdrawal.

    last_run_date is the watermark: the latest calendar date through
    which the rule has been fully evaluated, whether or not it fired.
    """
    model_config = _STATE_CONFIG

    id: str = Field(default_factory=generate_id, min_length=1)
    account_id: str = Field(..., min_length=1, alias="accountId")
    kind: TransactionType = Field(..., alias="type")
    amount: float = Field(..., gt=0)
    frequency: Frequency = Frequency.DAILY
    exclude_weekends: bool = Field(default=True, alias="excludeWeekends")
    weekdays: tuple[int, ...] = ()
    last_run_date: date = Field(..., alias="lastRunDate")
    active: bool = True
    description: str = ""

    @field_validator("last_run_date", mode="before")
    @classmethod
    def strip_time_component(cls, v):
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    @field_validator("weekdays")
    @classmethod
    def normalize_weekdays(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"Weekday must be between 0 and 6, got {day}")
        return tuple(sorted(set(v)))


class AppState(BaseModel):
    """
    The full application state.

    This is the unit of persistence and the unit the automation
    engine transforms.
    """
    model_config = _STATE_CONFIG

    accounts: tuple[Account, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    automation_rules: tuple[AutomationRule, ...] = Field(
        default=(),
        alias="automationRules",
    )
    theme_mode: ThemeMode = Field(default=ThemeMode.NORMAL, alias="themeMode")

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "AppState":
        """Account and rule ids must be unique within a snapshot."""
        for label, items in (
            ("account", self.accounts),
            ("automation rule", self.automation_rules),
        ):
            ids = [item.id for item in items]
            if len(ids) != len(set(ids)):
                raise ValueError(f"Duplicate {label} id in state")
        return self

    def find_account(self, account_id: str) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_rule(self, rule_id: str) -> Optional[AutomationRule]:
        return next((r for r in self.automation_rules if r.id == rule_id), None)

    def to_snapshot(self) -> dict:
        """Serialize to the persisted (camelCase) shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_numeric', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of validating one user operation.

    Only error-level issues block the operation; warnings are shown
    but the change still goes through.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
