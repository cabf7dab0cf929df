"""
Data Models Package

This package contains all Pydantic models used in Money Keeper.
All data flowing through the system must conform to these schemas.
"""

from src.models.ledger import (
    WEEKDAY_NAMES,
    WEEKEND_DAYS,
    Account,
    AppState,
    AutomationRule,
    Frequency,
    ThemeMode,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    generate_id,
    weekday_number,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "WEEKDAY_NAMES",
    "WEEKEND_DAYS",
    "Account",
    "AppState",
    "AutomationRule",
    "Frequency",
    "ThemeMode",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "generate_id",
    "weekday_number",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
