"""
Audit Models for Money Keeper

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every balance change
2. Debugging information when things go wrong
3. A record of what the automation catch-up did on each start

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_DELETED = "account_deleted"

    # Transactions
    TRANSACTION_RECORDED = "transaction_recorded"
    INPUT_REJECTED = "input_rejected"

    # Automation rules
    RULE_CREATED = "rule_created"
    RULE_TOGGLED = "rule_toggled"
    RULE_DELETED = "rule_deleted"
    AUTOMATION_COMPLETED = "automation_completed"

    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_SAVED = "state_saved"
    SAVE_FAILED = "save_failed"

    # AI analysis
    SUMMARY_GENERATED = "summary_generated"
    SUMMARY_FAILED = "summary_failed"

    # Preferences
    THEME_CHANGED = "theme_changed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
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

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'rule', 'state')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one app session)"
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

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(account_id, name)
        event = AuditEventBuilder.automation_completed("2024-01-08", 3, 12)
    """

    @staticmethod
    def account_created(
        account_id: str,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def account_deleted(
        account_id: str,
        removed_transactions: int,
        removed_rules: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=(
                f"Account deleted with {removed_transactions} transactions "
                f"and {removed_rules} automation rules"
            ),
            details={
                "removed_transactions": removed_transactions,
                "removed_rules": removed_rules,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_recorded(
        transaction_id: str,
        account_id: str,
        kind: str,
        amount: float,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Manual {kind.lower()} of {amount:,.2f}",
            details={
                "account_id": account_id,
                "kind": kind,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def rule_created(
        rule_id: str,
        description: str,
        frequency: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RULE_CREATED,
            entity_type="rule",
            entity_id=rule_id,
            correlation_id=correlation_id,
            description=f"Automation rule created: {description}",
            details={"frequency": frequency},
            is_user_action=True,
        )

    @staticmethod
    def rule_toggled(
        rule_id: str,
        active: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RULE_TOGGLED,
            entity_type="rule",
            entity_id=rule_id,
            correlation_id=correlation_id,
            description=f"Automation rule {'activated' if active else 'paused'}",
            details={"active": active},
            is_user_action=True,
        )

    @staticmethod
    def rule_deleted(
        rule_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RULE_DELETED,
            entity_type="rule",
            entity_id=rule_id,
            correlation_id=correlation_id,
            description="Automation rule deleted",
            is_user_action=True,
        )

    @staticmethod
    def automation_completed(
        as_of: str,
        rules_advanced: int,
        transactions_created: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTOMATION_COMPLETED,
            entity_type="state",
            correlation_id=correlation_id,
            description=(
                f"Automation catch-up through {as_of}: {transactions_created} "
                f"transactions from {rules_advanced} rules"
            ),
            details={
                "as_of": as_of,
                "rules_advanced": rules_advanced,
                "transactions_created": transactions_created,
            },
        )

    @staticmethod
    def state_loaded(
        accounts: int,
        transactions: int,
        rules: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="state",
            correlation_id=correlation_id,
            description=f"State loaded with {accounts} accounts",
            details={
                "accounts": accounts,
                "transactions": transactions,
                "rules": rules,
            },
        )

    @staticmethod
    def state_saved(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="state",
            correlation_id=correlation_id,
            description="State snapshot persisted",
        )

    @staticmethod
    def save_failed(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            correlation_id=correlation_id,
            description="State snapshot could not be persisted; continuing in memory",
        )

    @staticmethod
    def summary_generated(
        response_chars: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_GENERATED,
            entity_type="summary",
            correlation_id=correlation_id,
            description="AI financial summary generated",
            details={"response_chars": response_chars},
            is_user_action=True,
        )

    @staticmethod
    def summary_failed(
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="summary",
            correlation_id=correlation_id,
            description="AI financial summary fell back to a fixed message",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def theme_changed(
        theme: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.THEME_CHANGED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Theme switched to {theme}",
            details={"theme": theme},
            is_user_action=True,
        )
