"""Automation catch-up package."""

from src.automation.engine import (
    AUTOMATION_TIME,
    AutomationEngine,
    AutomationRun,
    automated_note,
    automated_transaction_id,
    iter_catch_up_days,
    process_automations,
    rule_fires_on,
)

__all__ = [
    "AUTOMATION_TIME",
    "AutomationEngine",
    "AutomationRun",
    "automated_note",
    "automated_transaction_id",
    "iter_catch_up_days",
    "process_automations",
    "rule_fires_on",
]
