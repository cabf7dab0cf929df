"""Pure ledger state transitions."""

from src.ledger.operations import (
    add_rule,
    create_account,
    delete_account,
    delete_rule,
    deposit,
    manual_note,
    record_transaction,
    toggle_rule,
    toggle_theme,
    withdraw,
)

__all__ = [
    "add_rule",
    "create_account",
    "delete_account",
    "delete_rule",
    "deposit",
    "manual_note",
    "record_transaction",
    "toggle_rule",
    "toggle_theme",
    "withdraw",
]
