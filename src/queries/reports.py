"""
Ledger Queries

Read-only views over an AppState snapshot: account histories, recent
activity, totals. Used by the UI and to build the AI analysis prompt.

derived_balance() recomputes an account balance from its history. The
stored balance is never replaced by it; it exists to check that the
running total and the history agree.
"""

from typing import Optional

from src.models.ledger import Account, AppState, AutomationRule, Transaction


class LedgerQueries:
    """Query helpers bound to one state snapshot."""

    def __init__(self, state: AppState):
        self._state = state

    def get_account(self, account_id: str) -> Optional[Account]:
        return self._state.find_account(account_id)

    def account_history(self, account_id: str) -> list[Transaction]:
        """All transactions of an account, newest first."""
        return sorted(
            (t for t in self._state.transactions if t.account_id == account_id),
            key=lambda t: t.occurred_at,
            reverse=True,
        )

    def recent_transactions(self, limit: int = 20) -> list[Transaction]:
        """The most recent transactions across all accounts, newest first."""
        if limit <= 0:
            return []
        ordered = sorted(self._state.transactions, key=lambda t: t.occurred_at, reverse=True)
        return ordered[:limit]

    def total_balance(self) -> float:
        return sum(a.balance for a in self._state.accounts)

    def derived_balance(self, account_id: str) -> float:
        """Sum of deposits minus withdrawals in the account's history."""
        return sum(
            t.signed_amount for t in self._state.transactions if t.account_id == account_id
        )

    def active_rules(self) -> list[AutomationRule]:
        return [r for r in self._state.automation_rules if r.active]

    def rules_for_account(self, account_id: str) -> list[AutomationRule]:
        return [r for r in self._state.automation_rules if r.account_id == account_id]
