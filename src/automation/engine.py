"""
Automation Catch-up Engine

Replays recurring automation rules for every calendar day missed since
each rule's watermark (last_run_date), up to and including "today".

DESIGN DECISION: The engine is a pure function of (state, as_of).
- No clock reads: the caller supplies as_of
- No persistence: the caller saves the returned state
- No random ids: synthesized transactions get ids derived from the
  rule and the day, so the same inputs always give the same output

Calendar arithmetic uses datetime.date and whole-day timedeltas.
Timestamps are never subtracted and divided, so daylight-saving
transitions cannot shift a day.

KNOWN QUIRK: an inactive rule's watermark does not move. When the rule
is reactivated, the next run replays every day since the old watermark,
including the days it was inactive.
"""

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterator, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from src.models.ledger import (
    AppState,
    AutomationRule,
    Frequency,
    Transaction,
    WEEKEND_DAYS,
    weekday_number,
)


logger = structlog.get_logger(__name__)

# Canonical local time of day stamped on synthesized transactions.
AUTOMATION_TIME = time(9, 0, 0)


def automated_transaction_id(rule: AutomationRule, day: date) -> str:
    """Deterministic id: one rule fires at most once per calendar day."""
    return f"auto-{rule.id}-{day:%Y%m%d}"


def automated_note(rule: AutomationRule) -> str:
    return f"Auto {rule.kind.label}: {rule.description}"


def iter_catch_up_days(last_run: date, as_of: date) -> Iterator[date]:
    """Every calendar day strictly after last_run, up to and including as_of."""
    for offset in range(1, (as_of - last_run).days + 1):
        yield last_run + timedelta(days=offset)


def rule_fires_on(rule: AutomationRule, day: date) -> bool:
    """
    Firing predicate for a single candidate day.

    Daily rules fire every day unless weekends are excluded and the
    day is a Saturday or Sunday. Weekly rules fire only on their
    selected weekdays.
    """
    weekday = weekday_number(day)
    if rule.frequency is Frequency.DAILY:
        return not (rule.exclude_weekends and weekday in WEEKEND_DAYS)
    if rule.frequency is Frequency.WEEKLY:
        return weekday in rule.weekdays
    return False


class AutomationRun(BaseModel):
    """Outcome of one engine pass."""

    model_config = ConfigDict(frozen=True)

    as_of: date
    state: AppState
    changed: bool
    transactions: tuple[Transaction, ...] = ()
    advanced_rule_ids: tuple[str, ...] = ()
    skipped_rule_ids: tuple[str, ...] = Field(
        default=(),
        description="Active rules not evaluated because their account is missing",
    )

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)


class AutomationEngine:
    """
    Materializes due automation occurrences into transactions.

    process() is idempotent: a second call with the same as_of finds
    every evaluated watermark already at as_of and returns its input
    unchanged (the very same object).
    """

    def __init__(
        self,
        run_time: time = AUTOMATION_TIME,
        id_factory: Callable[[AutomationRule, date], str] = automated_transaction_id,
    ):
        self._run_time = run_time
        self._id_factory = id_factory

    def process(self, state: AppState, as_of: date) -> AppState:
        """Return the caught-up state, or `state` itself if nothing was due."""
        return self.run(state, as_of).state

    def run(self, state: AppState, as_of: date) -> AutomationRun:
        """
        Evaluate every rule against as_of and report what happened.

        Balances are reconciled once per account with the net delta of
        its synthesized transactions, after all rules are evaluated.
        """
        if isinstance(as_of, datetime):
            as_of = as_of.date()

        account_ids = {account.id for account in state.accounts}
        new_transactions: list[Transaction] = []
        updated_rules: list[AutomationRule] = []
        advanced: list[str] = []
        skipped: list[str] = []

        for rule in state.automation_rules:
            if not rule.active:
                updated_rules.append(rule)
                continue

            if (as_of - rule.last_run_date).days <= 0:
                # Already caught up, or the clock moved backward
                updated_rules.append(rule)
                continue

            if rule.account_id not in account_ids:
                logger.warning(
                    "automation_rule_orphaned",
                    rule_id=rule.id,
                    account_id=rule.account_id,
                )
                skipped.append(rule.id)
                updated_rules.append(rule)
                continue

            new_transactions.extend(self._catch_up(rule, as_of))
            updated_rules.append(rule.model_copy(update={"last_run_date": as_of}))
            advanced.append(rule.id)

        if not advanced:
            return AutomationRun(
                as_of=as_of,
                state=state,
                changed=False,
                skipped_rule_ids=tuple(skipped),
            )

        new_state = state.model_copy(update={
            "accounts": self._reconcile_balances(state, new_transactions),
            "transactions": state.transactions + tuple(new_transactions),
            "automation_rules": tuple(updated_rules),
        })

        logger.info(
            "automation_catch_up_complete",
            as_of=as_of.isoformat(),
            rules_advanced=len(advanced),
            transactions_created=len(new_transactions),
        )

        return AutomationRun(
            as_of=as_of,
            state=new_state,
            changed=True,
            transactions=tuple(new_transactions),
            advanced_rule_ids=tuple(advanced),
            skipped_rule_ids=tuple(skipped),
        )

    def _catch_up(self, rule: AutomationRule, as_of: date) -> list[Transaction]:
        """Synthesize one transaction per firing day between the watermark and as_of."""
        transactions = []
        for day in iter_catch_up_days(rule.last_run_date, as_of):
            try:
                fires = rule_fires_on(rule, day)
            except Exception as e:
                # An unclassifiable day is treated as non-firing
                logger.warning(
                    "automation_day_unclassified",
                    rule_id=rule.id,
                    day=day.isoformat(),
                    error=str(e),
                )
                fires = False

            if not fires:
                continue

            transactions.append(Transaction(
                id=self._id_factory(rule, day),
                account_id=rule.account_id,
                kind=rule.kind,
                amount=rule.amount,
                occurred_at=datetime.combine(day, self._run_time),
                note=automated_note(rule),
                is_automated=True,
            ))
        return transactions

    @staticmethod
    def _reconcile_balances(
        state: AppState,
        transactions: list[Transaction],
    ) -> tuple:
        deltas: dict[str, float] = defaultdict(float)
        for tx in transactions:
            deltas[tx.account_id] += tx.signed_amount

        accounts = []
        for account in state.accounts:
            if account.id in deltas:
                account = account.model_copy(
                    update={"balance": account.balance + deltas[account.id]}
                )
            accounts.append(account)
        return tuple(accounts)


_default_engine = AutomationEngine()


def process_automations(state: AppState, as_of: date, engine: Optional[AutomationEngine] = None) -> AppState:
    """Run the catch-up with the default engine (canonical 09:00 timestamps)."""
    return (engine or _default_engine).process(state, as_of)
