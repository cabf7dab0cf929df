"""
Ledger Operations

Pure state transitions: each function takes the current AppState and
returns a new one. Nothing here reads the clock implicitly or persists;
the orchestrator does that around these calls. Non-blocking validation
warnings are logged.

Invalid input raises InvalidInputError before anything is built, so an
operation is applied in full or not at all.
"""

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

import structlog

from src.models.ledger import (
    Account,
    AppState,
    AutomationRule,
    Frequency,
    ThemeMode,
    Transaction,
    TransactionType,
)
from src.validation.validator import InputValidator, InvalidInputError, coerce_amount


logger = structlog.get_logger(__name__)

_validator = InputValidator()


def manual_note(kind: TransactionType) -> str:
    return f"Manual {kind.label}"


def create_account(state: AppState, name: str, palette: Sequence[str]) -> tuple[AppState, Account]:
    """
    Add an account with a zero balance.

    Colors rotate through the palette by the current account count.
    """
    result = _validator.validate_account_name(name)
    if result.has_errors:
        raise InvalidInputError("create_account", result)

    palette = list(palette) or ["blue"]
    account = Account(
        name=name.strip(),
        balance=0.0,
        color_tag=palette[len(state.accounts) % len(palette)],
    )
    new_state = state.model_copy(update={"accounts": state.accounts + (account,)})
    return new_state, account


def delete_account(state: AppState, account_id: str) -> AppState:
    """Remove an account together with its transactions and automation rules."""
    return state.model_copy(update={
        "accounts": tuple(a for a in state.accounts if a.id != account_id),
        "transactions": tuple(t for t in state.transactions if t.account_id != account_id),
        "automation_rules": tuple(r for r in state.automation_rules if r.account_id != account_id),
    })


def record_transaction(
    state: AppState,
    account_id: str,
    kind: TransactionType,
    amount: Any,
    note: str = "",
    now: Optional[datetime] = None,
) -> tuple[AppState, Transaction]:
    """
    Append a manual transaction and adjust the account balance.

    The note defaults to "Manual deposit" / "Manual withdraw".
    """
    result = _validator.validate_transaction(state, account_id, amount)
    if result.has_errors:
        raise InvalidInputError(f"record_{kind.label}", result)

    value = coerce_amount(amount)
    transaction = Transaction(
        account_id=account_id,
        kind=kind,
        amount=value,
        occurred_at=now or datetime.now(),
        note=(note or "").strip() or manual_note(kind),
        is_automated=False,
    )

    accounts = tuple(
        a.model_copy(update={"balance": a.balance + transaction.signed_amount})
        if a.id == account_id else a
        for a in state.accounts
    )
    new_state = state.model_copy(update={
        "accounts": accounts,
        "transactions": state.transactions + (transaction,),
    })
    return new_state, transaction


def deposit(state: AppState, account_id: str, amount: Any, note: str = "",
            now: Optional[datetime] = None) -> tuple[AppState, Transaction]:
    return record_transaction(state, account_id, TransactionType.DEPOSIT, amount, note, now)


def withdraw(state: AppState, account_id: str, amount: Any, note: str = "",
             now: Optional[datetime] = None) -> tuple[AppState, Transaction]:
    return record_transaction(state, account_id, TransactionType.WITHDRAW, amount, note, now)


def add_rule(
    state: AppState,
    account_id: str,
    kind: TransactionType,
    amount: Any,
    description: str,
    today: date,
    frequency: Frequency = Frequency.DAILY,
    exclude_weekends: bool = True,
    weekdays: Iterable[int] = (),
) -> tuple[AppState, AutomationRule]:
    """
    Create an active automation rule starting from today.

    The watermark starts at today, so the first occurrence is tomorrow.
    Daily rules keep no weekdays; weekly rules never exclude weekends.
    """
    weekdays = tuple(weekdays or ())
    result = _validator.validate_rule(
        state,
        account_id=account_id,
        amount=amount,
        description=description,
        frequency=frequency,
        exclude_weekends=exclude_weekends,
        weekdays=weekdays,
    )
    if result.has_errors:
        raise InvalidInputError("add_rule", result)
    if result.warnings:
        logger.info("input_warnings", operation="add_rule", warnings=result.warnings)

    is_daily = frequency is Frequency.DAILY
    rule = AutomationRule(
        account_id=account_id,
        kind=kind,
        amount=coerce_amount(amount),
        frequency=frequency,
        exclude_weekends=exclude_weekends if is_daily else False,
        weekdays=() if is_daily else weekdays,
        last_run_date=today,
        active=True,
        description=description.strip(),
    )
    new_state = state.model_copy(update={
        "automation_rules": state.automation_rules + (rule,),
    })
    return new_state, rule


def toggle_rule(state: AppState, rule_id: str) -> AppState:
    """Flip a rule between active and paused. The watermark is left alone."""
    return state.model_copy(update={
        "automation_rules": tuple(
            r.model_copy(update={"active": not r.active}) if r.id == rule_id else r
            for r in state.automation_rules
        ),
    })


def delete_rule(state: AppState, rule_id: str) -> AppState:
    return state.model_copy(update={
        "automation_rules": tuple(r for r in state.automation_rules if r.id != rule_id),
    })


def toggle_theme(state: AppState) -> AppState:
    next_theme = ThemeMode.NORMAL if state.theme_mode is ThemeMode.CYBERPUNK else ThemeMode.CYBERPUNK
    return state.model_copy(update={"theme_mode": next_theme})
