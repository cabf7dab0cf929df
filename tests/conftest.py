"""Shared fixtures and builders for Money Keeper tests."""

from datetime import date

import pytest

from src.models.ledger import (
    Account,
    AppState,
    AutomationRule,
    Frequency,
    TransactionType,
)


def make_account(account_id: str = "acc-1", name: str = "Wallet", balance: float = 0.0) -> Account:
    return Account(id=account_id, name=name, balance=balance, color_tag="blue")


def make_rule(
    rule_id: str = "rule-1",
    account_id: str = "acc-1",
    kind: TransactionType = TransactionType.WITHDRAW,
    amount: float = 10.0,
    frequency: Frequency = Frequency.DAILY,
    exclude_weekends: bool = False,
    weekdays: tuple = (),
    last_run_date: date = date(2024, 1, 1),
    active: bool = True,
    description: str = "Lunch",
) -> AutomationRule:
    return AutomationRule(
        id=rule_id,
        account_id=account_id,
        kind=kind,
        amount=amount,
        frequency=frequency,
        exclude_weekends=exclude_weekends,
        weekdays=weekdays,
        last_run_date=last_run_date,
        active=active,
        description=description,
    )


@pytest.fixture
def account() -> Account:
    return make_account()


@pytest.fixture
def empty_state() -> AppState:
    return AppState()


@pytest.fixture
def state_with_account(account) -> AppState:
    return AppState(accounts=(account,))
