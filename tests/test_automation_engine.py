"""
Tests for the automation catch-up engine.

Calendar reference (2024):
    Mon 01, Tue 02, Wed 03, Thu 04, Fri 05, Sat 06, Sun 07, Mon 08, Tue 09, Wed 10
"""

import pytest
from datetime import date, datetime, time

from src.automation import (
    AUTOMATION_TIME,
    AutomationEngine,
    automated_note,
    automated_transaction_id,
    iter_catch_up_days,
    process_automations,
    rule_fires_on,
)
from src.ledger import operations
from src.models.ledger import AppState, Frequency, TransactionType
from tests.conftest import make_account, make_rule


def state_with(*rules, balance: float = 100.0) -> AppState:
    return AppState(accounts=(make_account(balance=balance),), automation_rules=rules)


@pytest.fixture
def engine() -> AutomationEngine:
    return AutomationEngine()


class TestCatchUpDays:
    """Tests for day enumeration."""

    def test_days_are_exclusive_of_watermark_inclusive_of_today(self):
        """Test the enumerated range."""
        days = list(iter_catch_up_days(date(2024, 1, 5), date(2024, 1, 8)))
        assert days == [date(2024, 1, 6), date(2024, 1, 7), date(2024, 1, 8)]

    def test_no_days_when_caught_up(self):
        """Test same-day and backward ranges are empty."""
        assert list(iter_catch_up_days(date(2024, 1, 5), date(2024, 1, 5))) == []
        assert list(iter_catch_up_days(date(2024, 1, 5), date(2024, 1, 1))) == []

    def test_leap_day_is_included(self):
        """Test that Feb 29 is enumerated in a leap year."""
        days = list(iter_catch_up_days(date(2024, 2, 28), date(2024, 3, 1)))
        assert days == [date(2024, 2, 29), date(2024, 3, 1)]

    def test_daylight_saving_change_does_not_shift_days(self):
        """Test a range spanning the US spring-forward date."""
        days = list(iter_catch_up_days(date(2024, 3, 9), date(2024, 3, 11)))
        assert days == [date(2024, 3, 10), date(2024, 3, 11)]


class TestFiringPredicate:
    """Tests for rule_fires_on."""

    def test_daily_fires_every_day(self):
        """Test daily rule without weekend exclusion."""
        rule = make_rule(exclude_weekends=False)
        assert rule_fires_on(rule, date(2024, 1, 6))
        assert rule_fires_on(rule, date(2024, 1, 7))

    def test_daily_excluding_weekends(self):
        """Test Saturday and Sunday are skipped."""
        rule = make_rule(exclude_weekends=True)
        assert not rule_fires_on(rule, date(2024, 1, 6))
        assert not rule_fires_on(rule, date(2024, 1, 7))
        assert rule_fires_on(rule, date(2024, 1, 8))

    def test_weekly_fires_on_selected_days(self):
        """Test weekly rule on Monday and Wednesday."""
        rule = make_rule(frequency=Frequency.WEEKLY, weekdays=(1, 3))
        assert rule_fires_on(rule, date(2024, 1, 8))
        assert rule_fires_on(rule, date(2024, 1, 10))
        assert not rule_fires_on(rule, date(2024, 1, 9))

    def test_weekly_with_no_days_never_fires(self):
        """Test an empty weekday set."""
        rule = make_rule(frequency=Frequency.WEEKLY, weekdays=())
        assert not any(rule_fires_on(rule, date(2024, 1, d)) for d in range(1, 8))


class TestAutomationEngine:
    """Tests for AutomationEngine.process / run."""

    def test_weekend_exclusion_friday_to_monday(self, engine):
        """Fri watermark, Mon today, weekends excluded: only Monday fires."""
        rule = make_rule(exclude_weekends=True, last_run_date=date(2024, 1, 5))
        result = engine.run(state_with(rule), date(2024, 1, 8))

        assert result.transaction_count == 1
        tx = result.transactions[0]
        assert tx.occurred_at == datetime(2024, 1, 8, 9, 0, 0)
        assert result.state.automation_rules[0].last_run_date == date(2024, 1, 8)

    def test_weekly_selection_monday_and_wednesday(self, engine):
        """Weekly {Mon, Wed} from Jan 1 to Jan 10 fires on Jan 3, 8 and 10."""
        rule = make_rule(
            frequency=Frequency.WEEKLY,
            weekdays=(1, 3),
            last_run_date=date(2024, 1, 1),
        )
        result = engine.run(state_with(rule), date(2024, 1, 10))

        fired = [tx.occurred_at.date() for tx in result.transactions]
        assert fired == [date(2024, 1, 3), date(2024, 1, 8), date(2024, 1, 10)]

    def test_synthesized_transaction_fields(self, engine):
        """Test note, flag, id and time of day of a generated transaction."""
        rule = make_rule(kind=TransactionType.DEPOSIT, amount=25.0, description="Salary",
                         last_run_date=date(2024, 1, 1))
        result = engine.run(state_with(rule), date(2024, 1, 2))

        tx = result.transactions[0]
        assert tx.note == "Auto deposit: Salary"
        assert tx.note == automated_note(rule)
        assert tx.is_automated is True
        assert tx.id == "auto-rule-1-20240102"
        assert tx.id == automated_transaction_id(rule, date(2024, 1, 2))
        assert tx.occurred_at.time() == AUTOMATION_TIME
        assert tx.kind == TransactionType.DEPOSIT
        assert tx.amount == 25.0

    def test_same_day_is_noop(self, engine):
        """Test that as_of == watermark returns the same state object."""
        state = state_with(make_rule(last_run_date=date(2024, 1, 5)))
        assert engine.process(state, date(2024, 1, 5)) is state

    def test_idempotence(self, engine):
        """Test that a second run on the same day changes nothing."""
        state = state_with(make_rule(last_run_date=date(2024, 1, 1)))
        once = engine.process(state, date(2024, 1, 10))
        twice = engine.process(once, date(2024, 1, 10))

        assert once is not state
        assert twice is once

    def test_backward_clock_is_noop(self, engine):
        """Test that as_of before the watermark neither fails nor rewinds."""
        state = state_with(make_rule(last_run_date=date(2024, 1, 10)))
        result = engine.run(state, date(2024, 1, 5))

        assert result.changed is False
        assert result.state is state
        assert result.state.automation_rules[0].last_run_date == date(2024, 1, 10)

    def test_watermark_advances_without_firing(self, engine):
        """Test that the watermark moves even if no day fired."""
        rule = make_rule(exclude_weekends=True, last_run_date=date(2024, 1, 5))
        result = engine.run(state_with(rule), date(2024, 1, 7))

        assert result.transaction_count == 0
        assert result.changed is True
        assert result.state.automation_rules[0].last_run_date == date(2024, 1, 7)

    def test_watermark_never_decreases(self, engine):
        """Test monotonicity over a sequence of run dates."""
        state = state_with(make_rule(last_run_date=date(2024, 1, 1)))
        watermarks = []
        for as_of in (date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 9), date(2024, 1, 4)):
            state = engine.process(state, as_of)
            watermarks.append(state.automation_rules[0].last_run_date)

        assert watermarks == sorted(watermarks)
        assert watermarks[-1] == date(2024, 1, 9)

    def test_balance_conservation(self, engine):
        """Test the balance changes by exactly the signed sum of new transactions."""
        rules = (
            make_rule("r-in", kind=TransactionType.DEPOSIT, amount=50.0),
            make_rule("r-out", kind=TransactionType.WITHDRAW, amount=7.5),
        )
        state = state_with(*rules, balance=100.0)
        result = engine.run(state, date(2024, 1, 5))

        delta = sum(tx.signed_amount for tx in result.transactions)
        assert result.transaction_count == 8
        assert result.state.accounts[0].balance == pytest.approx(100.0 + delta)
        assert result.state.accounts[0].balance == pytest.approx(100.0 + 4 * 50.0 - 4 * 7.5)

    def test_inactive_rule_is_frozen(self, engine):
        """Test that an inactive rule neither fires nor advances."""
        rule = make_rule(active=False, last_run_date=date(2024, 1, 1))
        state = state_with(rule)
        result = engine.run(state, date(2024, 1, 10))

        assert result.changed is False
        assert result.state is state
        assert result.state.automation_rules[0].last_run_date == date(2024, 1, 1)

    def test_reactivated_rule_replays_inactive_period(self, engine):
        """Test that re-enabling a paused rule catches up from its old watermark."""
        state = state_with(make_rule(active=False, last_run_date=date(2024, 1, 1)))
        state = engine.process(state, date(2024, 1, 5))
        state = operations.toggle_rule(state, "rule-1")

        result = engine.run(state, date(2024, 1, 10))
        assert result.transaction_count == 9

    def test_orphaned_rule_is_skipped(self, engine):
        """Test a rule whose account is gone is reported and left alone."""
        orphan = make_rule("orphan", account_id="gone", last_run_date=date(2024, 1, 1))
        state = state_with(orphan)
        result = engine.run(state, date(2024, 1, 5))

        assert result.changed is False
        assert result.skipped_rule_ids == ("orphan",)
        assert result.state.automation_rules[0].last_run_date == date(2024, 1, 1)
        assert result.state.transactions == ()

    def test_year_boundary(self, engine):
        """Sat Dec 30 to Tue Jan 2 with weekends excluded fires Jan 1 and Jan 2."""
        rule = make_rule(exclude_weekends=True, last_run_date=date(2023, 12, 30))
        result = engine.run(state_with(rule), date(2024, 1, 2))

        fired = [tx.occurred_at.date() for tx in result.transactions]
        assert fired == [date(2024, 1, 1), date(2024, 1, 2)]

    def test_month_boundary_in_leap_year(self, engine):
        """Test that Feb 29 fires for a daily rule."""
        rule = make_rule(last_run_date=date(2024, 2, 27))
        result = engine.run(state_with(rule), date(2024, 3, 1))

        fired = [tx.occurred_at.date() for tx in result.transactions]
        assert fired == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

    def test_transactions_are_appended(self, engine):
        """Test that existing history is kept in front of new transactions."""
        state = state_with(make_rule(last_run_date=date(2024, 1, 1)))
        state, manual = operations.deposit(state, "acc-1", 10, now=datetime(2024, 1, 1, 12, 0))
        result = engine.run(state, date(2024, 1, 3))

        assert result.state.transactions[0] == manual
        assert len(result.state.transactions) == 3

    def test_deterministic_output(self, engine):
        """Test that the same input gives equal output."""
        state = state_with(make_rule(last_run_date=date(2024, 1, 1)))
        assert engine.process(state, date(2024, 1, 9)) == engine.process(state, date(2024, 1, 9))

    def test_unclassifiable_day_is_skipped(self, monkeypatch):
        """Test that a predicate failure skips only that day."""
        from src.automation import engine as engine_module

        real = engine_module.rule_fires_on

        def flaky(rule, day):
            if day == date(2024, 1, 3):
                raise ValueError("bad day")
            return real(rule, day)

        monkeypatch.setattr(engine_module, "rule_fires_on", flaky)
        result = AutomationEngine().run(state_with(make_rule()), date(2024, 1, 4))

        fired = [tx.occurred_at.date() for tx in result.transactions]
        assert fired == [date(2024, 1, 2), date(2024, 1, 4)]
        assert result.state.automation_rules[0].last_run_date == date(2024, 1, 4)

    def test_custom_run_time(self):
        """Test the time of day is configurable."""
        engine = AutomationEngine(run_time=time(7, 30))
        result = engine.run(state_with(make_rule()), date(2024, 1, 2))
        assert result.transactions[0].occurred_at == datetime(2024, 1, 2, 7, 30)

    def test_accepts_datetime_as_of(self, engine):
        """Test that a datetime is reduced to its calendar date."""
        result = engine.run(state_with(make_rule()), datetime(2024, 1, 2, 23, 59))
        assert result.as_of == date(2024, 1, 2)
        assert result.transaction_count == 1

    def test_process_automations_wrapper(self):
        """Test the module-level convenience function."""
        state = state_with(make_rule())
        new_state = process_automations(state, date(2024, 1, 3))
        assert len(new_state.transactions) == 2
