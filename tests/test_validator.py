"""Tests for InputValidator."""

import pytest

from src.models.ledger import AppState, Frequency
from src.validation import InputValidator, InvalidInputError, coerce_amount
from tests.conftest import make_account


@pytest.fixture
def validator() -> InputValidator:
    return InputValidator()


@pytest.fixture
def state() -> AppState:
    return AppState(accounts=(make_account(),))


class TestCoerceAmount:
    """Tests for amount parsing."""

    @pytest.mark.parametrize("raw, expected", [
        (10, 10.0),
        ("12.5", 12.5),
        (" 7 ", 7.0),
        ("1,000.50", 1000.5),
        (-3, -3.0),
    ])
    def test_parses_numbers(self, raw, expected):
        """Test numeric input."""
        assert coerce_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "  ", "ten", True, False, float("nan"), "-inf", [1]])
    def test_rejects_non_numbers(self, raw):
        """Test unusable input becomes None."""
        assert coerce_amount(raw) is None


class TestTransactionValidation:
    """Tests for validate_transaction."""

    def test_valid_transaction(self, validator, state):
        """Test a normal deposit passes."""
        assert validator.validate_transaction(state, "acc-1", "25").is_valid

    def test_missing_amount(self, validator, state):
        """Test an empty amount."""
        result = validator.validate_transaction(state, "acc-1", "")
        assert [i.issue_type for i in result.issues] == ["missing"]

    def test_zero_amount(self, validator, state):
        """Test a zero amount."""
        result = validator.validate_transaction(state, "acc-1", 0)
        assert [i.issue_type for i in result.issues] == ["not_positive"]

    def test_unknown_account_and_bad_amount(self, validator, state):
        """Test that all issues are reported together."""
        result = validator.validate_transaction(state, "nope", "abc")
        assert {i.issue_type for i in result.issues} == {"unknown_account", "not_numeric"}
        assert result.error_count == 2

    def test_missing_account(self, validator, state):
        """Test no account chosen."""
        result = validator.validate_transaction(state, None, 5)
        assert result.issues[0].field == "account_id"


class TestRuleValidation:
    """Tests for validate_rule."""

    def test_valid_daily_rule(self, validator, state):
        """Test a normal daily rule."""
        result = validator.validate_rule(state, "acc-1", 5, "Coffee", Frequency.DAILY)
        assert result.is_valid
        assert result.issues == []

    def test_valid_weekly_rule(self, validator, state):
        """Test a normal weekly rule."""
        result = validator.validate_rule(
            state, "acc-1", 5, "Allowance", Frequency.WEEKLY,
            exclude_weekends=False, weekdays=[1, 3],
        )
        assert result.is_valid

    def test_weekly_without_days(self, validator, state):
        """Test a weekly rule needs at least one day."""
        result = validator.validate_rule(
            state, "acc-1", 5, "Allowance", Frequency.WEEKLY, exclude_weekends=False,
        )
        assert result.has_errors
        assert result.issues[0].field == "weekdays"

    def test_weekday_out_of_range(self, validator, state):
        """Test weekdays outside 0-6."""
        result = validator.validate_rule(
            state, "acc-1", 5, "Allowance", Frequency.WEEKLY,
            exclude_weekends=False, weekdays=[1, 7],
        )
        assert [i.issue_type for i in result.issues] == ["out_of_range"]

    def test_missing_description(self, validator, state):
        """Test a rule without description."""
        result = validator.validate_rule(state, "acc-1", 5, "", Frequency.DAILY)
        assert result.issues[0].field == "description"

    def test_exclude_weekends_on_weekly_is_warning(self, validator, state):
        """Test the flag is tolerated on weekly rules."""
        result = validator.validate_rule(
            state, "acc-1", 5, "Allowance", Frequency.WEEKLY,
            exclude_weekends=True, weekdays=[2],
        )
        assert result.is_valid
        assert len(result.warnings) == 1


class TestFriendlySummary:
    """Tests for user-facing messages."""

    def test_all_passed(self, validator, state):
        """Test a clean result."""
        result = validator.validate_transaction(state, "acc-1", 5)
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_lists_errors(self, validator, state):
        """Test errors are listed."""
        result = validator.validate_transaction(state, "acc-1", -1)
        summary = validator.get_user_friendly_summary(result)
        assert "Please fix the following:" in summary
        assert "greater than zero" in summary

    def test_invalid_input_error_message(self, validator, state):
        """Test the exception carries the result and a readable message."""
        result = validator.validate_transaction(state, "acc-1", None)
        error = InvalidInputError("record_deposit", result)

        assert error.result is result
        assert "record_deposit rejected" in str(error)
        assert isinstance(error, ValueError)
