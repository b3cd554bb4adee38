"""
Tests for the two-stage input validator.
"""

import pytest

from finance_engine.models.debt import Debt
from finance_engine.models.projection import (
    FundingSource,
    FundingSourceKind,
    GrowthPlan,
    RecurringContribution,
    ReferenceAsset,
    ScheduledEvent,
)
from finance_engine.validation import InputValidationError, InputValidator


@pytest.fixture
def validator():
    return InputValidator()


def _plan(**overrides) -> GrowthPlan:
    values = dict(
        id="west",
        target=1_000_000,
        start_period="2025-01",
        horizon=12,
        sources=[FundingSource(id="fund", kind=FundingSourceKind.INVESTED, balance=100_000)],
    )
    values.update(overrides)
    return GrowthPlan(**values)


class TestDebtValidation:
    """Tests for debt list validation."""

    def test_valid_debts(self, validator):
        """Test that ordinary debts pass both stages."""
        result = validator.validate_debts([
            Debt(id="card", balance=10_000, annual_rate=36, minimum_payment=500),
        ])
        assert result.is_valid
        assert result.schema_valid and result.semantic_valid
        assert result.issues == []
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_negative_values(self, validator):
        """Test that negative balance, rate and minimum are errors."""
        result = validator.validate_debts([
            Debt(id="bad", balance=-1, annual_rate=-0.1, minimum_payment=-5),
        ])
        assert not result.is_valid
        assert not result.schema_valid
        assert result.error_count == 3
        assert {i.field for i in result.issues} == {
            "debts[0].balance",
            "debts[0].annual_rate",
            "debts[0].minimum_payment",
        }

    def test_duplicate_ids(self, validator):
        """Test that duplicate ids are reported once."""
        debts = [Debt(id="a", balance=1), Debt(id="a", balance=2), Debt(id="a", balance=3)]
        result = validator.validate_debts(debts)
        duplicates = [i for i in result.issues if i.issue_type == "duplicate_id"]
        assert len(duplicates) == 1

    def test_negative_extra_payment(self, validator):
        """Test that a negative extra payment is an error."""
        result = validator.validate_debts([Debt(id="a", balance=100, minimum_payment=10)], extra_payment=-50)
        assert not result.is_valid
        assert result.issues[0].field == "extra_payment"

    def test_semantic_skipped_when_schema_fails(self, validator):
        """Test that stage 2 only runs after stage 1 passes."""
        result = validator.validate_debts([Debt(id="a", balance=-100, annual_rate=500)])
        assert all(i.severity == "error" for i in result.issues)
        assert result.semantic_valid is False

    def test_never_resolves_is_a_warning(self, validator):
        """Test that a minimum below monthly interest warns but passes."""
        result = validator.validate_debts([
            Debt(id="card", balance=10_000, annual_rate=0.36, minimum_payment=200),
        ])
        assert result.is_valid
        assert [i.issue_type for i in result.issues] == ["never_resolves"]
        assert len(result.warnings) == 1
        assert "Please verify" in validator.get_user_friendly_summary(result)

    def test_implausible_rate_warning(self, validator):
        """Test that a rate above 100% a year warns."""
        result = validator.validate_debts([
            Debt(id="card", balance=100, annual_rate=150, minimum_payment=100),
        ])
        assert result.is_valid
        assert result.issues[0].issue_type == "suspicious_value"

    def test_error_carries_result(self, validator):
        """Test InputValidationError message and payload."""
        result = validator.validate_debts([Debt(id="bad", balance=-1)])
        error = InputValidationError(result)
        assert error.result is result
        assert "Invalid debts" in str(error)
        assert "negative balance" in str(error)


class TestGrowthPlanValidation:
    """Tests for growth plan validation."""

    def test_valid_plan(self, validator):
        """Test that a plain plan passes."""
        result = validator.validate_growth_plan(_plan())
        assert result.is_valid
        assert result.subject == "growth_plan:west"

    def test_non_positive_target(self, validator):
        """Test that the target must be positive."""
        result = validator.validate_growth_plan(_plan(target=0))
        assert not result.is_valid
        assert result.issues[0].field == "target"

    def test_negative_source(self, validator):
        """Test that negative source balances and rates are errors."""
        plan = _plan(sources=[
            FundingSource(id="fund", kind=FundingSourceKind.CASH, balance=-1, annual_rate=-0.05),
        ])
        assert validator.validate_growth_plan(plan).error_count == 2

    def test_duplicate_sources(self, validator):
        """Test that duplicate source ids are errors."""
        plan = _plan(sources=[
            FundingSource(id="fund", kind=FundingSourceKind.CASH),
            FundingSource(id="fund", kind=FundingSourceKind.INVESTED),
        ])
        assert not validator.validate_growth_plan(plan).is_valid

    def test_unknown_sources(self, validator):
        """Test that events and contributions must name known sources."""
        plan = _plan(
            events=[ScheduledEvent(period_key="2025-06", source_id="ghost", delta=100)],
            contributions=[RecurringContribution(source_id="phantom", amount=10)],
        )
        result = validator.validate_growth_plan(plan)
        assert not result.is_valid
        assert [i.issue_type for i in result.issues] == ["unknown_reference", "unknown_reference"]

    def test_event_outside_horizon_warns(self, validator):
        """Test that events at period 0 or past the horizon are flagged."""
        plan = _plan(events=[
            ScheduledEvent(period_key="2025-01", source_id="fund", delta=100),
            ScheduledEvent(period_key="2026-02", source_id="fund", delta=100),
            ScheduledEvent(period_key="2026-01", source_id="fund", delta=100),
        ])
        result = validator.validate_growth_plan(plan)
        assert result.is_valid
        assert [i.field for i in result.issues] == ["events[0].period_key", "events[1].period_key"]

    def test_negative_reference(self, validator):
        """Test that the reference asset cannot be negative."""
        plan = _plan(reference=ReferenceAsset(id="unit", value=-1))
        assert not validator.validate_growth_plan(plan).is_valid
