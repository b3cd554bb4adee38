"""
Tests for goal planning and emergency fund sizing.
"""

import pytest
from datetime import date

from finance_engine.engine.goals import (
    goal_milestones,
    monthly_needed,
    months_left,
    months_to_reach,
    project_goal,
    recommend_emergency_fund,
    risk_score,
)
from finance_engine.models.goals import SavingsGoal


AS_OF = date(2025, 6, 15)


def _goal(**overrides) -> SavingsGoal:
    values = dict(id="trip", name="Trip", target_amount=12_000)
    values.update(overrides)
    return SavingsGoal(**values)


class TestGoalMath:
    """Tests for per-goal figures."""

    def test_months_left_without_deadline(self):
        """Test that an unknown deadline is one month away."""
        assert months_left(_goal(), AS_OF) == 1

    def test_months_left_counts_calendar_months(self):
        """Test months until the deadline."""
        assert months_left(_goal(target_date=date(2025, 12, 1)), AS_OF) == 6

    def test_monthly_needed(self):
        """Test the saving rate that meets the deadline."""
        goal = _goal(target_date=date(2025, 12, 1))
        assert monthly_needed(goal, AS_OF) == pytest.approx(2000)

    def test_monthly_needed_past_deadline(self):
        """Test that a passed deadline asks for everything remaining."""
        goal = _goal(current_amount=2000, target_date=date(2025, 1, 1))
        assert monthly_needed(goal, AS_OF) == pytest.approx(10_000)

    def test_months_to_reach(self):
        """Test months needed at a fixed contribution."""
        assert months_to_reach(1000, 300) == 4
        assert months_to_reach(0, 300) == 0
        assert months_to_reach(1000, 0) is None

    def test_milestones_reached(self):
        """Test which quarter milestones are reached."""
        milestones = goal_milestones(_goal(target_amount=1000, current_amount=600))
        assert [m.pct for m in milestones] == [25, 50, 75, 100]
        assert [m.reached for m in milestones] == [True, True, False, False]


class TestProjectGoal:
    """Tests for the projected savings path."""

    def test_path_runs_past_reach_and_caps(self):
        """Test the projected path stops three periods past the reach date."""
        plan = project_goal(_goal(target_amount=1000, monthly_contribution=250), None, AS_OF)
        assert plan.contribution == 250
        assert plan.months_to_reach == 4
        assert plan.projected_balances == [0, 250, 500, 750, 1000, 1000, 1000, 1000]

    def test_no_contribution_never_reaches(self):
        """Test that nothing saved never reaches the goal."""
        plan = project_goal(_goal(), 0, AS_OF, max_periods=24)
        assert plan.months_to_reach is None
        assert len(plan.projected_balances) == 25
        assert set(plan.projected_balances) == {0}

    def test_explicit_contribution_overrides_goal(self):
        """Test that a given contribution replaces the goal's own."""
        plan = project_goal(_goal(monthly_contribution=100), 6000, AS_OF)
        assert plan.months_to_reach == 2


class TestEmergencyFund:
    """Tests for emergency fund sizing."""

    def test_risk_score_requires_all_answers(self):
        """Test that an incomplete questionnaire has no score."""
        assert risk_score([1, 2, 3, 4, 5]) == 15
        assert risk_score([1, 2, 3, 4]) is None
        assert risk_score([1, 2, None, 4, 5]) is None

    def test_recommended_months_from_risk(self):
        """Test months derived from the risk score."""
        assert recommend_emergency_fund(10_000, 15).recommended_months == 9

    def test_recommended_months_clamped(self):
        """Test the 3 to 12 month bounds."""
        assert recommend_emergency_fund(10_000, 2).recommended_months == 3
        assert recommend_emergency_fund(10_000, 25).recommended_months == 12

    def test_default_without_questionnaire(self):
        """Test the default six months and progress figures."""
        plan = recommend_emergency_fund(10_000, None, current=30_000, monthly_saving=10_000)
        assert plan.recommended_months == 6
        assert plan.target_amount == 60_000
        assert plan.gap == 30_000
        assert plan.months_covered == pytest.approx(3.0)
        assert plan.funded_pct == pytest.approx(50.0)
        assert plan.months_to_target == 3

    def test_zero_essentials(self):
        """Test that zero essentials does not divide by zero."""
        plan = recommend_emergency_fund(0, None, current=500)
        assert plan.months_covered == 0.0
        assert plan.funded_pct == 0.0
        assert plan.gap == 0.0
