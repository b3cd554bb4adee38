"""
Goal and Emergency Fund Planning

Linear savings plans: how much a goal needs per month, when a contribution
reaches it, and how large the emergency fund should be for a given risk
profile.

DESIGN DECISION: Division by a month count never reaches the UI as NaN or
infinity. An unknown deadline is planned as one month away, a deadline
already reached asks for the full remaining amount, and "never" is None.
"""

import math
from datetime import date
from typing import Optional, Sequence

from finance_engine.engine.growth import months_between
from finance_engine.engine.money import round_half_up
from finance_engine.models.goals import (
    EmergencyFundPlan,
    GoalMilestone,
    GoalPlan,
    SavingsGoal,
)


MILESTONE_PCTS = (25, 50, 75, 100)
RISK_QUESTION_COUNT = 5
DEFAULT_EMERGENCY_MONTHS = 6
MIN_EMERGENCY_MONTHS = 3
MAX_EMERGENCY_MONTHS = 12
RISK_MONTHS_FACTOR = 0.6


def months_left(goal: SavingsGoal, as_of: date) -> int:
    """Calendar months until the deadline; 1 when there is no deadline."""
    if goal.target_date is None:
        return 1
    return months_between(as_of, goal.target_date)


def monthly_needed(goal: SavingsGoal, as_of: date) -> float:
    """Monthly saving that reaches the goal by its deadline."""
    months = months_left(goal, as_of)
    if months > 0:
        return goal.remaining / months
    return goal.remaining


def months_to_reach(remaining: float, contribution: float) -> Optional[int]:
    """Months of `contribution` needed to cover `remaining`; None if never."""
    if contribution <= 0:
        return None
    return math.ceil(max(0.0, remaining) / contribution)


def goal_milestones(goal: SavingsGoal) -> list[GoalMilestone]:
    return [
        GoalMilestone(
            pct=pct,
            amount=goal.target_amount * pct / 100,
            reached=goal.current_amount >= goal.target_amount * pct / 100,
        )
        for pct in MILESTONE_PCTS
    ]


def project_goal(
    goal: SavingsGoal,
    contribution: Optional[float],
    as_of: date,
    max_periods: int = 60,
) -> GoalPlan:
    """
    Plan one goal.

    A None contribution falls back to the goal's own monthly contribution.
    The projected path runs a few periods past the reach date, at most
    max_periods, and is capped at the target.
    """
    if contribution is None:
        contribution = goal.monthly_contribution

    reach = months_to_reach(goal.remaining, contribution)
    periods = max_periods if reach is None else min(reach + 3, max_periods)

    balance = goal.current_amount
    projected = []
    for _ in range(periods + 1):
        projected.append(min(balance, goal.target_amount))
        balance += contribution

    return GoalPlan(
        goal_id=goal.id,
        months_left=months_left(goal, as_of),
        monthly_needed=monthly_needed(goal, as_of),
        contribution=contribution,
        months_to_reach=reach,
        projected_balances=projected,
        milestones=goal_milestones(goal),
    )


def risk_score(answers: Sequence[Optional[int]]) -> Optional[int]:
    """
    Sum of the risk questionnaire answers.

    None until every question has an answer.
    """
    if len(answers) != RISK_QUESTION_COUNT or any(a is None for a in answers):
        return None
    return sum(answers)


def recommend_emergency_fund(
    essentials: float,
    risk: Optional[int],
    current: float = 0.0,
    monthly_saving: float = 0.0,
) -> EmergencyFundPlan:
    """
    Size the emergency fund.

    Recommended months are round(risk * 0.6) clamped to 3..12, or 6 when
    the questionnaire is incomplete (risk is None).
    """
    if risk is None:
        months = DEFAULT_EMERGENCY_MONTHS
    else:
        months = min(
            MAX_EMERGENCY_MONTHS,
            max(MIN_EMERGENCY_MONTHS, round_half_up(risk * RISK_MONTHS_FACTOR)),
        )

    target = essentials * months
    gap = max(0.0, target - current)
    return EmergencyFundPlan(
        risk_score=risk,
        recommended_months=months,
        target_amount=target,
        months_covered=current / essentials if essentials > 0 else 0.0,
        funded_pct=current / target * 100 if target > 0 else 0.0,
        gap=gap,
        months_to_target=months_to_reach(gap, monthly_saving),
    )
