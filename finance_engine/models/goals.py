"""
Goal Planning Models

Savings goals and the emergency fund, as planned on the goals screens.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SavingsGoal(BaseModel):
    """A savings goal with an optional deadline."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: float = Field(..., gt=0)
    current_amount: float = Field(default=0.0, ge=0)
    target_date: Optional[date] = Field(
        default=None,
        description="Deadline; unknown deadlines are planned as one month away"
    )
    monthly_contribution: float = Field(default=0.0, ge=0)
    priority: int = Field(default=1, ge=1)

    @property
    def remaining(self) -> float:
        return max(0.0, self.target_amount - self.current_amount)

    @property
    def progress_pct(self) -> float:
        return self.current_amount / self.target_amount * 100


class GoalMilestone(BaseModel):
    model_config = ConfigDict(frozen=True)

    pct: int
    amount: float
    reached: bool


class GoalPlan(BaseModel):
    """Derived plan for one goal."""
    model_config = ConfigDict(frozen=True)

    goal_id: str
    months_left: int
    monthly_needed: float
    contribution: float
    months_to_reach: Optional[int] = None
    projected_balances: list[float] = Field(default_factory=list)
    milestones: list[GoalMilestone] = Field(default_factory=list)


class EmergencyFundPlan(BaseModel):
    """Recommended emergency fund size and how far along it is."""
    model_config = ConfigDict(frozen=True)

    risk_score: Optional[int] = None
    recommended_months: int
    target_amount: float
    months_covered: float
    funded_pct: float
    gap: float
    months_to_target: Optional[int] = Field(
        default=None,
        description="None when nothing is being saved toward the gap"
    )
