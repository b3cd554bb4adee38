"""
Debt Models

Records consumed and produced by the payoff simulator.

DESIGN DECISION: Results are frozen models. A timeline entry is built once
from the previous period's state and never touched again, so a result can be
handed to a serializer or cached by the caller without defensive copies.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class PayoffStrategy(str, Enum):
    """
    Fixed debt payoff strategies.

    SNOWBALL: smallest balance first.
    AVALANCHE: highest interest rate first.
    """
    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"


class DebtKind(str, Enum):
    """Kind of liability, used only for display."""
    CREDIT_CARD = "credit_card"
    AUTO_LOAN = "auto_loan"
    MORTGAGE = "mortgage"
    STUDENT_LOAN = "student_loan"
    PERSONAL_LOAN = "personal_loan"
    MEDICAL = "medical"
    OTHER = "other"


# =============================================================================
# INPUT MODELS
# =============================================================================

class Debt(BaseModel):
    """
    A single liability as supplied by the persistence layer.

    The annual rate may arrive as a fraction (0.36) or a whole percentage (36);
    the simulator normalizes it before use.

    PRECONDITION: balance, annual_rate and minimum_payment are non-negative.
    The simulator does not check this; InputValidator does.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Stable debt identifier"
    )
    name: Optional[str] = Field(
        default=None,
        description="Display name"
    )
    balance: float = Field(
        ...,
        description="Current outstanding balance"
    )
    annual_rate: Optional[float] = Field(
        default=None,
        description="Annual interest rate, fraction or whole percentage"
    )
    minimum_payment: float = Field(
        default=0.0,
        description="Required monthly payment"
    )
    kind: DebtKind = Field(
        default=DebtKind.OTHER,
        description="Liability kind"
    )


# =============================================================================
# RESULT MODELS
# =============================================================================

class AmortizationStep(BaseModel):
    """Outcome of advancing one debt by one period."""
    model_config = ConfigDict(frozen=True)

    new_balance: float = Field(ge=0)
    interest: float
    payment: float


class PayoffTimelineEntry(BaseModel):
    """Balances after one simulated period."""
    model_config = ConfigDict(frozen=True)

    period_index: int = Field(ge=0)
    balances_by_entity: dict[str, float] = Field(default_factory=dict)
    total: float


class PayoffResult(BaseModel):
    """
    Result of running one strategy to payoff or to the horizon cap.

    horizon_reached is True when balances were still outstanding at the cap.
    That is not an error: the UI is expected to warn that the plan never
    resolves.
    """
    model_config = ConfigDict(frozen=True)

    strategy: PayoffStrategy
    extra_payment: float = 0.0
    total_periods: int = Field(ge=0)
    total_interest_paid: int = Field(
        ...,
        description="Interest paid, rounded to the nearest currency unit"
    )
    timeline: list[PayoffTimelineEntry] = Field(default_factory=list)
    horizon_reached: bool = False

    @property
    def final_total(self) -> float:
        """Outstanding balance after the last simulated period."""
        if not self.timeline:
            return 0.0
        return self.timeline[-1].total


class StrategyComparison(BaseModel):
    """
    Snowball vs avalanche over the same debts and extra payment.

    Savings are measured against a zero-extra baseline of the winning
    strategy, so both runs share an ordering.
    """
    model_config = ConfigDict(frozen=True)

    snowball: PayoffResult
    avalanche: PayoffResult
    baseline_snowball: PayoffResult
    baseline_avalanche: PayoffResult
    winner: PayoffStrategy
    periods_saved: int = Field(ge=0)
    interest_saved: int = Field(ge=0)

    @property
    def best(self) -> PayoffResult:
        return self.avalanche if self.winner == PayoffStrategy.AVALANCHE else self.snowball


class DebtSummary(BaseModel):
    """Headline figures for the debt planner."""
    model_config = ConfigDict(frozen=True)

    debt_count: int = Field(ge=0)
    total_balance: float
    total_minimum: float
    weighted_average_rate: float = Field(
        ...,
        description="Balance-weighted annual rate as a fraction"
    )
