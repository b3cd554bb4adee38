"""
Findings Models

Output records of the findings engine and the thresholds that drive it.

DESIGN DECISION: Thresholds are an explicit model passed into the engine,
not module globals. The defaults encode the dashboard's domain policy; the
configuration layer can override any of them per deployment.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# FINDINGS
# =============================================================================

class Severity(str, Enum):
    """Finding severity. Sort order is red, amber, green."""
    RED = "red"
    AMBER = "amber"
    GREEN = "green"


SEVERITY_ORDER = {
    Severity.RED: 0,
    Severity.AMBER: 1,
    Severity.GREEN: 2,
}


class FindingCategory(str, Enum):
    CRYPTO = "crypto"
    REAL_ESTATE = "real_estate"
    FIXED_INCOME = "fixed_income"
    RETIREMENT = "retirement"
    GENERAL = "general"


class Finding(BaseModel):
    """
    One observation emitted by a rule.

    The id is deterministic for identical input (rule name plus entity key),
    so the UI can use it as a stable key and to de-duplicate.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    severity: Severity
    category: FindingCategory
    title: str
    detail: str
    suggestion: str
    action_ref: str = Field(
        ...,
        description="Where in the dashboard the user can act on this"
    )


# =============================================================================
# THRESHOLDS
# =============================================================================

class FindingsThresholds(BaseModel):
    """
    Rule thresholds.

    Percentages are whole numbers (70.0 means 70%); rates are fractions.
    All comparisons against *_pct and *_days limits are strict unless the
    rule says otherwise.
    """
    model_config = ConfigDict(frozen=True)

    # Crypto
    crypto_concentration_pct: float = 70.0
    crypto_loss_pct: float = -25.0
    crypto_net_worth_pct: float = 20.0

    # Real estate
    valuation_stale_days: int = 180
    sale_pending_days: int = 90
    target_gap_urgent_pct: float = 20.0
    target_urgent_months: int = 12
    target_gap_healthy_pct: float = 10.0

    # Fixed income
    maturity_window_days: int = 7
    commission_tier_threshold: float = 2_500_000.0
    commission_tier_proximity: float = Field(
        default=0.95,
        description="Fraction of the tier threshold at which the approach rule starts"
    )
    commission_tier_rate: float = 0.0082
    commission_reached_min_rate: float = Field(
        default=0.009,
        description="Recorded commission above this means the record still shows the old tier"
    )
    tax_window_start_month: int = Field(default=2, ge=1, le=12)
    tax_window_end_month: int = Field(default=4, ge=1, le=12)

    # Retirement
    retirement_stale_days: int = 90
    retirement_instrument_type: str = "afore"
    retirement_age: int = 65
    retirement_growth_rate: float = 0.085
    income_replacement_ratio: float = 0.70
    retirement_years: int = 20
    retirement_shortfall_ratio: float = 0.5

    # Private equity
    pe_stale_days: int = 180
    pe_exit_window_months: int = 18

    # Liquidity
    emergency_healthy_months: float = 6.0


# =============================================================================
# HEALTH SCORE
# =============================================================================

class HealthInputs(BaseModel):
    """
    Metrics the health score is banded on.

    target_gap_pct is None when there is no funding target.
    """
    model_config = ConfigDict(frozen=True)

    target_gap_pct: Optional[float] = None
    debt_to_income: float = 0.0
    has_multiple_assets: bool = False
    liquid_months: float = 0.0
    retirement_on_track: bool = True


class HealthScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_readiness: int = Field(ge=0, le=25)
    debt_health: int = Field(ge=0, le=20)
    investment_diversity: int = Field(ge=0, le=15)
    liquidity: int = Field(ge=0, le=15)
    retirement: int = Field(ge=0, le=15)
    net_worth_trend: int = Field(ge=0, le=10)


class HealthScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0, le=100)
    label: str
    breakdown: HealthScoreBreakdown


# =============================================================================
# SUMMARIES
# =============================================================================

class NetWorthSummary(BaseModel):
    """Net worth by asset class, in the base currency, rounded."""
    model_config = ConfigDict(frozen=True)

    total: int
    crypto: int = 0
    fixed_income: int = 0
    real_estate: int = 0
    retirement: int = 0
    private_equity: int = 0


class CategoryScore(BaseModel):
    """Scorecard of one spending category."""
    model_config = ConfigDict(frozen=True)

    category_id: str
    name: str
    spent: float
    budget: float
    trend_pct: int
    transaction_count: int
    budget_score: int = Field(ge=1, le=5)
    trend_score: int = Field(ge=1, le=5)
    frequency_score: int = Field(ge=1, le=5)
    total_score: int = Field(ge=0, le=100)
    grade: str


class SpendingScorecard(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: list[CategoryScore] = Field(default_factory=list)
    overall_score: int = 0
    overall_grade: Optional[str] = None


class AuditReport(BaseModel):
    """Everything the portfolio audit screen shows."""
    model_config = ConfigDict(frozen=True)

    score: HealthScore
    findings: list[Finding] = Field(default_factory=list)
    net_worth: NetWorthSummary
    monthly_income: int = 0
    debt_to_income_pct: int = 0
    emergency_months: float = 0.0
    total_debt: int = 0
