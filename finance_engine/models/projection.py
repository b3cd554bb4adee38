"""
Funding Projection Models

Inputs and outputs of the growth projector: the funding sources that
accumulate toward a target, the one-time events and recurring contributions
scheduled against them, and the month-by-month timeline that comes out.

DESIGN DECISION: Periods are keyed by "YYYY-MM" labels. Events scheduled by
the persistence layer carry calendar months, and matching on the label keeps
the projector free of date arithmetic inside the loop.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


PERIOD_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _check_period_key(value: str) -> str:
    if not PERIOD_KEY_PATTERN.match(value):
        raise ValueError(f"Invalid period key: {value!r} (expected YYYY-MM)")
    return value


# =============================================================================
# ENUMS
# =============================================================================

class FundingSourceKind(str, Enum):
    """
    Kinds of funding sources.

    FIXED sources (e.g. a locked pension sub-account applied at delivery)
    never compound, whatever rate is configured for them.
    """
    CASH = "cash"
    INVESTED = "invested"
    VOLATILE = "volatile"
    FIXED = "fixed"


class MilestoneStatus(str, Enum):
    DONE = "done"
    PENDING = "pending"
    TARGET = "target"


# =============================================================================
# INPUT MODELS
# =============================================================================

class FundingSource(BaseModel):
    """One account or asset contributing toward the target."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    kind: FundingSourceKind
    balance: float = Field(
        default=0.0,
        description="Balance at period 0"
    )
    annual_rate: Optional[float] = Field(
        default=None,
        description="Own annual rate, used when the run does not override the kind's rate"
    )
    owner: Optional[str] = None


class ScheduledEvent(BaseModel):
    """
    A one-time additive change to a source, effective at a given period.

    Applied before that period's compounding.
    """

    period_key: str = Field(..., description="Period label, YYYY-MM")
    source_id: str
    delta: float
    label: Optional[str] = None

    @field_validator("period_key")
    @classmethod
    def validate_period_key(cls, v: str) -> str:
        return _check_period_key(v)


class RecurringContribution(BaseModel):
    """A fixed amount added to a source every period after the first."""

    source_id: str
    amount: float
    until_period: Optional[str] = Field(
        default=None,
        description="Last period (inclusive) that receives the contribution"
    )
    label: Optional[str] = None

    @field_validator("until_period")
    @classmethod
    def validate_until_period(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_period_key(v)


class ReferenceAsset(BaseModel):
    """
    An independently appreciating value tracked alongside the sources.

    Typically the market value of the property being funded. It feeds the
    equity outlook only and never the gap.
    """

    id: str
    name: Optional[str] = None
    value: float
    annual_rate: Optional[float] = None


class GrowthPlan(BaseModel):
    """
    Everything about a projection except the rates.

    Starting balances and scheduled events are fixed per plan; rates are the
    free parameters varied between scenarios.
    """

    id: str = "plan"
    name: Optional[str] = None
    sources: list[FundingSource] = Field(default_factory=list)
    target: float = Field(..., description="Amount to be funded")
    start_period: str = Field(..., description="Label of period 0, YYYY-MM")
    horizon: int = Field(
        ...,
        ge=0,
        description="Number of periods after period 0"
    )
    events: list[ScheduledEvent] = Field(default_factory=list)
    contributions: list[RecurringContribution] = Field(default_factory=list)
    reference: Optional[ReferenceAsset] = None

    @field_validator("start_period")
    @classmethod
    def validate_start_period(cls, v: str) -> str:
        return _check_period_key(v)

    @property
    def initial_total(self) -> float:
        return sum(s.balance for s in self.sources)


class GrowthRates(BaseModel):
    """
    Annual rates per source kind for one run.

    None means "use each source's own rate". Rates may be fractions or whole
    percentages. FIXED has no entry: it never compounds.
    """
    model_config = ConfigDict(frozen=True)

    cash: Optional[float] = None
    invested: Optional[float] = None
    volatile: Optional[float] = None
    appreciation: Optional[float] = Field(
        default=None,
        description="Rate for the reference asset"
    )

    def for_kind(self, kind: FundingSourceKind) -> Optional[float]:
        if kind == FundingSourceKind.FIXED:
            return 0.0
        return getattr(self, kind.value)


# =============================================================================
# RESULT MODELS
# =============================================================================

class ProjectionEntry(BaseModel):
    """State of every source at the end of one period."""
    model_config = ConfigDict(frozen=True)

    period_index: int = Field(ge=0)
    period_key: str
    balances_by_entity: dict[str, float] = Field(default_factory=dict)
    total: float
    gap: float = Field(
        ...,
        description="target - total; negative once over-funded"
    )
    reference_value: Optional[float] = None


class GrowthProjection(BaseModel):
    """Outcome of one projection run."""
    model_config = ConfigDict(frozen=True)

    plan_id: str
    target: float
    rates: GrowthRates
    timeline: list[ProjectionEntry] = Field(default_factory=list)
    final_total: float
    final_gap: float
    final_reference_value: Optional[float] = None
    financing_ceiling: Optional[float] = None

    @property
    def equity_outlook(self) -> Optional[float]:
        """Reference value minus target at the horizon."""
        if self.final_reference_value is None:
            return None
        return self.final_reference_value - self.target

    @property
    def funded_pct(self) -> float:
        if self.target <= 0:
            return 0.0
        return self.final_total / self.target * 100

    @property
    def gap_pct(self) -> float:
        if self.target <= 0:
            return 0.0
        return self.final_gap / self.target * 100

    @property
    def financing_needed(self) -> float:
        return max(0.0, self.final_gap)

    @property
    def within_financing_range(self) -> bool:
        """Positive gap small enough to be covered by standard financing."""
        if self.financing_ceiling is None:
            return False
        return 0 < self.final_gap < self.financing_ceiling


class ScenarioOutcome(BaseModel):
    """Headline numbers of one named scenario."""
    model_config = ConfigDict(frozen=True)

    name: str
    rates: GrowthRates
    final_total: float
    final_gap: float


class Milestone(BaseModel):
    """A dated checkpoint on the way to the target."""
    model_config = ConfigDict(frozen=True)

    period_key: str
    label: str
    status: MilestoneStatus
