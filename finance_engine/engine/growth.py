"""
Funding Growth Projection

Advances a set of funding sources one month at a time toward a target,
applying recurring contributions and scheduled one-time events, and
compounding each source at the monthly equivalent of its annual rate.

DESIGN DECISION: Monthly rates are (1 + r) ** (1/12) - 1, never r / 12.
Over a multi-year horizon the flat rate overstates growth noticeably.

Period 0 is the current state and is recorded unmodified. For every later
period, in order:
1. recurring contributions still in force
2. scheduled events keyed by that period's label
3. compounding of every non-fixed source and of the reference asset
4. total = sum of sources, gap = target - total
"""

from datetime import date
from typing import Mapping, Optional, Union

from finance_engine.engine.rates import monthly_compound_rate
from finance_engine.models.projection import (
    FundingSourceKind,
    GrowthPlan,
    GrowthProjection,
    GrowthRates,
    Milestone,
    MilestoneStatus,
    ProjectionEntry,
    ScenarioOutcome,
    ScheduledEvent,
)


PeriodLike = Union[str, date]


# =============================================================================
# PERIOD ARITHMETIC
# =============================================================================

def _year_month(value: PeriodLike) -> tuple[int, int]:
    if isinstance(value, date):
        return value.year, value.month
    year, month = value.split("-")[:2]
    return int(year), int(month)


def period_key(value: PeriodLike) -> str:
    """YYYY-MM label of a date or period key."""
    year, month = _year_month(value)
    return f"{year:04d}-{month:02d}"


def shift_period(start: PeriodLike, months: int) -> str:
    """Period label `months` after start."""
    year, month = _year_month(start)
    index = year * 12 + (month - 1) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def period_labels(start: PeriodLike, horizon: int) -> list[str]:
    """Labels of period 0 through period `horizon`, inclusive."""
    return [shift_period(start, n) for n in range(horizon + 1)]


def months_between(start: PeriodLike, end: PeriodLike) -> int:
    """Whole calendar months from start to end, never negative. Days are ignored."""
    y1, m1 = _year_month(start)
    y2, m2 = _year_month(end)
    return max(0, (y2 - y1) * 12 + (m2 - m1))


def transfer_event(
    period: PeriodLike,
    source_id: str,
    gross: float,
    deduction: float = 0.0,
    label: Optional[str] = None,
) -> ScheduledEvent:
    """
    A balance transfer landing in a source, net of a deduction.

    E.g. sale proceeds arriving after the linked mortgages are paid off.
    The delta never goes negative.
    """
    return ScheduledEvent(
        period_key=period_key(period),
        source_id=source_id,
        delta=max(0.0, gross - deduction),
        label=label,
    )


# =============================================================================
# PROJECTION
# =============================================================================

def _source_monthly_rates(plan: GrowthPlan, rates: GrowthRates) -> dict[str, float]:
    monthly = {}
    for source in plan.sources:
        if source.kind == FundingSourceKind.FIXED:
            monthly[source.id] = 0.0
            continue
        annual = rates.for_kind(source.kind)
        if annual is None:
            annual = source.annual_rate
        monthly[source.id] = monthly_compound_rate(annual)
    return monthly


def project_growth(
    plan: GrowthPlan,
    rates: Optional[GrowthRates] = None,
    financing_ceiling: Optional[float] = None,
) -> GrowthProjection:
    """
    Project a growth plan over its horizon.

    Args:
        plan: Sources, target, start period, horizon and scheduled changes.
        rates: Annual rates per source kind. A None rate (or no rates at
            all) falls back to each source's own rate; a missing rate
            normalizes to 0.
        financing_ceiling: Largest positive gap considered coverable by
            standard financing.

    PRECONDITIONS: source ids are unique and every event and contribution
    names an existing source.
    """
    if rates is None:
        rates = GrowthRates()
    labels = period_labels(plan.start_period, plan.horizon)
    monthly = _source_monthly_rates(plan, rates)

    reference_value: Optional[float] = None
    reference_rate = 0.0
    if plan.reference is not None:
        reference_value = plan.reference.value
        appreciation = rates.appreciation
        if appreciation is None:
            appreciation = plan.reference.annual_rate
        reference_rate = monthly_compound_rate(appreciation)

    events_by_period: dict[str, list[ScheduledEvent]] = {}
    for event in plan.events:
        events_by_period.setdefault(event.period_key, []).append(event)

    balances = {s.id: s.balance for s in plan.sources}
    timeline = [_entry(0, labels[0], balances, plan.target, reference_value)]

    for index in range(1, plan.horizon + 1):
        key = labels[index]
        balances = dict(balances)

        for contribution in plan.contributions:
            # YYYY-MM labels order correctly as strings
            if contribution.until_period is None or key <= contribution.until_period:
                balances[contribution.source_id] += contribution.amount

        for event in events_by_period.get(key, []):
            balances[event.source_id] += event.delta

        for source_id, rate in monthly.items():
            balances[source_id] *= 1 + rate
        if reference_value is not None:
            reference_value *= 1 + reference_rate

        timeline.append(_entry(index, key, balances, plan.target, reference_value))

    last = timeline[-1]
    return GrowthProjection(
        plan_id=plan.id,
        target=plan.target,
        rates=rates,
        timeline=timeline,
        final_total=last.total,
        final_gap=last.gap,
        final_reference_value=last.reference_value,
        financing_ceiling=financing_ceiling,
    )


def _entry(
    index: int,
    key: str,
    balances: Mapping[str, float],
    target: float,
    reference_value: Optional[float],
) -> ProjectionEntry:
    total = sum(balances.values())
    return ProjectionEntry(
        period_index=index,
        period_key=key,
        balances_by_entity=dict(balances),
        total=total,
        gap=target - total,
        reference_value=reference_value,
    )


def run_scenarios(
    plan: GrowthPlan,
    scenarios: Mapping[str, GrowthRates],
) -> list[ScenarioOutcome]:
    """
    Re-run the same plan under each named set of rates.

    Rates are the only free parameters; balances and events are shared.
    Outcomes come back in the mapping's order.
    """
    outcomes = []
    for name, rates in scenarios.items():
        projection = project_growth(plan, rates)
        outcomes.append(
            ScenarioOutcome(
                name=name,
                rates=rates,
                final_total=projection.final_total,
                final_gap=projection.final_gap,
            )
        )
    return outcomes


# =============================================================================
# MILESTONES
# =============================================================================

def build_milestones(plan: GrowthPlan, as_of_period: PeriodLike) -> list[Milestone]:
    """
    Dated checkpoints on the way to the target, sorted by period.

    Includes the current funded position, every scheduled event, the last
    period of each bounded contribution, each fixed source being applied at
    the end, and the target itself. Events at or before as_of_period are
    done; the rest are pending. Ties keep insertion order.
    """
    now = period_key(as_of_period)
    end = shift_period(plan.start_period, plan.horizon)
    names = {s.id: s.name or s.id for s in plan.sources}

    def status(key: str) -> MilestoneStatus:
        return MilestoneStatus.DONE if key <= now else MilestoneStatus.PENDING

    funded_pct = plan.initial_total / plan.target * 100 if plan.target > 0 else 0.0
    milestones = [
        Milestone(
            period_key=now,
            label=f"{plan.initial_total:,.0f} available ({funded_pct:.1f}% of target)",
            status=MilestoneStatus.DONE,
        )
    ]

    for event in plan.events:
        label = event.label or f"{event.delta:,.0f} into {names.get(event.source_id, event.source_id)}"
        milestones.append(
            Milestone(period_key=event.period_key, label=label, status=status(event.period_key))
        )

    for contribution in plan.contributions:
        if contribution.until_period is None:
            continue
        what = contribution.label or f"{contribution.amount:,.0f} contribution"
        milestones.append(
            Milestone(
                period_key=contribution.until_period,
                label=f"Last {what}",
                status=status(contribution.until_period),
            )
        )

    for source in plan.sources:
        if source.kind == FundingSourceKind.FIXED:
            milestones.append(
                Milestone(
                    period_key=end,
                    label=f"{names[source.id]} ({source.balance:,.0f}) applied to balance",
                    status=MilestoneStatus.PENDING,
                )
            )

    milestones.append(
        Milestone(
            period_key=end,
            label=f"{plan.name or 'Target'}: final balance due",
            status=MilestoneStatus.TARGET,
        )
    )

    return sorted(milestones, key=lambda m: m.period_key)
