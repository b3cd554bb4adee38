"""
Tests for the funding growth projector, period helpers and milestones.
"""

import pytest
from datetime import date

from finance_engine.engine.growth import (
    build_milestones,
    months_between,
    period_key,
    period_labels,
    project_growth,
    run_scenarios,
    shift_period,
    transfer_event,
)
from finance_engine.engine.rates import monthly_compound_rate
from finance_engine.models.projection import (
    FundingSource,
    FundingSourceKind,
    GrowthPlan,
    GrowthRates,
    MilestoneStatus,
    RecurringContribution,
    ReferenceAsset,
    ScheduledEvent,
)


def _plan(**overrides) -> GrowthPlan:
    values = dict(
        id="west",
        name="West Tower",
        target=200_000,
        start_period="2025-01",
        horizon=12,
        sources=[FundingSource(id="fund", kind=FundingSourceKind.INVESTED, balance=100_000)],
    )
    values.update(overrides)
    return GrowthPlan(**values)


class TestPeriodHelpers:
    """Tests for YYYY-MM period arithmetic."""

    def test_period_key_from_date(self):
        """Test that a date maps to its month label."""
        assert period_key(date(2025, 3, 31)) == "2025-03"

    def test_shift_across_year(self):
        """Test shifting across a year boundary."""
        assert shift_period("2025-11", 3) == "2026-02"
        assert shift_period("2025-01", 0) == "2025-01"

    def test_period_labels_inclusive(self):
        """Test that labels cover period 0 through the horizon."""
        labels = period_labels("2025-12", 2)
        assert labels == ["2025-12", "2026-01", "2026-02"]

    def test_months_between(self):
        """Test whole months, never negative."""
        assert months_between("2025-01", "2026-03") == 14
        assert months_between(date(2025, 6, 30), date(2025, 7, 1)) == 1
        assert months_between("2026-01", "2025-01") == 0

    def test_transfer_event_net_of_deduction(self):
        """Test that a transfer lands net of the deduction, never negative."""
        event = transfer_event(date(2025, 6, 15), "cash", 3_000_000, 1_200_000, label="Sale proceeds")
        assert event.period_key == "2025-06"
        assert event.delta == 1_800_000

        underwater = transfer_event("2025-06", "cash", 100, 500)
        assert underwater.delta == 0.0


class TestProjectGrowth:
    """Tests for the month-stepped projection."""

    def test_period_zero_is_unmodified(self):
        """Test that period 0 reports the starting state."""
        projection = project_growth(_plan(), GrowthRates(invested=0.12))
        first = projection.timeline[0]
        assert first.period_index == 0
        assert first.period_key == "2025-01"
        assert first.total == 100_000
        assert first.gap == 100_000

    def test_zero_horizon(self):
        """Test that a zero horizon yields only period 0."""
        projection = project_growth(_plan(horizon=0), GrowthRates(invested=0.12))
        assert len(projection.timeline) == 1
        assert projection.final_total == 100_000

    def test_compounds_to_annual_rate(self):
        """Test that twelve monthly steps reproduce the annual rate."""
        projection = project_growth(_plan(), GrowthRates(invested=0.12))
        assert len(projection.timeline) == 13
        assert projection.final_total == pytest.approx(112_000)
        assert projection.final_gap == pytest.approx(88_000)
        assert projection.timeline[-1].period_key == "2026-01"

    def test_percentage_rate_normalized(self):
        """Test that a whole-percentage rate is read as a fraction."""
        projection = project_growth(_plan(), GrowthRates(invested=12))
        assert projection.final_total == pytest.approx(112_000)

    def test_fixed_source_never_grows(self):
        """Test that fixed sources ignore every rate."""
        plan = _plan(sources=[
            FundingSource(id="locked", kind=FundingSourceKind.FIXED, balance=50_000, annual_rate=0.3),
        ])
        projection = project_growth(plan, GrowthRates(cash=0.3, invested=0.3, volatile=0.3))
        assert projection.final_total == 50_000

    def test_missing_rate_uses_source_rate(self):
        """Test that an unset kind rate falls back to the source's own rate."""
        plan = _plan(sources=[
            FundingSource(id="fund", kind=FundingSourceKind.INVESTED, balance=100_000, annual_rate=0.12),
        ])
        assert project_growth(plan).final_total == pytest.approx(112_000)
        assert project_growth(plan, GrowthRates(invested=0.0)).final_total == pytest.approx(100_000)

    def test_contributions_stop_after_until_period(self):
        """Test that a bounded contribution stops after its last period."""
        plan = _plan(
            horizon=4,
            sources=[FundingSource(id="cash", kind=FundingSourceKind.CASH, balance=0)],
            contributions=[RecurringContribution(source_id="cash", amount=1000, until_period="2025-03")],
        )
        projection = project_growth(plan, GrowthRates(cash=0.0))
        totals = [entry.total for entry in projection.timeline]
        assert totals == [0, 1000, 2000, 2000, 2000]

    def test_events_apply_on_their_period(self):
        """Test that an event lands on its period and one at period 0 is ignored."""
        plan = _plan(
            horizon=3,
            sources=[FundingSource(id="cash", kind=FundingSourceKind.CASH, balance=0)],
            events=[
                ScheduledEvent(period_key="2025-01", source_id="cash", delta=999),
                ScheduledEvent(period_key="2025-03", source_id="cash", delta=5000),
            ],
        )
        projection = project_growth(plan, GrowthRates(cash=0.0))
        totals = [entry.total for entry in projection.timeline]
        assert totals == [0, 0, 5000, 5000]

    def test_event_compounds_in_its_own_period(self):
        """Test that events are applied before that period's compounding."""
        plan = _plan(
            horizon=1,
            sources=[FundingSource(id="fund", kind=FundingSourceKind.INVESTED, balance=0)],
            events=[ScheduledEvent(period_key="2025-02", source_id="fund", delta=1000)],
        )
        projection = project_growth(plan, GrowthRates(invested=0.12))
        assert projection.final_total == pytest.approx(1000 * (1 + monthly_compound_rate(0.12)))

    def test_reference_asset_appreciates_separately(self):
        """Test that the reference asset never affects the gap."""
        plan = _plan(reference=ReferenceAsset(id="unit", value=1_000_000, annual_rate=0.05))
        projection = project_growth(plan, GrowthRates(invested=0.0, appreciation=0.125))
        assert projection.final_reference_value == pytest.approx(1_125_000)
        assert projection.final_gap == pytest.approx(100_000)
        assert projection.equity_outlook == pytest.approx(925_000)

    def test_reference_falls_back_to_own_rate(self):
        """Test that an unset appreciation uses the asset's own rate."""
        plan = _plan(reference=ReferenceAsset(id="unit", value=1_000_000, annual_rate=0.05))
        projection = project_growth(plan, GrowthRates(invested=0.0))
        assert projection.final_reference_value == pytest.approx(1_050_000)

    def test_overfunded_gap_is_negative(self):
        """Test that the gap goes negative once over-funded."""
        projection = project_growth(_plan(target=50_000), GrowthRates(invested=0.0))
        assert projection.final_gap == -50_000
        assert projection.financing_needed == 0.0

    def test_financing_ceiling_carried(self):
        """Test that the financing ceiling decides the financing range."""
        projection = project_growth(_plan(), GrowthRates(invested=0.0), financing_ceiling=1_000_000)
        assert projection.within_financing_range is True

    @pytest.mark.parametrize("horizon", [0, 1, 24, 360])
    def test_zero_rates_keep_total(self, horizon):
        """Test that zero rates and no events leave the total unchanged."""
        plan = _plan(
            horizon=horizon,
            sources=[
                FundingSource(id="cash", kind=FundingSourceKind.CASH, balance=1234.5),
                FundingSource(id="fund", kind=FundingSourceKind.INVESTED, balance=100_000),
                FundingSource(id="coins", kind=FundingSourceKind.VOLATILE, balance=777),
            ],
        )
        projection = project_growth(plan, GrowthRates(cash=0, invested=0, volatile=0))
        assert projection.final_total == pytest.approx(plan.initial_total)

    def test_higher_rate_never_lowers_total(self):
        """Test that raising a rate never decreases the final total."""
        totals = [
            project_growth(_plan(), GrowthRates(invested=rate)).final_total
            for rate in (0.0, 0.05, 0.095, 0.2)
        ]
        assert totals == sorted(totals)

    def test_same_input_same_output(self):
        """Test that projection is deterministic."""
        plan = _plan()
        rates = GrowthRates(invested=0.095)
        assert project_growth(plan, rates) == project_growth(plan, rates)


class TestScenarios:
    """Tests for scenario comparison."""

    def test_outcomes_follow_rates(self):
        """Test that a higher rate closes more of the gap, in mapping order."""
        scenarios = {
            "conservative": GrowthRates(invested=0.08),
            "base": GrowthRates(invested=0.095),
            "optimistic": GrowthRates(invested=0.11),
        }
        outcomes = run_scenarios(_plan(), scenarios)
        assert [o.name for o in outcomes] == ["conservative", "base", "optimistic"]
        gaps = [o.final_gap for o in outcomes]
        assert gaps[0] > gaps[1] > gaps[2]
        assert outcomes[1].rates == scenarios["base"]


class TestMilestones:
    """Tests for milestone building."""

    @pytest.fixture
    def plan(self):
        return _plan(
            target=200_000,
            sources=[
                FundingSource(id="fund", name="Debt fund", kind=FundingSourceKind.INVESTED, balance=40_000),
                FundingSource(id="housing", name="Housing account", kind=FundingSourceKind.FIXED, balance=10_000),
            ],
            events=[
                ScheduledEvent(period_key="2025-03", source_id="fund", delta=20_000, label="Bonus"),
                ScheduledEvent(period_key="2025-09", source_id="fund", delta=30_000),
            ],
            contributions=[
                RecurringContribution(
                    source_id="fund", amount=5000, until_period="2025-08", label="monthly deposit"
                ),
                RecurringContribution(source_id="fund", amount=100),
            ],
        )

    def test_sorted_with_statuses(self, plan):
        """Test order, labels and done/pending status."""
        milestones = build_milestones(plan, date(2025, 6, 10))
        assert [(m.period_key, m.status) for m in milestones] == [
            ("2025-03", MilestoneStatus.DONE),
            ("2025-06", MilestoneStatus.DONE),
            ("2025-08", MilestoneStatus.PENDING),
            ("2025-09", MilestoneStatus.PENDING),
            ("2026-01", MilestoneStatus.PENDING),
            ("2026-01", MilestoneStatus.TARGET),
        ]

    def test_labels(self, plan):
        """Test the generated milestone labels."""
        labels = [m.label for m in build_milestones(plan, "2025-06")]
        assert labels == [
            "Bonus",
            "50,000 available (25.0% of target)",
            "Last monthly deposit",
            "30,000 into Debt fund",
            "Housing account (10,000) applied to balance",
            "West Tower: final balance due",
        ]

    def test_event_on_as_of_is_done(self, plan):
        """Test that an event in the current month counts as done."""
        milestones = build_milestones(plan, "2025-09")
        event = next(m for m in milestones if m.label == "30,000 into Debt fund")
        assert event.status == MilestoneStatus.DONE
