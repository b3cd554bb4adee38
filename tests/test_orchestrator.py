"""
Integration tests for the flows, with in-memory providers.

Retry backoff is set to zero through the environment so failing fetches do
not slow the suite down.
"""

import asyncio
import pytest
from datetime import date

from finance_engine.audit import AuditLogger, create_correlation_id
from finance_engine.config import Settings
from finance_engine.models.audit import RunEvent, RunEventBuilder, RunEventType, RunSeverity
from finance_engine.models.debt import Debt, PayoffStrategy
from finance_engine.models.projection import (
    FundingSource,
    FundingSourceKind,
    GrowthPlan,
    MilestoneStatus,
)
from finance_engine.models.snapshots import (
    CategorySpend,
    CryptoHolding,
    CryptoSnapshot,
    FinancialSnapshot,
    PrivateEquityHolding,
    PrivateEquitySnapshot,
    SpendingSnapshot,
)
from finance_engine.orchestrator import (
    DebtPlannerFlow,
    FundingProjectionFlow,
    PortfolioAuditFlow,
    create_app_components,
)
from finance_engine.services.providers import (
    InMemoryRunEventSink,
    InMemorySnapshotProvider,
    NotFoundError,
    ProviderConnectionError,
    RunEventSink,
    StaticRateProvider,
)
from finance_engine.validation import InputValidationError


AS_OF = date(2025, 6, 15)


class FlakySnapshotProvider(InMemorySnapshotProvider):
    """Fails the first `failures` debt fetches with a connection error."""

    def __init__(self, failures: int, **kwargs):
        super().__init__(**kwargs)
        self._failures = failures

    async def get_debts(self):
        if self._failures > 0:
            self._failures -= 1
            self._count("get_debts")
            raise ProviderConnectionError("connection reset")
        return await super().get_debts()


class MalformedSnapshotProvider(InMemorySnapshotProvider):
    """Raises a non-provider error from the debt fetch."""

    async def get_debts(self):
        self._count("get_debts")
        raise KeyError("balance")


class BrokenSink(RunEventSink):
    """A sink whose writes always fail."""

    async def append_event(self, event: RunEvent) -> bool:
        raise RuntimeError("disk full")

    async def get_events_by_correlation_id(self, correlation_id):
        return []


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    monkeypatch.setenv("PROVIDER_BACKOFF_MIN_SECONDS", "0")
    monkeypatch.setenv("PROVIDER_BACKOFF_MAX_SECONDS", "0")


@pytest.fixture
def sink():
    return InMemoryRunEventSink()


@pytest.fixture
def debts():
    return [
        Debt(id="card", balance=3000, annual_rate=36, minimum_payment=150),
        Debt(id="car", balance=1500, annual_rate=0.08, minimum_payment=100),
    ]


@pytest.fixture
def plan():
    return GrowthPlan(
        id="west",
        name="West Tower",
        target=500_000,
        start_period="2025-01",
        horizon=24,
        sources=[
            FundingSource(id="fund", kind=FundingSourceKind.INVESTED, balance=200_000),
            FundingSource(id="housing", kind=FundingSourceKind.FIXED, balance=50_000),
        ],
    )


def _types(sink: InMemoryRunEventSink) -> list[RunEventType]:
    return [e.event_type for e in sink.events]


class TestDebtPlannerFlow:
    """Tests for the debt planner flow."""

    def test_plan(self, debts, sink):
        """Test a full run, its events and the single fetch."""
        provider = InMemorySnapshotProvider(debts=debts)
        flow = DebtPlannerFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())
        correlation_id = create_correlation_id()

        comparison, summary = asyncio.run(flow.plan(extra_payment=200, correlation_id=correlation_id))

        assert comparison.winner == PayoffStrategy.AVALANCHE
        assert summary.debt_count == 2
        assert provider.calls == {"get_debts": 1}
        assert _types(sink) == [
            RunEventType.SNAPSHOT_FETCHED,
            RunEventType.PAYOFF_SIMULATED,
            RunEventType.PAYOFF_SIMULATED,
            RunEventType.STRATEGIES_COMPARED,
        ]
        events = asyncio.run(sink.get_events_by_correlation_id(correlation_id))
        assert len(events) == 4

    def test_invalid_debts_rejected(self, sink):
        """Test that invalid input never reaches the simulator."""
        provider = InMemorySnapshotProvider(debts=[Debt(id="bad", balance=-10)])
        flow = DebtPlannerFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        with pytest.raises(InputValidationError) as excinfo:
            asyncio.run(flow.plan())

        assert excinfo.value.result.error_count == 1
        assert _types(sink)[-1] == RunEventType.VALIDATION_FAILED
        assert RunEventType.PAYOFF_SIMULATED not in _types(sink)

    def test_horizon_cap_from_settings(self, sink, monkeypatch):
        """Test that the configured cap stops a plan that never resolves."""
        monkeypatch.setenv("ENGINE_HORIZON_CAP", "24")
        provider = InMemorySnapshotProvider(
            debts=[Debt(id="card", balance=10_000, annual_rate=0.6, minimum_payment=100)]
        )
        flow = DebtPlannerFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        comparison, _ = asyncio.run(flow.plan())

        assert comparison.snowball.total_periods == 24
        assert comparison.snowball.horizon_reached
        assert _types(sink).count(RunEventType.HORIZON_REACHED) == 2

    def test_retries_connection_errors(self, debts, sink):
        """Test that a transient failure is retried."""
        provider = FlakySnapshotProvider(failures=2, debts=debts)
        flow = DebtPlannerFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        comparison, _ = asyncio.run(flow.plan())

        assert provider.calls["get_debts"] == 3
        assert comparison.best.total_periods > 0
        assert RunEventType.PROVIDER_ERROR not in _types(sink)

    def test_gives_up_after_attempts(self, debts, sink):
        """Test that a persistent failure is logged and re-raised."""
        provider = FlakySnapshotProvider(failures=10, debts=debts)
        flow = DebtPlannerFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        with pytest.raises(ProviderConnectionError):
            asyncio.run(flow.plan())

        assert provider.calls["get_debts"] == 3
        assert _types(sink) == [RunEventType.PROVIDER_ERROR]

    def test_unexpected_error_logged_not_retried(self, sink):
        """Test that a non-provider failure is logged as a system error and re-raised."""
        provider = MalformedSnapshotProvider()
        flow = DebtPlannerFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        with pytest.raises(KeyError):
            asyncio.run(flow.plan())

        assert provider.calls["get_debts"] == 1
        assert _types(sink) == [RunEventType.SYSTEM_ERROR]
        event = sink.events[0]
        assert event.severity == RunSeverity.ERROR
        assert event.description == "System error: KeyError"
        assert event.details == {"provider": "debts"}


class TestFundingProjectionFlow:
    """Tests for the funding projection flow."""

    def test_project(self, plan, sink):
        """Test projection, scenarios and milestones with default rates."""
        provider = InMemorySnapshotProvider(plans=[plan])
        flow = FundingProjectionFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        projection, outcomes, milestones = asyncio.run(flow.project(AS_OF))

        assert projection.rates.invested == 0.095
        assert projection.financing_ceiling == 1_000_000
        assert projection.timeline[-1].balances_by_entity["housing"] == 50_000
        assert [o.name for o in outcomes] == ["conservative", "base", "optimistic"]
        assert outcomes[1].final_total == pytest.approx(projection.final_total)
        assert milestones[-1].status == MilestoneStatus.TARGET
        assert _types(sink) == [
            RunEventType.SNAPSHOT_FETCHED,
            RunEventType.PROJECTION_COMPLETED,
            RunEventType.SCENARIOS_COMPARED,
        ]

    def test_unknown_plan_not_retried(self, plan, sink):
        """Test that a missing plan fails at once."""
        provider = InMemorySnapshotProvider(plans=[plan])
        flow = FundingProjectionFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        with pytest.raises(NotFoundError):
            asyncio.run(flow.project(AS_OF, plan_id="east"))

        assert provider.calls["get_growth_plan"] == 1
        assert _types(sink) == [RunEventType.PROVIDER_ERROR]

    def test_invalid_plan_rejected(self, plan, sink):
        """Test that a plan with a non-positive target is rejected."""
        provider = InMemorySnapshotProvider(plans=[plan.model_copy(update={"target": 0})])
        flow = FundingProjectionFlow(provider, audit_logger=AuditLogger(sink), settings=Settings())

        with pytest.raises(InputValidationError):
            asyncio.run(flow.project(AS_OF))

        assert _types(sink)[-1] == RunEventType.VALIDATION_FAILED


class TestPortfolioAuditFlow:
    """Tests for the portfolio audit flow."""

    @pytest.fixture
    def snapshot(self):
        return FinancialSnapshot(
            as_of=date(2000, 1, 1),
            monthly_income=50_000,
            domains=[PrivateEquitySnapshot(holdings=[
                PrivateEquityHolding(ticker="ACME", name="Acme", shares=100, current_price_usd=10),
            ])],
        )

    def test_audit_with_rate_provider(self, snapshot, sink):
        """Test the report, re-stamped as_of and spending scorecard."""
        provider = InMemorySnapshotProvider(
            snapshot=snapshot,
            spending=SpendingSnapshot(categories=[
                CategorySpend(category_id="food", spent=700, budget=1000, transaction_count=5),
            ]),
        )
        flow = PortfolioAuditFlow(
            provider,
            rate_provider=StaticRateProvider(20),
            audit_logger=AuditLogger(sink),
            settings=Settings(),
        )

        report, scorecard = asyncio.run(flow.audit(AS_OF))

        assert report.net_worth.private_equity == 20_000
        assert [f.id for f in report.findings] == ["pe-tax-advisory-ACME"]
        assert "$1,000 USD" in report.findings[0].detail
        assert scorecard.overall_grade == "A"
        assert provider.calls == {"get_financial_snapshot": 1, "get_spending_snapshot": 1}
        assert _types(sink) == [RunEventType.SNAPSHOT_FETCHED, RunEventType.FINDINGS_EVALUATED]

    def test_rate_fallback(self, snapshot, monkeypatch):
        """Test that the configured fallback rate is used without a provider."""
        monkeypatch.setenv("FINDINGS_USD_RATE_FALLBACK", "18")
        flow = PortfolioAuditFlow(InMemorySnapshotProvider(snapshot=snapshot), settings=Settings())

        report, scorecard = asyncio.run(flow.audit(AS_OF))

        assert report.net_worth.private_equity == 18_000
        assert scorecard.overall_grade is None

    def test_currency_from_settings(self, snapshot, monkeypatch):
        """Test that the configured currency reaches finding text."""
        monkeypatch.setenv("ENGINE_CURRENCY_CODE", "EUR")
        snapshot = snapshot.model_copy(update={"domains": [
            CryptoSnapshot(holdings=[CryptoHolding(symbol="BTC", value=500, cost=1000)]),
        ]})
        flow = PortfolioAuditFlow(InMemorySnapshotProvider(snapshot=snapshot), settings=Settings())

        report, _ = asyncio.run(flow.audit(AS_OF))

        assert report.findings[0].id == "crypto-large-loss"
        assert "$500 EUR" in report.findings[0].detail


class TestAppComponents:
    """Tests for the component factory."""

    def test_flows_share_sink(self, debts, plan, sink):
        """Test that every flow logs to the same sink."""
        provider = InMemorySnapshotProvider(debts=debts, plans=[plan])
        debt_flow, projection_flow, audit_flow = create_app_components(provider, sink=sink, settings=Settings())

        asyncio.run(debt_flow.plan())
        asyncio.run(projection_flow.project(AS_OF))
        asyncio.run(audit_flow.audit(AS_OF))

        types = set(_types(sink))
        assert RunEventType.STRATEGIES_COMPARED in types
        assert RunEventType.SCENARIOS_COMPARED in types
        assert RunEventType.FINDINGS_EVALUATED in types


class TestAuditLogger:
    """Tests for the run audit logger."""

    def test_sink_failure_does_not_raise(self):
        """Test that a failing sink is reported, not raised."""
        logger = AuditLogger(BrokenSink())
        event = RunEventBuilder.snapshot_fetched("debts", 2, create_correlation_id())
        assert asyncio.run(logger.log(event)) is False

    def test_no_sink(self):
        """Test local-only logging."""
        event = RunEventBuilder.provider_error("debts", "timeout", create_correlation_id())
        assert asyncio.run(AuditLogger().log(event)) is True
