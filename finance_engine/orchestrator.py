"""
Main Orchestrator for the Finance Engine

This module ties the providers, validation, engine and audit logging
together into the three end-to-end flows the dashboard calls:
1. Debt planning (fetch debts -> validate -> compare strategies)
2. Funding projection (fetch plan -> validate -> project -> scenarios)
3. Portfolio audit (fetch snapshots -> findings -> score -> scorecards)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every input is fetched once, before any simulation runs
- Nothing reaches the engine without passing validation
- Every step is audited

This is also the only place that reads settings. The engine receives every
constant as an explicit argument.
"""

from datetime import date
from typing import Awaitable, Callable, Optional, TypeVar
from uuid import UUID

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from finance_engine.audit import AuditLogger, create_correlation_id
from finance_engine.config import Settings, get_settings
from finance_engine.config.settings import ProviderSettings
from finance_engine.engine.growth import build_milestones, project_growth, run_scenarios
from finance_engine.engine.payoff import compare_strategies, summarize_debts
from finance_engine.findings.engine import FindingsEngine, audit_portfolio
from finance_engine.findings.scoring import score_spending
from finance_engine.formatting import FormatConfig
from finance_engine.models.debt import DebtSummary, StrategyComparison
from finance_engine.models.findings import AuditReport, SpendingScorecard
from finance_engine.models.projection import (
    GrowthProjection,
    GrowthRates,
    Milestone,
    ScenarioOutcome,
)
from finance_engine.models.validation import ValidationResult
from finance_engine.services.providers import (
    ProviderConnectionError,
    ProviderError,
    RateProvider,
    RunEventSink,
    SnapshotProvider,
)
from finance_engine.validation import InputValidationError, InputValidator


T = TypeVar("T")


async def fetch_with_retry(
    name: str,
    call: Callable[..., Awaitable[T]],
    *args,
    provider_settings: ProviderSettings,
    audit_logger: AuditLogger,
    correlation_id: UUID,
) -> T:
    """
    Run one provider call with retries.

    Only connection failures are retried. Any provider error that survives
    the retries is logged and re-raised. Anything else the provider raises is
    logged as a system error and re-raised without a retry.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(provider_settings.retry_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=provider_settings.backoff_min_seconds,
            max=provider_settings.backoff_max_seconds,
        ),
        retry=retry_if_exception_type(ProviderConnectionError),
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                return await call(*args)
    except ProviderError as e:
        await audit_logger.log_provider_error(name, str(e), correlation_id)
        raise
    except Exception as e:
        await audit_logger.log_error(
            error_type=type(e).__name__,
            error_message=str(e),
            details={"provider": name},
            correlation_id=correlation_id,
        )
        raise


async def _reject_if_invalid(
    result: ValidationResult,
    audit_logger: AuditLogger,
    correlation_id: UUID,
) -> None:
    if result.is_valid:
        return
    await audit_logger.log_validation_failed(
        subject=result.subject,
        issues=[issue.model_dump() for issue in result.issues],
        correlation_id=correlation_id,
    )
    raise InputValidationError(result)


class DebtPlannerFlow:
    """
    Orchestrates the debt planner.

    Flow:
    1. Fetch → active debts, once
    2. Validate → reject negative or duplicate records
    3. Simulate → snowball, avalanche and zero-extra baselines
    4. Audit → one event per strategy, a warning per capped run
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._provider = provider
        self._validator = validator or InputValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()

    async def plan(
        self,
        extra_payment: float = 0.0,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[StrategyComparison, DebtSummary]:
        """
        Compare payoff strategies for the current debts.

        Returns:
            (comparison, summary)

        Raises:
            InputValidationError: If the debts fail validation
            ProviderError: If the debts cannot be fetched
        """
        correlation_id = correlation_id or create_correlation_id()
        horizon_cap = self._settings.engine.horizon_cap

        debts = await fetch_with_retry(
            "debts",
            self._provider.get_debts,
            provider_settings=self._settings.provider,
            audit_logger=self._audit_logger,
            correlation_id=correlation_id,
        )
        await self._audit_logger.log_snapshot_fetched("debts", len(debts), correlation_id)

        result = self._validator.validate_debts(debts, extra_payment)
        await _reject_if_invalid(result, self._audit_logger, correlation_id)

        comparison = compare_strategies(debts, extra_payment, horizon_cap)

        await self._audit_logger.log_payoff_simulated(comparison.snowball, correlation_id, horizon_cap)
        await self._audit_logger.log_payoff_simulated(comparison.avalanche, correlation_id, horizon_cap)
        await self._audit_logger.log_strategies_compared(comparison, correlation_id)

        return comparison, summarize_debts(debts)


class FundingProjectionFlow:
    """
    Orchestrates the funding projection.

    Flow:
    1. Fetch → the growth plan, once
    2. Validate → unknown sources, negative balances, bad targets
    3. Project → the requested rates, then every configured scenario
    4. Milestones → dated checkpoints relative to as_of
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._provider = provider
        self._validator = validator or InputValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()

    async def project(
        self,
        as_of: date,
        plan_id: Optional[str] = None,
        rates: Optional[GrowthRates] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[GrowthProjection, list[ScenarioOutcome], list[Milestone]]:
        """
        Project a funding plan.

        Args:
            as_of: Evaluation date; decides which milestones are done
            plan_id: Plan to project; the provider's default when None
            rates: Rates for the main projection; configured defaults when None

        Returns:
            (projection, scenario_outcomes, milestones)

        Raises:
            InputValidationError: If the plan fails validation
            ProviderError: If the plan cannot be fetched
        """
        correlation_id = correlation_id or create_correlation_id()
        projection_settings = self._settings.projection

        plan = await fetch_with_retry(
            "growth_plan",
            self._provider.get_growth_plan,
            plan_id,
            provider_settings=self._settings.provider,
            audit_logger=self._audit_logger,
            correlation_id=correlation_id,
        )
        await self._audit_logger.log_snapshot_fetched(
            f"growth_plan:{plan.id}", len(plan.sources), correlation_id
        )

        result = self._validator.validate_growth_plan(plan)
        await _reject_if_invalid(result, self._audit_logger, correlation_id)

        if rates is None:
            rates = projection_settings.default_rates
        projection = project_growth(
            plan,
            rates,
            financing_ceiling=projection_settings.financing_ceiling,
        )
        await self._audit_logger.log_projection_completed(projection, correlation_id)

        outcomes = run_scenarios(plan, projection_settings.scenarios)
        await self._audit_logger.log_scenarios_compared(plan.id, outcomes, correlation_id)

        return projection, outcomes, build_milestones(plan, as_of)


class PortfolioAuditFlow:
    """
    Orchestrates the portfolio audit.

    Flow:
    1. Fetch → portfolio snapshot, spending snapshot and USD rate, once
    2. Evaluate → findings, health score, net worth
    3. Score → spending scorecards
    4. Audit → severity counts and score
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        rate_provider: Optional[RateProvider] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
        fmt: Optional[FormatConfig] = None,
    ):
        self._provider = provider
        self._rate_provider = rate_provider
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()
        self._engine = FindingsEngine(
            thresholds=self._settings.findings.thresholds,
            fmt=fmt or FormatConfig(currency_code=self._settings.engine.currency_code),
        )

    async def audit(
        self,
        as_of: date,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[AuditReport, SpendingScorecard]:
        """
        Audit the portfolio and spending as of a date.

        Returns:
            (report, spending_scorecard)

        Raises:
            ProviderError: If a snapshot or the rate cannot be fetched
        """
        correlation_id = correlation_id or create_correlation_id()
        fetch = dict(
            provider_settings=self._settings.provider,
            audit_logger=self._audit_logger,
            correlation_id=correlation_id,
        )

        snapshot = await fetch_with_retry(
            "financial_snapshot", self._provider.get_financial_snapshot, as_of, **fetch
        )
        spending = await fetch_with_retry(
            "spending_snapshot", self._provider.get_spending_snapshot, as_of, **fetch
        )
        usd_rate = self._settings.findings.usd_rate_fallback
        if self._rate_provider is not None:
            usd_rate = await fetch_with_retry("usd_rate", self._rate_provider.get_usd_rate, **fetch)

        await self._audit_logger.log_snapshot_fetched(
            "financial_snapshot", len(snapshot.domains), correlation_id
        )

        report = audit_portfolio(snapshot, usd_rate=usd_rate, engine=self._engine)
        await self._audit_logger.log_findings_evaluated(report, correlation_id)

        return report, score_spending(spending)


def create_app_components(
    provider: SnapshotProvider,
    rate_provider: Optional[RateProvider] = None,
    sink: Optional[RunEventSink] = None,
    settings: Optional[Settings] = None,
) -> tuple[DebtPlannerFlow, FundingProjectionFlow, PortfolioAuditFlow]:
    """
    Factory function to create all flows over one provider.

    Args:
        provider: Source of debts, plans and snapshots
        rate_provider: Source of the USD rate; the configured fallback when None
        sink: Persistence for run events; local logging only when None
        settings: Settings override, mainly for tests

    Returns:
        (debt_planner, funding_projection, portfolio_audit)
    """
    settings = settings or get_settings()
    audit_logger = AuditLogger(sink)

    debt_flow = DebtPlannerFlow(provider, audit_logger=audit_logger, settings=settings)
    projection_flow = FundingProjectionFlow(provider, audit_logger=audit_logger, settings=settings)
    audit_flow = PortfolioAuditFlow(
        provider,
        rate_provider=rate_provider,
        audit_logger=audit_logger,
        settings=settings,
    )

    return debt_flow, projection_flow, audit_flow
