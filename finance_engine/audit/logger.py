"""
Run Audit Logger

DESIGN DECISION: Every engine run is logged. A figure shown on the dashboard
can then be traced to the inputs, parameters and outcome that produced it.

The audit logger:
- Is async so a slow sink does not hold up the run
- Never raises because of a sink failure
- Ties the events of one run together with a correlation id
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_engine.models.audit import RunEvent, RunEventBuilder, RunSeverity
from finance_engine.models.debt import PayoffResult, StrategyComparison
from finance_engine.models.projection import GrowthProjection, ScenarioOutcome
from finance_engine.models.findings import AuditReport, Severity
from finance_engine.services.providers.interface import RunEventSink


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central run logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional sink (for persistence)
    """

    def __init__(self, sink: Optional[RunEventSink] = None):
        """
        Args:
            sink: Persistence backend. If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger("finance_engine.audit")

    async def log(self, event: RunEvent) -> bool:
        """
        Log a run event.

        Always logs locally. Persists to the sink if one is configured.

        Returns True if the sink write succeeded (or no sink is configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == RunSeverity.ERROR:
            self._logger.error("run_event", **log_dict)
        elif event.severity == RunSeverity.WARNING:
            self._logger.warning("run_event", **log_dict)
        elif event.severity == RunSeverity.DEBUG:
            self._logger.debug("run_event", **log_dict)
        else:
            self._logger.info("run_event", **log_dict)

        if self._sink:
            try:
                return await self._sink.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "run_event_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_snapshot_fetched(
        self,
        subject: str,
        record_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(RunEventBuilder.snapshot_fetched(subject, record_count, correlation_id))

    async def log_validation_failed(
        self,
        subject: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        await self.log(RunEventBuilder.validation_failed(subject, issues, correlation_id))

    async def log_payoff_simulated(
        self,
        result: PayoffResult,
        correlation_id: UUID,
        horizon_cap: int,
    ) -> None:
        """Log one strategy run, plus a warning when it hit the cap."""
        await self.log(RunEventBuilder.payoff_simulated(
            strategy=result.strategy.value,
            extra_payment=result.extra_payment,
            total_periods=result.total_periods,
            total_interest_paid=result.total_interest_paid,
            correlation_id=correlation_id,
        ))
        if result.horizon_reached:
            await self.log(RunEventBuilder.horizon_reached(
                strategy=result.strategy.value,
                horizon_cap=horizon_cap,
                remaining_balance=result.final_total,
                correlation_id=correlation_id,
            ))

    async def log_strategies_compared(
        self,
        comparison: StrategyComparison,
        correlation_id: UUID,
    ) -> None:
        await self.log(RunEventBuilder.strategies_compared(
            winner=comparison.winner.value,
            periods_saved=comparison.periods_saved,
            interest_saved=comparison.interest_saved,
            correlation_id=correlation_id,
        ))

    async def log_projection_completed(
        self,
        projection: GrowthProjection,
        correlation_id: UUID,
    ) -> None:
        await self.log(RunEventBuilder.projection_completed(
            plan_id=projection.plan_id,
            horizon=len(projection.timeline) - 1,
            final_total=projection.final_total,
            final_gap=projection.final_gap,
            correlation_id=correlation_id,
        ))

    async def log_scenarios_compared(
        self,
        plan_id: str,
        outcomes: list[ScenarioOutcome],
        correlation_id: UUID,
    ) -> None:
        await self.log(RunEventBuilder.scenarios_compared(
            plan_id=plan_id,
            outcomes={o.name: round(o.final_gap, 2) for o in outcomes},
            correlation_id=correlation_id,
        ))

    async def log_findings_evaluated(
        self,
        report: AuditReport,
        correlation_id: UUID,
    ) -> None:
        counts = {severity: 0 for severity in Severity}
        for finding in report.findings:
            counts[finding.severity] += 1
        await self.log(RunEventBuilder.findings_evaluated(
            red=counts[Severity.RED],
            amber=counts[Severity.AMBER],
            green=counts[Severity.GREEN],
            score=report.score.total,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(RunEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_provider_error(
        self,
        provider: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(RunEventBuilder.provider_error(provider, error_message, correlation_id))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a run and pass it through every step.
    """
    return uuid4()
