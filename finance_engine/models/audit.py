"""
Run Audit Models

Every engine run is logged so a number shown on the dashboard can be traced
back to the inputs and parameters that produced it.

DESIGN DECISION: Run events are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class RunEventType(str, Enum):
    """
    Types of events we audit.

    Each flow step has its own event type.
    """
    # Inputs
    SNAPSHOT_FETCHED = "snapshot_fetched"
    VALIDATION_FAILED = "validation_failed"

    # Debt planner
    PAYOFF_SIMULATED = "payoff_simulated"
    STRATEGIES_COMPARED = "strategies_compared"
    HORIZON_REACHED = "horizon_reached"

    # Funding projection
    PROJECTION_COMPLETED = "projection_completed"
    SCENARIOS_COMPARED = "scenarios_compared"

    # Portfolio audit
    FINDINGS_EVALUATED = "findings_evaluated"

    # System events
    SYSTEM_ERROR = "system_error"
    PROVIDER_ERROR = "provider_error"


class RunSeverity(str, Enum):
    """Severity level for run events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class RunEvent(BaseModel):
    """
    A single audit event.

    One run produces several of these, tied together by correlation_id.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: RunEventType
    severity: RunSeverity = RunSeverity.INFO

    subject: Optional[str] = Field(
        default=None,
        description="What the event is about (e.g., 'debts', 'growth_plan:west')"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one run"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "subject": self.subject,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class RunEventBuilder:
    """
    Helper class to build run events with common patterns.

    Usage:
        event = RunEventBuilder.strategies_compared("avalanche", 4, 1250, correlation_id)
        event = RunEventBuilder.findings_evaluated(3, 1, 4, 72, correlation_id)
    """

    @staticmethod
    def snapshot_fetched(
        subject: str,
        record_count: int,
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.SNAPSHOT_FETCHED,
            severity=RunSeverity.DEBUG,
            subject=subject,
            correlation_id=correlation_id,
            description=f"Fetched {subject} ({record_count} records)",
            details={"record_count": record_count},
        )

    @staticmethod
    def validation_failed(
        subject: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.VALIDATION_FAILED,
            severity=RunSeverity.WARNING,
            subject=subject,
            correlation_id=correlation_id,
            description=f"Input rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def payoff_simulated(
        strategy: str,
        extra_payment: float,
        total_periods: int,
        total_interest_paid: int,
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.PAYOFF_SIMULATED,
            subject="debts",
            correlation_id=correlation_id,
            description=f"{strategy} payoff in {total_periods} periods",
            details={
                "strategy": strategy,
                "extra_payment": extra_payment,
                "total_periods": total_periods,
                "total_interest_paid": total_interest_paid,
            },
        )

    @staticmethod
    def strategies_compared(
        winner: str,
        periods_saved: int,
        interest_saved: int,
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.STRATEGIES_COMPARED,
            subject="debts",
            correlation_id=correlation_id,
            description=f"{winner} wins, saving {interest_saved} in interest",
            details={
                "winner": winner,
                "periods_saved": periods_saved,
                "interest_saved": interest_saved,
            },
        )

    @staticmethod
    def horizon_reached(
        strategy: str,
        horizon_cap: int,
        remaining_balance: float,
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.HORIZON_REACHED,
            severity=RunSeverity.WARNING,
            subject="debts",
            correlation_id=correlation_id,
            description=f"{strategy} plan still owes {remaining_balance:,.0f} after {horizon_cap} periods",
            details={
                "strategy": strategy,
                "horizon_cap": horizon_cap,
                "remaining_balance": round(remaining_balance, 2),
            },
        )

    @staticmethod
    def projection_completed(
        plan_id: str,
        horizon: int,
        final_total: float,
        final_gap: float,
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.PROJECTION_COMPLETED,
            subject=f"growth_plan:{plan_id}",
            correlation_id=correlation_id,
            description=f"Projected {horizon} periods, gap {final_gap:,.0f}",
            details={
                "horizon": horizon,
                "final_total": round(final_total, 2),
                "final_gap": round(final_gap, 2),
            },
        )

    @staticmethod
    def scenarios_compared(
        plan_id: str,
        outcomes: dict[str, float],
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.SCENARIOS_COMPARED,
            subject=f"growth_plan:{plan_id}",
            correlation_id=correlation_id,
            description=f"Compared {len(outcomes)} scenarios",
            details={"final_gaps": outcomes},
        )

    @staticmethod
    def findings_evaluated(
        red: int,
        amber: int,
        green: int,
        score: int,
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.FINDINGS_EVALUATED,
            severity=RunSeverity.WARNING if red else RunSeverity.INFO,
            subject="portfolio",
            correlation_id=correlation_id,
            description=f"Health score {score}: {red} red, {amber} amber, {green} green",
            details={
                "red": red,
                "amber": amber,
                "green": green,
                "score": score,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.SYSTEM_ERROR,
            severity=RunSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def provider_error(
        provider: str,
        error_message: str,
        correlation_id: UUID,
    ) -> RunEvent:
        return RunEvent(
            event_type=RunEventType.PROVIDER_ERROR,
            severity=RunSeverity.ERROR,
            description=f"Provider error: {provider}",
            error_message=error_message,
            details={"provider": provider},
            correlation_id=correlation_id,
        )
