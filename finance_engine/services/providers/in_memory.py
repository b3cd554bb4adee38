"""
In-Memory Providers

Reference implementations backed by plain objects. Used in tests and by
callers that already hold their records in memory.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from finance_engine.models.audit import RunEvent
from finance_engine.models.debt import Debt
from finance_engine.models.projection import GrowthPlan
from finance_engine.models.snapshots import FinancialSnapshot, SpendingSnapshot
from finance_engine.services.providers.interface import (
    NotFoundError,
    RateProvider,
    RunEventSink,
    SnapshotProvider,
)


class InMemorySnapshotProvider(SnapshotProvider):
    """
    Serves fixed records.

    The financial snapshot is re-stamped with the requested as_of so rules
    are evaluated against the caller's date.
    """

    def __init__(
        self,
        debts: Optional[list[Debt]] = None,
        plans: Optional[list[GrowthPlan]] = None,
        snapshot: Optional[FinancialSnapshot] = None,
        spending: Optional[SpendingSnapshot] = None,
    ):
        self._debts = list(debts or [])
        self._plans = {p.id: p for p in plans or []}
        self._snapshot = snapshot
        self._spending = spending
        self.calls: dict[str, int] = {}

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def get_debts(self) -> list[Debt]:
        self._count("get_debts")
        return list(self._debts)

    async def get_growth_plan(self, plan_id: Optional[str] = None) -> GrowthPlan:
        self._count("get_growth_plan")
        if plan_id is None:
            if not self._plans:
                raise NotFoundError("No growth plan configured")
            return next(iter(self._plans.values()))
        try:
            return self._plans[plan_id]
        except KeyError:
            raise NotFoundError(f"Growth plan {plan_id} not found") from None

    async def get_financial_snapshot(self, as_of: date) -> FinancialSnapshot:
        self._count("get_financial_snapshot")
        if self._snapshot is None:
            return FinancialSnapshot(as_of=as_of)
        return self._snapshot.model_copy(update={"as_of": as_of})

    async def get_spending_snapshot(self, as_of: date) -> SpendingSnapshot:
        self._count("get_spending_snapshot")
        if self._spending is None:
            return SpendingSnapshot(month=as_of.strftime("%Y-%m"))
        return self._spending


class StaticRateProvider(RateProvider):
    """Always returns the same rate."""

    def __init__(self, usd_rate: float):
        self._usd_rate = usd_rate

    async def get_usd_rate(self) -> float:
        return self._usd_rate


class InMemoryRunEventSink(RunEventSink):
    """Keeps run events in a list."""

    def __init__(self):
        self.events: list[RunEvent] = []

    async def append_event(self, event: RunEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[RunEvent]:
        matching = [e for e in self.events if e.correlation_id == correlation_id]
        return sorted(matching, key=lambda e: e.timestamp)
