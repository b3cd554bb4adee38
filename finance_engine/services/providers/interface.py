"""
Abstract Provider Interfaces

DESIGN DECISION: The engine never talks to a database or a market-data API.
Collaborators implement these interfaces, and the orchestrator fetches
everything a run needs once, up front. A run never re-fetches mid-simulation,
so the same inputs always reproduce the same numbers.

This allows us to:
1. Back the engine with any store (SQL, REST, spreadsheets)
2. Use in-memory providers for testing
3. Add caching layers transparently
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from finance_engine.models.audit import RunEvent
from finance_engine.models.debt import Debt
from finance_engine.models.projection import GrowthPlan
from finance_engine.models.snapshots import FinancialSnapshot, SpendingSnapshot


class SnapshotProvider(ABC):
    """
    Current-state records from the persistence layer.

    Any backend must implement these methods.
    """

    @abstractmethod
    async def get_debts(self) -> list[Debt]:
        """
        Active debts.

        Raises:
            ProviderError: If the fetch fails
        """
        pass

    @abstractmethod
    async def get_growth_plan(self, plan_id: Optional[str] = None) -> GrowthPlan:
        """
        A funding plan with its sources and scheduled events.

        Args:
            plan_id: Which plan; the backend's default plan when None

        Raises:
            NotFoundError: If no such plan exists
            ProviderError: If the fetch fails
        """
        pass

    @abstractmethod
    async def get_financial_snapshot(self, as_of: date) -> FinancialSnapshot:
        """
        Portfolio state for the findings engine, evaluated at as_of.

        Raises:
            ProviderError: If the fetch fails
        """
        pass

    @abstractmethod
    async def get_spending_snapshot(self, as_of: date) -> SpendingSnapshot:
        """
        Per-category spending for the month containing as_of, with the
        previous month's totals for trend.

        Raises:
            ProviderError: If the fetch fails
        """
        pass


class RateProvider(ABC):
    """Exchange rates, fetched once per run and held for its duration."""

    @abstractmethod
    async def get_usd_rate(self) -> float:
        """
        Units of base currency per USD.

        Raises:
            ProviderError: If the rate cannot be fetched
        """
        pass


class RunEventSink(ABC):
    """Persistence for run audit events. Append-only."""

    @abstractmethod
    async def append_event(self, event: RunEvent) -> bool:
        """
        Append a run event.

        Returns:
            True if persisted successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[RunEvent]:
        """All events of one run, in chronological order."""
        pass


class ProviderError(Exception):
    """Base exception for provider operations."""
    pass


class NotFoundError(ProviderError):
    """Requested record does not exist."""
    pass


class ProviderConnectionError(ProviderError):
    """Could not reach the provider backend."""
    pass
