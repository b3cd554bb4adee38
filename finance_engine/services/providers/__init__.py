"""
Provider Services Package

Abstract interfaces for the engine's collaborators, plus in-memory
reference implementations.
"""

from finance_engine.services.providers.interface import (
    NotFoundError,
    ProviderConnectionError,
    ProviderError,
    RateProvider,
    RunEventSink,
    SnapshotProvider,
)
from finance_engine.services.providers.in_memory import (
    InMemoryRunEventSink,
    InMemorySnapshotProvider,
    StaticRateProvider,
)

__all__ = [
    # Interfaces
    "RateProvider",
    "RunEventSink",
    "SnapshotProvider",
    # Exceptions
    "NotFoundError",
    "ProviderConnectionError",
    "ProviderError",
    # In-memory implementations
    "InMemoryRunEventSink",
    "InMemorySnapshotProvider",
    "StaticRateProvider",
]
