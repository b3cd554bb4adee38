"""Configuration package."""

from finance_engine.config.settings import (
    EngineSettings,
    FindingsSettings,
    ProjectionSettings,
    ProviderSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "EngineSettings",
    "FindingsSettings",
    "ProjectionSettings",
    "ProviderSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
