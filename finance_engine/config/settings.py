"""
Configuration Management for the Finance Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, and only the
orchestrator reads it. Engine functions receive every constant as an explicit
parameter, so a simulation never depends on ambient process state.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from finance_engine.models.findings import FindingsThresholds
from finance_engine.models.projection import GrowthRates


class EngineSettings(BaseSettings):
    """Simulation limits and presentation currency."""

    model_config = SettingsConfigDict(
        env_prefix="ENGINE_",
        extra="ignore"
    )

    horizon_cap: int = Field(
        default=360,
        ge=1,
        le=1200,
        description="Maximum payoff periods before a run is cut off"
    )
    currency_code: str = Field(
        default="MXN",
        min_length=3,
        max_length=3,
        description="ISO code of the base currency"
    )

    @field_validator("currency_code")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class ProjectionSettings(BaseSettings):
    """
    Default growth rates and scenarios for funding projections.

    Rates are annual fractions. Scenario rates replace the invested rate only;
    every other rate stays at its default.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROJECTION_",
        extra="ignore"
    )

    cash_rate: float = Field(
        default=0.0,
        description="Annual rate on cash payments already made"
    )
    invested_rate: float = Field(
        default=0.095,
        description="Annual net return on invested principal"
    )
    volatile_rate: float = Field(
        default=0.15,
        description="Annual growth assumed for volatile assets"
    )
    appreciation_rate: float = Field(
        default=0.125,
        description="Annual appreciation of the reference asset"
    )

    conservative_rate: float = 0.08
    base_rate: float = 0.095
    optimistic_rate: float = 0.11

    financing_ceiling: float = Field(
        default=1_000_000.0,
        gt=0,
        description="Largest gap still considered coverable by standard financing"
    )

    @property
    def default_rates(self) -> GrowthRates:
        return GrowthRates(
            cash=self.cash_rate,
            invested=self.invested_rate,
            volatile=self.volatile_rate,
            appreciation=self.appreciation_rate,
        )

    @property
    def scenarios(self) -> dict[str, GrowthRates]:
        """Named scenario rates, conservative to optimistic."""
        base = self.default_rates
        return {
            "conservative": base.model_copy(update={"invested": self.conservative_rate}),
            "base": base.model_copy(update={"invested": self.base_rate}),
            "optimistic": base.model_copy(update={"invested": self.optimistic_rate}),
        }


class FindingsSettings(BaseSettings):
    """
    Findings rule thresholds.

    Override a single threshold with FINDINGS_THRESHOLDS__<NAME>, e.g.
    FINDINGS_THRESHOLDS__CRYPTO_CONCENTRATION_PCT=60.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINDINGS_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    thresholds: FindingsThresholds = Field(default_factory=FindingsThresholds)
    usd_rate_fallback: Optional[float] = Field(
        default=None,
        gt=0,
        description="USD rate used when no rate provider is configured"
    )


class ProviderSettings(BaseSettings):
    """Retry policy for the upfront snapshot fetch."""

    model_config = SettingsConfigDict(
        env_prefix="PROVIDER_",
        extra="ignore"
    )

    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Fetch attempts before giving up"
    )
    backoff_min_seconds: float = Field(default=2.0, ge=0)
    backoff_max_seconds: float = Field(default=10.0, ge=0)


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()

    @property
    def projection(self) -> ProjectionSettings:
        return ProjectionSettings()

    @property
    def findings(self) -> FindingsSettings:
        return FindingsSettings()

    @property
    def provider(self) -> ProviderSettings:
        return ProviderSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error" entries
    for the sections that failed. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("engine", "projection", "findings", "provider"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
