"""
Configuration management for pricegap.

Settings come from built-in defaults, ``PRICEGAP_*`` environment variables
and an optional TOML file, whose values win over both. Nested sections
use ``__`` as delimiter, e.g. ``PRICEGAP_BACKFILL__DAILY_CALL_BUDGET=50``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import toml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pricegap.core.exceptions import ErrorCode, PriceGapError


class BackfillSettings(BaseModel):
    """Rate policy applied by the backfill orchestrator."""

    daily_call_budget: int = Field(25, ge=1, description="Provider calls allowed per day")
    inter_call_delay: float = Field(1.0, ge=0.0, description="Seconds between bulk symbols")
    settle_delay: float = Field(1.0, ge=0.0, description="Seconds to wait before re-reading the store")
    default_window_days: int = Field(90, ge=1, description="Analysis window without transaction history")


class CalendarSettings(BaseModel):
    """Trading calendar switches."""

    include_good_friday: bool = Field(False, description="Treat Good Friday as a market holiday")


class FilterSettings(BaseModel):
    """Source filter behaviour."""

    keep_expected_gaps: bool = Field(False, description="Keep weekend/holiday dates when filtering by source")


class StorageSettings(BaseModel):
    """Observation store location."""

    database: str = Field(
        default_factory=lambda: str(Path.home() / ".pricegap" / "pricegap.duckdb"),
        description="DuckDB database path, or :memory: for a throwaway store",
    )


class ProviderSettings(BaseModel):
    """External price provider."""

    name: str = Field("alpha_vantage", description="Provider identifier")
    api_key: str | None = Field(None, description="Provider API key")
    base_url: str = Field("https://www.alphavantage.co/query", description="Provider endpoint")
    timeout: float = Field(30.0, gt=0.0, description="Request timeout in seconds")


class LoggingSettings(BaseModel):
    """Logging output."""

    level: str = Field("INFO", description="Log level")
    file_path: str | None = Field(None, description="Optional JSON lines log file")


class PriceGapSettings(BaseSettings):
    """Main pricegap configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PRICEGAP_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    backfill: BackfillSettings = Field(default_factory=BackfillSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    filter: FilterSettings = Field(default_factory=FilterSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load_from_file(cls, config_path: Path) -> PriceGapSettings:
        """Load settings from a TOML file; file values override the environment."""
        if not config_path.exists():
            raise PriceGapError(
                f"Configuration file not found: {config_path}",
                ErrorCode.CONFIGURATION_ERROR.value,
                {"path": str(config_path)},
            )
        try:
            config_data: dict[str, Any] = toml.load(config_path)
        except toml.TomlDecodeError as exc:
            raise PriceGapError(
                f"Invalid configuration file {config_path}: {exc}",
                ErrorCode.CONFIGURATION_ERROR.value,
                {"path": str(config_path)},
            ) from exc
        return cls(**config_data)

    def save_to_file(self, config_path: Path) -> None:
        """Save settings to a TOML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(self.model_dump(exclude_none=True), f)


_settings: PriceGapSettings | None = None


def load_settings(config_path: Path | None = None) -> PriceGapSettings:
    """Build settings, optionally from ``config_path``, and make them current."""
    global _settings
    _settings = PriceGapSettings.load_from_file(config_path) if config_path else PriceGapSettings()
    return _settings


def get_settings() -> PriceGapSettings:
    """Return the current settings, loading defaults on first use."""
    if _settings is None:
        return load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings."""
    global _settings
    _settings = None
