"""Configuration management module."""

from pricegap.core.config.settings import (
    BackfillSettings,
    CalendarSettings,
    FilterSettings,
    LoggingSettings,
    PriceGapSettings,
    ProviderSettings,
    StorageSettings,
    get_settings,
    load_settings,
    reset_settings,
)

__all__ = [
    "PriceGapSettings",
    "BackfillSettings",
    "CalendarSettings",
    "FilterSettings",
    "StorageSettings",
    "ProviderSettings",
    "LoggingSettings",
    "get_settings",
    "load_settings",
    "reset_settings",
]
