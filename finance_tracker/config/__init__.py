"""Configuration package."""

from finance_tracker.config.settings import (
    LedgerSettings,
    LoggingSettings,
    Settings,
    get_settings,
)

__all__ = [
    "LedgerSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
