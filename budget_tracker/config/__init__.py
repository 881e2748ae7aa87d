"""Configuration package."""

from budget_tracker.config.settings import (
    AppSettings,
    DatabaseSettings,
    SessionSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "SessionSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
