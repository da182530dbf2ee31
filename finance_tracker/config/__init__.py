"""Configuration package."""

from finance_tracker.config.settings import (
    DEFAULT_CATEGORIES,
    AppSettings,
    Settings,
    StorageSettings,
    TrackerSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "AppSettings",
    "Settings",
    "StorageSettings",
    "TrackerSettings",
    "get_settings",
    "validate_all_settings",
]
