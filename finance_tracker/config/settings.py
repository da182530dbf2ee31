"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Form limits, category lists, export options and the storage location
all live in one place so the different tracker variants are just
different configurations of the same code.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORIES = "Food,Shopping,Travel,Rent,Salary,Other"


class StorageSettings(BaseSettings):
    """Persistence slot configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend: 'file' (one file per key) or 'memory'"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the persisted slots (file backend)"
    )

    # Slot names, matching the browser dashboard's local storage keys
    transactions_key: str = Field(
        default="financeTransactions",
        min_length=1,
        description="Key of the slot holding the transaction list"
    )
    theme_key: str = Field(
        default="financeTheme",
        min_length=1,
        description="Key of the slot holding the theme preference"
    )

    quota_bytes: Optional[int] = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Maximum total size of stored values (None for unlimited)"
    )


class TrackerSettings(BaseSettings):
    """Form rules, categories, reporting windows and export options."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Form limits
    max_title_length: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum number of characters in a transaction title"
    )
    min_amount: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Amounts must be strictly greater than this"
    )
    max_reasonable_amount: Decimal = Field(
        default=Decimal("10000000"),
        gt=0,
        description="Amounts above this get a 'please verify' warning"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future a transaction date can be"
    )

    # Categories
    categories: str = Field(
        default=DEFAULT_CATEGORIES,
        description="Comma-separated list of allowed categories"
    )
    default_income_category: str = Field(
        default="Salary",
        min_length=1,
        description="Category used for quick-add income entries"
    )

    # Presentation
    currency_symbol: str = Field(
        default="₹",
        description="Currency symbol used when formatting amounts"
    )
    page_size: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Transactions per page in the list view"
    )

    # Reporting windows
    average_window_days: int = Field(
        default=30,
        ge=1,
        description="Trailing window for the average daily expense"
    )
    daily_series_days: int = Field(
        default=7,
        ge=1,
        le=366,
        description="Number of days in the income/expense trend chart"
    )

    # Export
    csv_include_payment_method: bool = Field(
        default=False,
        description="Add a PaymentMethod column to CSV exports"
    )
    csv_byte_order_mark: bool = Field(
        default=False,
        description="Prepend a UTF-8 byte-order mark to CSV exports"
    )
    backup_version: str = Field(
        default="1.0",
        min_length=1,
        description="Format-version tag written into JSON backups"
    )

    @field_validator('categories')
    @classmethod
    def validate_categories(cls, v: str) -> str:
        """At least one non-empty category is required."""
        if not [c for c in v.split(",") if c.strip()]:
            raise ValueError("At least one category must be configured")
        return v

    @property
    def categories_list(self) -> list[str]:
        """Get categories as a list, in configured order, without duplicates."""
        seen = []
        for category in self.categories.split(","):
            category = category.strip()
            if category and category not in seen:
                seen.append(category)
        return seen


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )


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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def tracker(self) -> TrackerSettings:
        return TrackerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries describing failures.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "tracker", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
