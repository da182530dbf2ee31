"""Presentation helpers (charts and formatting)."""

from finance_tracker.presenter.charts import (
    category_pie,
    daily_line,
    format_currency,
    monthly_bar,
)

__all__ = ["category_pie", "daily_line", "format_currency", "monthly_bar"]
