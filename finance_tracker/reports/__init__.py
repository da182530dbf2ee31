"""Reporting package: aggregates, filters and pagination."""

from finance_tracker.reports.aggregator import (
    average_daily_expense,
    build_summary,
    category_expenses,
    daily_series,
    monthly_expenses,
    most_active_weekday,
    savings_rate,
    top_category,
    totals,
)
from finance_tracker.reports.filters import (
    PaginationCursor,
    filter_transactions,
    paginate,
    sort_transactions,
)

__all__ = [
    "average_daily_expense",
    "build_summary",
    "category_expenses",
    "daily_series",
    "monthly_expenses",
    "most_active_weekday",
    "savings_rate",
    "top_category",
    "totals",
    "PaginationCursor",
    "filter_transactions",
    "paginate",
    "sort_transactions",
]
