"""
Reporting Models

Result shapes produced by the aggregation and filtering functions and
consumed by the presenter (charts, summary cards, transaction list).

CRITICAL: These are computed views. Nothing here is persisted.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finance_tracker.models.transaction import Transaction


NO_FILTER = "all"


class Totals(BaseModel):
    """Income, expense and balance over a set of transactions."""

    income: Decimal = Decimal(0)
    expense: Decimal = Decimal(0)
    balance: Decimal = Decimal(0)


class DailySeries(BaseModel):
    """Per-day income and expense sums, one entry per calendar day."""

    days: list[dt.date] = Field(default_factory=list)
    income: list[Decimal] = Field(default_factory=list)
    expense: list[Decimal] = Field(default_factory=list)


class DashboardSummary(BaseModel):
    """
    Everything the dashboard renders, computed in one pass.

    This is the chart data contract: `category_expenses` feeds the
    doughnut chart, `monthly_expenses` the 12-slot bar chart and
    `daily` the N-day trend chart.
    """

    generated_at: dt.datetime = Field(
        default_factory=dt.datetime.now
    )
    transaction_count: int = Field(ge=0)

    totals: Totals
    category_expenses: dict[str, Decimal] = Field(default_factory=dict)
    monthly_expenses: list[Decimal] = Field(
        ...,
        min_length=12,
        max_length=12,
    )
    daily: DailySeries

    top_category: str
    top_category_amount: Decimal
    most_active_weekday: Optional[str] = None
    most_active_weekday_count: int = Field(default=0, ge=0)
    savings_rate: Decimal
    average_daily_expense: Decimal
    average_window_days: int = Field(ge=1)


class TransactionFilter(BaseModel):
    """
    Filter criteria for the transaction list.

    Every criterion is optional. A missing value, or the value "all",
    disables that criterion. Supplied criteria are combined with AND.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    type: Optional[str] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """True when no criterion is active."""
        return not any(
            value is not None and value != NO_FILTER and value != ""
            for value in (
                self.type,
                self.category,
                self.date,
                self.date_from,
                self.date_to,
                self.text,
            )
        )


class Page(BaseModel):
    """One page of a (filtered) transaction list."""

    items: list[Transaction] = Field(default_factory=list)
    page_number: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_count: int = Field(ge=0)
    total_pages: int = Field(ge=0)

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages


class ExportResult(BaseModel):
    """
    Outcome of an export request.

    Exports report failure (e.g. nothing to export) through this object
    instead of raising, so the UI can show the message directly.
    """

    success: bool
    message: str
    content: Optional[str] = None
    filename: Optional[str] = None
    count: int = Field(default=0, ge=0)
