"""
Aggregation Functions

DESIGN DECISION: Aggregation is DETERMINISTIC and stateless.
Every function takes a sequence of transactions and returns a fresh
value; nothing is cached and nothing reads global state. Functions that
depend on "today" accept it as an argument.

All sums are Decimal and unrounded. Rounding to two decimals and
thousands separators are presentation concerns.

Tie-breaking rule shared by top_category and most_active_weekday:
the first key encountered in iteration (insertion) order wins.
"""

import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence, TypeVar

from finance_tracker.models.report import DailySeries, DashboardSummary, Totals
from finance_tracker.models.transaction import Category, Transaction


ZERO = Decimal(0)
HUNDRED = Decimal(100)

NO_EXPENSE_CATEGORY = Category.OTHER.value

K = TypeVar("K")


def _first_max(counts: dict[K, Decimal]) -> Optional[K]:
    """Key with the largest value; on ties the earliest inserted key wins."""
    best_key = None
    best_value = None
    for key, value in counts.items():
        if best_value is None or value > best_value:
            best_key, best_value = key, value
    return best_key


def totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum amounts by type. balance = income - expense."""
    income = ZERO
    expense = ZERO
    for transaction in transactions:
        if transaction.is_income:
            income += transaction.amount
        else:
            expense += transaction.amount
    return Totals(income=income, expense=expense, balance=income - expense)


def category_expenses(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """
    Expense sums grouped by category.

    Categories without expenses are absent, not zero.
    """
    categories: dict[str, Decimal] = {}
    for transaction in transactions:
        if transaction.is_expense:
            categories[transaction.category] = (
                categories.get(transaction.category, ZERO) + transaction.amount
            )
    return categories


def monthly_expenses(transactions: Iterable[Transaction]) -> list[Decimal]:
    """
    Twelve expense sums, index 0 = January.

    Years are not distinguished: January 2023 and January 2024 both
    land in slot 0.
    """
    months = [ZERO] * 12
    for transaction in transactions:
        if transaction.is_expense:
            months[transaction.month] += transaction.amount
    return months


def daily_series(
    transactions: Iterable[Transaction],
    start_date: date,
    day_count: int,
) -> DailySeries:
    """
    Income and expense per calendar day in [start_date, start_date + day_count).

    Days without transactions are zero-filled.
    """
    if day_count < 0:
        raise ValueError("day_count must not be negative")

    days = [start_date + timedelta(days=offset) for offset in range(day_count)]
    index = {day: position for position, day in enumerate(days)}
    income = [ZERO] * day_count
    expense = [ZERO] * day_count

    for transaction in transactions:
        position = index.get(transaction.date)
        if position is None:
            continue
        if transaction.is_income:
            income[position] += transaction.amount
        else:
            expense[position] += transaction.amount

    return DailySeries(days=days, income=income, expense=expense)


def top_category(transactions: Iterable[Transaction]) -> tuple[str, Decimal]:
    """
    Category with the largest expense sum.

    Returns ("Other", 0) when there are no expenses.
    """
    categories = category_expenses(transactions)
    best = _first_max(categories)
    if best is None:
        return NO_EXPENSE_CATEGORY, ZERO
    return best, categories[best]


def most_active_weekday(
    transactions: Iterable[Transaction],
) -> tuple[Optional[str], int]:
    """
    Weekday name with the most transactions of any type.

    Returns (None, 0) for an empty sequence.
    """
    counts: dict[str, int] = {}
    for transaction in transactions:
        weekday = calendar.day_name[transaction.date.weekday()]
        counts[weekday] = counts.get(weekday, 0) + 1
    best = _first_max(counts)
    if best is None:
        return None, 0
    return best, counts[best]


def savings_rate(transactions: Iterable[Transaction]) -> Decimal:
    """Percentage of income kept: (income - expense) / income * 100, or 0 without income."""
    result = totals(transactions)
    if result.income == ZERO:
        return ZERO
    return (result.income - result.expense) / result.income * HUNDRED


def average_daily_expense(
    transactions: Iterable[Transaction],
    range_days: int,
    today: Optional[date] = None,
) -> Decimal:
    """
    Expense total over the trailing window divided by the window length.

    The window covers records dated on or after today - range_days.
    Days without entries still count toward the divisor.
    """
    if range_days <= 0:
        raise ValueError("range_days must be positive")
    today = today or date.today()
    cutoff = today - timedelta(days=range_days)
    spent = sum(
        (t.amount for t in transactions if t.is_expense and t.date >= cutoff),
        ZERO,
    )
    return spent / Decimal(range_days)


def build_summary(
    transactions: Sequence[Transaction],
    today: Optional[date] = None,
    average_window_days: int = 30,
    daily_series_days: int = 7,
) -> DashboardSummary:
    """
    Compute every dashboard figure at once.

    The daily series ends today and covers `daily_series_days` days.
    """
    today = today or date.today()
    transactions = list(transactions)

    category, category_amount = top_category(transactions)
    weekday, weekday_count = most_active_weekday(transactions)
    series_start = today - timedelta(days=daily_series_days - 1)

    return DashboardSummary(
        generated_at=datetime.now(),
        transaction_count=len(transactions),
        totals=totals(transactions),
        category_expenses=category_expenses(transactions),
        monthly_expenses=monthly_expenses(transactions),
        daily=daily_series(transactions, series_start, daily_series_days),
        top_category=category,
        top_category_amount=category_amount,
        most_active_weekday=weekday,
        most_active_weekday_count=weekday_count,
        savings_rate=savings_rate(transactions),
        average_daily_expense=average_daily_expense(
            transactions, average_window_days, today=today
        ),
        average_window_days=average_window_days,
    )
