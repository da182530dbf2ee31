"""
Dashboard Charts

DESIGN DECISION: Each builder takes one piece of the dashboard summary
(category sums, the 12 monthly slots, the daily series) and returns a
plotly Figure for st.plotly_chart. The builders never look at
transactions directly.
"""

import calendar
from decimal import Decimal
from typing import Mapping, Optional, Sequence, Union

import plotly.graph_objects as go

from finance_tracker.models.report import DailySeries


MONTH_LABELS = list(calendar.month_abbr)[1:]

PIE_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#FFA07A",
    "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E2",
]
INCOME_COLOR = "#00e676"
EXPENSE_COLOR = "#ff6b6b"
BAR_COLOR = "rgba(0, 230, 118, 0.7)"


def format_currency(amount: Union[Decimal, float], symbol: str = "₹") -> str:
    """Two decimals with thousands separators, e.g. -₹1,234.50."""
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def _apply_theme(fig: go.Figure, dark: bool) -> go.Figure:
    fig.update_layout(
        template="plotly_dark" if dark else "plotly_white",
        margin=dict(l=20, r=20, t=50, b=20),
        legend=dict(orientation="h"),
    )
    return fig


def category_pie(
    category_sums: Mapping[str, Decimal],
    title: str = "Expenses by Category",
    dark: bool = False,
) -> Optional[go.Figure]:
    """
    Doughnut chart of expense per category.

    Returns None when there is nothing to plot; the caller shows a
    "No expense data" message instead.
    """
    if not category_sums:
        return None
    fig = go.Figure(
        go.Pie(
            labels=list(category_sums.keys()),
            values=[float(v) for v in category_sums.values()],
            hole=0.5,
            marker=dict(colors=PIE_COLORS),
            sort=False,
        )
    )
    fig.update_layout(title=title)
    return _apply_theme(fig, dark)


def monthly_bar(
    monthly: Sequence[Decimal],
    symbol: str = "₹",
    title: str = "Monthly Expenses",
    dark: bool = False,
) -> go.Figure:
    """Bar chart with one bar per calendar month (12 slots)."""
    if len(monthly) != 12:
        raise ValueError("monthly expenses must have exactly 12 entries")
    fig = go.Figure(
        go.Bar(
            x=MONTH_LABELS,
            y=[float(v) for v in monthly],
            name="Monthly Expenses",
            marker_color=BAR_COLOR,
        )
    )
    fig.update_layout(
        title=title,
        yaxis=dict(rangemode="tozero", tickprefix=symbol),
    )
    return _apply_theme(fig, dark)


def daily_line(
    series: DailySeries,
    symbol: str = "₹",
    title: str = "Income vs Expenses",
    dark: bool = False,
) -> go.Figure:
    """Two lines, income and expense, one point per day."""
    labels = [day.isoformat() for day in series.days]
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=labels,
            y=[float(v) for v in series.income],
            mode="lines+markers",
            name="Income",
            line=dict(color=INCOME_COLOR),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=labels,
            y=[float(v) for v in series.expense],
            mode="lines+markers",
            name="Expenses",
            line=dict(color=EXPENSE_COLOR),
        )
    )
    fig.update_layout(
        title=title,
        yaxis=dict(rangemode="tozero", tickprefix=symbol),
    )
    return _apply_theme(fig, dark)
