"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.transaction import (
    Category,
    PaymentMethod,
    Transaction,
    TransactionInput,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from finance_tracker.models.report import (
    NO_FILTER,
    DailySeries,
    DashboardSummary,
    ExportResult,
    Page,
    Totals,
    TransactionFilter,
)

__all__ = [
    # Transaction models
    "Category",
    "PaymentMethod",
    "Transaction",
    "TransactionInput",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    # Report models
    "NO_FILTER",
    "DailySeries",
    "DashboardSummary",
    "ExportResult",
    "Page",
    "Totals",
    "TransactionFilter",
]
