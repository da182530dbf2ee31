"""
Core Data Models for Finance Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the transaction invariants at runtime
2. Provide clear validation error messages
3. Be serializable for the persistence slot and JSON backups

DESIGN DECISION: A Transaction is immutable once created.
There is no edit operation; records are only added, deleted, or
bulk-replaced by import/reset.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class Category(str, Enum):
    """
    Default transaction categories.

    The set actually accepted by the form is configurable
    (see TrackerSettings.categories); these are the defaults.
    """
    FOOD = "Food"
    SHOPPING = "Shopping"
    TRAVEL = "Travel"
    RENT = "Rent"
    SALARY = "Salary"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    """Suggested payment method tags. Free-form values are also accepted."""
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"
    BANK_TRANSFER = "Bank Transfer"
    OTHER = "Other"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    One recorded income or expense event.

    The persisted JSON shape is the one the browser dashboard stores:
    id, title, amount, type, category, date, month and (optionally)
    paymentMethod. `month` is derived from `date` and cannot be set.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    # Identity: creation timestamp in milliseconds, also the default sort key
    id: int = Field(
        ...,
        gt=0,
        description="Unique, monotonically increasing identifier"
    )
    title: str = Field(
        ...,
        min_length=1,
        description="What the transaction was for"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive amount"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category label used for grouping"
    )
    date: dt.date = Field(
        default_factory=dt.date.today,
        description="Calendar date of the transaction"
    )
    payment_method: Optional[str] = Field(
        default=None,
        alias="paymentMethod",
        max_length=50,
        description="Optional payment method tag"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def amount_from_json_number(cls, v):
        # JSON numbers arrive as floats; 0.1 must stay 0.1
        if isinstance(v, float):
            return Decimal(repr(v))
        return v

    @computed_field
    @property
    def month(self) -> int:
        """Zero-based month index (0-11) of `date`."""
        return self.date.month - 1

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Amount with its direction applied (expenses negative)."""
        return self.amount if self.is_income else -self.amount

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, amount: Decimal) -> Union[int, float, str]:
        # Stored as a JSON number, as the browser dashboard does, unless
        # a double cannot hold every digit
        if amount == amount.to_integral_value():
            return int(amount)
        as_float = float(amount)
        if Decimal(repr(as_float)) == amount:
            return as_float
        return str(amount)

    def to_record(self) -> dict:
        """Convert to the JSON-compatible record used for persistence."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# FORM INPUT
# =============================================================================

class TransactionInput(BaseModel):
    """
    Raw data from the transaction form.

    CRITICAL: This is UNVALIDATED input. It must go through
    TransactionValidator before a Transaction is created from it.
    Amount may arrive as text straight from an input box.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = ""
    amount: Union[Decimal, int, float, str, None] = None
    type: str = TransactionType.EXPENSE.value
    category: Optional[str] = None
    date: Optional[dt.date] = None
    payment_method: Optional[str] = None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_long', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields, limits)
    Stage 2: Semantic validation (suspicious but allowed values)
    """

    validated_at: dt.datetime = Field(
        default_factory=dt.datetime.now
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    # Values after normalization (only set when valid)
    amount: Optional[Decimal] = None
    category: Optional[str] = None

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def errors(self) -> list[str]:
        """Messages of error-level issues, in the order they were found."""
        return [issue.message for issue in self.issues if issue.severity == "error"]
