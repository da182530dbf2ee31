"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (title, amount, category for expenses)
- Limits (title length, minimum amount)
- Allowed values (type, configured categories)
- Errors here block the transaction

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Absurd amount detection
- Only produces warnings; the user may still save

IMPORTANT: Validation NEVER silently fixes issues.
The one normalization it applies is the documented default category
for income entries that arrive without one.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from finance_tracker.config import TrackerSettings, get_settings
from finance_tracker.models.transaction import (
    TransactionInput,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


class ValidationError(Exception):
    """User input failed validation. Nothing was saved."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("\n".join(result.errors) or "Invalid transaction")


class TransactionValidator:
    """
    Validates transaction form data through a two-stage pipeline.

    Stage 1: Schema validation (blocking errors)
    Stage 2: Semantic validation (non-blocking warnings)
    """

    def __init__(self, settings: Optional[TrackerSettings] = None):
        self._settings = settings or get_settings().tracker

    @staticmethod
    def parse_amount(raw: Any) -> Optional[Decimal]:
        """Parse a form amount; None if it is missing or not a finite number."""
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, str):
            raw = raw.strip()
            if not raw:
                return None
        try:
            value = Decimal(str(raw))
        except InvalidOperation:
            return None
        if not value.is_finite():
            return None
        return value

    def _validate_schema(
        self,
        data: TransactionInput,
    ) -> tuple[bool, list[ValidationIssue], Optional[Decimal], Optional[str]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues, parsed_amount, category)
        """
        issues = []
        max_length = self._settings.max_title_length
        min_amount = self._settings.min_amount

        # Title
        if not data.title:
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Title is required",
                severity="error",
            ))
        elif len(data.title) > max_length:
            issues.append(ValidationIssue(
                field="title",
                issue_type="too_long",
                message=f"Title must be at most {max_length} characters",
                severity="error",
                suggested_fix="Shorten the title",
            ))

        # Amount
        amount = self.parse_amount(data.amount)
        if amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Please enter a valid amount",
                severity="error",
            ))
        elif amount <= min_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be greater than {min_amount}",
                severity="error",
            ))

        # Type
        allowed_types = [t.value for t in TransactionType]
        if data.type not in allowed_types:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Type must be one of: {', '.join(allowed_types)}",
                severity="error",
            ))

        # Category (defaulted for income, required for expenses)
        category = data.category or None
        if category is None:
            if data.type == TransactionType.INCOME.value:
                category = self._settings.default_income_category
            else:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="missing",
                    message="Please select a category",
                    severity="error",
                ))
        elif category not in self._settings.categories_list:
            issues.append(ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=f"Unknown category: {category}",
                severity="error",
                suggested_fix=(
                    "Choose one of: " + ", ".join(self._settings.categories_list)
                ),
            ))

        if data.payment_method and len(data.payment_method) > 50:
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="too_long",
                message="Payment method must be at most 50 characters",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues, amount, category

    def _validate_semantic(
        self,
        data: TransactionInput,
        amount: Decimal,
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        max_future_date = today + timedelta(
            days=self._settings.future_date_tolerance_days
        )
        if data.date and data.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Transaction date ({data.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        if amount > self._settings.max_reasonable_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        data: TransactionInput,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            data: Raw form data
            today: Reference date for the future-date check

        Returns:
            ValidationResult with all issues found. When valid, the
            parsed amount and the (possibly defaulted) category are set.
        """
        today = today or date.today()
        all_issues = []

        schema_valid, schema_issues, amount, category = self._validate_schema(data)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(data, amount, today)
            all_issues.extend(semantic_issues)

        is_valid = schema_valid and semantic_valid

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=is_valid,
            amount=amount if is_valid else None,
            category=category if is_valid else None,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Generate the message shown to the user after validation."""
        if result.is_valid and not result.warnings:
            return "✅ Transaction looks good."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
