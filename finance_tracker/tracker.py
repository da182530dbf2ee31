"""
Finance Tracker Session

This module ties together all the components and defines the
end-to-end flows for:
1. Adding a transaction (form → validate → create → persist → log)
2. Deleting, importing, resetting
3. Exporting (CSV, JSON backup)
4. Reading (dashboard summary, filtered and paginated list)

DESIGN DECISION: All state lives on a FinanceTracker instance.
The store, the active filter and the pagination cursor are attributes
of the session object, never module globals, so every test (and every
UI session) gets an isolated tracker.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Union
from uuid import UUID

from finance_tracker.audit import AuditLogger, configure_logging, create_correlation_id
from finance_tracker.config import Settings, TrackerSettings, get_settings
from finance_tracker.export import (
    EmptyExportError,
    FormatError,
    backup_filename,
    csv_filename,
    dumps_backup,
    from_json_backup,
    to_csv,
)
from finance_tracker.models.report import (
    DashboardSummary,
    ExportResult,
    Page,
    TransactionFilter,
)
from finance_tracker.models.transaction import (
    Transaction,
    TransactionInput,
    TransactionType,
    ValidationResult,
)
from finance_tracker.reports import (
    PaginationCursor,
    build_summary,
    filter_transactions,
    sort_transactions,
)
from finance_tracker.services.storage import (
    InMemoryStorage,
    KeyValueStorage,
    LocalFileStorage,
)
from finance_tracker.services.store import (
    PersistenceError,
    PreferenceStore,
    TransactionStore,
)
from finance_tracker.validation import TransactionValidator, ValidationError


class FinanceTracker:
    """
    One user's tracker session.

    Flow for a new transaction:
    1. Validate the form input (ValidationError, nothing saved)
    2. Build the Transaction with a fresh id and today's date by default
    3. Persist through the store (PersistenceError, nothing changed)
    4. Log the event
    """

    def __init__(
        self,
        store: TransactionStore,
        preferences: Optional[PreferenceStore] = None,
        settings: Optional[TrackerSettings] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._preferences = preferences
        self._settings = settings or get_settings().tracker
        self._validator = validator or TransactionValidator(self._settings)
        self._audit_logger = audit_logger or AuditLogger()

        # List view state
        self.filter = TransactionFilter()
        self.cursor = PaginationCursor(self._settings.page_size)

    @property
    def store(self) -> TransactionStore:
        return self._store

    @property
    def settings(self) -> TrackerSettings:
        return self._settings

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._store.get_all()

    # -------------------------------------------------------------------------
    # Adding and deleting
    # -------------------------------------------------------------------------

    def validate(
        self,
        data: TransactionInput,
        today: Optional[date] = None,
    ) -> tuple[ValidationResult, str]:
        """
        Validate form input without saving.

        Returns:
            (validation_result, user_message)
        """
        result = self._validator.validate(data, today=today)
        return result, self._validator.get_user_friendly_summary(result)

    def add_transaction(
        self,
        data: TransactionInput,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Validate, create and persist a transaction.

        Raises:
            ValidationError: If the input is invalid
            PersistenceError: If the list could not be saved
        """
        correlation_id = correlation_id or create_correlation_id()
        now = now or datetime.now()

        result = self._validator.validate(data, today=now.date())
        if not result.is_valid:
            self._audit_logger.log_validation_failed(
                issues=[
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in result.issues
                ],
                correlation_id=correlation_id,
            )
            raise ValidationError(result)

        transaction = Transaction(
            id=self._store.next_id(now),
            title=data.title,
            amount=result.amount,
            type=TransactionType(data.type),
            category=result.category,
            date=data.date or now.date(),
            payment_method=data.payment_method or None,
        )

        try:
            self._store.add(transaction)
        except PersistenceError as e:
            self._audit_logger.log_persistence_failed(
                operation="add",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_transaction_added(
            transaction_id=transaction.id,
            transaction_type=transaction.type.value,
            amount=str(transaction.amount),
            category=transaction.category,
            correlation_id=correlation_id,
        )
        return transaction

    def quick_add_income(
        self,
        amount: Union[Decimal, int, float, str],
        title: str = "Income",
        now: Optional[datetime] = None,
    ) -> Transaction:
        """Record income with the default income category."""
        return self.add_transaction(
            TransactionInput(
                title=title,
                amount=amount,
                type=TransactionType.INCOME.value,
            ),
            now=now,
        )

    def delete_transaction(
        self,
        transaction_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete by id. Deleting an unknown id is a no-op.

        Raises:
            PersistenceError: If the list could not be saved
        """
        try:
            removed = self._store.remove(transaction_id)
        except PersistenceError as e:
            self._audit_logger.log_persistence_failed(
                operation="delete",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        if removed:
            self._audit_logger.log_transaction_deleted(
                transaction_id=transaction_id,
                correlation_id=correlation_id,
            )
        return removed

    # -------------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------------

    def import_backup(
        self,
        document: Union[Mapping[str, Any], str, bytes],
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Replace all transactions with the contents of a backup.

        Returns the number of imported transactions.

        Raises:
            FormatError: If the backup is malformed (existing data untouched)
            PersistenceError: If the list could not be saved
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            transactions = from_json_backup(document)
        except FormatError as e:
            self._audit_logger.log_import_rejected(
                error_message=str(e),
                indices=e.indices,
                correlation_id=correlation_id,
            )
            raise

        replaced = len(self._store)
        try:
            self._store.replace_all(transactions)
        except PersistenceError as e:
            self._audit_logger.log_persistence_failed(
                operation="import",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self.cursor.reset()
        self._audit_logger.log_data_imported(
            count=len(transactions),
            replaced=replaced,
            correlation_id=correlation_id,
        )
        return len(transactions)

    def reset(self, correlation_id: Optional[UUID] = None) -> int:
        """Delete every transaction. Returns how many were removed."""
        removed = len(self._store)
        try:
            self._store.clear()
        except PersistenceError as e:
            self._audit_logger.log_persistence_failed(
                operation="reset",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self.filter = TransactionFilter()
        self.cursor.reset()
        self._audit_logger.log_data_reset(removed=removed, correlation_id=correlation_id)
        return removed

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_csv(self, today: Optional[date] = None) -> ExportResult:
        """CSV of all transactions; an empty list is reported, not raised."""
        transactions = self._store.get_all()
        try:
            content = to_csv(
                transactions,
                include_payment_method=self._settings.csv_include_payment_method,
                byte_order_mark=self._settings.csv_byte_order_mark,
            )
        except EmptyExportError as e:
            self._audit_logger.log_export("csv", 0)
            return ExportResult(success=False, message=str(e))

        filename = csv_filename(today)
        self._audit_logger.log_export("csv", len(transactions), filename=filename)
        return ExportResult(
            success=True,
            message=f"Exported {len(transactions)} transactions",
            content=content,
            filename=filename,
            count=len(transactions),
        )

    def export_backup(self, now: Optional[datetime] = None) -> ExportResult:
        """JSON backup document of all transactions."""
        transactions = self._store.get_all()
        content = dumps_backup(
            transactions,
            version=self._settings.backup_version,
            now=now,
        )
        filename = backup_filename(now.date() if now else None)
        self._audit_logger.log_export("json", len(transactions), filename=filename)
        return ExportResult(
            success=True,
            message=f"Backed up {len(transactions)} transactions",
            content=content,
            filename=filename,
            count=len(transactions),
        )

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def summary(self, today: Optional[date] = None) -> DashboardSummary:
        return build_summary(
            self._store.get_all(),
            today=today,
            average_window_days=self._settings.average_window_days,
            daily_series_days=self._settings.daily_series_days,
        )

    def view(
        self,
        criteria: Optional[TransactionFilter] = None,
        page_number: Optional[int] = None,
        sort_by: str = "id",
    ) -> Page:
        """
        Filtered, newest-first, paginated list.

        A new filter sends the cursor back to page 1. A page number
        outside the available range is ignored and the current page kept.
        """
        if criteria is not None and criteria != self.filter:
            self.filter = criteria
            self.cursor.reset()

        visible = sort_transactions(
            filter_transactions(self._store.get_all(), self.filter),
            by=sort_by,
            newest_first=True,
        )
        self.cursor.update_count(len(visible))
        if page_number is not None:
            self.cursor.go_to(page_number)
        return self.cursor.page(visible)

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    @property
    def theme(self) -> str:
        if self._preferences is None:
            return "light"
        return self._preferences.load_theme()

    def toggle_theme(self) -> str:
        if self._preferences is None:
            raise PersistenceError("No preference storage configured")
        theme = self._preferences.toggle_theme()
        self._audit_logger.log_theme_changed(theme)
        return theme


def create_storage(settings: Optional[Settings] = None) -> KeyValueStorage:
    """Build the configured storage backend."""
    storage_settings = (settings or get_settings()).storage
    if storage_settings.backend == "memory":
        return InMemoryStorage(quota_bytes=storage_settings.quota_bytes)
    return LocalFileStorage(
        storage_settings.data_dir,
        quota_bytes=storage_settings.quota_bytes,
    )


def create_tracker(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
) -> FinanceTracker:
    """
    Factory function to create a ready-to-use tracker.

    Args:
        settings: Settings to use (defaults to get_settings())
        storage: Storage backend override, e.g. InMemoryStorage in tests

    Returns:
        A FinanceTracker with its transactions already loaded
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    storage = storage or create_storage(settings)
    storage_settings = settings.storage

    store = TransactionStore(storage, key=storage_settings.transactions_key)
    store.load()

    return FinanceTracker(
        store=store,
        preferences=PreferenceStore(storage, theme_key=storage_settings.theme_key),
        settings=settings.tracker,
        audit_logger=AuditLogger(),
    )
