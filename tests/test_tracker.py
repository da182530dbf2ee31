"""
Integration tests for the FinanceTracker session.

These drive whole flows (form input -> validation -> store -> aggregates)
against in-memory storage.
"""

import json
import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from structlog.testing import capture_logs

from finance_tracker.audit import AuditEventType
from finance_tracker.config import TrackerSettings
from finance_tracker.export import FormatError
from finance_tracker.models import TransactionFilter, TransactionInput
from finance_tracker.services import (
    InMemoryStorage,
    PersistenceError,
    PreferenceStore,
    TransactionStore,
)
from finance_tracker.services.store import DEFAULT_TRANSACTIONS_KEY
from finance_tracker.tracker import FinanceTracker, create_tracker
from finance_tracker.validation import ValidationError


NOW = datetime(2024, 1, 5, 9, 30)


def build_tracker(storage=None, **settings):
    storage = storage if storage is not None else InMemoryStorage()
    store = TransactionStore(storage)
    store.load()
    return FinanceTracker(
        store=store,
        preferences=PreferenceStore(storage),
        settings=TrackerSettings(**settings),
    )


@pytest.fixture
def tracker():
    return build_tracker()


def coffee(**overrides):
    data = {
        "title": "Coffee",
        "amount": "50",
        "type": "expense",
        "category": "Food",
        "date": date(2024, 1, 5),
    }
    data.update(overrides)
    return TransactionInput(**data)


class TestAddTransaction:
    """Tests for the add flow."""

    def test_coffee_scenario(self, tracker):
        """Adding Coffee 50 updates every aggregate."""
        tracker.add_transaction(coffee(), now=NOW)

        summary = tracker.summary(today=date(2024, 1, 5))
        assert summary.totals.income == 0
        assert summary.totals.expense == Decimal("50")
        assert summary.totals.balance == Decimal("-50")
        assert summary.category_expenses == {"Food": Decimal("50")}
        assert summary.monthly_expenses[0] == Decimal("50")

    def test_returns_created_transaction(self, tracker):
        transaction = tracker.add_transaction(coffee(payment_method="UPI"), now=NOW)
        assert transaction.id == int(NOW.timestamp() * 1000)
        assert transaction.amount == Decimal("50")
        assert transaction.payment_method == "UPI"
        assert tracker.transactions == (transaction,)

    def test_date_defaults_to_today(self, tracker):
        transaction = tracker.add_transaction(coffee(date=None), now=NOW)
        assert transaction.date == NOW.date()

    def test_ids_are_unique_within_one_instant(self, tracker):
        first = tracker.add_transaction(coffee(), now=NOW)
        second = tracker.add_transaction(coffee(title="Tea"), now=NOW)
        assert second.id > first.id

    def test_invalid_input_saves_nothing(self):
        storage = InMemoryStorage()
        tracker = build_tracker(storage)
        with pytest.raises(ValidationError) as exc_info:
            tracker.add_transaction(coffee(title="", amount="-1"), now=NOW)
        assert exc_info.value.result.error_count == 2
        assert tracker.transactions == ()
        assert storage.get(DEFAULT_TRANSACTIONS_KEY) is None

    def test_warnings_do_not_block(self, tracker):
        transaction = tracker.add_transaction(
            coffee(date=date(2024, 3, 1)),
            now=NOW,
        )
        assert transaction.date == date(2024, 3, 1)

    def test_storage_failure(self):
        tracker = build_tracker(InMemoryStorage(quota_bytes=50))
        with pytest.raises(PersistenceError):
            tracker.add_transaction(coffee(), now=NOW)
        assert tracker.transactions == ()

    def test_quick_add_income(self, tracker):
        """Income of 6000 uses the default category and leaves no top expense."""
        transaction = tracker.quick_add_income("6000", now=NOW)
        assert transaction.category == "Salary"
        assert transaction.title == "Income"
        assert transaction.is_income

        summary = tracker.summary(today=NOW.date())
        assert (summary.top_category, summary.top_category_amount) == ("Other", 0)

    def test_quick_add_income_validates(self, tracker):
        with pytest.raises(ValidationError):
            tracker.quick_add_income("abc", now=NOW)


class TestDeleteAndReset:
    """Tests for delete and reset."""

    def test_delete(self, tracker):
        transaction = tracker.add_transaction(coffee(), now=NOW)
        assert tracker.delete_transaction(transaction.id) is True
        assert tracker.transactions == ()

    def test_delete_unknown_is_noop(self, tracker):
        tracker.add_transaction(coffee(), now=NOW)
        assert tracker.delete_transaction(12345) is False
        assert len(tracker.transactions) == 1

    def test_reset(self, tracker):
        tracker.add_transaction(coffee(), now=NOW)
        tracker.add_transaction(coffee(title="Tea"), now=NOW)
        tracker.view(TransactionFilter(category="Food"))
        assert tracker.reset() == 2
        assert tracker.transactions == ()
        assert tracker.filter.is_empty


class TestImportExport:
    """Tests for backups and CSV export."""

    def test_backup_restores_into_new_tracker(self, tracker):
        tracker.add_transaction(coffee(amount="12.75"), now=NOW)
        tracker.quick_add_income("6000", now=NOW)
        backup = tracker.export_backup(now=NOW)
        assert backup.success
        assert backup.filename == "finance_backup_2024-01-05.json"
        assert backup.count == 2

        restored = build_tracker()
        assert restored.import_backup(backup.content) == 2
        assert restored.transactions == tracker.transactions

    def test_precise_amount_survives_backup_and_restart(self):
        storage = InMemoryStorage()
        tracker = build_tracker(storage)
        added = tracker.add_transaction(
            coffee(amount="0.10000000000000000001"), now=NOW,
        )

        restored = build_tracker()
        restored.import_backup(tracker.export_backup(now=NOW).content)
        assert restored.transactions == (added,)
        assert build_tracker(storage).transactions == (added,)

    def test_import_replaces_existing(self, tracker):
        tracker.add_transaction(coffee(), now=NOW)
        document = {"transactions": []}
        assert tracker.import_backup(document) == 0
        assert tracker.transactions == ()

    def test_rejected_import_leaves_data_untouched(self, tracker):
        original = tracker.add_transaction(coffee(), now=NOW)
        with pytest.raises(FormatError):
            tracker.import_backup(json.dumps({"version": "1.0"}))
        with pytest.raises(FormatError) as exc_info:
            tracker.import_backup({"transactions": [{"id": 1}]})
        assert exc_info.value.indices == [0]
        assert tracker.transactions == (original,)

    def test_csv_export(self, tracker):
        tracker.add_transaction(coffee(), now=NOW)
        result = tracker.export_csv(today=date(2024, 1, 5))
        assert result.success
        assert result.filename == "transactions_2024-01-05.csv"
        assert result.content.splitlines()[1] == (
            '"Coffee","50.00","expense","Food","2024-01-05"'
        )

    def test_csv_export_with_payment_method_column(self):
        tracker = build_tracker(csv_include_payment_method=True)
        tracker.add_transaction(coffee(payment_method="Cash"), now=NOW)
        result = tracker.export_csv()
        assert result.content.splitlines()[0].endswith(",PaymentMethod")

    def test_empty_csv_export_is_reported(self, tracker):
        result = tracker.export_csv()
        assert result.success is False
        assert result.message == "No transactions to export!"
        assert result.content is None


class TestView:
    """Tests for the filtered, paginated list."""

    @pytest.fixture
    def busy_tracker(self):
        tracker = build_tracker(page_size=10)
        for minute in range(12):
            tracker.add_transaction(
                coffee(title=f"Coffee {minute}"),
                now=NOW + timedelta(minutes=minute),
            )
        tracker.add_transaction(
            coffee(title="Taxi", category="Travel"),
            now=NOW + timedelta(hours=1),
        )
        return tracker

    def test_newest_first(self, busy_tracker):
        page = busy_tracker.view()
        assert page.items[0].title == "Taxi"
        assert page.items[1].title == "Coffee 11"
        assert len(page.items) == 10
        assert page.total_pages == 2

    def test_page_navigation(self, busy_tracker):
        page = busy_tracker.view(page_number=2)
        assert page.page_number == 2
        assert [t.title for t in page.items] == ["Coffee 2", "Coffee 1", "Coffee 0"]

    def test_out_of_range_page_is_ignored(self, busy_tracker):
        busy_tracker.view(page_number=2)
        page = busy_tracker.view(page_number=5)
        assert page.page_number == 2

    def test_new_filter_returns_to_first_page(self, busy_tracker):
        busy_tracker.view(page_number=2)
        page = busy_tracker.view(TransactionFilter(category="Travel"))
        assert page.page_number == 1
        assert [t.title for t in page.items] == ["Taxi"]

    def test_same_filter_keeps_page(self, busy_tracker):
        busy_tracker.view(TransactionFilter(category="Food"), page_number=2)
        page = busy_tracker.view(TransactionFilter(category="Food"))
        assert page.page_number == 2

    def test_delete_on_last_page_clamps(self, busy_tracker):
        busy_tracker.view(page_number=2)
        for transaction in list(busy_tracker.transactions)[:3]:
            busy_tracker.delete_transaction(transaction.id)
        page = busy_tracker.view()
        assert page.page_number == 1
        assert page.total_pages == 1


class TestAuditTrail:
    """Tests for the audit events a session emits."""

    @staticmethod
    def event_types(logs):
        return [event["event_type"] for event in logs if "event_type" in event]

    def test_only_explicit_exports_are_audited(self, tracker):
        with capture_logs() as logs:
            tracker.add_transaction(coffee(), now=NOW)
            tracker.view()
            tracker.summary(today=NOW.date())
            tracker.export_csv(today=NOW.date())
        assert self.event_types(logs) == ["transaction_added", "export_completed"]

    def test_events_use_known_types(self, tracker):
        known = {event_type.value for event_type in AuditEventType}
        with capture_logs() as logs:
            tracker.add_transaction(coffee(), now=NOW)
            with pytest.raises(ValidationError):
                tracker.add_transaction(coffee(title=""), now=NOW)
            tracker.export_backup(now=NOW)
            tracker.toggle_theme()
            tracker.reset()
        emitted = self.event_types(logs)
        assert len(emitted) == 5
        assert set(emitted) <= known


class TestTheme:
    """Tests for the theme preference."""

    def test_toggle(self, tracker):
        assert tracker.theme == "light"
        assert tracker.toggle_theme() == "dark"
        assert tracker.theme == "dark"

    def test_without_preference_storage(self):
        store = TransactionStore(InMemoryStorage())
        tracker = FinanceTracker(store=store, settings=TrackerSettings())
        assert tracker.theme == "light"
        with pytest.raises(PersistenceError):
            tracker.toggle_theme()


class TestCreateTracker:
    """Tests for the factory."""

    def test_loads_existing_transactions(self, make_transaction):
        raw = json.dumps([make_transaction().to_record()])
        storage = InMemoryStorage({DEFAULT_TRANSACTIONS_KEY: raw, "financeTheme": "dark"})
        tracker = create_tracker(storage=storage)
        assert [t.title for t in tracker.transactions] == ["Coffee"]
        assert tracker.theme == "dark"

    def test_memory_backend_from_environment(self, monkeypatch):
        monkeypatch.setenv("FINANCE_STORAGE_BACKEND", "memory")
        tracker = create_tracker()
        assert tracker.transactions == ()

    def test_file_backend_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FINANCE_STORAGE_DATA_DIR", str(tmp_path))
        tracker = create_tracker()
        tracker.add_transaction(coffee(), now=NOW)

        reopened = create_tracker()
        assert [t.title for t in reopened.transactions] == ["Coffee"]
        assert (tmp_path / "financeTransactions.slot").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
