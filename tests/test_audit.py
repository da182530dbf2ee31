"""Tests for structured audit logging."""

from uuid import UUID

from structlog.testing import capture_logs

from finance_tracker.audit import (
    AuditEventType,
    AuditLogger,
    create_correlation_id,
)


class TestAuditLogger:
    """Tests for AuditLogger events."""

    def test_transaction_added(self):
        correlation_id = create_correlation_id()
        with capture_logs() as logs:
            AuditLogger().log_transaction_added(
                transaction_id=1,
                transaction_type="expense",
                amount="50",
                category="Food",
                correlation_id=correlation_id,
            )
        assert len(logs) == 1
        event = logs[0]
        assert event["event_type"] == AuditEventType.TRANSACTION_ADDED.value
        assert event["log_level"] == "info"
        assert event["correlation_id"] == str(correlation_id)
        assert event["category"] == "Food"

    def test_validation_failure_is_a_warning(self):
        with capture_logs() as logs:
            AuditLogger().log_validation_failed(
                issues=[{"field": "title", "type": "missing"}],
            )
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["correlation_id"] is None

    def test_persistence_failure_is_an_error(self):
        with capture_logs() as logs:
            AuditLogger().log_persistence_failed("add", "quota exceeded")
        assert logs[0]["log_level"] == "error"
        assert logs[0]["event_type"] == "save_failed"
        assert logs[0]["operation"] == "add"

    def test_empty_export_is_logged_as_skipped(self):
        with capture_logs() as logs:
            AuditLogger().log_export("csv", 0)
        assert logs[0]["event_type"] == "export_skipped"

    def test_export_completed(self):
        with capture_logs() as logs:
            AuditLogger().log_export("json", 3, filename="finance_backup_2024-01-05.json")
        assert logs[0]["event_type"] == "export_completed"
        assert logs[0]["count"] == 3

    def test_import_rejected_lists_indices(self):
        with capture_logs() as logs:
            AuditLogger().log_import_rejected("bad records", indices=[1, 4])
        assert logs[0]["indices"] == [1, 4]


def test_correlation_ids_are_unique():
    first = create_correlation_id()
    assert isinstance(first, UUID)
    assert first != create_correlation_id()
