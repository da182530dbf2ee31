"""
Audit Logger

DESIGN DECISION: Every state-changing action in the tracker is logged
as one structured event. This provides:
1. Traceability of adds, deletes, imports and resets
2. Debugging capability when a save or import fails
3. A single place that names every event the system emits

Events go to the standard logging output as JSON lines. A correlation
ID ties together the events of one user action (e.g. a rejected
submission followed by a successful one).
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structured logs to stderr at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    VALIDATION_FAILED = "validation_failed"
    SAVE_FAILED = "save_failed"

    # Bulk operations
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"
    DATA_RESET = "data_reset"

    # Export
    EXPORT_COMPLETED = "export_completed"
    EXPORT_SKIPPED = "export_skipped"

    # Preferences
    THEME_CHANGED = "theme_changed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditLogger:
    """
    Central audit logging service.

    Wraps a structlog logger with one method per event type so that
    call sites cannot misspell event names or forget key details.
    """

    def __init__(self, logger_name: str = "finance_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(
        self,
        event_type: AuditEventType,
        description: str,
        severity: AuditSeverity = AuditSeverity.INFO,
        correlation_id: Optional[UUID] = None,
        **details: Any,
    ) -> None:
        """Emit one audit event."""
        fields = {
            "event_type": event_type.value,
            "description": description,
            "correlation_id": str(correlation_id) if correlation_id else None,
            **details,
        }

        if severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **fields)
        elif severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **fields)
        elif severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **fields)
        else:
            self._logger.info("audit_event", **fields)

    def log_transaction_added(
        self,
        transaction_id: int,
        transaction_type: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventType.TRANSACTION_ADDED,
            f"Transaction added: {transaction_type} {amount} ({category})",
            correlation_id=correlation_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            category=category,
        )

    def log_transaction_deleted(
        self,
        transaction_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventType.TRANSACTION_DELETED,
            f"Transaction deleted: {transaction_id}",
            correlation_id=correlation_id,
            transaction_id=transaction_id,
        )

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventType.VALIDATION_FAILED,
            f"Validation failed with {len(issues)} issues",
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            issues=issues,
        )

    def log_persistence_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventType.SAVE_FAILED,
            f"Could not save after {operation}",
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            operation=operation,
            error_message=error_message,
        )

    def log_data_imported(
        self,
        count: int,
        replaced: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventType.DATA_IMPORTED,
            f"Imported {count} transactions (replaced {replaced})",
            correlation_id=correlation_id,
            count=count,
            replaced=replaced,
        )

    def log_import_rejected(
        self,
        error_message: str,
        indices: Optional[list[int]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventType.IMPORT_REJECTED,
            "Import rejected",
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            error_message=error_message,
            indices=indices or [],
        )

    def log_data_reset(
        self,
        removed: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventType.DATA_RESET,
            f"All data reset ({removed} transactions removed)",
            correlation_id=correlation_id,
            removed=removed,
        )

    def log_export(
        self,
        export_format: str,
        count: int,
        filename: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        if count == 0:
            self.log(
                AuditEventType.EXPORT_SKIPPED,
                f"{export_format.upper()} export skipped: no transactions",
                severity=AuditSeverity.WARNING,
                correlation_id=correlation_id,
                export_format=export_format,
            )
            return
        self.log(
            AuditEventType.EXPORT_COMPLETED,
            f"Exported {count} transactions as {export_format.upper()}",
            correlation_id=correlation_id,
            export_format=export_format,
            count=count,
            filename=filename,
        )

    def log_theme_changed(self, theme: str) -> None:
        self.log(
            AuditEventType.THEME_CHANGED,
            f"Theme changed to {theme}",
            theme=theme,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through
    all subsequent operations.
    """
    return uuid4()
