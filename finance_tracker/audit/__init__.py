"""Audit logging package."""

from finance_tracker.audit.logger import (
    AuditEventType,
    AuditLogger,
    AuditSeverity,
    configure_logging,
    create_correlation_id,
)

__all__ = [
    "AuditEventType",
    "AuditLogger",
    "AuditSeverity",
    "configure_logging",
    "create_correlation_id",
]
