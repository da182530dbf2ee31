"""
In-Memory Storage Implementation

Used by tests and by the 'memory' backend setting. Enforces the same
optional quota as the file backend so quota failures can be exercised
without touching the disk.
"""

from typing import Optional

import structlog

from finance_tracker.services.storage.interface import (
    KeyValueStorage,
    QuotaExceededError,
)


logger = structlog.get_logger(__name__)


class InMemoryStorage(KeyValueStorage):
    """Dict-backed slot storage."""

    def __init__(
        self,
        initial: Optional[dict[str, str]] = None,
        quota_bytes: Optional[int] = None,
    ):
        self._data: dict[str, str] = dict(initial or {})
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            current = self.get(key)
            current_size = len(current.encode("utf-8")) if current is not None else 0
            required = self.used_bytes() - current_size + len(value.encode("utf-8"))
            if required > self._quota_bytes:
                logger.warning(
                    "storage_quota_exceeded",
                    key=key,
                    required_bytes=required,
                    quota_bytes=self._quota_bytes,
                )
                raise QuotaExceededError(key, required, self._quota_bytes)
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._data)
