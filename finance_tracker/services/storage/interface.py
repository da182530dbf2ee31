"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the persistence slot.
This allows us to:
1. Keep the transaction store independent of where bytes end up
2. Use in-memory storage for testing
3. Simulate a storage quota the way browser local storage enforces one

The interface is intentionally tiny - a string-keyed, string-valued
slot store, the same contract as browser local storage.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Abstract interface for key-value persistence.

    Any storage implementation (memory, local files, ...)
    must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Slot name

        Returns:
            The stored text, or None if the slot is empty

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: Slot name
            value: Text to store

        Raises:
            QuotaExceededError: If the write would exceed the quota
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Args:
            key: Slot name

        Returns:
            True if something was removed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List the keys currently holding a value."""
        pass

    def used_bytes(self) -> int:
        """Total UTF-8 size of all stored values."""
        total = 0
        for key in self.keys():
            value = self.get(key)
            if value is not None:
                total += len(value.encode("utf-8"))
        return total


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class QuotaExceededError(StorageError):
    """A write would push the stored data over the configured quota."""

    def __init__(self, key: str, required_bytes: int, quota_bytes: int):
        self.key = key
        self.required_bytes = required_bytes
        self.quota_bytes = quota_bytes
        super().__init__(
            f"Storage quota exceeded writing '{key}': "
            f"{required_bytes} bytes needed, quota is {quota_bytes} bytes"
        )
