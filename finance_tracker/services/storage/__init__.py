"""
Storage Services Package

Provides the abstract slot-storage interface and concrete implementations.
Local files are the default backend; in-memory storage backs the tests.
"""

from finance_tracker.services.storage.interface import (
    KeyValueStorage,
    QuotaExceededError,
    StorageError,
)
from finance_tracker.services.storage.local_file import LocalFileStorage
from finance_tracker.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "KeyValueStorage",
    # Exceptions
    "QuotaExceededError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "LocalFileStorage",
]
