"""Services package."""

from finance_tracker.services.storage import (
    InMemoryStorage,
    KeyValueStorage,
    LocalFileStorage,
    QuotaExceededError,
    StorageError,
)
from finance_tracker.services.store import (
    DuplicateTransactionError,
    PersistenceError,
    PreferenceStore,
    TransactionStore,
)

__all__ = [
    # Storage
    "InMemoryStorage",
    "KeyValueStorage",
    "LocalFileStorage",
    "QuotaExceededError",
    "StorageError",
    # Store
    "DuplicateTransactionError",
    "PersistenceError",
    "PreferenceStore",
    "TransactionStore",
]
