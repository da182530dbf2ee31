"""
Transaction Store

The store is the sole owner of the transaction list. It reads the list
from one persistence slot and writes the full list back after every
change ("last write wins").

DESIGN DECISION: Writes are copy-on-write.
Each change builds a new list, persists it, and only then replaces the
visible state. If the write fails (e.g. quota exceeded) the store still
shows exactly what was last saved.
"""

import json
from datetime import datetime
from typing import Iterable, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from finance_tracker.export.exporter import FormatError
from finance_tracker.models.transaction import Transaction
from finance_tracker.services.storage.interface import KeyValueStorage, StorageError


logger = structlog.get_logger(__name__)

DEFAULT_TRANSACTIONS_KEY = "financeTransactions"
DEFAULT_THEME_KEY = "financeTheme"

THEME_LIGHT = "light"
THEME_DARK = "dark"
THEMES = (THEME_LIGHT, THEME_DARK)


class PersistenceError(Exception):
    """The transaction list could not be written to storage."""
    pass


class DuplicateTransactionError(PersistenceError):
    """A transaction with the same id is already stored."""
    pass


class TransactionStore:
    """
    Owns the list of transactions and keeps it in sync with storage.

    Callers get immutable snapshots (tuples) and never the internal list.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_TRANSACTIONS_KEY,
    ):
        self._storage = storage
        self._key = key
        self._transactions: tuple[Transaction, ...] = ()
        self._last_id = 0

    @property
    def key(self) -> str:
        return self._key

    def __len__(self) -> int:
        return len(self._transactions)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> tuple[Transaction, ...]:
        """
        Load the persisted list.

        Missing or malformed data yields an empty list; this never raises.
        Malformed records inside a valid array are skipped.
        """
        try:
            raw = self._storage.get(self._key)
        except StorageError as e:
            logger.warning("transactions_load_failed", key=self._key, error=str(e))
            raw = None

        self._transactions = tuple(self._parse(raw))
        self._last_id = max((t.id for t in self._transactions), default=0)

        logger.info("transactions_loaded", key=self._key, count=len(self._transactions))
        return self._transactions

    def _parse(self, raw: Optional[str]) -> list[Transaction]:
        if not raw:
            return []

        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.warning("transactions_malformed", key=self._key, error=str(e))
            return []

        if not isinstance(records, list):
            logger.warning(
                "transactions_malformed",
                key=self._key,
                error=f"expected a list, got {type(records).__name__}",
            )
            return []

        transactions = []
        seen_ids = set()
        for index, record in enumerate(records):
            try:
                transaction = Transaction.model_validate(record)
            except PydanticValidationError as e:
                logger.warning(
                    "transaction_record_skipped",
                    key=self._key,
                    index=index,
                    error=str(e),
                )
                continue
            if transaction.id in seen_ids:
                logger.warning(
                    "transaction_record_skipped",
                    key=self._key,
                    index=index,
                    error=f"duplicate id {transaction.id}",
                )
                continue
            seen_ids.add(transaction.id)
            transactions.append(transaction)

        return transactions

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_all(self) -> tuple[Transaction, ...]:
        """Current transactions in insertion order."""
        return self._transactions

    def get(self, transaction_id: int) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def next_id(self, now: Optional[datetime] = None) -> int:
        """
        Allocate an id from the creation timestamp in milliseconds.

        Two ids allocated in the same millisecond (or after importing
        ids from the future) still come out unique and increasing.
        """
        now = now or datetime.now()
        candidate = max(int(now.timestamp() * 1000), self._last_id + 1)
        self._last_id = candidate
        return candidate

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _commit(self, transactions: tuple[Transaction, ...]) -> None:
        """Persist a new list, then make it visible."""
        payload = json.dumps(
            [transaction.to_record() for transaction in transactions],
            ensure_ascii=False,
        )
        try:
            self._storage.set(self._key, payload)
        except StorageError as e:
            logger.error("transactions_persist_failed", key=self._key, error=str(e))
            raise PersistenceError(f"Failed to save transactions: {e}") from e

        self._transactions = transactions
        self._last_id = max(
            self._last_id,
            max((t.id for t in transactions), default=0),
        )

    def add(self, transaction: Transaction) -> None:
        """
        Append a transaction and persist the full list.

        Raises:
            DuplicateTransactionError: If the id is already stored
            PersistenceError: If the write fails (state is unchanged)
        """
        if self.get(transaction.id) is not None:
            raise DuplicateTransactionError(
                f"Transaction {transaction.id} already exists"
            )
        self._commit(self._transactions + (transaction,))

    def remove(self, transaction_id: int) -> bool:
        """
        Remove every transaction with this id, then persist.

        Returns False (and writes nothing) if the id is not stored.
        """
        remaining = tuple(t for t in self._transactions if t.id != transaction_id)
        if len(remaining) == len(self._transactions):
            return False
        self._commit(remaining)
        return True

    def replace_all(self, transactions: Iterable[Transaction]) -> None:
        """
        Replace the whole list (import).

        Raises:
            FormatError: If any element is not a Transaction or ids repeat
            PersistenceError: If the write fails (state is unchanged)
        """
        candidates = list(transactions)

        bad_indices = [
            index for index, item in enumerate(candidates)
            if not isinstance(item, Transaction)
        ]
        if bad_indices:
            raise FormatError(
                "Invalid transaction records at indices: "
                + ", ".join(str(i) for i in bad_indices),
                indices=bad_indices,
            )

        seen = set()
        duplicate_indices = []
        for index, transaction in enumerate(candidates):
            if transaction.id in seen:
                duplicate_indices.append(index)
            seen.add(transaction.id)
        if duplicate_indices:
            raise FormatError(
                "Duplicate transaction ids at indices: "
                + ", ".join(str(i) for i in duplicate_indices),
                indices=duplicate_indices,
            )

        self._commit(tuple(candidates))

    def clear(self) -> None:
        """Wipe all transactions (reset)."""
        self._commit(())


class PreferenceStore:
    """Theme preference, stored as "dark" or "light" under its own key."""

    def __init__(
        self,
        storage: KeyValueStorage,
        theme_key: str = DEFAULT_THEME_KEY,
    ):
        self._storage = storage
        self._theme_key = theme_key

    def load_theme(self) -> str:
        """Stored theme, or "light" when missing, unreadable or unrecognized."""
        try:
            value = self._storage.get(self._theme_key)
        except StorageError as e:
            logger.warning("theme_load_failed", key=self._theme_key, error=str(e))
            return THEME_LIGHT
        return value if value in THEMES else THEME_LIGHT

    def save_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme!r}. Allowed: {THEMES}")
        try:
            self._storage.set(self._theme_key, theme)
        except StorageError as e:
            raise PersistenceError(f"Failed to save theme: {e}") from e

    def toggle_theme(self) -> str:
        """Flip between light and dark, persist, and return the new theme."""
        theme = THEME_LIGHT if self.load_theme() == THEME_DARK else THEME_DARK
        self.save_theme(theme)
        return theme
