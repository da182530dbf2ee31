"""
CSV Export and JSON Backup

Two formats leave the tracker:
- CSV: one quoted row per transaction, for spreadsheets
- JSON backup: the full transaction list plus an export timestamp and
  a format-version tag, which can be imported back

IMPORTANT: Importing a backup validates EVERY record.
A backup with even one malformed record is rejected as a whole and the
error names the offending record indices. Nothing is silently dropped.
"""

import csv
import io
import json
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.models.transaction import Transaction


CSV_HEADERS = ["Title", "Amount", "Type", "Category", "Date"]
PAYMENT_METHOD_HEADER = "PaymentMethod"
UTF8_BOM = "\ufeff"

BACKUP_TRANSACTIONS_FIELD = "transactions"
BACKUP_DATE_FIELD = "exportDate"
BACKUP_VERSION_FIELD = "version"
DEFAULT_BACKUP_VERSION = "1.0"


class ExportError(Exception):
    """Base exception for export operations."""
    pass


class EmptyExportError(ExportError):
    """There is nothing to export."""
    pass


class FormatError(Exception):
    """An import document is missing required fields or has the wrong shape."""

    def __init__(self, message: str, indices: Optional[list[int]] = None):
        super().__init__(message)
        self.indices = list(indices or [])


# =============================================================================
# CSV
# =============================================================================

def to_csv(
    transactions: Sequence[Transaction],
    include_payment_method: bool = False,
    byte_order_mark: bool = False,
) -> str:
    """
    Serialize transactions to CSV text.

    Header row is unquoted; every data field is quoted (embedded quotes
    doubled). Amounts are written with two decimals.

    Raises:
        EmptyExportError: If there are no transactions. Callers should
            check first and report this to the user.
    """
    if not transactions:
        raise EmptyExportError("No transactions to export!")

    headers = list(CSV_HEADERS)
    if include_payment_method:
        headers.append(PAYMENT_METHOD_HEADER)

    buffer = io.StringIO()
    if byte_order_mark:
        buffer.write(UTF8_BOM)
    buffer.write(",".join(headers) + "\n")

    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for transaction in transactions:
        row = [
            transaction.title,
            f"{transaction.amount:.2f}",
            transaction.type.value,
            transaction.category,
            transaction.date.isoformat(),
        ]
        if include_payment_method:
            row.append(transaction.payment_method or "")
        writer.writerow(row)

    return buffer.getvalue()


def csv_filename(today: Optional[date] = None) -> str:
    """Download name for a CSV export, e.g. transactions_2024-01-05.csv."""
    today = today or date.today()
    return f"transactions_{today.isoformat()}.csv"


# =============================================================================
# JSON BACKUP
# =============================================================================

def to_json_backup(
    transactions: Sequence[Transaction],
    version: str = DEFAULT_BACKUP_VERSION,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Wrap the transaction list in a backup document."""
    now = now or datetime.now(timezone.utc)
    return {
        BACKUP_TRANSACTIONS_FIELD: [t.to_record() for t in transactions],
        BACKUP_DATE_FIELD: now.isoformat(),
        BACKUP_VERSION_FIELD: version,
    }


def dumps_backup(
    transactions: Sequence[Transaction],
    version: str = DEFAULT_BACKUP_VERSION,
    now: Optional[datetime] = None,
) -> str:
    """Backup document as pretty-printed JSON text."""
    return json.dumps(
        to_json_backup(transactions, version=version, now=now),
        indent=2,
        ensure_ascii=False,
    )


def backup_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"finance_backup_{today.isoformat()}.json"


def from_json_backup(
    document: Union[Mapping, str, bytes],
) -> list[Transaction]:
    """
    Parse a backup document back into transactions.

    Accepts the document itself or its JSON text.

    Raises:
        FormatError: If the text is not JSON, the document has no
            transaction list, or any record is invalid or repeats an id
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except ValueError as e:
            raise FormatError(f"Backup is not valid JSON: {e}")

    if not isinstance(document, Mapping):
        raise FormatError("Backup document must be a JSON object")

    if BACKUP_TRANSACTIONS_FIELD not in document:
        raise FormatError(
            f"Invalid backup: missing '{BACKUP_TRANSACTIONS_FIELD}' field"
        )

    records = document[BACKUP_TRANSACTIONS_FIELD]
    if not isinstance(records, list):
        raise FormatError(
            f"Invalid backup: '{BACKUP_TRANSACTIONS_FIELD}' must be a list"
        )

    transactions = []
    bad_indices = []
    seen_ids = set()
    for index, record in enumerate(records):
        try:
            transaction = Transaction.model_validate(record)
        except PydanticValidationError:
            bad_indices.append(index)
            continue
        if transaction.id in seen_ids:
            bad_indices.append(index)
            continue
        seen_ids.add(transaction.id)
        transactions.append(transaction)

    if bad_indices:
        raise FormatError(
            "Invalid transaction records at indices: "
            + ", ".join(str(i) for i in bad_indices),
            indices=bad_indices,
        )

    return transactions
