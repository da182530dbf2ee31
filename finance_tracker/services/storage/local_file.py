"""
Local File Storage Implementation

DESIGN DECISION: Each slot is one UTF-8 file in a data directory.
This keeps the on-disk layout identical to what the browser dashboard
keeps in local storage: one JSON array under the transactions key and
one short string under the theme key.

TRADEOFFS:
- Not suitable for large data (fine for one person's ledger)
- No transactions across keys (each slot is written independently)
- Writes are atomic per slot: temp file + rename, so a crash mid-write
  never leaves a truncated slot behind
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.services.storage.interface import (
    KeyValueStorage,
    QuotaExceededError,
    StorageError,
)


logger = structlog.get_logger(__name__)

SLOT_SUFFIX = ".slot"
_VALID_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalFileStorage(KeyValueStorage):
    """
    File-per-key implementation of slot storage.

    Transient write failures (e.g. a file briefly locked by a backup
    tool) are retried before being reported as StorageError.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        quota_bytes: Optional[int] = None,
    ):
        self._directory = Path(directory)
        self._quota_bytes = quota_bytes

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        """Map a key to its file, rejecting keys that could escape the directory."""
        if not _VALID_KEY.match(key) or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}{SLOT_SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read '{key}': {e}")

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        encoded = value.encode("utf-8")

        try:
            self._check_quota(key, path, len(encoded))
            self._write_atomic(path, encoded)
        except OSError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to write '{key}': {e}")

    def _check_quota(self, key: str, path: Path, size: int) -> None:
        if self._quota_bytes is None:
            return
        current_size = path.stat().st_size if path.exists() else 0
        required = self.used_bytes() - current_size + size
        if required > self._quota_bytes:
            logger.warning(
                "storage_quota_exceeded",
                key=key,
                required_bytes=required,
                quota_bytes=self._quota_bytes,
            )
            raise QuotaExceededError(key, required, self._quota_bytes)

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_atomic(self, path: Path, data: bytes) -> None:
        """Write to a temp file in the same directory, then rename over the target."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=SLOT_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete '{key}': {e}")

    def keys(self) -> list[str]:
        if not self._directory.exists():
            return []
        return sorted(
            path.name[:-len(SLOT_SUFFIX)]
            for path in self._directory.glob(f"*{SLOT_SUFFIX}")
            if not path.name.startswith(".tmp-")
        )

    def used_bytes(self) -> int:
        return sum(self._path_for(key).stat().st_size for key in self.keys())
