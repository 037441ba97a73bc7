"""
Local cache of starred repositories.

A single sqlite-utils table keyed by repository URL. Every access goes
through one connection guarded by a lock, so pipeline workers can upsert
concurrently.
"""

import os
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import sqlite_utils

from stars.config import CACHE_PATH
from stars.exceptions import StoreError
from stars.logging import get_logger
from stars.types.stars import StarRecord

logger = get_logger("store")
MEMORY = ":memory:"

_COLUMNS = {
    "url": str,
    "language": str,
    "description": str,
    "topics": str,
    "stargazers": int,
    "pushed_at": str,
    "starred_at": str,
    "archived": int,
}
_INDEXES = ("language", "archived", "pushed_at", "starred_at")


def default_cache_path() -> Path:
    """Cache location, overridable with STARS_CACHE_PATH."""
    override = os.environ.get("STARS_CACHE_PATH")
    return Path(override).expanduser() if override else CACHE_PATH


class StarStore:
    """Upsert/scan/query/delete access to cached StarRecords."""

    TABLE = "stars"

    def __init__(self, path: str | Path | None = None) -> None:
        """
        Open (creating if needed) the cache database.

        Args:
            path: Database file, or ":memory:" (default: ~/.cache/stars.db)

        Raises:
            StoreError: If the file cannot be created or opened
        """
        self.path = MEMORY if str(path) == MEMORY else Path(path or default_cache_path())
        self._lock = threading.RLock()

        try:
            if self.path != MEMORY:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path), check_same_thread=False)
            self.db = sqlite_utils.Database(conn)
            self._ensure_table()
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"Could not open cache at {self.path}: {e}") from e

        logger.debug("Opened cache at %s", self.path)

    def _ensure_table(self) -> None:
        table = self.db[self.TABLE]
        table.create(_COLUMNS, pk="url", if_not_exists=True)
        for column in _INDEXES:
            table.create_index([column], if_not_exists=True)

    @contextmanager
    def _locked(self, action: str) -> Iterator[sqlite_utils.Database]:
        with self._lock:
            try:
                yield self.db
            except sqlite3.Error as e:
                raise StoreError(f"Could not {action}: {e}") from e

    def upsert(self, record: StarRecord) -> None:
        """Insert a record, overwriting any record with the same URL."""
        with self._locked(f"save {record.url}") as db:
            db[self.TABLE].upsert(record.to_row(), pk="url")

    def all(self) -> list[StarRecord]:
        with self._locked("read cached stars") as db:
            return [StarRecord.from_row(row) for row in db[self.TABLE].rows]

    def find_by(self, field: str, value: Any) -> list[StarRecord]:
        """
        Return records whose field equals value.

        Raises:
            ValueError: If field is not a StarRecord column
        """
        if field not in _COLUMNS:
            raise ValueError(f"unknown field {field!r}")
        if isinstance(value, bool):
            value = int(value)

        with self._locked(f"query cached stars by {field}") as db:
            rows = db[self.TABLE].rows_where(f"[{field}] = ?", [value])
            return [StarRecord.from_row(row) for row in rows]

    def delete(self, url: str) -> None:
        with self._locked(f"delete {url}") as db:
            db[self.TABLE].delete_where("url = ?", [url])

    def count(self) -> int:
        with self._locked("count cached stars") as db:
            return db[self.TABLE].count

    def close(self) -> None:
        with self._lock:
            self.db.close()

    def clear(self) -> None:
        """Wipe the cache by removing its database file."""
        self.close()
        if self.path == MEMORY:
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreError(f"Could not remove {self.path}: {e}") from e
        logger.info("Removed cache %s", self.path)

    def __enter__(self) -> "StarStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
