"""
Generic key/value persistence with prefix scans.

Every record type (moods, reminders, memories) is stored in one flat
key space as a JSON document under a ``"<type>:<discriminator>"``
key.  This module defines the ``KVStore`` contract and two
implementations:

* ``InMemoryKVStore`` keeps documents in a dict; used by tests and for
  throwaway runs.
* ``SqliteKVStore`` persists documents in a single ``kv_store`` table
  of an SQLite database file.

Contract
--------
``get`` returns ``None`` for a missing key and never raises for it.
``set`` overwrites unconditionally (last writer wins).  ``delete`` is
idempotent.  ``scan_by_prefix`` returns every value whose key starts
with the prefix, in storage order; callers sort by the timestamp
embedded in each document.  There is no pagination: a scan reads the
whole matching range.

Backend failures are raised as ``StorageError`` with the underlying
cause in the message.  No retries are attempted.
"""

import copy
import json
import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .errors import StorageError


logger = logging.getLogger(__name__)


class KVStore(ABC):
    """Abstract key/value store with prefix scans."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or ``None`` when absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``.  Removing an absent key is not an error."""

    @abstractmethod
    def scan_by_prefix(self, prefix: str) -> List[Any]:
        """Return all values whose key starts with ``prefix``."""


class InMemoryKVStore(KVStore):
    """Dict‑backed store.  Values are deep‑copied in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def scan_by_prefix(self, prefix: str) -> List[Any]:
        return [copy.deepcopy(v) for k, v in self._data.items() if k.startswith(prefix)]

    def keys(self) -> List[str]:
        return list(self._data)


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are returned unchanged; relative paths are resolved
    against the project root.
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def _escape_like(prefix: str) -> str:
    """Escape LIKE wildcards so the prefix is matched literally."""
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqliteKVStore(KVStore):
    """Key/value store persisted in an SQLite table.

    A new connection is opened for every operation and closed
    afterwards, so the store is safe to share across requests.  The
    ``kv_store`` table is created on demand.

    Parameters
    ----------
    path : str
        Filesystem path of the database file.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _connect(self) -> sqlite3.Connection:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        # LIKE is case-insensitive for ASCII by default; keys are not.
        conn.execute("PRAGMA case_sensitive_like = ON")
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv_store (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        return conn

    @contextmanager
    def _cursor(self, operation: str) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor, commit on success and translate sqlite and JSON errors."""
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as exc:
            logger.error("KV %s failed to connect to %s: %s", operation, self.path, exc)
            raise StorageError(f"KV {operation} failed: {exc}") from exc
        try:
            yield conn.cursor()
            conn.commit()
        except (sqlite3.Error, ValueError, TypeError) as exc:
            logger.error("KV %s failed: %s", operation, exc)
            raise StorageError(f"KV {operation} failed: {exc}") from exc
        finally:
            conn.close()

    def get(self, key: str) -> Optional[Any]:
        with self._cursor("get") as cursor:
            row = cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            return json.loads(row["value"]) if row else None

    def set(self, key: str, value: Any) -> None:
        with self._cursor("set") as cursor:
            payload = json.dumps(value)
            cursor.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, payload),
            )

    def delete(self, key: str) -> None:
        with self._cursor("delete") as cursor:
            cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def scan_by_prefix(self, prefix: str) -> List[Any]:
        pattern = _escape_like(prefix) + "%"
        with self._cursor("scan") as cursor:
            rows = cursor.execute(
                "SELECT value FROM kv_store WHERE key LIKE ? ESCAPE '\\'",
                (pattern,),
            ).fetchall()
            return [json.loads(row["value"]) for row in rows]
