# durable key/value storage used by the client-side stores, modelled on window.localStorage
from __future__ import annotations

import os
import sqlite3
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from utils.logger import get_logger

_logger = get_logger(__name__)


class StorageError(Exception):
    """Base class for failures of the durable storage medium."""


class StorageUnavailableError(StorageError):
    """The storage medium cannot be opened in the current context."""


class QuotaExceededError(StorageError):
    """A write would push the storage past its byte quota."""


class LocalStorage(ABC):
    """
    Interface shared by the storage backends.

    Keys and values are plain strings; callers serialize to JSON themselves.
    """

    def available(self) -> bool:
        return True

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...

    def clear(self) -> None:
        for key in self.keys():
            self.remove_item(key)


class MemoryLocalStorage(LocalStorage):
    """Dict backed storage. Contents are lost with the process."""

    def __init__(self, quota: int = 0) -> None:
        self._data: Dict[str, str] = {}
        self.quota = quota

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota:
            used = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            if used + len(key) + len(value) > self.quota:
                raise QuotaExceededError(f"writing '{key}' exceeds {self.quota} bytes")
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class SqliteLocalStorage(LocalStorage):
    """
    File backed storage: one row per key in a single sqlite table.

    Every call opens its own connection and commits before returning, so a
    write is durable once set_item returns. Any sqlite/OS failure surfaces as
    a StorageError.
    """

    def __init__(self, path: str, quota: int = 0) -> None:
        self.path = path
        self.quota = quota
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            conn = sqlite3.connect(self.path)
            if not self._initialized:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS local_storage (
                        key   TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    );
                    """
                )
                conn.commit()
                self._initialized = True
            return conn
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError(f"cannot open {self.path}: {e}") from e

    def available(self) -> bool:
        try:
            conn = self._connect()
        except StorageUnavailableError as e:
            _logger.debug(str(e))
            return False
        conn.close()
        return True

    def get_item(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT value FROM local_storage WHERE key = ?;", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"read of '{key}' failed: {e}") from e
        finally:
            conn.close()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            if self.quota:
                row = conn.execute(
                    "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) "
                    "FROM local_storage WHERE key <> ?;",
                    (key,),
                ).fetchone()
                if row[0] + len(key) + len(value) > self.quota:
                    raise QuotaExceededError(
                        f"writing '{key}' exceeds {self.quota} bytes"
                    )
            conn.execute(
                "INSERT INTO local_storage(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"write of '{key}' failed: {e}") from e
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM local_storage WHERE key = ?;", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"delete of '{key}' failed: {e}") from e
        finally:
            conn.close()

    def keys(self) -> List[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT key FROM local_storage ORDER BY key;").fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"listing keys failed: {e}") from e
        finally:
            conn.close()
        return [row[0] for row in rows]


def open_local_storage(path: str, quota: int = 0) -> Optional[LocalStorage]:
    """Return file backed storage at path, or None when it cannot be opened."""
    storage = SqliteLocalStorage(path, quota=quota)
    if not storage.available():
        _logger.warning(f"Local storage at {path} unavailable, state will not persist.")
        return None
    return storage
