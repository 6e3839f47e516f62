from __future__ import annotations

import json
from typing import Any, Optional

from db.local_storage import LocalStorage, StorageError
from utils.logger import get_logger

_logger = get_logger(__name__)


class PersistedSlot:
    """
    One key of durable local storage, owned by a single store.

    Values go in and come out as JSON-compatible python objects. Storage that
    is missing (None), reports itself unavailable, or raises StorageError is
    treated as empty on read and skipped on write; nothing here raises to the
    caller.
    """

    def __init__(self, storage: Optional[LocalStorage], key: str) -> None:
        self.storage = storage
        self.key = key

    def available(self) -> bool:
        if self.storage is None:
            return False
        try:
            return self.storage.available()
        except StorageError as e:
            _logger.warning(f"Storage probe for '{self.key}' failed: {e}")
            return False

    def load(self) -> Optional[Any]:
        """Parsed value under the key, or None if absent, unreadable or malformed."""
        if not self.available():
            return None
        try:
            raw = self.storage.get_item(self.key)
        except StorageError as e:
            _logger.warning(f"Error reading '{self.key}' from local storage: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            _logger.warning(f"Discarding malformed '{self.key}' in local storage: {e}")
            return None

    def save(self, value: Any) -> bool:
        """Write value under the key. Returns False when the write was skipped or failed."""
        if not self.available():
            return False
        try:
            self.storage.set_item(self.key, json.dumps(value, ensure_ascii=False))
        except (StorageError, TypeError, ValueError) as e:
            _logger.warning(f"Error writing '{self.key}' to local storage: {e}")
            return False
        return True

    def remove(self) -> bool:
        if not self.available():
            return False
        try:
            self.storage.remove_item(self.key)
        except StorageError as e:
            _logger.warning(f"Error removing '{self.key}' from local storage: {e}")
            return False
        return True
