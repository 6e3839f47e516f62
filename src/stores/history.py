from __future__ import annotations

from typing import List, Optional

from db.local_storage import LocalStorage
from stores.models import HistoryEntry
from stores.persistence import PersistedSlot
from utils.logger import get_logger

_logger = get_logger(__name__)

HISTORY_KEY = "recentlyViewed"
MAX_HISTORY_LENGTH = 10


class RecentHistoryStore:
    """
    Recently viewed products, newest first.

    Nothing is cached in memory: every call reads the storage entry, so two
    stores over the same storage see each other's writes.
    """

    def __init__(
        self,
        storage: Optional[LocalStorage],
        key: str = HISTORY_KEY,
        max_length: int = MAX_HISTORY_LENGTH,
    ) -> None:
        self._slot = PersistedSlot(storage, key)
        self.max_length = max_length

    def get_history(self) -> List[HistoryEntry]:
        """
        Return the stored history.

        Absent storage, a missing key and malformed contents all give [].
        """
        data = self._slot.load()
        if not isinstance(data, list):
            return []
        try:
            return [HistoryEntry.from_dict(entry) for entry in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            _logger.warning(f"Discarding unreadable history: {e!r}")
            return []

    def add_to_history(self, item: HistoryEntry) -> None:
        """Move item to the front, dropping any older entry with the same id."""
        if item is None or not item.id:
            return
        if not self._slot.available():
            return

        history = [entry for entry in self.get_history() if entry.id != item.id]
        history.insert(0, item)
        history = history[: self.max_length]

        self._slot.save([entry.to_dict() for entry in history])

    def clear_history(self) -> None:
        self._slot.remove()
