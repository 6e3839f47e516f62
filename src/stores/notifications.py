from __future__ import annotations

import dataclasses
from typing import Iterable, List

from stores.models import NotificationEntry


class NotificationStore:
    """In-memory notifications, newest first. Reset whenever the app restarts."""

    def __init__(self) -> None:
        self._notifications: List[NotificationEntry] = []

    @property
    def notifications(self) -> List[NotificationEntry]:
        return list(self._notifications)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if n.unread)

    def __len__(self) -> int:
        return len(self._notifications)

    def set_notifications(self, items: Iterable[NotificationEntry]) -> None:
        self._notifications = list(items)

    def mark_as_read(self, notification_id: int) -> None:
        self._notifications = [
            dataclasses.replace(n, unread=False) if n.id == notification_id else n
            for n in self._notifications
        ]

    def mark_all_as_read(self) -> None:
        self._notifications = [
            dataclasses.replace(n, unread=False) for n in self._notifications
        ]

    def add_notification(self, item: NotificationEntry) -> None:
        self._notifications = [item, *self._notifications]

    def remove_notification(self, notification_id: int) -> None:
        self._notifications = [
            n for n in self._notifications if n.id != notification_id
        ]
