"""Local window of recent notifications held by a client."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable

from notistream.domain.entities import Notification

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class NotificationCache:
    """Deduplicated, newest-first list plus the server-confirmed unread count.

    The list is a bounded recent window, so ``unread_count`` is never derived
    from it: it comes from the snapshot and from every stream frame, and is
    only adjusted locally by optimistic read actions.
    """

    def __init__(self, max_size: int = 50) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self._items: list[Notification] = []
        self.unread_count = 0

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    def ids(self) -> set[str]:
        return {item.id for item in self._items if item.id is not None}

    def replace(self, notifications: Iterable[Notification], unread_count: int) -> None:
        """Swap the cached window for a fresh snapshot."""

        unique: list[Notification] = []
        seen: set[str | None] = set()
        for notification in notifications:
            if notification.id in seen:
                continue
            seen.add(notification.id)
            unique.append(notification)
        self._items = unique[: self.max_size]
        self.set_unread_count(unread_count)

    def merge(self, notifications: Iterable[Notification]) -> list[Notification]:
        """Prepend notifications not cached yet and return just those.

        Entries already cached keep their local state, so an optimistic
        mark-read is not undone by a frame that raced with it.
        """

        known = self.ids()
        added: list[Notification] = []
        for notification in notifications:
            if notification.id in known:
                continue
            known.add(notification.id)
            added.append(notification)
        if added:
            added.sort(key=lambda n: n.created_at or _EPOCH, reverse=True)
            self._items = (added + self._items)[: self.max_size]
        return added

    def set_unread_count(self, unread_count: int) -> None:
        self.unread_count = max(0, int(unread_count))

    def mark_read(self, notification_ids: Iterable[str]) -> int:
        """Flip the cached entries to read; return how many were unread."""

        targets = set(notification_ids)
        changed = 0
        for index, item in enumerate(self._items):
            if item.id in targets and not item.is_read:
                self._items[index] = replace(item, is_read=True)
                changed += 1
        self.unread_count = max(0, self.unread_count - changed)
        return changed

    def mark_all_read(self) -> int:
        changed = 0
        for index, item in enumerate(self._items):
            if not item.is_read:
                self._items[index] = replace(item, is_read=True)
                changed += 1
        self.unread_count = 0
        return changed

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["NotificationCache"]
