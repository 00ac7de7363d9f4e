"""Session-scoped access to the durable notification store."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from notistream.domain.entities import Notification
from notistream.infrastructure.repositories import NotificationRepository


class NotificationStore:
    """Run each repository operation in its own short-lived session.

    Stream controllers outlive any request-scoped session, so every call opens
    and closes one. All methods are blocking; async callers go through
    ``anyio.to_thread.run_sync``.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def fetch_since(
        self, recipient_id: str, cursor: datetime, limit: int
    ) -> Sequence[Notification]:
        with self._session_factory() as session:
            return NotificationRepository(session).fetch_since(
                recipient_id, cursor, limit=limit
            )

    def list_recent(
        self, recipient_id: str, limit: int = 50, unread_only: bool = False
    ) -> Sequence[Notification]:
        with self._session_factory() as session:
            return NotificationRepository(session).list_recent(
                recipient_id, limit=limit, unread_only=unread_only
            )

    def count_unread(self, recipient_id: str) -> int:
        with self._session_factory() as session:
            return NotificationRepository(session).count_unread(recipient_id)

    def mark_read(self, recipient_id: str, notification_ids: Iterable[str]) -> int:
        with self._session_factory() as session:
            return NotificationRepository(session).mark_read(recipient_id, notification_ids)

    def mark_all_read(self, recipient_id: str) -> int:
        with self._session_factory() as session:
            return NotificationRepository(session).mark_all_read(recipient_id)

    def create(self, notification: Notification) -> Notification:
        with self._session_factory() as session:
            return NotificationRepository(session).create(notification)


__all__ = ["NotificationStore"]
