"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from notistream.domain.entities import Notification, NotificationType, RelatedType
from notistream.domain.errors import StoreUnavailable
from notistream.infrastructure.models import NotificationModel
from notistream.utils import (
    from_storage_datetime,
    now_in_app_timezone,
    to_storage_datetime,
)


class NotificationRepository:
    """Provide read/write operations for :class:`Notification` objects.

    Driver and pool failures are re-raised as :class:`StoreUnavailable` so
    callers can treat them as transient without knowing about SQLAlchemy.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def fetch_since(
        self,
        recipient_id: str,
        cursor: datetime,
        *,
        limit: int,
    ) -> Sequence[Notification]:
        """Return notifications created strictly after ``cursor``, newest first.

        When more than ``limit`` rows qualify, the ones closest to the cursor
        are returned, so advancing the cursor to the newest of them never
        skips a row.
        """

        with self._translate_errors():
            query = (
                self.session.query(NotificationModel)
                .filter(NotificationModel.recipient_id == recipient_id)
                .filter(NotificationModel.created_at > to_storage_datetime(cursor))
                .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
                .limit(limit)
            )
            return [self._to_entity(model) for model in reversed(query.all())]

    def list_recent(
        self,
        recipient_id: str,
        *,
        limit: int | None = 50,
        unread_only: bool = False,
    ) -> Sequence[Notification]:
        with self._translate_errors():
            query = self.session.query(NotificationModel).filter(
                NotificationModel.recipient_id == recipient_id
            )
            if unread_only:
                query = query.filter(NotificationModel.is_read.is_(False))
            query = query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
            if limit is not None:
                query = query.limit(limit)
            return [self._to_entity(model) for model in query.all()]

    def count_unread(self, recipient_id: str) -> int:
        with self._translate_errors():
            count = (
                self.session.query(func.count(NotificationModel.id))
                .filter(NotificationModel.recipient_id == recipient_id)
                .filter(NotificationModel.is_read.is_(False))
                .scalar()
            )
            return int(count or 0)

    def create(self, notification: Notification) -> Notification:
        with self._translate_errors():
            model = NotificationModel()
            self._apply_entity_to_model(model, notification)
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
            return self._to_entity(model)

    def mark_read(self, recipient_id: str, notification_ids: Iterable[str]) -> int:
        """Mark the given notifications read and return how many changed.

        Ids that are already read, unknown, or addressed to another recipient
        are ignored, which makes repeated calls harmless.
        """

        ids = sorted({notification_id for notification_id in notification_ids if notification_id})
        if not ids:
            return 0
        with self._translate_errors():
            updated = (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.id.in_(ids),
                    NotificationModel.recipient_id == recipient_id,
                    NotificationModel.is_read.is_(False),
                )
                .update(self._read_values(), synchronize_session=False)
            )
            self.session.commit()
            return int(updated or 0)

    def mark_all_read(self, recipient_id: str) -> int:
        with self._translate_errors():
            updated = (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.recipient_id == recipient_id,
                    NotificationModel.is_read.is_(False),
                )
                .update(self._read_values(), synchronize_session=False)
            )
            self.session.commit()
            return int(updated or 0)

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except (DBAPIError, PoolTimeoutError) as exc:
            self.session.rollback()
            raise StoreUnavailable(str(exc)) from exc

    @staticmethod
    def _read_values() -> dict:
        return {
            NotificationModel.is_read: True,
            NotificationModel.read_at: to_storage_datetime(now_in_app_timezone()),
        }

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        if notification.id is not None:
            model.id = notification.id
        model.created_at = to_storage_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.recipient_id = notification.recipient_id
        model.type = NotificationType(notification.type).value
        model.title = notification.title
        model.message = notification.message
        model.related_type = (
            RelatedType(notification.related_type).value if notification.related_type else None
        )
        model.related_id = notification.related_id
        model.is_read = bool(notification.is_read)
        model.read_at = to_storage_datetime(notification.read_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            type=NotificationType(model.type),
            title=model.title,
            message=model.message,
            related_type=RelatedType(model.related_type) if model.related_type else None,
            related_id=model.related_id,
            is_read=bool(model.is_read),
            created_at=from_storage_datetime(model.created_at),
            read_at=from_storage_datetime(model.read_at),
        )


__all__ = ["NotificationRepository"]
