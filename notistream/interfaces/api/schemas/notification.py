"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from notistream.domain.entities import NotificationType, RelatedType


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NotificationRead(_CamelModel):
    """Representation of a notification delivered to the client."""

    id: str
    recipient_id: str
    type: NotificationType
    title: str
    message: str | None = None
    related_type: RelatedType | None = None
    related_id: str | None = None
    is_read: bool = False
    created_at: datetime
    read_at: datetime | None = None


class NotificationListResponse(_CamelModel):
    """Snapshot returned to a client before it attaches to the stream."""

    success: bool = True
    data: list[NotificationRead] = Field(default_factory=list)
    unread_count: int = Field(ge=0)


class UnreadCountResponse(_CamelModel):
    success: bool = True
    unread_count: int = Field(ge=0)


class NotificationMarkReadRequest(_CamelModel):
    """Payload used to mark a batch, or every notification, as read."""

    notification_ids: list[str] | None = Field(
        default=None, description="Identifiers of the notifications to mark as read"
    )
    mark_all_as_read: bool = False

    def unique_ids(self) -> list[str]:
        """Return the identifiers without duplicates preserving order."""

        unique: list[str] = []
        seen: set[str] = set()
        for notification_id in self.notification_ids or []:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class NotificationMarkReadResponse(_CamelModel):
    success: bool = True
    message: str
    updated: int = Field(ge=0)


__all__ = [
    "NotificationListResponse",
    "NotificationMarkReadRequest",
    "NotificationMarkReadResponse",
    "NotificationRead",
    "UnreadCountResponse",
]
