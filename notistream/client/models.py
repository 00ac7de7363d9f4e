"""Client-side representations of stream frames and consumer state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from notistream.domain.entities import Notification, NotificationType, RelatedType


class ConsumerState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"
    RECONNECTING = "reconnecting"
    TERMINATED = "terminated"
    CLOSED = "closed"


@dataclass
class StreamFrame:
    """One decoded message of the notification stream."""

    type: str
    notifications: list[Notification] = field(default_factory=list)
    unread_count: int | None = None
    message: str | None = None
    timestamp: datetime | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "StreamFrame":
        if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
            raise ValueError("Frame payload must be an object with a string 'type'")
        unread = payload.get("unreadCount")
        return cls(
            type=payload["type"],
            notifications=[
                notification_from_payload(item) for item in payload.get("notifications") or []
            ],
            unread_count=int(unread) if unread is not None else None,
            message=payload.get("message"),
            timestamp=_parse_timestamp(payload.get("timestamp")),
        )


def notification_from_payload(payload: dict[str, Any]) -> Notification:
    """Build a :class:`Notification` from its camelCase JSON form."""

    related_type = payload.get("relatedType")
    return Notification(
        id=str(payload["id"]),
        recipient_id=str(payload.get("recipientId") or ""),
        type=NotificationType(payload["type"]),
        title=payload.get("title") or "",
        message=payload.get("message"),
        related_type=RelatedType(related_type) if related_type else None,
        related_id=payload.get("relatedId"),
        is_read=bool(payload.get("isRead", False)),
        created_at=_parse_timestamp(payload.get("createdAt")),
        read_at=_parse_timestamp(payload.get("readAt")),
    )


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


__all__ = ["ConsumerState", "StreamFrame", "notification_from_payload"]
