"""Serialization of notifications and Server-Sent Events frames."""

from __future__ import annotations

import json
from typing import Any, Iterable

from notistream.domain.entities import Notification
from notistream.utils import isoformat_or_none, now_in_app_timezone

FRAME_CONNECTED = "connected"
FRAME_NOTIFICATION = "notification"
FRAME_HEARTBEAT = "heartbeat"

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON payload representation for ``notification``."""

    return {
        "id": notification.id,
        "recipientId": notification.recipient_id,
        "type": _enum_value(notification.type),
        "title": notification.title,
        "message": notification.message,
        "relatedType": _enum_value(notification.related_type),
        "relatedId": notification.related_id,
        "isRead": bool(notification.is_read),
        "createdAt": isoformat_or_none(notification.created_at),
        "readAt": isoformat_or_none(notification.read_at),
    }


def encode_frame(
    frame_type: str,
    *,
    notifications: Iterable[Notification] | None = None,
    unread_count: int | None = None,
    message: str | None = None,
) -> str:
    """Render one ``data:`` message of the notification stream."""

    payload: dict[str, Any] = {"type": frame_type}
    if message is not None:
        payload["message"] = message
    if notifications is not None:
        payload["notifications"] = [serialize_notification(n) for n in notifications]
    if unread_count is not None:
        payload["unreadCount"] = unread_count
    payload["timestamp"] = now_in_app_timezone().isoformat()
    return f"data: {json.dumps(payload)}\n\n"


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


__all__ = [
    "FRAME_CONNECTED",
    "FRAME_HEARTBEAT",
    "FRAME_NOTIFICATION",
    "SSE_HEADERS",
    "encode_frame",
    "serialize_notification",
]
