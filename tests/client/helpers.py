"""Builders for JSON payloads the notification server emits."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone


def notification_payload(
    notification_id: str,
    *,
    seconds_ago: float = 0,
    is_read: bool = False,
    recipient_id: str = "staff-1",
) -> dict:
    created = datetime.now(timezone.utc) - timedelta(seconds=seconds_ago)
    return {
        "id": notification_id,
        "recipientId": recipient_id,
        "type": "QUOTE_SUBMITTED",
        "title": "New Quote from Acme",
        "message": "Review and respond promptly.",
        "relatedType": "quotation",
        "relatedId": "quote-1",
        "isRead": is_read,
        "createdAt": created.isoformat(),
        "readAt": None,
    }


def snapshot_body(notifications: list[dict], unread_count: int) -> dict:
    return {"success": True, "data": notifications, "unreadCount": unread_count}


def sse_body(*frames: dict) -> str:
    return "".join(f"data: {json.dumps(frame)}\n\n" for frame in frames)
