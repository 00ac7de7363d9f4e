"""Realtime notification helpers for the infrastructure layer."""

from .frames import (
    FRAME_CONNECTED,
    FRAME_HEARTBEAT,
    FRAME_NOTIFICATION,
    SSE_HEADERS,
    encode_frame,
    serialize_notification,
)
from .publisher import NotificationPublisher, dispatch_notification, notification_publisher
from .registry import StreamRegistry, stream_registry
from .stream import NotificationStreamController

__all__ = [
    "FRAME_CONNECTED",
    "FRAME_HEARTBEAT",
    "FRAME_NOTIFICATION",
    "SSE_HEADERS",
    "encode_frame",
    "serialize_notification",
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "StreamRegistry",
    "stream_registry",
    "NotificationStreamController",
]
