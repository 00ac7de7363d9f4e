"""Push-on-write hints for live notification streams."""

from __future__ import annotations

import logging

from notistream.domain.entities import Notification

from .registry import StreamRegistry, stream_registry

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Wake the recipient's open streams after a notification is stored.

    Delivery itself still happens through the stream's own poll, so a missed
    wake-up only delays a notification until the next regular tick.
    """

    def __init__(self, registry: StreamRegistry) -> None:
        self._registry = registry

    def dispatch(self, notification: Notification) -> None:
        try:
            self._registry.wake(notification.recipient_id)
        except RuntimeError:
            logger.debug(
                "Could not wake streams for %s", notification.recipient_id, exc_info=True
            )


notification_publisher = NotificationPublisher(stream_registry)


def dispatch_notification(notification: Notification) -> None:
    """Public helper that delegates to the shared publisher instance."""

    notification_publisher.dispatch(notification)


__all__ = [
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
]
