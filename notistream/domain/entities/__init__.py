"""Domain entities exposed by the application."""

from .connection_session import ConnectionSession
from .notification import Notification, NotificationType, RelatedType

__all__ = [
    "ConnectionSession",
    "Notification",
    "NotificationType",
    "RelatedType",
]
