"""Client side of the notification stream: consumer, cache and reconciler."""

from .api import NotificationApiClient
from .backoff import ReconnectPolicy
from .cache import NotificationCache
from .consumer import CONNECTION_LOST_MESSAGE, ReconnectingStreamConsumer
from .models import ConsumerState, StreamFrame, notification_from_payload
from .reconciler import ReadStateReconciler
from .sse import SSEDecoder, iter_frames

__all__ = [
    "CONNECTION_LOST_MESSAGE",
    "ConsumerState",
    "NotificationApiClient",
    "NotificationCache",
    "ReadStateReconciler",
    "ReconnectPolicy",
    "ReconnectingStreamConsumer",
    "SSEDecoder",
    "StreamFrame",
    "iter_frames",
    "notification_from_payload",
]
