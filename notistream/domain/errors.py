"""Error taxonomy for notification storage and delivery."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for notification delivery failures."""


class StoreUnavailable(NotificationError):
    """The durable notification store could not be reached.

    Transient: stream controllers log it and retry on the next tick.
    """


class ChannelError(NotificationError):
    """The push channel failed or ended unexpectedly."""


class ReconnectExhausted(NotificationError):
    """The consumer gave up after its configured number of attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Gave up reconnecting after {attempts} attempt(s)")
        self.attempts = attempts


class MarkReadFailed(NotificationError):
    """Writing read state back to the server did not succeed."""


__all__ = [
    "NotificationError",
    "StoreUnavailable",
    "ChannelError",
    "ReconnectExhausted",
    "MarkReadFailed",
]
