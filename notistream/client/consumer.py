"""Reconnecting consumer of the notification stream."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

import httpx

from notistream.domain.entities import Notification
from notistream.domain.errors import ChannelError, ReconnectExhausted

from .api import NotificationApiClient
from .backoff import ReconnectPolicy
from .cache import NotificationCache
from .models import ConsumerState, StreamFrame
from .sse import iter_frames

logger = logging.getLogger(__name__)

CONNECTION_LOST_MESSAGE = "Connection lost. Please refresh the page."
SNAPSHOT_FAILED_MESSAGE = "Failed to load notifications"

NotificationCallback = Callable[[Notification], None]
StateCallback = Callable[[ConsumerState], None]


class ReconnectingStreamConsumer:
    """Keep a :class:`NotificationCache` in sync with the server stream.

    Every (re)connection first loads the REST snapshot, then applies stream
    frames as they arrive. A failed channel is retried with exponential
    backoff; once the policy's attempts are spent the consumer stops in
    ``TERMINATED`` and exposes :data:`CONNECTION_LOST_MESSAGE` via ``error``.
    Errors never escape :meth:`run`; they become state transitions.
    """

    def __init__(
        self,
        api: NotificationApiClient,
        *,
        cache: NotificationCache | None = None,
        policy: ReconnectPolicy | None = None,
        on_notification: NotificationCallback | None = None,
        on_state_change: StateCallback | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.api = api
        self.cache = cache or NotificationCache()
        self.policy = policy or ReconnectPolicy()
        self.on_notification = on_notification
        self.on_state_change = on_state_change
        self._sleep = sleep
        self.state = ConsumerState.IDLE
        self.attempts = 0
        self.error: str | None = None
        self.last_exception: Exception | None = None
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return self.state is ConsumerState.CONNECTED

    def start(self) -> asyncio.Task:
        """Run the consumer in a background task on the current loop."""

        if self._task is None or self._task.done():
            self._closed = False
            self._task = asyncio.create_task(self.run())
        return self._task

    async def run(self) -> None:
        while not self._closed:
            self._set_state(ConsumerState.CONNECTING)
            try:
                await self._consume_once()
            except asyncio.CancelledError:
                raise
            except (ChannelError, httpx.HTTPError) as exc:
                self.last_exception = exc
                logger.warning("Notification stream error: %s", exc)
            except Exception as exc:
                self.last_exception = exc
                logger.exception("Unexpected notification stream failure")

            if self._closed:
                return
            self._set_state(ConsumerState.ERROR)
            if not self.policy.can_retry(self.attempts):
                self.last_exception = ReconnectExhausted(self.attempts)
                self.error = CONNECTION_LOST_MESSAGE
                logger.error("Giving up on notification stream after %d attempt(s)", self.attempts)
                self._set_state(ConsumerState.TERMINATED)
                return

            delay = self.policy.delay_for(self.attempts)
            self.attempts += 1
            logger.info(
                "Reconnecting notification stream in %.1fs (attempt %d)", delay, self.attempts
            )
            self._set_state(ConsumerState.RECONNECTING)
            await self._sleep(delay)

    async def refresh(self) -> bool:
        """Reload the snapshot into the cache; return whether it succeeded."""

        try:
            notifications, unread_count = await self.api.fetch_snapshot()
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning("Could not load notification snapshot: %s", exc)
            self.error = SNAPSHOT_FAILED_MESSAGE
            return False
        self.cache.replace(notifications, unread_count)
        if self.error == SNAPSHOT_FAILED_MESSAGE:
            self.error = None
        return True

    def handle_frame(self, frame: StreamFrame) -> list[Notification]:
        """Apply one stream frame to the cache; return the new notifications."""

        added: list[Notification] = []
        if frame.type == "connected":
            # The server accepted the channel; start the backoff over.
            self.attempts = 0
            if self.error == CONNECTION_LOST_MESSAGE:
                self.error = None
        if frame.type == "notification" and frame.notifications:
            added = self.cache.merge(frame.notifications)
            for notification in added:
                self._emit_notification(notification)
        if frame.unread_count is not None:
            self.cache.set_unread_count(frame.unread_count)
        return added

    async def close(self) -> None:
        """Stop the stream and any pending reconnect; safe to call twice."""

        self._closed = True
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._set_state(ConsumerState.CLOSED)

    async def _consume_once(self) -> None:
        async with self.api.open_stream() as lines:
            self._set_state(ConsumerState.CONNECTED)
            await self.refresh()
            async for frame in iter_frames(lines):
                if self._closed:
                    return
                self.handle_frame(frame)
        raise ChannelError("Notification stream ended")

    def _emit_notification(self, notification: Notification) -> None:
        if self.on_notification is None:
            return
        try:
            self.on_notification(notification)
        except Exception:
            logger.exception("on_notification callback failed")

    def _set_state(self, state: ConsumerState) -> None:
        if state is self.state:
            return
        self.state = state
        if self.on_state_change is None:
            return
        try:
            self.on_state_change(state)
        except Exception:
            logger.exception("on_state_change callback failed")


__all__ = [
    "CONNECTION_LOST_MESSAGE",
    "ReconnectingStreamConsumer",
]
