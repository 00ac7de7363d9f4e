"""Per-connection controller behind the notification SSE endpoint."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime, timedelta

import anyio
from anyio import to_thread

from notistream.domain.entities import ConnectionSession
from notistream.domain.errors import StoreUnavailable
from notistream.infrastructure.store import NotificationStore

from .frames import FRAME_CONNECTED, FRAME_HEARTBEAT, FRAME_NOTIFICATION, encode_frame
from .registry import StreamRegistry

logger = logging.getLogger(__name__)


class NotificationStreamController:
    """Poll the store for one principal and render the results as SSE frames.

    Lifecycle: ``stream()`` registers a session and emits ``connected``; each
    tick then fetches rows newer than the session cursor and emits either a
    ``notification`` or a ``heartbeat`` frame carrying the fresh unread
    count. Closing the generator (client disconnect, task cancellation or
    registry shutdown) unregisters the session.
    """

    def __init__(
        self,
        principal_id: str,
        *,
        store: NotificationStore,
        registry: StreamRegistry,
        poll_interval: float = 5.0,
        backlog_window: float = 60.0,
        batch_limit: int = 10,
        failure_alert_ticks: int = 6,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> None:
        self.principal_id = principal_id
        self._store = store
        self._registry = registry
        self._poll_interval = poll_interval
        self._backlog_window = timedelta(seconds=backlog_window)
        self._batch_limit = batch_limit
        self._failure_alert_ticks = failure_alert_ticks
        self._is_disconnected = is_disconnected
        # Delivered ids mapped to their created_at; pruned below the cursor.
        self._delivered: dict[str, datetime] = {}
        self._backlog_pending = False
        self._consecutive_failures = 0
        self.session: ConnectionSession | None = None

    async def stream(self) -> AsyncIterator[str]:
        session = self._registry.open(
            self.principal_id, backlog_window=self._backlog_window
        )
        self.session = session
        logger.info(
            "Notification stream %s opened for %s (cursor %s)",
            session.session_id,
            self.principal_id,
            session.cursor.isoformat(),
        )
        try:
            yield encode_frame(FRAME_CONNECTED, message="SSE connection established")
            while session.is_active:
                session.wakeup.clear()
                frame = await self.tick(session)
                if frame is not None:
                    yield frame
                if self._is_disconnected is not None and await self._is_disconnected():
                    break
                if self._backlog_pending:
                    continue
                with anyio.move_on_after(self._poll_interval):
                    await session.wakeup.wait()
        finally:
            self._registry.close(session)
            logger.info(
                "Notification stream %s closed for %s",
                session.session_id,
                self.principal_id,
            )

    async def tick(self, session: ConnectionSession) -> str | None:
        """Run one poll cycle; never raises for store or query failures."""

        try:
            rows = await to_thread.run_sync(
                self._store.fetch_since, self.principal_id, session.cursor, self._batch_limit
            )
            unread_count = await to_thread.run_sync(
                self._store.count_unread, self.principal_id
            )
        except Exception as exc:
            # One connection's failure must never end the others' streams.
            self._backlog_pending = False
            self._record_failure(exc)
            return None
        self._consecutive_failures = 0

        previous = session.cursor
        fresh = [
            row
            for row in rows
            if row.id not in self._delivered
            and (row.created_at is None or row.created_at > previous)
        ]
        observed = [row.created_at for row in rows if row.created_at is not None]
        cursor = session.advance(max(observed) if observed else None)
        self._registry.remember(session)
        # A full batch that moved the cursor may have more rows behind it.
        self._backlog_pending = len(rows) >= self._batch_limit and cursor > previous

        for row in fresh:
            if row.id is not None and row.created_at is not None:
                self._delivered[row.id] = row.created_at
        self._delivered = {
            notification_id: created_at
            for notification_id, created_at in self._delivered.items()
            if created_at >= cursor
        }

        if not fresh:
            return encode_frame(FRAME_HEARTBEAT, unread_count=unread_count)

        logger.debug(
            "Delivering %d notification(s) to %s", len(fresh), self.principal_id
        )
        return encode_frame(
            FRAME_NOTIFICATION, notifications=fresh, unread_count=unread_count
        )

    def _record_failure(self, exc: Exception) -> None:
        self._consecutive_failures += 1
        logger.warning(
            "Notification poll failed for %s (%d in a row): %s",
            self.principal_id,
            self._consecutive_failures,
            exc,
            exc_info=not isinstance(exc, StoreUnavailable),
        )
        if self._consecutive_failures == self._failure_alert_ticks:
            logger.error(
                "Notification store unreachable for %s after %d consecutive polls",
                self.principal_id,
                self._consecutive_failures,
            )


__all__ = ["NotificationStreamController"]
