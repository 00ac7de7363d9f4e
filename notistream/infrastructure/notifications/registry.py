"""Process-wide registry of live notification streams."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import DefaultDict, Set

from notistream.domain.entities import ConnectionSession
from notistream.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


class StreamRegistry:
    """Track open stream sessions and the last cursor seen per principal.

    The remembered cursor lets a reconnecting client resume where its previous
    connection stopped, as long as that point is inside the backlog window.
    State lives in process memory only: a restart forgets every cursor.
    """

    def __init__(self) -> None:
        self._sessions: DefaultDict[str, Set[ConnectionSession]] = defaultdict(set)
        self._cursors: dict[str, datetime] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    def open(
        self,
        principal_id: str,
        *,
        backlog_window: timedelta,
        now: datetime | None = None,
    ) -> ConnectionSession:
        """Register a new session for ``principal_id`` and return it."""

        self._loop = asyncio.get_running_loop()
        floor = (now or now_in_app_timezone()) - backlog_window
        self._forget_before(floor)
        remembered = self._cursors.get(principal_id)
        cursor = remembered if remembered is not None and remembered > floor else floor
        session = ConnectionSession(principal_id=principal_id, cursor=cursor)
        self._sessions[principal_id].add(session)
        return session

    def remember(self, session: ConnectionSession) -> None:
        """Store ``session``'s cursor as the resume point for its principal."""

        previous = self._cursors.get(session.principal_id)
        if previous is None or session.cursor > previous:
            self._cursors[session.principal_id] = session.cursor

    def close(self, session: ConnectionSession) -> None:
        """Deactivate ``session`` and drop it from the live set."""

        session.close()
        self.remember(session)
        sessions = self._sessions.get(session.principal_id)
        if sessions is None:
            return
        sessions.discard(session)
        if not sessions:
            self._sessions.pop(session.principal_id, None)

    def close_all(self) -> int:
        """Close every live session; used on application shutdown."""

        sessions = [s for group in self._sessions.values() for s in group]
        for session in sessions:
            self.close(session)
        if sessions:
            logger.info("Closed %d notification stream(s)", len(sessions))
        return len(sessions)

    def wake(self, principal_id: str) -> None:
        """Make every live session of ``principal_id`` poll immediately.

        Safe to call from worker threads: the wake-up is handed to the loop
        that owns the sessions.
        """

        sessions = list(self._sessions.get(principal_id, ()))
        if not sessions:
            return
        loop = self._loop
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        for session in sessions:
            if loop is None or running is loop:
                session.wake()
            elif not loop.is_closed():
                loop.call_soon_threadsafe(session.wake)

    def _forget_before(self, floor: datetime) -> None:
        """Drop resume points a new session would ignore anyway."""

        stale = [
            principal_id
            for principal_id, cursor in self._cursors.items()
            if cursor <= floor and principal_id not in self._sessions
        ]
        for principal_id in stale:
            del self._cursors[principal_id]

    def cursor_for(self, principal_id: str) -> datetime | None:
        return self._cursors.get(principal_id)

    def active_count(self, principal_id: str | None = None) -> int:
        if principal_id is not None:
            return len(self._sessions.get(principal_id, ()))
        return sum(len(group) for group in self._sessions.values())


stream_registry = StreamRegistry()


__all__ = ["StreamRegistry", "stream_registry"]
