"""Ephemeral state of one open notification stream."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(eq=False)
class ConnectionSession:
    """Cursor and liveness flag owned by a single stream controller."""

    principal_id: str
    cursor: datetime
    is_active: bool = True
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    wakeup: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    def advance(self, observed: datetime | None) -> datetime:
        """Move the cursor forward to ``observed``; never move it back."""

        if observed is not None and observed > self.cursor:
            self.cursor = observed
        return self.cursor

    def wake(self) -> None:
        """Ask the owning controller to run its next tick right away."""

        if self.is_active:
            self.wakeup.set()

    def close(self) -> None:
        self.is_active = False
        self.wakeup.set()


__all__ = ["ConnectionSession"]
