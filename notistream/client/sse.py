"""Incremental decoder for ``text/event-stream`` bodies."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

from .models import StreamFrame

logger = logging.getLogger(__name__)


class SSEDecoder:
    """Accumulate stream lines and emit the ``data`` of each complete event.

    Follows the event-stream rules the notification server relies on: blank
    lines terminate an event, lines starting with ``:`` are comments, and
    multiple ``data`` lines are joined with a newline.
    """

    def __init__(self) -> None:
        self._data: list[str] = []

    def feed(self, line: str) -> str | None:
        line = line.rstrip("\r\n")
        if not line:
            if not self._data:
                return None
            data = "\n".join(self._data)
            self._data = []
            return data
        if line.startswith(":"):
            return None
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            self._data.append(value)
        return None


async def iter_frames(lines: AsyncIterable[str]) -> AsyncIterator[StreamFrame]:
    """Yield decoded frames from ``lines``; malformed events are skipped."""

    decoder = SSEDecoder()
    async for line in lines:
        data = decoder.feed(line)
        if data is None:
            continue
        try:
            yield StreamFrame.from_payload(json.loads(data))
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding malformed notification frame: %r", data[:200])


__all__ = ["SSEDecoder", "iter_frames"]
