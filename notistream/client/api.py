"""HTTP access to the notification snapshot, read-state and stream surfaces."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Iterable

import anyio
import httpx

from notistream.domain.entities import Notification
from notistream.domain.errors import ChannelError, MarkReadFailed

from .models import notification_from_payload

logger = logging.getLogger(__name__)


class NotificationApiClient:
    """Thin async wrapper over ``httpx`` for one authenticated principal."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        heartbeat_timeout: float | None = 30.0,
    ) -> None:
        if heartbeat_timeout is not None and heartbeat_timeout <= 0:
            raise ValueError("heartbeat_timeout must be positive")
        # The server sends a frame every poll tick; silence longer than this
        # means the channel is dead even if the socket is still open.
        self.heartbeat_timeout = heartbeat_timeout
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout
        )
        if http_client is not None and headers:
            self._http.headers.update(headers)

    async def fetch_snapshot(self) -> tuple[list[Notification], int]:
        """Return the recent notifications and the unread count."""

        response = await self._http.get("/notifications")
        response.raise_for_status()
        body = response.json()
        if not body.get("success"):
            raise httpx.HTTPError(f"Snapshot request failed: {body.get('error')}")
        notifications = [notification_from_payload(item) for item in body.get("data") or []]
        return notifications, int(body.get("unreadCount") or 0)

    async def mark_read(self, notification_ids: Iterable[str]) -> None:
        await self._patch({"notificationIds": list(notification_ids)})

    async def mark_all_read(self) -> None:
        await self._patch({"markAllAsRead": True})

    @asynccontextmanager
    async def open_stream(self) -> AsyncIterator[AsyncIterator[str]]:
        """Open the event stream and yield its line iterator.

        Raises :class:`ChannelError` when the server refuses the stream, the
        transport fails, or no line arrives within ``heartbeat_timeout``.
        """

        try:
            async with self._http.stream(
                "GET",
                "/notifications/stream",
                headers={"Accept": "text/event-stream"},
                timeout=httpx.Timeout(
                    self._http.timeout.connect, read=self.heartbeat_timeout
                ),
            ) as response:
                if response.status_code != 200:
                    raise ChannelError(
                        f"Stream request returned status {response.status_code}"
                    )
                yield self._lines_until_silent(response.aiter_lines())
        except httpx.HTTPError as exc:
            raise ChannelError(str(exc) or exc.__class__.__name__) from exc

    async def _lines_until_silent(self, lines: AsyncIterator[str]) -> AsyncIterator[str]:
        # The transport read timeout only covers real sockets; this also
        # bounds transports that stall without one.
        while True:
            try:
                with anyio.fail_after(self.heartbeat_timeout):
                    line = await lines.__anext__()
            except StopAsyncIteration:
                return
            except TimeoutError as exc:
                raise ChannelError(
                    f"No stream data for {self.heartbeat_timeout:g}s"
                ) from exc
            yield line

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _patch(self, payload: dict) -> None:
        try:
            response = await self._http.patch("/notifications", json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise MarkReadFailed(str(exc) or exc.__class__.__name__) from exc
        if not body.get("success"):
            raise MarkReadFailed(body.get("error") or "Mark-read request was rejected")


__all__ = ["NotificationApiClient"]
