"""Optimistic read-state updates for the client notification cache."""

from __future__ import annotations

import logging
from typing import Iterable

from notistream.domain.errors import MarkReadFailed

from .api import NotificationApiClient
from .cache import NotificationCache

logger = logging.getLogger(__name__)


class ReadStateReconciler:
    """Apply read actions locally first, then write them back to the server.

    A failed write is logged and left in place rather than rolled back; the
    unread count from the next stream frame or snapshot corrects any drift.
    """

    def __init__(self, cache: NotificationCache, api: NotificationApiClient) -> None:
        self._cache = cache
        self._api = api

    async def mark_as_read(self, notification_ids: Iterable[str]) -> bool:
        ids = list(dict.fromkeys(i for i in notification_ids if i))
        if not ids:
            return True
        self._cache.mark_read(ids)
        try:
            await self._api.mark_read(ids)
        except MarkReadFailed as exc:
            logger.warning("Could not mark %d notification(s) as read: %s", len(ids), exc)
            return False
        return True

    async def mark_all_as_read(self) -> bool:
        self._cache.mark_all_read()
        try:
            await self._api.mark_all_read()
        except MarkReadFailed as exc:
            logger.warning("Could not mark all notifications as read: %s", exc)
            return False
        return True


__all__ = ["ReadStateReconciler"]
