"""Endpoints and SSE stream for realtime notifications."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from notistream.config import Settings, get_settings
from notistream.domain.entities import Notification
from notistream.domain.errors import StoreUnavailable
from notistream.infrastructure.database import get_db
from notistream.infrastructure.notifications import (
    SSE_HEADERS,
    NotificationStreamController,
    StreamRegistry,
)
from notistream.infrastructure.repositories import NotificationRepository
from notistream.infrastructure.store import NotificationStore
from notistream.interfaces.api.dependencies import (
    get_current_principal,
    get_notification_store,
    get_stream_registry,
    oauth2_scheme,
    resolve_principal,
)
from notistream.interfaces.api.schemas import (
    NotificationListResponse,
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationRead,
    UnreadCountResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        recipient_id=notification.recipient_id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        related_type=notification.related_type,
        related_id=notification.related_id,
        is_read=notification.is_read,
        created_at=notification.created_at,
        read_at=notification.read_at,
    )


def _store_unavailable(exc: StoreUnavailable) -> HTTPException:
    logger.warning("Notification store unavailable: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Notification store unavailable",
    )


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    unread: bool = Query(default=False, description="Only return unread notifications"),
    db: Session = Depends(get_db),
    principal_id: str = Depends(get_current_principal),
    settings: Settings = Depends(get_settings),
) -> NotificationListResponse:
    """Return the recent notifications and the unread count for the caller."""

    repository = NotificationRepository(db)
    try:
        notifications = repository.list_recent(
            principal_id, limit=settings.snapshot_limit, unread_only=unread
        )
        unread_count = repository.count_unread(principal_id)
    except StoreUnavailable as exc:
        raise _store_unavailable(exc) from exc
    return NotificationListResponse(
        data=[_notification_to_schema(n) for n in notifications],
        unread_count=unread_count,
    )


@router.get("/count", response_model=UnreadCountResponse)
def unread_notification_count(
    db: Session = Depends(get_db),
    principal_id: str = Depends(get_current_principal),
) -> UnreadCountResponse:
    try:
        unread_count = NotificationRepository(db).count_unread(principal_id)
    except StoreUnavailable as exc:
        raise _store_unavailable(exc) from exc
    return UnreadCountResponse(unread_count=unread_count)


@router.patch("", response_model=NotificationMarkReadResponse)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
    principal_id: str = Depends(get_current_principal),
) -> NotificationMarkReadResponse:
    """Mark the listed notifications, or all of them, as read."""

    repository = NotificationRepository(db)
    try:
        if payload.mark_all_as_read:
            updated = repository.mark_all_read(principal_id)
            return NotificationMarkReadResponse(
                message="All notifications marked as read", updated=updated
            )
        if payload.notification_ids is not None:
            ids = payload.unique_ids()
            updated = repository.mark_read(principal_id, ids)
            return NotificationMarkReadResponse(
                message=f"{len(ids)} notification(s) marked as read", updated=updated
            )
    except StoreUnavailable as exc:
        raise _store_unavailable(exc) from exc

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid request. Provide notificationIds array or markAllAsRead: true",
    )


@router.get("/stream")
async def notifications_stream(
    request: Request,
    token: str | None = Query(default=None, description="Access token for EventSource clients"),
    header_token: str | None = Depends(oauth2_scheme),
    store: NotificationStore = Depends(get_notification_store),
    registry: StreamRegistry = Depends(get_stream_registry),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """Server-Sent Events stream of new notifications for the caller."""

    # Browsers' EventSource cannot send headers, so the query token is accepted too.
    principal_id = resolve_principal(header_token or token)
    controller = NotificationStreamController(
        principal_id,
        store=store,
        registry=registry,
        poll_interval=settings.stream_poll_interval_seconds,
        backlog_window=settings.stream_backlog_window_seconds,
        batch_limit=settings.stream_batch_limit,
        failure_alert_ticks=settings.stream_store_failure_alert_ticks,
        is_disconnected=request.is_disconnected,
    )
    return StreamingResponse(
        controller.stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
