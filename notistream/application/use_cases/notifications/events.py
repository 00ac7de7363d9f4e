"""Utility helpers to generate and dispatch domain notifications."""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from notistream.domain.entities import Notification, NotificationType, RelatedType
from notistream.domain.errors import StoreUnavailable
from notistream.infrastructure.notifications import dispatch_notification
from notistream.infrastructure.repositories import NotificationRepository
from notistream.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def create_notification(
    session: Session,
    *,
    recipient_id: str,
    type: NotificationType,
    title: str,
    message: str | None = None,
    related_id: str | None = None,
    related_type: RelatedType | None = None,
) -> Notification | None:
    """Persist a notification for ``recipient_id`` and wake its live streams.

    Returns ``None`` when the store is unavailable; the business operation that
    produced the event must not fail because its notification could not be
    written.
    """

    notification = Notification(
        id=None,
        recipient_id=recipient_id,
        type=NotificationType(type),
        title=title,
        message=message,
        related_type=RelatedType(related_type) if related_type else None,
        related_id=related_id,
        is_read=False,
        created_at=now_in_app_timezone(),
    )
    try:
        saved = NotificationRepository(session).create(notification)
    except StoreUnavailable:
        logger.exception("Could not store %s notification for %s", type, recipient_id)
        return None
    logger.info("Notification created for %s: %s", recipient_id, title)
    dispatch_notification(saved)
    return saved


def notify_many(
    session: Session,
    recipient_ids: Iterable[str],
    *,
    type: NotificationType,
    title: str,
    message: str | None = None,
    related_id: str | None = None,
    related_type: RelatedType | None = None,
) -> int:
    """Send the same notification to several recipients; return successes."""

    seen: set[str] = set()
    count = 0
    for recipient_id in recipient_ids:
        if not recipient_id or recipient_id in seen:
            continue
        seen.add(recipient_id)
        created = create_notification(
            session,
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            related_id=related_id,
            related_type=related_type,
        )
        if created is not None:
            count += 1
    return count


# Staff


def notify_quote_submitted(
    session: Session, staff_id: str, brand_name: str, campaign_name: str, quotation_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=staff_id,
        type=NotificationType.QUOTE_SUBMITTED,
        title=f"New Quote from {brand_name}",
        message=(
            f'{brand_name} has submitted a quote request for "{campaign_name}". '
            "Review and respond promptly."
        ),
        related_id=quotation_id,
        related_type=RelatedType.QUOTATION,
    )


def notify_invoice_submitted(
    session: Session, staff_id: str, creator_name: str, campaign_name: str, invoice_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=staff_id,
        type=NotificationType.INVOICE_SUBMITTED,
        title=f"Invoice from {creator_name}",
        message=(
            f'{creator_name} has submitted an invoice for "{campaign_name}". '
            "Please review and process payment."
        ),
        related_id=invoice_id,
        related_type=RelatedType.INVOICE,
    )


def notify_campaign_assigned(
    session: Session, staff_id: str, campaign_name: str, campaign_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=staff_id,
        type=NotificationType.CAMPAIGN_ASSIGNED,
        title=f"Campaign Assigned: {campaign_name}",
        message=f'You have been assigned to manage the "{campaign_name}" campaign.',
        related_id=campaign_id,
        related_type=RelatedType.CAMPAIGN,
    )


def notify_brand_assigned(
    session: Session, staff_id: str, brand_name: str, brand_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=staff_id,
        type=NotificationType.BRAND_ASSIGNED,
        title=f"Brand Assigned: {brand_name}",
        message=f"You are now the account manager for {brand_name}.",
        related_id=brand_id,
        related_type=RelatedType.BRAND,
    )


def notify_content_submitted(
    session: Session, staff_id: str, influencer_name: str, campaign_name: str, submission_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=staff_id,
        type=NotificationType.CONTENT_SUBMITTED,
        title=f"Content Submitted by {influencer_name}",
        message=f'{influencer_name} has submitted content for "{campaign_name}". Please review.',
        related_id=submission_id,
        related_type=RelatedType.CONTENT_SUBMISSION,
    )


def notify_campaign_accepted(
    session: Session, staff_id: str, influencer_name: str, campaign_name: str, campaign_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=staff_id,
        type=NotificationType.CAMPAIGN_ACCEPTED,
        title=f"{influencer_name} Accepted Campaign",
        message=f'{influencer_name} has accepted the invitation to join "{campaign_name}".',
        related_id=campaign_id,
        related_type=RelatedType.CAMPAIGN,
    )


def notify_campaign_declined(
    session: Session, staff_id: str, influencer_name: str, campaign_name: str, campaign_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=staff_id,
        type=NotificationType.CAMPAIGN_DECLINED,
        title=f"{influencer_name} Declined Campaign",
        message=f'{influencer_name} has declined the invitation to join "{campaign_name}".',
        related_id=campaign_id,
        related_type=RelatedType.CAMPAIGN,
    )


# Influencer


def notify_campaign_invitation(
    session: Session, influencer_id: str, brand_name: str, campaign_name: str, invitation_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=influencer_id,
        type=NotificationType.CAMPAIGN_INVITATION,
        title=f"Campaign Invitation from {brand_name}",
        message=(
            f'You\'ve been invited to join "{campaign_name}" by {brand_name}. '
            "Check your invitations to respond."
        ),
        related_id=invitation_id,
        related_type=RelatedType.CAMPAIGN_INVITATION,
    )


def notify_content_approved(
    session: Session, influencer_id: str, campaign_name: str, submission_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=influencer_id,
        type=NotificationType.CONTENT_APPROVED,
        title="Content Approved!",
        message=f'Your content for "{campaign_name}" has been approved. Great work!',
        related_id=submission_id,
        related_type=RelatedType.CONTENT_SUBMISSION,
    )


def notify_content_rejected(
    session: Session, influencer_id: str, campaign_name: str, reason: str, submission_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=influencer_id,
        type=NotificationType.CONTENT_REJECTED,
        title="Content Rejected",
        message=f'Your content for "{campaign_name}" was not approved. Reason: {reason}',
        related_id=submission_id,
        related_type=RelatedType.CONTENT_SUBMISSION,
    )


def notify_revision_requested(
    session: Session, influencer_id: str, campaign_name: str, feedback: str, submission_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=influencer_id,
        type=NotificationType.REVISION_REQUESTED,
        title="Revision Requested",
        message=(
            f'A revision has been requested for your content in "{campaign_name}". {feedback}'
        ),
        related_id=submission_id,
        related_type=RelatedType.CONTENT_SUBMISSION,
    )


def notify_invoice_approved(
    session: Session, influencer_id: str, invoice_number: str, invoice_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=influencer_id,
        type=NotificationType.INVOICE_APPROVED,
        title="Invoice Approved",
        message=(
            f"Your invoice {invoice_number} has been approved. "
            "Payment will be processed soon."
        ),
        related_id=invoice_id,
        related_type=RelatedType.INVOICE,
    )


def notify_invoice_rejected(
    session: Session, influencer_id: str, invoice_number: str, reason: str, invoice_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=influencer_id,
        type=NotificationType.INVOICE_REJECTED,
        title="Invoice Rejected",
        message=f"Your invoice {invoice_number} was rejected. Reason: {reason}",
        related_id=invoice_id,
        related_type=RelatedType.INVOICE,
    )


def notify_payment_processed(
    session: Session, influencer_id: str, amount: str, campaign_name: str, invoice_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=influencer_id,
        type=NotificationType.PAYMENT_PROCESSED,
        title="Payment Sent!",
        message=f'{amount} has been sent for your work on "{campaign_name}".',
        related_id=invoice_id,
        related_type=RelatedType.INVOICE,
    )


# Brand


def notify_quotation_sent(
    session: Session, brand_user_id: str, campaign_name: str, quotation_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=brand_user_id,
        type=NotificationType.QUOTATION_SENT,
        title="Quotation Ready",
        message=f'Your quotation for "{campaign_name}" is ready for review.',
        related_id=quotation_id,
        related_type=RelatedType.QUOTATION,
    )


def notify_influencer_accepted(
    session: Session, brand_user_id: str, influencer_name: str, campaign_name: str, campaign_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=brand_user_id,
        type=NotificationType.INFLUENCER_ACCEPTED,
        title=f"{influencer_name} Joined Your Campaign",
        message=f'{influencer_name} has accepted the invitation to join "{campaign_name}".',
        related_id=campaign_id,
        related_type=RelatedType.CAMPAIGN,
    )


def notify_influencer_declined(
    session: Session, brand_user_id: str, influencer_name: str, campaign_name: str, campaign_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=brand_user_id,
        type=NotificationType.INFLUENCER_DECLINED,
        title=f"{influencer_name} Declined Invitation",
        message=f'{influencer_name} has declined the invitation to join "{campaign_name}".',
        related_id=campaign_id,
        related_type=RelatedType.CAMPAIGN,
    )


def notify_content_ready(
    session: Session, brand_user_id: str, influencer_name: str, campaign_name: str, campaign_id: str
) -> Notification | None:
    return create_notification(
        session,
        recipient_id=brand_user_id,
        type=NotificationType.CONTENT_READY,
        title="New Content Available",
        message=(
            f'{influencer_name} has posted content for "{campaign_name}". '
            "View it in your campaign dashboard."
        ),
        related_id=campaign_id,
        related_type=RelatedType.CAMPAIGN,
    )
