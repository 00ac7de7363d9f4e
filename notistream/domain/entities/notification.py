"""Domain entity representing a notification addressed to a principal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """Closed set of events that produce a notification."""

    # Staff
    QUOTE_SUBMITTED = "QUOTE_SUBMITTED"
    INVOICE_SUBMITTED = "INVOICE_SUBMITTED"
    CAMPAIGN_ASSIGNED = "CAMPAIGN_ASSIGNED"
    BRAND_ASSIGNED = "BRAND_ASSIGNED"
    CONTENT_SUBMITTED = "CONTENT_SUBMITTED"
    # Influencer
    CAMPAIGN_INVITATION = "CAMPAIGN_INVITATION"
    CAMPAIGN_ACCEPTED = "CAMPAIGN_ACCEPTED"
    CAMPAIGN_DECLINED = "CAMPAIGN_DECLINED"
    CONTENT_APPROVED = "CONTENT_APPROVED"
    CONTENT_REJECTED = "CONTENT_REJECTED"
    REVISION_REQUESTED = "REVISION_REQUESTED"
    INVOICE_APPROVED = "INVOICE_APPROVED"
    INVOICE_REJECTED = "INVOICE_REJECTED"
    PAYMENT_PROCESSED = "PAYMENT_PROCESSED"
    # Brand
    QUOTATION_SENT = "QUOTATION_SENT"
    QUOTATION_APPROVED = "QUOTATION_APPROVED"
    QUOTATION_REJECTED = "QUOTATION_REJECTED"
    CAMPAIGN_CREATED = "CAMPAIGN_CREATED"
    INFLUENCER_ACCEPTED = "INFLUENCER_ACCEPTED"
    INFLUENCER_DECLINED = "INFLUENCER_DECLINED"
    CONTENT_READY = "CONTENT_READY"


class RelatedType(str, Enum):
    """Kinds of business entity a notification may point back to."""

    QUOTATION = "quotation"
    INVOICE = "invoice"
    CAMPAIGN = "campaign"
    BRAND = "brand"
    CONTENT_SUBMISSION = "content_submission"
    CAMPAIGN_INVITATION = "campaign_invitation"


@dataclass
class Notification:
    """Information message delivered to a specific principal.

    ``related_type``/``related_id`` are a lookup hint only; the notification
    never owns the referenced entity.
    """

    id: str | None
    recipient_id: str
    type: NotificationType
    title: str
    message: str | None = None
    related_type: RelatedType | None = None
    related_id: str | None = None
    is_read: bool = False
    created_at: datetime | None = None
    read_at: datetime | None = None


__all__ = ["Notification", "NotificationType", "RelatedType"]
