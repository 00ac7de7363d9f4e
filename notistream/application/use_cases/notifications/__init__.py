"""Public helpers for emitting domain notifications."""

from .events import (
    create_notification,
    notify_brand_assigned,
    notify_campaign_accepted,
    notify_campaign_assigned,
    notify_campaign_declined,
    notify_campaign_invitation,
    notify_content_approved,
    notify_content_ready,
    notify_content_rejected,
    notify_content_submitted,
    notify_influencer_accepted,
    notify_influencer_declined,
    notify_invoice_approved,
    notify_invoice_rejected,
    notify_invoice_submitted,
    notify_many,
    notify_payment_processed,
    notify_quotation_sent,
    notify_quote_submitted,
    notify_revision_requested,
)

__all__ = [
    "create_notification",
    "notify_many",
    "notify_quote_submitted",
    "notify_invoice_submitted",
    "notify_campaign_assigned",
    "notify_brand_assigned",
    "notify_content_submitted",
    "notify_campaign_accepted",
    "notify_campaign_declined",
    "notify_campaign_invitation",
    "notify_content_approved",
    "notify_content_rejected",
    "notify_revision_requested",
    "notify_invoice_approved",
    "notify_invoice_rejected",
    "notify_payment_processed",
    "notify_quotation_sent",
    "notify_influencer_accepted",
    "notify_influencer_declined",
    "notify_content_ready",
]
