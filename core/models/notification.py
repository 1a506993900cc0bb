# =============================================================================
# core/models/notification.py - Notification Schemas
# =============================================================================
# Notifications are append-only rows written as a side effect of a state
# change (asset moderated, application reviewed). They are shown in the
# site's notification bell and never read back by the API.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """What happened, from the recipient's point of view."""
    ASSET_APPROVED = "asset_approved"
    ASSET_REJECTED = "asset_rejected"
    CONTRIBUTOR_APPROVED = "contributor_approved"
    CONTRIBUTOR_REJECTED = "contributor_rejected"


class Notification(BaseModel):
    """
    A notification to insert.

    Example:
        {
            "user_id": "550e8400-...",
            "type": "asset_approved",
            "title": "Asset Approved!",
            "message": "Your asset \"Sunset\" has been approved ...",
            "link": "/asset/660e8400-..."
        }
    """
    user_id: str = Field(..., description="Recipient profile id")
    type: NotificationType
    title: str
    message: str
    link: str | None = Field(default=None, description="Site path the notification opens")
