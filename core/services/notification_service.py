# =============================================================================
# core/services/notification_service.py - Notification Writes
# =============================================================================
# Inserts notification rows. Always called as a post-commit side effect,
# so errors propagate to the PostCommitQueue which logs them.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import RowStore
from core.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

NOTIFICATIONS_TABLE = "notifications"


class NotificationService:
    """Writes notifications for a recipient."""

    def __init__(self, store: RowStore):
        self.store = store

    def create(self, notification: Notification) -> dict[str, Any]:
        """
        Insert one notification.

        Raises:
            RowStoreError: If the insert fails
        """
        row = self.store.insert(NOTIFICATIONS_TABLE, notification.model_dump(mode="json"))
        logger.info(f"Created {notification.type.value} notification for user {notification.user_id}")
        return row


# =============================================================================
# Message Builders
# =============================================================================

def asset_approved(user_id: str, asset_id: str, asset_title: str) -> Notification:
    return Notification(
        user_id=user_id,
        type=NotificationType.ASSET_APPROVED,
        title="Asset Approved! ✅",
        message=f'Your asset "{asset_title}" has been approved and is now live on the marketplace.',
        link=f"/asset/{asset_id}",
    )


def asset_rejected(user_id: str, asset_title: str, reason: str | None) -> Notification:
    if reason:
        message = f'Your asset "{asset_title}" has been rejected. Reason: {reason}'
    else:
        message = (
            f'Your asset "{asset_title}" has been rejected. '
            "Please review the guidelines and try again."
        )
    return Notification(
        user_id=user_id,
        type=NotificationType.ASSET_REJECTED,
        title="Asset Rejected",
        message=message,
        link="/contributor/dashboard",
    )


def contributor_approved(user_id: str) -> Notification:
    return Notification(
        user_id=user_id,
        type=NotificationType.CONTRIBUTOR_APPROVED,
        title="Contributor Application Approved 🎉",
        message="Your application has been approved.",
        link="/contributor/dashboard",
    )


def contributor_rejected(user_id: str, reason: str | None) -> Notification:
    if reason:
        message = f"Your contributor application has been rejected. Reason: {reason}"
    else:
        message = (
            "Your contributor application has been rejected. "
            "Please review the requirements and try again."
        )
    return Notification(
        user_id=user_id,
        type=NotificationType.CONTRIBUTOR_REJECTED,
        title="Contributor Application Rejected",
        message=message,
        link="/become-contributor",
    )
