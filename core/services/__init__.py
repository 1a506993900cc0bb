# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .authorization import AuthorizationGuard
from .side_effects import PostCommitQueue, run_inline
from .notification_service import NotificationService
from .moderation_service import AssetModerationService
from .contributor_service import ContributorService
from .asset_service import AssetService
from .subscription_service import SubscriptionService
from .admin_service import AdminService

__all__ = [
    "AuthorizationGuard",
    "PostCommitQueue",
    "run_inline",
    "NotificationService",
    "AssetModerationService",
    "ContributorService",
    "AssetService",
    "SubscriptionService",
    "AdminService",
]
