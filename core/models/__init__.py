# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - profile.py: Profile, roles and contributor tiers
# - asset.py: Asset records and the moderation lifecycle
# - notification.py: Notification rows
# - plan.py: Subscription plans and pricing helpers
# - level.py: Contributor level badges
#
# Rows coming out of the database are turned into these models at the
# boundary, so services work with typed records instead of raw dicts.
# =============================================================================

from .profile import (
    ContributorApplication,
    ContributorTier,
    Profile,
    UserRole,
)

from .asset import (
    Asset,
    AssetCreate,
    AssetStatus,
    AssetType,
    AssetUpdate,
    ModerationResult,
)

from .notification import (
    Notification,
    NotificationType,
)

from .plan import (
    BillingCycle,
    PlanUpdate,
    SubscriptionPlan,
    SubscriptionQuote,
    SubscriptionStatus,
    billing_period_end,
    calculate_final_price,
    is_within_discount_window,
    quote_subscription,
)

from .level import (
    LevelBadge,
    level_badge,
)

__all__ = [
    # Profile
    "ContributorApplication",
    "ContributorTier",
    "Profile",
    "UserRole",
    # Asset
    "Asset",
    "AssetCreate",
    "AssetStatus",
    "AssetType",
    "AssetUpdate",
    "ModerationResult",
    # Notification
    "Notification",
    "NotificationType",
    # Plan
    "BillingCycle",
    "PlanUpdate",
    "SubscriptionPlan",
    "SubscriptionQuote",
    "SubscriptionStatus",
    "billing_period_end",
    "calculate_final_price",
    "is_within_discount_window",
    "quote_subscription",
    # Level
    "LevelBadge",
    "level_badge",
]
