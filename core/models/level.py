# =============================================================================
# core/models/level.py - Contributor Level Badges
# =============================================================================
# Contributor levels are stored either as a plain tier name ("gold") or as
# one of the progression level ids ("level_3_professional"). Both map onto
# one of the four badge tiers for display.
# =============================================================================

from pydantic import BaseModel

from .profile import ContributorTier


class LevelBadge(BaseModel):
    """Badge shown next to a contributor."""
    level_id: str
    tier: ContributorTier
    name: str


# level id -> (badge tier, display name)
LEVEL_BADGES: dict[str, tuple[ContributorTier, str]] = {
    "level_1_starter": (ContributorTier.BRONZE, "Starter"),
    "level_2_growing": (ContributorTier.SILVER, "Growing"),
    "level_3_professional": (ContributorTier.GOLD, "Professional"),
    "level_4_elite": (ContributorTier.GOLD, "Elite"),
    "level_5_platinum": (ContributorTier.PLATINUM, "Platinum"),
    "level_6_ai_innovator": (ContributorTier.PLATINUM, "AI Innovator"),
}


def level_badge(level_id: str | None) -> LevelBadge:
    """
    Resolve a stored level to its badge.

    Unknown or missing levels get the bronze badge.

    Example:
        level_badge("level_4_elite")  # tier=gold, name="Elite"
        level_badge("silver")         # tier=silver, name="Silver"
    """
    key = (level_id or "").strip().lower()

    if key in LEVEL_BADGES:
        tier, name = LEVEL_BADGES[key]
        return LevelBadge(level_id=key, tier=tier, name=name)

    tier = ContributorTier.parse(key) or ContributorTier.BRONZE
    return LevelBadge(level_id=key, tier=tier, name=tier.value.capitalize())
