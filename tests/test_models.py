# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the row models to ensure:
# - Database values are normalized on read (roles, tiers, timestamps)
# - Invalid input raises ValidationError
# - Level badges resolve for every stored level format
# =============================================================================

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from core.models import (
    Asset,
    AssetCreate,
    AssetUpdate,
    ContributorTier,
    Notification,
    NotificationType,
    Profile,
    UserRole,
    level_badge,
)


# =============================================================================
# Profile
# =============================================================================

class TestProfile:
    """Tests for Profile model."""

    def test_role_is_normalized(self):
        profile = Profile.from_row({"id": "u1", "role": "  CONTRIBUTOR "})

        assert profile.role == UserRole.CONTRIBUTOR
        assert profile.is_contributor

    @pytest.mark.parametrize("raw", [None, "", "owner", 7])
    def test_missing_or_unknown_role_is_user(self, raw):
        assert Profile.from_row({"id": "u1", "role": raw}).role == UserRole.USER

    def test_unknown_tier_is_dropped(self):
        assert Profile.from_row({"id": "u1", "contributor_tier": "current"}).contributor_tier is None

    def test_pending_application(self):
        # Arrange: a plain user with an application date
        row = {"id": "u1", "role": "user", "application_date": "2024-01-15T10:30:00Z"}

        # Act
        profile = Profile.from_row(row)

        # Assert
        assert profile.has_pending_application
        assert profile.application_date == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_contributor_with_date_is_not_pending(self):
        row = {"id": "u1", "role": "contributor", "application_date": "2024-01-15T10:30:00Z"}

        assert not Profile.from_row(row).has_pending_application

    def test_admin_counts_as_contributor(self):
        assert Profile.from_row({"id": "u1", "role": "admin"}).is_contributor


# =============================================================================
# Asset
# =============================================================================

class TestAsset:

    def test_unexpected_status_survives_verbatim(self):
        asset = Asset.from_row({"id": "a1", "status": "archived"})

        assert asset.status == "archived"
        assert not asset.is_pending

    def test_uuid_ids_become_strings(self):
        from uuid import UUID

        asset = Asset.from_row({"id": UUID("aaaaaaaa-0000-4000-8000-000000000001"), "status": "pending"})

        assert asset.id == "aaaaaaaa-0000-4000-8000-000000000001"
        assert asset.is_pending

    def test_create_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            AssetCreate(title="t", type="audio", storage_path="p", license="l")

    def test_update_forbids_status(self):
        with pytest.raises(ValidationError):
            AssetUpdate.model_validate({"status": "approved"})

    def test_update_tracks_only_set_fields(self):
        update = AssetUpdate.model_validate({"title": "New"})

        assert update.model_dump(exclude_unset=True) == {"title": "New"}


# =============================================================================
# Notification
# =============================================================================

def test_notification_serializes_type_as_string():
    notification = Notification(
        user_id="u1",
        type=NotificationType.ASSET_APPROVED,
        title="Asset Approved! ✅",
        message="m",
        link="/asset/a1",
    )

    assert notification.model_dump(mode="json")["type"] == "asset_approved"


# =============================================================================
# Level badges
# =============================================================================

class TestLevelBadge:

    @pytest.mark.parametrize("level_id,tier,name", [
        ("level_1_starter", ContributorTier.BRONZE, "Starter"),
        ("level_2_growing", ContributorTier.SILVER, "Growing"),
        ("level_3_professional", ContributorTier.GOLD, "Professional"),
        ("level_4_elite", ContributorTier.GOLD, "Elite"),
        ("level_5_platinum", ContributorTier.PLATINUM, "Platinum"),
        ("level_6_ai_innovator", ContributorTier.PLATINUM, "AI Innovator"),
    ])
    def test_progression_levels(self, level_id, tier, name):
        badge = level_badge(level_id)

        assert badge.tier == tier
        assert badge.name == name

    def test_plain_tier_names(self):
        badge = level_badge("Silver")

        assert badge.tier == ContributorTier.SILVER
        assert badge.name == "Silver"

    @pytest.mark.parametrize("level_id", [None, "", "level_9_unknown"])
    def test_unknown_levels_fall_back_to_bronze(self, level_id):
        badge = level_badge(level_id)

        assert badge.tier == ContributorTier.BRONZE
        assert badge.name == "Bronze"
