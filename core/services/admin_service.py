# =============================================================================
# core/services/admin_service.py - Site Settings and Dashboard
# =============================================================================
# Site-wide settings live in a single `admin_settings` row with id 'main'.
# =============================================================================

import logging
from typing import Any

from app.auth.models import AuthSession
from app.exceptions import DependencyFailureError, InputValidationError
from core.models.asset import AssetStatus
from core.models.profile import UserRole
from core.services.authorization import AuthorizationGuard
from lib.supabase_client import NOT_NULL, RowStore, RowStoreError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "admin_settings"
SETTINGS_ROW_ID = "main"


class AdminService:
    """Admin-only settings and dashboard figures."""

    def __init__(self, store: RowStore, guard: AuthorizationGuard):
        self.store = store
        self.guard = guard

    def update_settings(self, session: AuthSession | None, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Merge `changes` into the settings row, creating it if needed.

        Raises:
            InputValidationError: Empty or non-object body
        """
        self.guard.require_admin(session)
        if not isinstance(changes, dict) or not changes:
            raise InputValidationError("Settings body must be a non-empty object")

        values = {k: v for k, v in changes.items() if k != "id"}
        values.update({"id": SETTINGS_ROW_ID, "updated_at": utc_now_iso()})

        try:
            row = self.store.upsert(SETTINGS_TABLE, values, on_conflict="id")
        except RowStoreError as e:
            logger.error(f"Failed to save admin settings: {e}")
            raise DependencyFailureError("Failed to update settings", error=str(e))

        logger.info(f"Admin settings updated by {session.user_id}: {sorted(changes)}")
        return row

    def dashboard_stats(self, session: AuthSession | None, redirect_to: str = "/admin") -> dict[str, int]:
        """
        Headline counts for the admin dashboard page.

        Uses the redirecting guard: callers without access are sent to the
        sign-in or home page instead of getting an error body.
        """
        self.guard.require_admin_or_redirect(session, next_path=redirect_to)

        try:
            return {
                "total_assets": self.store.count("assets"),
                "pending_assets": self.store.count("assets", {"status": AssetStatus.PENDING.value}),
                "total_users": self.store.count("profiles"),
                "contributors": self.store.count("profiles", {"role": UserRole.CONTRIBUTOR.value}),
                "pending_applications": self.store.count(
                    "profiles",
                    {"role": UserRole.USER.value, "application_date": NOT_NULL},
                ),
            }
        except RowStoreError as e:
            logger.error(f"Failed to compute dashboard stats: {e}")
            raise DependencyFailureError("Failed to load dashboard", error=str(e))
