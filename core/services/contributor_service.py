# =============================================================================
# core/services/contributor_service.py - Contributor Applications
# =============================================================================
# Users apply to become contributors; admins approve or reject.
#
#   no profile --apply--> user + application_date
#   user (no application) --apply--> user + application_date
#   user + application_date --approve--> contributor (tier bronze)
#   any --reject--> user, application_date cleared (may reapply)
#
# Admin operations go through the AuthorizationGuard and use the
# privileged store; `apply` runs as the caller.
# =============================================================================

import logging
from typing import Any

from app.auth.models import AuthSession
from app.exceptions import (
    AlreadyContributorError,
    ApplicationPendingError,
    DependencyFailureError,
    InputValidationError,
    ProfileNotFoundError,
    UnauthenticatedError,
)
from core.models.profile import (
    ContributorApplication,
    ContributorTier,
    Profile,
    UserRole,
)
from core.services import notification_service as notices
from core.services.authorization import AuthorizationGuard
from core.services.notification_service import NotificationService
from core.services.side_effects import Dispatcher, PostCommitQueue, run_inline
from lib.supabase_client import NOT_NULL, RowStore, RowStoreError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


class ContributorService:
    """
    Contributor application workflow.

    `store` is used for the caller's own profile (apply); admin operations
    use `privileged_store`.
    """

    def __init__(
        self,
        store: RowStore,
        privileged_store: RowStore,
        guard: AuthorizationGuard,
        notifications: NotificationService,
        dispatch: Dispatcher = run_inline,
    ):
        self.store = store
        self.privileged_store = privileged_store
        self.guard = guard
        self.notifications = notifications
        self.dispatch = dispatch

    # -------------------------------------------------------------------------
    # Applicant side
    # -------------------------------------------------------------------------

    def apply(
        self,
        session: AuthSession | None,
        message: str | None = None,
        portfolio_url: str | None = None,
    ) -> dict[str, Any]:
        """
        Submit (or resubmit) a contributor application for the caller.

        Returns:
            {"success": True, "message": ...}

        Raises:
            UnauthenticatedError: No session
            AlreadyContributorError: Caller is already a contributor or admin
            ApplicationPendingError: An application is already awaiting review
            DependencyFailureError: The store failed
        """
        if session is None:
            raise UnauthenticatedError()

        user_id = session.user_id
        now = utc_now_iso()
        application = {
            "application_message": message or None,
            "portfolio_url": portfolio_url or None,
            "application_date": now,
            "updated_at": now,
        }

        try:
            row = self.store.select_one(PROFILES_TABLE, filters={"id": user_id})
        except RowStoreError as e:
            logger.error(f"Failed to fetch profile {user_id}: {e}")
            raise DependencyFailureError("Failed to fetch profile", error=str(e))

        if row is None:
            username = (session.user.email or "user").split("@")[0]
            try:
                self.store.insert(PROFILES_TABLE, {
                    "id": user_id,
                    "username": username,
                    "role": UserRole.USER.value,
                    "created_at": now,
                    **application,
                })
            except RowStoreError as e:
                logger.error(f"Failed to create profile {user_id}: {e}")
                raise DependencyFailureError("Failed to submit application", error=str(e))

            logger.info(f"Contributor application submitted by new profile {user_id}")
            return {
                "success": True,
                "message": "Application submitted successfully. You will be notified once approved.",
            }

        profile = Profile.from_row(row)
        if profile.is_contributor:
            raise AlreadyContributorError()
        if profile.has_pending_application:
            raise ApplicationPendingError()

        try:
            self.store.update(PROFILES_TABLE, application, filters={"id": user_id})
        except RowStoreError as e:
            logger.error(f"Failed to update application for {user_id}: {e}")
            raise DependencyFailureError("Failed to submit application", error=str(e))

        logger.info(f"Contributor application resubmitted by {user_id}")
        return {
            "success": True,
            "message": "Application updated successfully. You will be notified once approved.",
        }

    # -------------------------------------------------------------------------
    # Admin side
    # -------------------------------------------------------------------------

    def list_pending_applications(self, session: AuthSession | None) -> list[ContributorApplication]:
        """Applications awaiting review, oldest first."""
        self.guard.require_admin(session)
        try:
            rows = self.privileged_store.select(
                PROFILES_TABLE,
                columns="id, username, application_date, application_message, portfolio_url",
                filters={"role": UserRole.USER.value, "application_date": NOT_NULL},
                order_by="application_date",
            )
        except RowStoreError as e:
            raise DependencyFailureError("Failed to list applications", error=str(e))
        return [ContributorApplication.model_validate(row) for row in rows]

    def approve_application(self, session: AuthSession | None, profile_id: Any) -> dict[str, Any]:
        """
        Grant the contributor role.

        Raises:
            ProfileNotFoundError: No such profile
            AlreadyContributorError: Profile is already a contributor (or admin)
        """
        self.guard.require_admin(session)
        profile = self._load_profile(self._validate_id(profile_id))

        if profile.is_contributor:
            raise AlreadyContributorError("Already approved")

        self._update_profile(profile.id, {
            "role": UserRole.CONTRIBUTOR.value,
            "contributor_tier": ContributorTier.BRONZE.value,
            "updated_at": utc_now_iso(),
        }, action="approve contributor")
        logger.info(f"Contributor application of {profile.id} approved by {session.user_id}")

        queue = PostCommitQueue("contributor.approve")
        queue.add("notification", self.notifications.create, notices.contributor_approved(profile.id))
        self.dispatch(queue)

        return {"success": True, "message": "Contributor approved"}

    def reject_application(
        self,
        session: AuthSession | None,
        profile_id: Any,
        reason: str | None = None,
    ) -> dict[str, Any]:
        """
        Turn the profile back into a plain user who may reapply.

        Raises:
            ProfileNotFoundError: No such profile
        """
        self.guard.require_admin(session)
        profile = self._load_profile(self._validate_id(profile_id))
        reason = reason.strip() if isinstance(reason, str) and reason.strip() else None

        self._update_profile(profile.id, {
            "role": UserRole.USER.value,
            "contributor_tier": None,
            "application_date": None,
            "updated_at": utc_now_iso(),
        }, action="reject contributor")
        logger.info(f"Contributor application of {profile.id} rejected by {session.user_id}")

        queue = PostCommitQueue("contributor.reject")
        queue.add("notification", self.notifications.create, notices.contributor_rejected(profile.id, reason))
        self.dispatch(queue)

        return {"success": True, "message": "Contributor rejected"}

    def update_level(self, session: AuthSession | None, profile_id: Any, level: Any) -> dict[str, Any]:
        """
        Change a contributor's tier.

        Raises:
            InputValidationError: Missing id or unknown level
        """
        self.guard.require_admin(session)
        profile_id = self._validate_id(profile_id)

        tier = ContributorTier.parse(level)
        if tier is None:
            raise InputValidationError(
                "Invalid level",
                details={"allowed": [t.value for t in ContributorTier]},
            )

        self._update_profile(profile_id, {
            "contributor_tier": tier.value,
            "updated_at": utc_now_iso(),
        }, action="update contributor level")
        logger.info(f"Contributor {profile_id} moved to tier {tier.value}")

        return {"success": True, "message": "Contributor level updated successfully"}

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_id(profile_id: Any) -> str:
        if not isinstance(profile_id, str) or not profile_id.strip():
            raise InputValidationError("Contributor ID is required")
        return profile_id.strip()

    def _load_profile(self, profile_id: str) -> Profile:
        try:
            row = self.privileged_store.select_one(PROFILES_TABLE, filters={"id": profile_id})
        except RowStoreError as e:
            logger.error(f"Failed to fetch profile {profile_id}: {e}")
            raise DependencyFailureError("Failed to fetch contributor profile", error=str(e))
        if row is None:
            raise ProfileNotFoundError(profile_id)
        return Profile.from_row(row)

    def _update_profile(self, profile_id: str, values: dict[str, Any], action: str) -> list[dict[str, Any]]:
        try:
            rows = self.privileged_store.update(PROFILES_TABLE, values, filters={"id": profile_id})
        except RowStoreError as e:
            logger.error(f"Failed to {action} {profile_id}: {e}")
            raise DependencyFailureError(f"Failed to {action}", error=str(e))
        if not rows:
            raise ProfileNotFoundError(profile_id)
        return rows
