# =============================================================================
# core/services/moderation_service.py - Asset Moderation Workflow
# =============================================================================
# Moves contributor-submitted assets out of review:
#
#   pending --approve--> approved
#   pending --reject---> rejected
#
# approved and rejected are terminal. The status change is one conditional
# update (WHERE id = :id AND status = 'pending'), so two admins acting on
# the same asset cannot both succeed.
#
# Once the change is persisted, the contributor is notified (notification
# row + email) through a PostCommitQueue. Those side effects are
# best-effort: their failures are logged and never reach the caller.
# =============================================================================

import logging
from typing import Any

from app.auth.models import AuthSession
from app.exceptions import (
    AssetNotFoundError,
    AssetNotPendingError,
    DependencyFailureError,
    InputValidationError,
)
from core.models.asset import Asset, AssetStatus, ModerationResult
from core.services import notification_service as notices
from core.services.authorization import AuthorizationGuard
from core.services.notification_service import NotificationService
from core.services.side_effects import Dispatcher, PostCommitQueue, run_inline
from lib.mailer import EmailSender, EmailTemplate
from lib.supabase_client import IdentityDirectory, RowStore, RowStoreError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

ASSETS_TABLE = "assets"


class AssetModerationService:
    """
    Approve/reject workflow for pending assets.

    All collaborators are injected so tests can substitute fakes.

    Example:
        service = AssetModerationService(
            store=RowStore(SupabaseClient.get_client()),
            guard=AuthorizationGuard(privileged_store),
            notifications=NotificationService(store),
            mailer=EmailDispatcher(),
            identities=IdentityDirectory(SupabaseClient.get_client()),
        )
        result = service.approve(session, asset_id)
    """

    def __init__(
        self,
        store: RowStore,
        guard: AuthorizationGuard,
        notifications: NotificationService,
        mailer: EmailSender,
        identities: IdentityDirectory,
        dispatch: Dispatcher = run_inline,
    ):
        self.store = store
        self.guard = guard
        self.notifications = notifications
        self.mailer = mailer
        self.identities = identities
        self.dispatch = dispatch

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def approve(self, session: AuthSession | None, asset_id: Any) -> ModerationResult:
        """
        Approve a pending asset.

        Clears any earlier rejection reason.

        Raises:
            UnauthenticatedError / ForbiddenError: Caller is not an admin
            InputValidationError: asset_id missing or not a string
            AssetNotFoundError: No such asset
            AssetNotPendingError: Asset already approved or rejected
            DependencyFailureError: The store failed
        """
        self.guard.require_admin(session)
        asset_id = self._validate_asset_id(asset_id)

        asset = self._transition(
            asset_id,
            AssetStatus.APPROVED,
            {"rejected_reason": None},
        )
        logger.info(f"Asset {asset_id} approved by {session.user_id}")

        queue = PostCommitQueue("asset.approve")
        if asset.contributor_id:
            queue.add(
                "notification",
                self.notifications.create,
                notices.asset_approved(asset.contributor_id, asset.id, asset.title),
            )
            queue.add(
                "email",
                self._email_contributor,
                asset,
                "Your Asset Has Been Approved",
                EmailTemplate.ASSET_APPROVED,
                {},
            )
        self.dispatch(queue)

        return ModerationResult(
            success=True,
            message="Asset approved successfully",
            asset_id=asset_id,
        )

    def reject(
        self,
        session: AuthSession | None,
        asset_id: Any,
        reason: str | None = None,
    ) -> ModerationResult:
        """
        Reject a pending asset, storing the trimmed reason (or null).

        Raises:
            Same as approve()
        """
        self.guard.require_admin(session)
        asset_id = self._validate_asset_id(asset_id)
        if reason is not None and not isinstance(reason, str):
            raise InputValidationError("reason must be a string")
        rejection_reason = reason.strip() if reason else None
        rejection_reason = rejection_reason or None

        asset = self._transition(
            asset_id,
            AssetStatus.REJECTED,
            {"rejected_reason": rejection_reason},
        )
        logger.info(f"Asset {asset_id} rejected by {session.user_id}")

        queue = PostCommitQueue("asset.reject")
        if asset.contributor_id:
            queue.add(
                "notification",
                self.notifications.create,
                notices.asset_rejected(asset.contributor_id, asset.title, rejection_reason),
            )
            queue.add(
                "email",
                self._email_contributor,
                asset,
                "Your Asset Has Been Rejected",
                EmailTemplate.ASSET_REJECTED,
                {"rejection_reason": rejection_reason or "No reason provided"},
            )
        self.dispatch(queue)

        return ModerationResult(
            success=True,
            message="Asset rejected successfully",
            asset_id=asset_id,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_asset_id(asset_id: Any) -> str:
        if not isinstance(asset_id, str) or not asset_id.strip():
            raise InputValidationError("asset_id is required and must be a string")
        return asset_id.strip()

    def _load(self, asset_id: str) -> Asset | None:
        try:
            row = self.store.select_one(ASSETS_TABLE, filters={"id": asset_id})
        except RowStoreError as e:
            logger.error(f"Failed to load asset {asset_id}: {e}")
            raise DependencyFailureError("Failed to load asset", error=str(e))
        return Asset.from_row(row) if row else None

    def _transition(
        self,
        asset_id: str,
        target: AssetStatus,
        extra_values: dict[str, Any],
    ) -> Asset:
        """
        Move a pending asset to `target`.

        Returns:
            The asset as it was before the change (title, contributor)
        """
        asset = self._load(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        if not asset.is_pending:
            raise AssetNotPendingError(asset_id, asset.status)

        values = {
            "status": target.value,
            "updated_at": utc_now_iso(),
            **extra_values,
        }
        try:
            updated = self.store.update(
                ASSETS_TABLE,
                values,
                filters={"id": asset_id, "status": AssetStatus.PENDING.value},
            )
        except RowStoreError as e:
            logger.error(f"Failed to set asset {asset_id} to {target.value}: {e}")
            verb = "approve" if target == AssetStatus.APPROVED else "reject"
            raise DependencyFailureError(f"Failed to {verb} asset", error=str(e))

        if not updated:
            # Someone else moved it (or deleted it) after we read it
            current = self._load(asset_id)
            if current is None:
                raise AssetNotFoundError(asset_id)
            logger.warning(f"Asset {asset_id} left pending concurrently (now {current.status})")
            raise AssetNotPendingError(asset_id, current.status)

        return asset

    def _email_contributor(
        self,
        asset: Asset,
        subject: str,
        template: EmailTemplate,
        extra_data: dict[str, Any],
    ) -> bool | None:
        """Post-commit task: email the asset's contributor, if they have an address."""
        email = self.identities.get_email(asset.contributor_id)
        if not email:
            logger.info(f"No email on file for contributor {asset.contributor_id}, skipping")
            return None

        profile = self.store.select_one(
            "profiles",
            columns="id, username",
            filters={"id": asset.contributor_id},
        )
        data = {
            "asset_title": asset.title,
            "asset_id": asset.id,
            "contributor_name": (profile or {}).get("username") or "Contributor",
            **extra_data,
        }
        return self.mailer.send(to=email, subject=subject, template=template, data=data)
