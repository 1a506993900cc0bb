# =============================================================================
# core/services/asset_service.py - Asset Records
# =============================================================================
# Creating, editing and removing asset rows. The file itself is uploaded to
# storage by the client first; `create` registers it for review.
#
# New assets always start as pending with a zero price. Status never
# changes here: see moderation_service.py.
# =============================================================================

import logging
from typing import Any

from pydantic import ValidationError

from app.auth.models import AuthSession
from app.exceptions import (
    AssetNotFoundError,
    DependencyFailureError,
    ForbiddenError,
    InputValidationError,
    UnauthenticatedError,
)
from core.models.asset import Asset, AssetCreate, AssetStatus, AssetUpdate
from core.models.profile import UserRole
from core.services.authorization import AuthorizationGuard
from lib.supabase_client import RowStore, RowStoreError, StorageBucket, SupabaseClientError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

ASSETS_TABLE = "assets"
ADMIN_STORAGE_PREFIX = "assets/admin/"


def _validation_details(error: ValidationError) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


class AssetService:
    """
    Asset CRUD.

    Example:
        service = AssetService(store, guard, StorageBucket(client))
        asset_id = service.create(session, {"title": "...", ...})
    """

    def __init__(self, store: RowStore, guard: AuthorizationGuard, storage: StorageBucket):
        self.store = store
        self.guard = guard
        self.storage = storage

    def create(self, session: AuthSession | None, payload: dict[str, Any] | AssetCreate) -> str:
        """
        Register an uploaded file as a pending asset.

        Args:
            session: The uploading contributor (or admin)
            payload: AssetCreate fields

        Returns:
            The new asset's id

        Raises:
            UnauthenticatedError: No session
            ForbiddenError: Caller is neither contributor nor admin
            InputValidationError: Missing/invalid fields or a storage path
                outside the caller's folder
            DependencyFailureError: The store failed
        """
        if session is None:
            raise UnauthenticatedError()

        try:
            role = self.guard.resolve_role(session.user_id)
        except RowStoreError as e:
            logger.error(f"Role lookup failed for {session.user_id}: {e}")
            raise ForbiddenError("Forbidden: Contributor access required")
        if role not in (UserRole.CONTRIBUTOR, UserRole.ADMIN):
            logger.warning(f"Asset upload denied for user {session.user_id} (role={role and role.value})")
            raise ForbiddenError("Forbidden: Contributor access required")

        try:
            data = payload if isinstance(payload, AssetCreate) else AssetCreate.model_validate(payload)
        except ValidationError as e:
            raise InputValidationError(
                "Missing or invalid asset fields",
                details={"errors": _validation_details(e)},
            )

        allowed_prefixes = [f"contributors/{session.user_id}/"]
        if role == UserRole.ADMIN:
            allowed_prefixes.append(ADMIN_STORAGE_PREFIX)
        if not any(data.storage_path.startswith(prefix) for prefix in allowed_prefixes):
            raise InputValidationError(
                "Invalid storage path",
                details={"storage_path": data.storage_path, "allowed_prefixes": allowed_prefixes},
            )

        now = utc_now_iso()
        values = {
            **data.model_dump(mode="json"),
            "contributor_id": session.user_id,
            "status": AssetStatus.PENDING.value,
            "price": 0,
            "created_at": now,
            "updated_at": now,
        }
        try:
            row = self.store.insert(ASSETS_TABLE, values)
        except RowStoreError as e:
            logger.error(f"Failed to create asset for {session.user_id}: {e}")
            raise DependencyFailureError("Failed to create asset", error=str(e))

        asset_id = str(row["id"])
        logger.info(f"Asset {asset_id} submitted for review by {session.user_id}")
        return asset_id

    def update(
        self,
        session: AuthSession | None,
        asset_id: str,
        changes: dict[str, Any] | AssetUpdate,
    ) -> Asset:
        """
        Edit catalogue fields of an asset (admin only).

        Raises:
            InputValidationError: Unknown field (including status) or nothing to change
            AssetNotFoundError: No such asset
        """
        self.guard.require_admin(session)

        try:
            update = changes if isinstance(changes, AssetUpdate) else AssetUpdate.model_validate(changes)
        except ValidationError as e:
            raise InputValidationError(
                "Invalid asset update",
                details={"errors": _validation_details(e)},
            )

        values = update.model_dump(exclude_unset=True)
        if not values:
            raise InputValidationError("No fields to update")
        values["updated_at"] = utc_now_iso()

        try:
            rows = self.store.update(ASSETS_TABLE, values, filters={"id": asset_id})
        except RowStoreError as e:
            logger.error(f"Failed to update asset {asset_id}: {e}")
            raise DependencyFailureError("Failed to update asset", error=str(e))
        if not rows:
            raise AssetNotFoundError(asset_id)

        logger.info(f"Asset {asset_id} edited by {session.user_id}: {sorted(values)}")
        return Asset.from_row(rows[0])

    def delete(self, session: AuthSession | None, asset_id: str) -> None:
        """
        Delete an asset and, best-effort, its stored file (admin only).

        Raises:
            AssetNotFoundError: No such asset
        """
        self.guard.require_admin(session)

        try:
            row = self.store.select_one(ASSETS_TABLE, columns="id, storage_path", filters={"id": asset_id})
        except RowStoreError as e:
            raise DependencyFailureError("Failed to load asset", error=str(e))
        if row is None:
            raise AssetNotFoundError(asset_id)

        storage_path = row.get("storage_path")
        if storage_path:
            try:
                self.storage.remove(storage_path)
            except SupabaseClientError as e:
                # An orphaned file is tolerable, a dangling row is not
                logger.warning(f"Could not remove {storage_path} for asset {asset_id}: {e}")

        try:
            self.store.delete(ASSETS_TABLE, filters={"id": asset_id})
        except RowStoreError as e:
            logger.error(f"Failed to delete asset {asset_id}: {e}")
            raise DependencyFailureError("Failed to delete asset", error=str(e))

        logger.info(f"Asset {asset_id} deleted by {session.user_id}")

    def list_pending(self, session: AuthSession | None, limit: int = 100) -> list[Asset]:
        """Assets awaiting review, oldest first (admin only)."""
        self.guard.require_admin(session)
        try:
            rows = self.store.select(
                ASSETS_TABLE,
                filters={"status": AssetStatus.PENDING.value},
                order_by="created_at",
                limit=limit,
            )
        except RowStoreError as e:
            raise DependencyFailureError("Failed to list pending assets", error=str(e))
        return [Asset.from_row(row) for row in rows]
