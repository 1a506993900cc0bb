# =============================================================================
# app/routers/admin_assets.py - Asset Moderation Endpoints
# =============================================================================
# Admin-only endpoints for reviewing and managing contributor assets.
#
# Request bodies are typed loosely on purpose: the admin check has to run
# before input validation, so a non-admin never learns which ids or fields
# are valid. The service validates after the guard.
# =============================================================================

from typing import Any

from fastapi import APIRouter, Path
from pydantic import BaseModel, Field

from app.dependencies import AssetServiceDep, ModerationServiceDep, SessionDep
from core.models.asset import Asset, ModerationResult

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ApproveAssetRequest(BaseModel):
    """Body of POST /admin/asset/approve."""
    asset_id: Any = Field(default=None, examples=["7d9f3a52-1c1e-4b0c-9a51-0f2a0c3e4d11"])


class RejectAssetRequest(BaseModel):
    """Body of POST /admin/asset/reject."""
    asset_id: Any = Field(default=None, examples=["7d9f3a52-1c1e-4b0c-9a51-0f2a0c3e4d11"])
    reason: Any = Field(default=None, examples=["Watermark visible in the preview"])


class PendingAssetsResponse(BaseModel):
    assets: list[Asset]
    total: int


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/admin/asset/approve", response_model=ModerationResult)
async def approve_asset(
    service: ModerationServiceDep,
    session: SessionDep,
    request: ApproveAssetRequest | None = None,
):
    """
    Approve a pending asset.

    Returns:
        {success: true, message, asset_id}

    Raises:
        400: Missing asset_id, or asset is not pending
        401/403: Not signed in / not an admin
        404: Asset not found
        500: Database failure
    """
    request = request or ApproveAssetRequest()
    return service.approve(session, request.asset_id)


@router.post("/admin/asset/reject", response_model=ModerationResult)
async def reject_asset(
    service: ModerationServiceDep,
    session: SessionDep,
    request: RejectAssetRequest | None = None,
):
    """
    Reject a pending asset with an optional reason.

    Raises:
        Same as approve
    """
    request = request or RejectAssetRequest()
    return service.reject(session, request.asset_id, request.reason)


@router.get("/admin/assets/pending", response_model=PendingAssetsResponse)
async def list_pending_assets(service: AssetServiceDep, session: SessionDep):
    """Assets awaiting review, oldest first."""
    assets = service.list_pending(session)
    return PendingAssetsResponse(assets=assets, total=len(assets))


@router.put("/admin/assets/{asset_id}", response_model=Asset)
async def update_asset(
    service: AssetServiceDep,
    session: SessionDep,
    asset_id: str = Path(..., description="Asset ID"),
    changes: dict[str, Any] | None = None,
):
    """
    Edit an asset's catalogue fields.

    Status cannot be changed here; use approve/reject.
    """
    return service.update(session, asset_id, changes or {})


@router.delete("/admin/assets/{asset_id}")
async def delete_asset(
    service: AssetServiceDep,
    session: SessionDep,
    asset_id: str = Path(..., description="Asset ID"),
):
    """Delete an asset and its stored file."""
    service.delete(session, asset_id)
    return {"success": True, "message": "Asset deleted successfully"}
