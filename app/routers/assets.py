# =============================================================================
# app/routers/assets.py - Asset Submission Endpoint
# =============================================================================
# Contributors register an uploaded file as an asset. New assets enter the
# review queue as pending.
# =============================================================================

from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from app.dependencies import AssetServiceDep, SessionDep

router = APIRouter()


class AssetCreateResponse(BaseModel):
    success: bool = True
    asset_id: str = Field(..., examples=["7d9f3a52-1c1e-4b0c-9a51-0f2a0c3e4d11"])
    message: str = "Asset submitted for review"


@router.post("/assets", response_model=AssetCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    service: AssetServiceDep,
    session: SessionDep,
    payload: dict[str, Any] | None = None,
):
    """
    Submit an asset for review.

    The body follows AssetCreate: title, type, storage_path and license
    are required. storage_path must live under contributors/<your id>/.

    Raises:
        400: Missing or invalid fields
        401: Not signed in
        403: Not a contributor
    """
    asset_id = service.create(session, payload or {})
    return AssetCreateResponse(asset_id=asset_id)
