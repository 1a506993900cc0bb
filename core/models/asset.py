# =============================================================================
# core/models/asset.py - Asset Schemas
# =============================================================================
# Contributor-submitted media and its moderation lifecycle:
# - AssetStatus: pending -> approved | rejected (terminal)
# - AssetType: image / video / 3d / other
# - Asset: typed view of an `assets` row
# - AssetCreate / AssetUpdate: validated inputs
# - ModerationResult: outcome returned by approve/reject
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AssetStatus(str, Enum):
    """
    Moderation states of an asset.

    Flow: pending -> approved
          pending -> rejected
    Nothing leaves approved or rejected.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AssetType(str, Enum):
    """Kinds of media the marketplace lists."""
    IMAGE = "image"
    VIDEO = "video"
    MODEL_3D = "3d"
    OTHER = "other"


class Asset(BaseModel):
    """
    Typed view of a row in `assets`.

    Status is kept as the raw string so that an unexpected value in the
    database still surfaces verbatim in error messages.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    contributor_id: str | None = None
    title: str = ""
    description: str | None = None
    type: str | None = None
    status: str = AssetStatus.PENDING.value
    rejected_reason: str | None = None
    storage_path: str | None = None
    preview_path: str | None = None
    license: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    price: float = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("id", "contributor_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Asset":
        """Build an Asset from a database row."""
        return cls.model_validate(row)

    @property
    def is_pending(self) -> bool:
        return self.status == AssetStatus.PENDING.value


class AssetCreate(BaseModel):
    """
    Input for registering an uploaded file as an asset.

    The file itself is uploaded to storage by the client first; this
    creates the database record pointing at it.

    Example:
        {
            "title": "Sunset over dunes",
            "type": "image",
            "storage_path": "contributors/<uid>/sunset.jpg",
            "license": "standard",
            "tags": ["desert", "sunset"]
        }
    """

    title: str = Field(..., description="Display title")
    description: str | None = Field(default=None)
    type: AssetType = Field(..., description="Media kind")
    storage_path: str = Field(..., description="Path of the uploaded file in storage")
    preview_path: str | None = Field(default=None, description="Public preview URL")
    license: str = Field(..., description="License identifier")
    category: str | None = Field(default=None)
    tags: list[str] | None = Field(default=None)

    @field_validator("title", "storage_path", "license")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty string")
        return value


class AssetUpdate(BaseModel):
    """
    Admin edits to an asset's catalogue fields.

    Status is deliberately absent: it only changes through moderation.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    license: str | None = None
    preview_path: str | None = None
    is_featured: bool | None = None


class ModerationResult(BaseModel):
    """Outcome of approve/reject."""
    success: bool = True
    message: str
    asset_id: str
