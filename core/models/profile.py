# =============================================================================
# core/models/profile.py - Profile Schemas
# =============================================================================
# A profile is the application-side record of an auth user:
# - UserRole: user / contributor / admin
# - ContributorTier: bronze / silver / gold / platinum (contributors only)
# - Profile: typed view of a `profiles` row, validated on read
#
# Role strings coming out of the database are normalized to UserRole here,
# once, so nothing downstream compares raw strings.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserRole(str, Enum):
    """
    Roles a profile can hold.

    Flow: user -> (application approved) -> contributor
          contributor -> (application rejected) -> user
    Admins are assigned out of band.
    """
    USER = "user"
    CONTRIBUTOR = "contributor"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Any) -> "UserRole | None":
        """
        Normalize a stored role string (case and whitespace insensitive).

        Returns None for missing or unknown roles.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ContributorTier(str, Enum):
    """Contributor level, shown as a badge next to contributor names."""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"

    @classmethod
    def parse(cls, value: Any) -> "ContributorTier | None":
        """Normalize a stored tier string; unknown values become None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Profile(BaseModel):
    """
    Typed view of a row in `profiles`.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "username": "jane",
            "role": "user",
            "contributor_tier": null,
            "application_date": "2024-01-15T10:30:00Z",
            "application_message": "I shoot aerial footage",
            "portfolio_url": "https://jane.example.com"
        }
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(..., description="Profile id, equal to the auth user id")

    username: str | None = Field(default=None, description="Public display name")

    # Unknown or missing roles are treated as plain users
    role: UserRole = Field(default=UserRole.USER, description="Access role")

    contributor_tier: ContributorTier | None = Field(
        default=None,
        description="Contributor level (null for non-contributors)"
    )

    # Set while an application is waiting for review
    application_date: datetime | None = Field(
        default=None,
        description="When the contributor application was submitted"
    )

    application_message: str | None = Field(default=None)

    portfolio_url: str | None = Field(default=None)

    created_at: datetime | None = Field(default=None)

    updated_at: datetime | None = Field(default=None)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> UserRole:
        return UserRole.parse(value) or UserRole.USER

    @field_validator("contributor_tier", mode="before")
    @classmethod
    def _normalize_tier(cls, value: Any) -> ContributorTier | None:
        return ContributorTier.parse(value)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        """Build a Profile from a database row."""
        return cls.model_validate(row)

    @property
    def is_contributor(self) -> bool:
        """Contributors and admins may upload assets."""
        return self.role in (UserRole.CONTRIBUTOR, UserRole.ADMIN)

    @property
    def has_pending_application(self) -> bool:
        """An application is pending while a plain user has an application date."""
        return self.role == UserRole.USER and self.application_date is not None


class ContributorApplication(BaseModel):
    """Pending application as listed for admins."""
    id: str
    username: str | None = None
    application_date: datetime | None = None
    application_message: str | None = None
    portfolio_url: str | None = None
