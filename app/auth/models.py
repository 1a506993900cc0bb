# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class AuthSession(BaseModel):
    """
    A validated session: the acting user plus the token they presented.

    The token is needed to build user-scoped (RLS) clients.
    """
    model_config = ConfigDict(frozen=True)

    user: AuthUser
    access_token: str

    @property
    def user_id(self) -> str:
        return str(self.user.id)


class UserResponse(BaseModel):
    """
    Full user response for API endpoints.

    Includes profile data from the public.profiles table.
    """
    id: UUID
    email: Optional[str] = None
    username: Optional[str] = None
    role: Optional[str] = None
    contributor_tier: Optional[str] = None
    # Display name of the contributor level badge
    badge: Optional[str] = None
    has_pending_application: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    role: Optional[str] = None  # Postgres role ("authenticated"), not the app role
