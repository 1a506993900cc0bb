# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting user info after authentication.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_session
from app.auth.models import AuthSession, UserResponse
from app.dependencies import PrivilegedStoreDep
from core.models.level import level_badge
from core.models.profile import Profile, UserRole
from lib.supabase_client import RowStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    store: PrivilegedStoreDep,
    session: AuthSession = Depends(get_current_session),
) -> UserResponse:
    """
    Get the current user's identity and profile.

    Returns:
        UserResponse: id, email, username, role, tier and application state

    Raises:
        401: If not authenticated
    """
    user = session.user

    try:
        row = store.select_one("profiles", filters={"id": session.user_id})
    except RowStoreError as e:
        logger.warning(f"Could not fetch profile for {session.user_id}: {e}")
        row = None

    if row:
        profile = Profile.from_row(row)
        badge = None
        if profile.role == UserRole.CONTRIBUTOR:
            badge = level_badge(row.get("contributor_level") or profile.contributor_tier).name
        return UserResponse(
            id=user.id,
            email=user.email,
            username=profile.username,
            role=profile.role.value,
            contributor_tier=profile.contributor_tier.value if profile.contributor_tier else None,
            badge=badge,
            has_pending_application=profile.has_pending_application,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )

    # Auth user without a profile row yet (created on first application)
    return UserResponse(id=user.id, email=user.email)


@router.get("/verify")
async def verify_token(
    session: AuthSession = Depends(get_current_session),
) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": session.user_id,
        "email": session.user.email,
    }
