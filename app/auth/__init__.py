# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Resolves Supabase sessions from bearer tokens or auth cookies.
#
# Usage:
#   from app.auth import get_current_session, AuthSession
#
#   @router.get("/protected")
#   async def protected(session: AuthSession = Depends(get_current_session)):
#       return {"user_id": session.user_id}
# =============================================================================

from app.auth.dependencies import (
    get_current_session,
    get_session_optional,
)
from app.auth.models import AuthSession, AuthUser, UserResponse

__all__ = [
    "get_current_session",
    "get_session_optional",
    "AuthSession",
    "AuthUser",
    "UserResponse",
]
