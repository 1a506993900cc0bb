# =============================================================================
# core/services/authorization.py - Admin Authorization Guard
# =============================================================================
# Decides whether the acting identity may perform administrative work.
#
# The role is always read through the privileged (service role) store: if
# the caller's own RLS-scoped client were used, their read permissions
# could hide or spoof the role they are being checked for.
#
# Two call shapes share one role check:
# - require_admin: raises UnauthenticatedError / ForbiddenError (APIs)
# - require_admin_or_redirect: raises RedirectRequired (pages)
# =============================================================================

import logging
from urllib.parse import urlencode

from app.auth.models import AuthSession
from app.config import settings
from app.exceptions import (
    ForbiddenError,
    RedirectRequired,
    UnauthenticatedError,
)
from core.models.profile import Profile, UserRole
from lib.supabase_client import RowStore, RowStoreError

logger = logging.getLogger(__name__)


class AuthorizationGuard:
    """
    Admin role check backed by the privileged row store.

    Example:
        guard = AuthorizationGuard(privileged_store)
        session = guard.require_admin(session)
    """

    def __init__(self, privileged_store: RowStore):
        self.store = privileged_store

    def resolve_role(self, user_id: str) -> UserRole | None:
        """
        Look up the role of a profile.

        Returns:
            The normalized role, or None if the profile doesn't exist

        Raises:
            RowStoreError: If the lookup fails
        """
        row = self.store.select_one("profiles", columns="id, role", filters={"id": user_id})
        if row is None:
            return None
        return Profile.from_row(row).role

    def require_admin(self, session: AuthSession | None) -> AuthSession:
        """
        Throwing variant for API contexts.

        Returns:
            The validated session

        Raises:
            UnauthenticatedError: No session
            ForbiddenError: Role is not admin, or the role couldn't be read
        """
        if session is None:
            logger.warning("Admin check failed: no session")
            raise UnauthenticatedError()

        try:
            role = self.resolve_role(session.user_id)
        except RowStoreError as e:
            logger.error(f"Admin check failed: role lookup error for {session.user_id}: {e}")
            raise ForbiddenError()

        if role != UserRole.ADMIN:
            logger.warning(f"Admin access denied for user {session.user_id} (role={role and role.value})")
            raise ForbiddenError()

        logger.debug(f"Admin access granted for user {session.user_id}")
        return session

    def require_admin_or_redirect(
        self,
        session: AuthSession | None,
        next_path: str = "/admin",
    ) -> AuthSession:
        """
        Redirecting variant for page contexts.

        No session -> sign-in page (with a redirect back to next_path).
        Not an admin -> home page.

        Raises:
            RedirectRequired: Instead of any auth error
        """
        try:
            return self.require_admin(session)
        except UnauthenticatedError:
            query = urlencode({"redirect": next_path})
            raise RedirectRequired(f"{settings.SIGNIN_PATH}?{query}")
        except ForbiddenError:
            raise RedirectRequired(settings.HOME_PATH)

    def is_admin(self, session: AuthSession | None) -> bool:
        """Non-raising check, e.g. for showing admin links."""
        try:
            self.require_admin(session)
        except (UnauthenticatedError, ForbiddenError):
            return False
        return True
