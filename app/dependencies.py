# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Tests swap any of these out through `app.dependency_overrides`, most
# usefully get_privileged_store / get_user_store (fake row store),
# get_identities, get_mailer and get_dispatcher.
# =============================================================================

from typing import Annotated, Optional

from fastapi import BackgroundTasks, Depends

from app.auth.dependencies import get_session_optional
from app.auth.models import AuthSession
from app.exceptions import UnauthenticatedError
from core.services.admin_service import AdminService
from core.services.asset_service import AssetService
from core.services.authorization import AuthorizationGuard
from core.services.contributor_service import ContributorService
from core.services.moderation_service import AssetModerationService
from core.services.notification_service import NotificationService
from core.services.side_effects import Dispatcher, PostCommitQueue
from core.services.subscription_service import SubscriptionService
from lib.mailer import EmailSender, get_email_dispatcher
from lib.supabase_client import (
    IdentityDirectory,
    RowStore,
    StorageBucket,
    SupabaseClient,
)


# =============================================================================
# Backing Stores
# =============================================================================

def get_privileged_store() -> RowStore:
    """Row store over the service-role client (bypasses RLS)."""
    return RowStore(SupabaseClient.get_client())


def get_user_store(
    session: Optional[AuthSession] = Depends(get_session_optional),
) -> RowStore:
    """
    Row store acting as the caller, so RLS applies.

    Raises:
        UnauthenticatedError: No session to act as
    """
    if session is None:
        raise UnauthenticatedError()
    return RowStore(SupabaseClient.get_user_client(session.access_token))


def get_identities() -> IdentityDirectory:
    return IdentityDirectory(SupabaseClient.get_client())


def get_storage() -> StorageBucket:
    return StorageBucket(SupabaseClient.get_client())


def get_mailer() -> EmailSender:
    return get_email_dispatcher()


def get_dispatcher(background_tasks: BackgroundTasks) -> Dispatcher:
    """
    Run post-commit side effects after the response has been sent.

    The state change is already persisted when the queue is handed over,
    so the client gets its answer without waiting on notifications or SMTP.
    """
    def dispatch(queue: PostCommitQueue) -> None:
        if len(queue):
            background_tasks.add_task(queue.run)

    return dispatch


PrivilegedStoreDep = Annotated[RowStore, Depends(get_privileged_store)]
SessionDep = Annotated[Optional[AuthSession], Depends(get_session_optional)]


# =============================================================================
# Services
# =============================================================================

def get_guard(store: PrivilegedStoreDep) -> AuthorizationGuard:
    return AuthorizationGuard(store)


def get_notification_service(store: PrivilegedStoreDep) -> NotificationService:
    return NotificationService(store)


def get_moderation_service(
    store: PrivilegedStoreDep,
    guard: AuthorizationGuard = Depends(get_guard),
    notifications: NotificationService = Depends(get_notification_service),
    mailer: EmailSender = Depends(get_mailer),
    identities: IdentityDirectory = Depends(get_identities),
    dispatch: Dispatcher = Depends(get_dispatcher),
) -> AssetModerationService:
    return AssetModerationService(
        store=store,
        guard=guard,
        notifications=notifications,
        mailer=mailer,
        identities=identities,
        dispatch=dispatch,
    )


def get_contributor_service(
    store: PrivilegedStoreDep,
    guard: AuthorizationGuard = Depends(get_guard),
    notifications: NotificationService = Depends(get_notification_service),
    dispatch: Dispatcher = Depends(get_dispatcher),
) -> ContributorService:
    return ContributorService(
        store=store,
        privileged_store=store,
        guard=guard,
        notifications=notifications,
        dispatch=dispatch,
    )


def get_applicant_service(
    user_store: RowStore = Depends(get_user_store),
    store: RowStore = Depends(get_privileged_store),
    guard: AuthorizationGuard = Depends(get_guard),
    notifications: NotificationService = Depends(get_notification_service),
    dispatch: Dispatcher = Depends(get_dispatcher),
) -> ContributorService:
    """ContributorService whose own-profile writes go through the caller's RLS."""
    return ContributorService(
        store=user_store,
        privileged_store=store,
        guard=guard,
        notifications=notifications,
        dispatch=dispatch,
    )


def get_asset_service(
    store: PrivilegedStoreDep,
    guard: AuthorizationGuard = Depends(get_guard),
    storage: StorageBucket = Depends(get_storage),
) -> AssetService:
    return AssetService(store, guard, storage)


def get_subscription_service(
    store: PrivilegedStoreDep,
    guard: AuthorizationGuard = Depends(get_guard),
    identities: IdentityDirectory = Depends(get_identities),
) -> SubscriptionService:
    return SubscriptionService(store, guard, identities)


def get_admin_service(
    store: PrivilegedStoreDep,
    guard: AuthorizationGuard = Depends(get_guard),
) -> AdminService:
    return AdminService(store, guard)


# Type aliases for dependency injection
ModerationServiceDep = Annotated[AssetModerationService, Depends(get_moderation_service)]
ContributorServiceDep = Annotated[ContributorService, Depends(get_contributor_service)]
ApplicantServiceDep = Annotated[ContributorService, Depends(get_applicant_service)]
AssetServiceDep = Annotated[AssetService, Depends(get_asset_service)]
SubscriptionServiceDep = Annotated[SubscriptionService, Depends(get_subscription_service)]
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
