# =============================================================================
# app/routers/admin.py - Admin Settings and Dashboard
# =============================================================================
# /admin/settings is an API route (401/403 on failure).
# /admin/dashboard backs the dashboard page: callers without access are
# redirected (303) to the sign-in or home page instead.
# =============================================================================

from typing import Any

from fastapi import APIRouter

from app.dependencies import AdminServiceDep, SessionDep

router = APIRouter()


@router.put("/admin/settings")
async def update_settings(
    service: AdminServiceDep,
    session: SessionDep,
    changes: dict[str, Any] | None = None,
):
    """Update site-wide settings."""
    saved = service.update_settings(session, changes or {})
    return {"success": True, "settings": saved}


@router.get("/admin/dashboard")
async def admin_dashboard(service: AdminServiceDep, session: SessionDep):
    """
    Headline counts for the admin dashboard.

    Redirects:
        303 to the sign-in page when not signed in
        303 to the home page when not an admin
    """
    return {"stats": service.dashboard_stats(session, redirect_to="/admin")}
