# =============================================================================
# app/routers/contributors.py - Contributor Application Endpoints
# =============================================================================
# Users apply through POST /contributor/apply; admins review applications
# under /admin/contributor*.
# =============================================================================

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.dependencies import ApplicantServiceDep, ContributorServiceDep, SessionDep
from core.models.profile import ContributorApplication

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ApplyRequest(BaseModel):
    """Body of POST /contributor/apply; both fields optional."""
    application_message: str | None = Field(
        default=None,
        max_length=2000,
        examples=["I shoot aerial footage of coastlines"],
    )
    portfolio_url: str | None = Field(default=None, examples=["https://jane.example.com"])


class ContributorDecisionRequest(BaseModel):
    id: Any = Field(default=None, description="Profile id of the applicant")
    reason: Any = Field(default=None, description="Optional rejection reason")


class ContributorLevelRequest(BaseModel):
    id: Any = Field(default=None, description="Profile id of the contributor")
    level: Any = Field(default=None, examples=["gold"])


class ActionResponse(BaseModel):
    success: bool = True
    message: str


class PendingApplicationsResponse(BaseModel):
    applications: list[ContributorApplication]
    total: int


# =============================================================================
# Applicant
# =============================================================================

@router.post("/contributor/apply", response_model=ActionResponse)
async def apply_as_contributor(
    service: ApplicantServiceDep,
    session: SessionDep,
    request: ApplyRequest | None = None,
):
    """
    Apply to become a contributor.

    Raises:
        400: Already a contributor, or an application is pending
             (body carries has_pending_application: true)
        401: Not signed in
    """
    request = request or ApplyRequest()
    return service.apply(session, request.application_message, request.portfolio_url)


# =============================================================================
# Admin
# =============================================================================

@router.get("/admin/contributors/pending", response_model=PendingApplicationsResponse)
async def list_pending_applications(service: ContributorServiceDep, session: SessionDep):
    applications = service.list_pending_applications(session)
    return PendingApplicationsResponse(applications=applications, total=len(applications))


@router.post("/admin/contributor/approve", response_model=ActionResponse)
async def approve_contributor(
    service: ContributorServiceDep,
    session: SessionDep,
    request: ContributorDecisionRequest | None = None,
):
    """Grant the contributor role (tier bronze)."""
    request = request or ContributorDecisionRequest()
    return service.approve_application(session, request.id)


@router.post("/admin/contributor/reject", response_model=ActionResponse)
async def reject_contributor(
    service: ContributorServiceDep,
    session: SessionDep,
    request: ContributorDecisionRequest | None = None,
):
    """Reject an application; the user may apply again."""
    request = request or ContributorDecisionRequest()
    return service.reject_application(session, request.id, request.reason)


@router.post("/admin/contributor/update-level", response_model=ActionResponse)
async def update_contributor_level(
    service: ContributorServiceDep,
    session: SessionDep,
    request: ContributorLevelRequest | None = None,
):
    """Change a contributor's tier (bronze/silver/gold/platinum)."""
    request = request or ContributorLevelRequest()
    return service.update_level(session, request.id, request.level)
