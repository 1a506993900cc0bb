# =============================================================================
# app/routers/plans.py - Subscription Plan Endpoints
# =============================================================================

from typing import Any

from fastapi import APIRouter, Path, status
from pydantic import BaseModel, Field

from app.dependencies import SessionDep, SubscriptionServiceDep
from core.models.plan import SubscriptionPlan

router = APIRouter()


class PlanResponse(BaseModel):
    """A plan with prices as plain numbers."""
    id: str
    name: str
    description: str | None = None
    original_price_monthly: float
    original_price_yearly: float
    first_month_discount_percent: float
    monthly_downloads: int | None = None
    features: list[str] = Field(default_factory=list)
    is_popular: bool = False

    @classmethod
    def from_plan(cls, plan: SubscriptionPlan) -> "PlanResponse":
        return cls(
            id=plan.id,
            name=plan.name,
            description=plan.description,
            original_price_monthly=float(plan.original_price_monthly),
            original_price_yearly=float(plan.original_price_yearly),
            first_month_discount_percent=float(plan.first_month_discount_percent),
            monthly_downloads=plan.monthly_downloads,
            features=plan.features,
            is_popular=plan.is_popular,
        )


class SubscribeRequest(BaseModel):
    plan_id: Any = Field(default=None, examples=["pro"])
    billing: Any = Field(default=None, examples=["monthly", "yearly"])


@router.get("/plans")
async def list_plans(service: SubscriptionServiceDep):
    """All subscription plans, cheapest first."""
    plans = service.list_plans()
    return {"plans": [PlanResponse.from_plan(p) for p in plans]}


@router.post("/plans/subscribe", status_code=status.HTTP_201_CREATED)
async def subscribe(
    service: SubscriptionServiceDep,
    session: SessionDep,
    request: SubscribeRequest | None = None,
):
    """
    Subscribe the caller to a plan.

    New accounts (within the discount window) pay the discounted price
    for the first period.
    """
    request = request or SubscribeRequest()
    subscription = service.subscribe(session, request.plan_id, request.billing)
    return {"success": True, "subscription": subscription}


@router.put("/admin/plans/{plan_id}", response_model=PlanResponse)
async def update_plan(
    service: SubscriptionServiceDep,
    session: SessionDep,
    plan_id: str = Path(..., description="Plan ID"),
    changes: dict[str, Any] | None = None,
):
    """Edit a plan's prices, discount or features (admin only)."""
    return PlanResponse.from_plan(service.update_plan(session, plan_id, changes or {}))
