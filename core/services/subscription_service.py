# =============================================================================
# core/services/subscription_service.py - Plans and Subscriptions
# =============================================================================
# Lists plans, prices new subscriptions and lets admins edit plans.
# Pricing rules live in core/models/plan.py.
# =============================================================================

import logging
from typing import Any

from pydantic import ValidationError

from app.auth.models import AuthSession
from app.config import settings
from app.exceptions import (
    DependencyFailureError,
    InputValidationError,
    PlanNotFoundError,
    UnauthenticatedError,
)
from core.models.plan import (
    BillingCycle,
    PlanUpdate,
    SubscriptionPlan,
    SubscriptionStatus,
    quote_subscription,
)
from core.services.authorization import AuthorizationGuard
from lib.supabase_client import IdentityDirectory, RowStore, RowStoreError, SupabaseClientError
from lib.utils import utc_now

logger = logging.getLogger(__name__)

PLANS_TABLE = "subscription_plans"
SUBSCRIPTIONS_TABLE = "subscriptions"


class SubscriptionService:
    """Subscription plans and new subscriptions."""

    def __init__(
        self,
        store: RowStore,
        guard: AuthorizationGuard,
        identities: IdentityDirectory,
        discount_window_hours: int | None = None,
    ):
        self.store = store
        self.guard = guard
        self.identities = identities
        self.discount_window_hours = (
            discount_window_hours
            if discount_window_hours is not None
            else settings.FIRST_MONTH_DISCOUNT_WINDOW_HOURS
        )

    def list_plans(self) -> list[SubscriptionPlan]:
        """All plans, cheapest first."""
        try:
            rows = self.store.select(PLANS_TABLE, order_by="original_price_monthly")
        except RowStoreError as e:
            raise DependencyFailureError("Failed to fetch plans", error=str(e))
        return [SubscriptionPlan.from_row(row) for row in rows]

    def get_plan(self, plan_id: str) -> SubscriptionPlan:
        try:
            row = self.store.select_one(PLANS_TABLE, filters={"id": plan_id})
        except RowStoreError as e:
            raise DependencyFailureError("Failed to fetch plan", error=str(e))
        if row is None:
            raise PlanNotFoundError(plan_id)
        return SubscriptionPlan.from_row(row)

    def subscribe(self, session: AuthSession | None, plan_id: Any, billing: Any) -> dict[str, Any]:
        """
        Start a subscription for the caller.

        Accounts created within the discount window pay the discounted
        first-period price.

        Returns:
            The inserted subscription row plus `final_price` and
            `discount_applied`

        Raises:
            UnauthenticatedError: No session
            InputValidationError: Missing plan id or unknown billing cycle
            PlanNotFoundError: No such plan
        """
        if session is None:
            raise UnauthenticatedError()
        if not isinstance(plan_id, str) or not plan_id.strip():
            raise InputValidationError("Plan ID and billing cycle required")
        try:
            cycle = BillingCycle(billing)
        except ValueError:
            raise InputValidationError(
                "Invalid billing cycle",
                details={"allowed": [c.value for c in BillingCycle]},
            )

        plan = self.get_plan(plan_id.strip())

        signed_up_at = None
        try:
            signed_up_at = self.identities.get_created_at(session.user_id)
        except (SupabaseClientError, ValueError) as e:
            # No discount rather than no subscription
            logger.warning(f"Could not read signup time of {session.user_id}: {e}")

        quote = quote_subscription(
            plan,
            cycle,
            signed_up_at=signed_up_at,
            now=utc_now(),
            window_hours=self.discount_window_hours,
        )

        try:
            row = self.store.insert(SUBSCRIPTIONS_TABLE, {
                "user_id": session.user_id,
                "plan_id": plan.id,
                "billing_cycle": cycle.value,
                "status": SubscriptionStatus.ACTIVE.value,
                "started_at": quote.started_at.isoformat(),
                "ends_at": quote.ends_at.isoformat(),
            })
        except RowStoreError as e:
            logger.error(f"Failed to create subscription for {session.user_id}: {e}")
            raise DependencyFailureError("Failed to create subscription", error=str(e))

        logger.info(
            f"User {session.user_id} subscribed to {plan.id} ({cycle.value}) "
            f"at {quote.final_price} discount={quote.discount_applied}"
        )
        return {
            **row,
            "final_price": float(quote.final_price),
            "discount_applied": quote.discount_applied,
        }

    def update_plan(
        self,
        session: AuthSession | None,
        plan_id: str,
        changes: dict[str, Any] | PlanUpdate,
    ) -> SubscriptionPlan:
        """
        Edit a plan (admin only).

        Raises:
            InputValidationError: Unknown field, out-of-range value, or nothing to change
            PlanNotFoundError: No such plan
        """
        self.guard.require_admin(session)
        try:
            update = changes if isinstance(changes, PlanUpdate) else PlanUpdate.model_validate(changes)
        except ValidationError as e:
            raise InputValidationError(
                "Invalid plan update",
                details={"errors": [err["msg"] for err in e.errors()]},
            )

        values = update.model_dump(mode="json", exclude_unset=True)
        if not values:
            raise InputValidationError("No fields to update")

        try:
            rows = self.store.update(PLANS_TABLE, values, filters={"id": plan_id})
        except RowStoreError as e:
            logger.error(f"Failed to update plan {plan_id}: {e}")
            raise DependencyFailureError("Failed to update plan", error=str(e))
        if not rows:
            raise PlanNotFoundError(plan_id)

        logger.info(f"Plan {plan_id} updated by {session.user_id}: {sorted(values)}")
        return SubscriptionPlan.from_row(rows[0])
