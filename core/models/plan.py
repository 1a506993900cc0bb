# =============================================================================
# core/models/plan.py - Subscription Plan Schemas
# =============================================================================
# Assets are only available through subscription plans. Each plan carries
# a monthly and a yearly price plus a first-period discount that applies
# to accounts created within the discount window.
#
# Pricing helpers are pure functions so they can be tested without a
# database.
# =============================================================================

from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lib.utils import add_months


class BillingCycle(str, Enum):
    """How often a subscription renews."""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"


class SubscriptionPlan(BaseModel):
    """
    Typed view of a row in `subscription_plans`.

    Prices come back from PostgREST as strings for numeric columns, so they
    are parsed into Decimal here.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: str
    description: str | None = None
    original_price_monthly: Decimal = Decimal("0")
    original_price_yearly: Decimal = Decimal("0")
    first_month_discount_percent: Decimal = Decimal("0")
    monthly_downloads: int | None = None
    features: list[str] = Field(default_factory=list)
    is_popular: bool = False

    @field_validator(
        "original_price_monthly",
        "original_price_yearly",
        "first_month_discount_percent",
        mode="before",
    )
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None or value == "" else value

    @field_validator("features", mode="before")
    @classmethod
    def _null_features(cls, value: Any) -> Any:
        return value or []

    @field_validator("is_popular", mode="before")
    @classmethod
    def _null_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SubscriptionPlan":
        return cls.model_validate(row)

    def original_price(self, billing: BillingCycle) -> Decimal:
        """List price for a billing cycle."""
        if billing == BillingCycle.YEARLY:
            return self.original_price_yearly
        return self.original_price_monthly


class PlanUpdate(BaseModel):
    """Admin edits to a plan."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    original_price_monthly: Decimal | None = Field(default=None, ge=0)
    original_price_yearly: Decimal | None = Field(default=None, ge=0)
    first_month_discount_percent: Decimal | None = Field(default=None, ge=0, le=100)
    monthly_downloads: int | None = Field(default=None, ge=0)
    features: list[str] | None = None
    is_popular: bool | None = None


class SubscriptionQuote(BaseModel):
    """Price and period computed for a new subscription."""
    plan_id: str
    billing: BillingCycle
    final_price: Decimal
    discount_applied: bool
    started_at: datetime
    ends_at: datetime


# =============================================================================
# Pricing Helpers
# =============================================================================

def is_within_discount_window(
    signed_up_at: datetime | None,
    now: datetime,
    window_hours: int = 48,
) -> bool:
    """
    Check whether an account is young enough for the first-period discount.

    Accounts with an unknown signup time never qualify.
    """
    if signed_up_at is None:
        return False
    return now - signed_up_at <= timedelta(hours=window_hours)


def calculate_final_price(original_price: Decimal, discount_percent: Decimal) -> Decimal:
    """
    Apply a percentage discount, rounded to cents.

    Example:
        calculate_final_price(Decimal("15"), Decimal("33"))  # Decimal("10.05")
    """
    discounted = Decimal(original_price) * (1 - Decimal(discount_percent) / 100)
    return discounted.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def billing_period_end(started_at: datetime, billing: BillingCycle) -> datetime:
    """End of the first billing period: one calendar month or year later."""
    if billing == BillingCycle.YEARLY:
        return add_months(started_at, 12)
    return add_months(started_at, 1)


def quote_subscription(
    plan: SubscriptionPlan,
    billing: BillingCycle,
    signed_up_at: datetime | None,
    now: datetime,
    window_hours: int = 48,
) -> SubscriptionQuote:
    """Work out what a new subscription costs and when its period ends."""
    original = plan.original_price(billing)
    discounted = is_within_discount_window(signed_up_at, now, window_hours)
    if discounted:
        final_price = calculate_final_price(original, plan.first_month_discount_percent)
    else:
        final_price = Decimal(original).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    return SubscriptionQuote(
        plan_id=plan.id,
        billing=billing,
        final_price=final_price,
        discount_applied=discounted,
        started_at=now,
        ends_at=billing_period_end(now, billing),
    )
