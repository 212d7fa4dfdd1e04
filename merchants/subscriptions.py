"""
Subscription window arithmetic and the plan gate.

Everything here is pure: callers pass `now` in and persist the result.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.choices import MerchantPlanChoices, SubscriptionStatusChoices
from core.constants import PREMIUM_REQUIRED_PLAN_COUNT, SUBSCRIPTION_PERIOD_DAYS
from core.exceptions import PlanGateError

SUBSCRIPTION_PERIOD = timedelta(days=SUBSCRIPTION_PERIOD_DAYS)


@dataclass(frozen=True)
class SubscriptionWindow:
    # `start` records the last renewal timestamp, not the window start
    start: datetime
    expiry: datetime


def initial_window(now: datetime) -> SubscriptionWindow:
    return SubscriptionWindow(start=now, expiry=now + SUBSCRIPTION_PERIOD)


def compute_renewal(now: datetime, current_expiry: Optional[datetime] = None) -> SubscriptionWindow:
    """
    Extend from the current expiry while it is still in the future,
    otherwise start a fresh period from `now`.

    Renewals stack: two calls in a row each add a full period.
    """
    if current_expiry is not None and current_expiry > now:
        return SubscriptionWindow(start=now, expiry=current_expiry + SUBSCRIPTION_PERIOD)
    return SubscriptionWindow(start=now, expiry=now + SUBSCRIPTION_PERIOD)


def effective_subscription_status(status: str, expiry: Optional[datetime], now: datetime) -> str:
    """
    Expiry is derived at read time; the stored status only records
    activation and cancellation. An active row without a window has
    never been approved.
    """
    if status == SubscriptionStatusChoices.ACTIVE:
        if expiry is None:
            return SubscriptionStatusChoices.INACTIVE
        if expiry < now:
            return SubscriptionStatusChoices.EXPIRED
    return status


def can_select_plan(existing_plan_count: int, requested_plan: str) -> bool:
    if existing_plan_count < 0:
        raise ValueError("existing_plan_count must be >= 0")
    if existing_plan_count >= PREMIUM_REQUIRED_PLAN_COUNT:
        return requested_plan == MerchantPlanChoices.PREMIUM
    return True


def ensure_plan_selectable(existing_plan_count: int, requested_plan: str) -> None:
    if not can_select_plan(existing_plan_count, requested_plan):
        raise PlanGateError(
            f"upgrade required: merchants with {PREMIUM_REQUIRED_PLAN_COUNT} or more "
            f"chit plans must select the {MerchantPlanChoices.PREMIUM.label} plan."
        )
