"""Subscription policy: what a user's plan unlocks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from yogashna.db.users_repository import count_active_enrollments as _count_active
from yogashna.db.users_repository import get_subscription

SubscriptionPlan = Literal["FREE", "PAID"]
SubscriptionSource = Literal["NONE", "APP_STORE", "PLAY_STORE", "WEB"]

FREE_UNLOCK_DAYS = 5
PAID_UNLOCK_DAYS = 21
FREE_MAX_ACTIVE_PROGRAMS = 1
PAID_MAX_ACTIVE_PROGRAMS = 5


@dataclass
class SubscriptionPolicy:
    """Limits derived from a user's subscription."""

    is_paid_active: bool
    tier: SubscriptionPlan
    free_unlock_days: int
    max_active_programs: int
    subscription_source: SubscriptionSource
    entitlement: str | None


def resolve_source(store: str | None) -> SubscriptionSource:
    """Map a free-form store name to a subscription source."""
    if not store:
        return "NONE"
    normalized = store.lower()
    if "app" in normalized:
        return "APP_STORE"
    if "play" in normalized:
        return "PLAY_STORE"
    if "web" in normalized:
        return "WEB"
    return "NONE"


def get_policy(user_id: str | None) -> SubscriptionPolicy:
    """Policy for a user; unknown users get the free plan.

    Args:
        user_id: Internal user id, or None when no user exists yet

    Returns:
        SubscriptionPolicy
    """
    tier: SubscriptionPlan = "FREE"
    is_paid_active = False
    entitlement = None
    source: SubscriptionSource = "NONE"

    subscription = get_subscription(user_id) if user_id else None
    if subscription is not None:
        source = resolve_source(subscription.store)
        if subscription.is_active and subscription.tier == "PAID":
            tier = "PAID"
            is_paid_active = True
            entitlement = subscription.entitlement

    paid = tier == "PAID"
    return SubscriptionPolicy(
        is_paid_active=is_paid_active,
        tier=tier,
        free_unlock_days=PAID_UNLOCK_DAYS if paid else FREE_UNLOCK_DAYS,
        max_active_programs=PAID_MAX_ACTIVE_PROGRAMS if paid else FREE_MAX_ACTIVE_PROGRAMS,
        subscription_source=source,
        entitlement=entitlement,
    )


def count_active_enrollments(user_id: str | None) -> int:
    if not user_id:
        return 0
    return _count_active(user_id)
