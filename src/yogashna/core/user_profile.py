"""User profile module (GET/PATCH /me).

Responsibilities:
- Get or create the user behind a verified identity
- Apply partial profile updates with unit conversion (ft/in, lbs)
- Track onboarding completion from the required fields
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

import structlog

from yogashna.db.users_repository import UserRecord, get_or_create_user, update_user
from yogashna.utils.numbers import round_half_up

logger = structlog.get_logger(__name__)

CM_PER_INCH = 2.54
KG_PER_LB = 0.453592

Gender = Literal["male", "female", "other", "prefer_not_to_say"]
REQUIRED_PREFERENCES = ("sessionLength", "preferredTime", "experienceLevel")


@dataclass
class HeightInput:
    """Height as entered: centimeters, or feet and inches."""

    unit: Literal["cm", "ft_in"]
    value_cm: int | None = None
    feet: int | None = None
    inches: int | None = None


@dataclass
class WeightInput:
    """Weight as entered: kilograms or pounds."""

    unit: Literal["kg", "lbs"]
    value_kg: int | None = None
    lbs: int | None = None


@dataclass
class ProfileUpdate:
    """Partial profile update; only fields listed in `provided` are applied."""

    name: str | None = None
    age: int | None = None
    gender: Gender | None = None
    height: HeightInput | None = None
    weight: WeightInput | None = None
    wellness_focus_id: str | None = None
    primary_goal_id: str | None = None
    preferences: dict[str, Any] | None = None
    provided: frozenset[str] = frozenset()


def convert_height(height: HeightInput | None) -> int | None:
    """Height in whole centimeters, or None when incomplete."""
    if height is None:
        return None
    if height.unit == "cm" and height.value_cm:
        return height.value_cm
    if height.unit == "ft_in" and height.feet is not None and height.inches is not None:
        total_inches = height.feet * 12 + height.inches
        return round_half_up(total_inches * CM_PER_INCH)
    return None


def convert_weight(weight: WeightInput | None) -> int | None:
    """Weight in whole kilograms, or None when incomplete."""
    if weight is None:
        return None
    if weight.unit == "kg" and weight.value_kg:
        return weight.value_kg
    if weight.unit == "lbs" and weight.lbs:
        return round_half_up(weight.lbs * KG_PER_LB)
    return None


def is_onboarding_complete(user: UserRecord) -> bool:
    """All of basic profile, focus/goal selections and preferences are set."""
    has_basic_profile = (
        bool(user.name)
        and user.age is not None
        and bool(user.gender)
        and user.height_cm is not None
        and user.weight_kg is not None
    )
    has_selections = bool(user.wellness_focus_id) and bool(user.primary_goal_id)
    preferences = user.preferences or {}
    has_preferences = all(preferences.get(key) for key in REQUIRED_PREFERENCES)

    return has_basic_profile and has_selections and has_preferences


def get_profile(firebase_uid: str, phone: str | None = None) -> UserRecord:
    """Get the user's profile, creating the user on first access."""
    return get_or_create_user(firebase_uid, phone)


def update_profile(
    firebase_uid: str,
    phone: str | None,
    update: ProfileUpdate,
) -> UserRecord:
    """Apply a partial update and recompute onboarding completion.

    The completion time is stamped on the first transition to complete.
    The flag is cleared again if required fields go missing.

    Args:
        firebase_uid: Identity of the caller
        phone: Phone claim, used when the user is created here
        update: Fields to change

    Returns:
        The updated UserRecord
    """
    user = get_or_create_user(firebase_uid, phone)

    fields: dict[str, Any] = {}
    for name in ("name", "age", "gender", "wellness_focus_id", "primary_goal_id", "preferences"):
        if name in update.provided:
            fields[name] = getattr(update, name)

    height_cm = convert_height(update.height)
    if height_cm is not None:
        fields["height_cm"] = height_cm
    weight_kg = convert_weight(update.weight)
    if weight_kg is not None:
        fields["weight_kg"] = weight_kg

    if fields:
        user = update_user(user.id, **fields)

    was_complete = user.is_onboarding_complete
    now_complete = is_onboarding_complete(user)

    if not was_complete and now_complete:
        user = update_user(
            user.id,
            is_onboarding_complete=True,
            onboarding_completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info("user_profile.onboarding_completed", user_id=user.id)
    elif was_complete and not now_complete:
        user = update_user(user.id, is_onboarding_complete=False)
        logger.info("user_profile.onboarding_reopened", user_id=user.id)

    logger.info("user_profile.updated", user_id=user.id, fields=sorted(fields))
    return user
