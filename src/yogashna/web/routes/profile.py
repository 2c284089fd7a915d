"""User profile endpoints (GET/PATCH /me)."""

from fastapi import APIRouter, Depends

from yogashna.core.user_profile import (
    HeightInput,
    ProfileUpdate,
    WeightInput,
    get_profile,
    update_profile,
)
from yogashna.db.users_repository import UserRecord
from yogashna.web.auth import AuthenticatedUser, get_current_user
from yogashna.web.schemas import (
    OnboardingStatus,
    ProfileDetails,
    ProfileResponse,
    ProfileUpdateRequest,
)

router = APIRouter(prefix="/me", tags=["profile"])


def _profile_response(user: UserRecord) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        firebase_uid=user.firebase_uid,
        phone_number=user.phone,
        profile=ProfileDetails(
            name=user.name,
            age=user.age,
            gender=user.gender,
            height_cm=user.height_cm,
            weight_kg=user.weight_kg,
        ),
        wellness_focus_id=user.wellness_focus_id,
        primary_goal_id=user.primary_goal_id,
        preferences=user.preferences,
        onboarding=OnboardingStatus(
            is_complete=user.is_onboarding_complete,
            completed_at=user.onboarding_completed_at,
        ),
    )


def _to_profile_update(request: ProfileUpdateRequest) -> ProfileUpdate:
    height = None
    if request.height is not None:
        height = HeightInput(
            unit=request.height.unit,
            value_cm=request.height.value_cm,
            feet=request.height.feet,
            inches=request.height.inches,
        )

    weight = None
    if request.weight is not None:
        weight = WeightInput(
            unit=request.weight.unit,
            value_kg=request.weight.value_kg,
            lbs=request.weight.lbs,
        )

    preferences = None
    if request.preferences is not None:
        preferences = request.preferences.model_dump(by_alias=True, exclude_unset=True)

    return ProfileUpdate(
        name=request.name,
        age=request.age,
        gender=request.gender,
        height=height,
        weight=weight,
        wellness_focus_id=request.wellness_focus_id,
        primary_goal_id=request.primary_goal_id,
        preferences=preferences,
        provided=frozenset(request.model_fields_set),
    )


@router.get("", response_model=ProfileResponse, response_model_by_alias=True)
async def read_profile(
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProfileResponse:
    """Get the caller's profile, creating it on first access."""
    record = get_profile(user.uid, user.phone_number)
    return _profile_response(record)


@router.patch("", response_model=ProfileResponse, response_model_by_alias=True)
async def patch_profile(
    request: ProfileUpdateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProfileResponse:
    """Partially update the caller's profile and onboarding state."""
    record = update_profile(user.uid, user.phone_number, _to_profile_update(request))
    return _profile_response(record)
