"""Practice preferences and today's personalized Abhyasa."""

from typing import Any

from fastapi import APIRouter, Depends, status

from yogashna.core.abhyasa_generator import generate_todays_abhyasa
from yogashna.core.practice_preferences import (
    clear_practice_preferences,
    format_focus_category,
    format_session_length,
    get_practice_preferences,
    merge_preferences_with_profile,
    save_practice_preferences,
)
from yogashna.db.users_repository import get_user_by_id
from yogashna.web.auth import get_current_user_id
from yogashna.web.schemas import PracticePreferencesUpdate

router = APIRouter(prefix="/me", tags=["practice"])


@router.get("/practice-preferences")
async def read_practice_preferences(
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Stored preferences, or the defaults."""
    return get_practice_preferences(user_id).to_dict()


@router.patch("/practice-preferences")
async def update_practice_preferences(
    request: PracticePreferencesUpdate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Merge the provided fields into the stored preferences."""
    updates = request.model_dump(exclude_unset=True)
    return save_practice_preferences(user_id, updates).to_dict()


@router.delete("/practice-preferences", status_code=status.HTTP_204_NO_CONTENT)
async def delete_practice_preferences(
    user_id: str = Depends(get_current_user_id),
) -> None:
    """Forget stored preferences."""
    clear_practice_preferences(user_id)


@router.get("/abhyasa/today")
async def read_todays_abhyasa(
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Warm-up, main practice and cool-down for today.

    The profile's focus and goal take precedence over stored preferences.
    """
    preferences = get_practice_preferences(user_id)
    user = get_user_by_id(user_id)
    if user is not None:
        preferences = merge_preferences_with_profile(
            preferences, user.wellness_focus_id, user.primary_goal_id
        )

    items = generate_todays_abhyasa(preferences)
    return {
        "preferences": preferences.to_dict(),
        "sessionLength": format_session_length(preferences.length),
        "focusCategory": format_focus_category(preferences.focus),
        "items": [item.to_dict() for item in items],
    }
