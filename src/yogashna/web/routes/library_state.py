"""Favorites, continue watching, safety acknowledgments and reminders."""

from typing import Any

from fastapi import APIRouter, Depends, status

from yogashna.core.continue_watching import (
    ContinueWatchingItem,
    clear_continue_watching,
    get_continue_watching,
    get_progress_percent,
    set_continue_watching,
    update_position,
)
from yogashna.core.errors import NotFoundError
from yogashna.core.favorites import is_favorite, list_favorites, toggle_favorite
from yogashna.core.notification_settings import (
    NotificationSettings,
    clear_notification_settings,
    get_notification_settings,
    save_notification_settings,
)
from yogashna.core.safety_ack import (
    clear_all_acknowledgments,
    has_safety_acknowledgment,
    save_safety_acknowledgment,
)
from yogashna.web.auth import get_current_user_id
from yogashna.web.schemas import (
    ContinueWatchingRequest,
    NotificationSettingsRequest,
    PositionUpdateRequest,
)

router = APIRouter(prefix="/me", tags=["library-state"])


def _continue_watching_response(item: ContinueWatchingItem | None) -> dict[str, Any]:
    return {
        "item": item.to_dict() if item is not None else None,
        "progressPercent": get_progress_percent(item),
    }


# =============================================================================
# FAVORITES
# =============================================================================


@router.get("/favorites")
async def read_favorites(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Favorite ids in the order they were added."""
    favorites = list_favorites(user_id)
    return {"data": favorites, "total": len(favorites)}


@router.get("/favorites/{item_id}")
async def read_favorite(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    return {"itemId": item_id, "isFavorite": is_favorite(user_id, item_id)}


@router.post("/favorites/{item_id}")
async def toggle_favorite_item(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Add the item if absent, otherwise remove it."""
    return {"itemId": item_id, "isFavorite": toggle_favorite(user_id, item_id)}


# =============================================================================
# CONTINUE WATCHING
# =============================================================================


@router.get("/continue-watching")
async def read_continue_watching(
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    return _continue_watching_response(get_continue_watching(user_id))


@router.put("/continue-watching")
async def replace_continue_watching(
    request: ContinueWatchingRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Start tracking a new video as the resume point."""
    item = set_continue_watching(
        user_id,
        ContinueWatchingItem(
            video_id=request.video_id,
            position_seconds=request.position_seconds,
            title=request.title,
            thumbnail_url=request.thumbnail_url,
            duration_seconds=request.duration_seconds,
            video_url=request.video_url,
        ),
    )
    return _continue_watching_response(item)


@router.patch("/continue-watching")
async def save_position(
    request: PositionUpdateRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Periodic position save from the player.

    Raises:
        NotFoundError: 404 when the resume point is for another video
    """
    item = update_position(user_id, request.video_id, request.position_seconds)
    if item is None:
        raise NotFoundError(f"No continue watching item for video {request.video_id}")
    return _continue_watching_response(item)


@router.delete("/continue-watching", status_code=status.HTTP_204_NO_CONTENT)
async def delete_continue_watching(user_id: str = Depends(get_current_user_id)) -> None:
    clear_continue_watching(user_id)


# =============================================================================
# SAFETY ACKNOWLEDGMENTS
# =============================================================================


@router.get("/safety-acks/{program_id}")
async def read_safety_ack(
    program_id: str,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Whether the program's safety note was acknowledged in the last 30 days."""
    return {
        "programId": program_id,
        "acknowledged": has_safety_acknowledgment(user_id, program_id),
    }


@router.post("/safety-acks/{program_id}", status_code=status.HTTP_201_CREATED)
async def acknowledge_safety(
    program_id: str,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    save_safety_acknowledgment(user_id, program_id)
    return {"programId": program_id, "acknowledged": True}


@router.delete("/safety-acks", status_code=status.HTTP_204_NO_CONTENT)
async def delete_safety_acks(user_id: str = Depends(get_current_user_id)) -> None:
    clear_all_acknowledgments(user_id)


# =============================================================================
# NOTIFICATION SETTINGS
# =============================================================================


@router.get("/notification-settings")
async def read_notification_settings(
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Reminder settings, or the defaults."""
    return get_notification_settings(user_id).to_dict()


@router.put("/notification-settings")
async def replace_notification_settings(
    request: NotificationSettingsRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    settings = NotificationSettings(
        enabled=request.enabled,
        time=request.time,
        days=list(request.days),
    )
    return save_notification_settings(user_id, settings).to_dict()


@router.delete("/notification-settings", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification_settings(user_id: str = Depends(get_current_user_id)) -> None:
    clear_notification_settings(user_id)
