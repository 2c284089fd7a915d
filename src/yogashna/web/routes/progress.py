"""Progress, badges and mood check-in endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, status

from yogashna.core.achievements import (
    SessionCompletionResult,
    SessionIdentifier,
    get_badges,
    mark_program_completed,
    mark_session_completed,
)
from yogashna.core.mood_tracking import get_mood_stats, load_mood_history, save_mood_checkin
from yogashna.core.progress_tracking import (
    get_progress_data,
    get_weekly_activity,
    get_weekly_completion_percentage,
    get_weekly_sessions_target,
    reset_progress_data,
)
from yogashna.web.auth import get_current_user_id
from yogashna.web.schemas import MoodCheckinRequest, SessionCompleteRequest

router = APIRouter(prefix="/me", tags=["progress"])


def _completion_response(result: SessionCompletionResult) -> dict[str, Any]:
    return {
        "recorded": result.recorded,
        "progress": result.progress.to_dict(),
        "newBadges": [badge.to_dict() for badge in result.new_badges],
    }


# =============================================================================
# PROGRESS
# =============================================================================


@router.get("/progress")
async def read_progress(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    return get_progress_data(user_id).to_dict()


@router.get("/progress/weekly")
async def read_weekly_progress(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Last seven days of activity and progress towards the weekly target."""
    return {
        "activity": [day.to_dict() for day in get_weekly_activity(user_id)],
        "target": get_weekly_sessions_target(),
        "completionPercentage": get_weekly_completion_percentage(user_id),
    }


@router.post("/progress/sessions", status_code=status.HTTP_201_CREATED)
async def complete_session(
    request: SessionCompleteRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Record a completed session; repeats of the same session are ignored."""
    session_id = SessionIdentifier(
        video_id=request.video_id,
        program_id=request.program_id,
        day_id=request.day_id,
    )
    result = mark_session_completed(user_id, session_id, request.duration_min)
    return _completion_response(result)


@router.post("/progress/programs/complete", status_code=status.HTTP_201_CREATED)
async def complete_program(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    return _completion_response(mark_program_completed(user_id))


@router.delete("/progress", status_code=status.HTTP_204_NO_CONTENT)
async def delete_progress(user_id: str = Depends(get_current_user_id)) -> None:
    reset_progress_data(user_id)


@router.get("/badges")
async def list_badges(user_id: str = Depends(get_current_user_id)) -> list[dict[str, Any]]:
    return [badge.to_dict() for badge in get_badges(user_id)]


# =============================================================================
# MOOD
# =============================================================================


@router.post("/moods", status_code=status.HTTP_201_CREATED)
async def create_mood_checkin(
    request: MoodCheckinRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    entry = save_mood_checkin(
        user_id,
        request.mood,
        program_id=request.program_id,
        day_number=request.day_number,
    )
    return entry.to_dict()


@router.get("/moods")
async def list_mood_history(user_id: str = Depends(get_current_user_id)) -> list[dict[str, Any]]:
    """Mood check-ins, newest first."""
    return [entry.to_dict() for entry in load_mood_history(user_id)]


@router.get("/moods/stats")
async def read_mood_stats(
    days: int = 30,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    stats = get_mood_stats(user_id, days=days)
    return {
        "total": stats.total,
        "byMood": stats.by_mood,
        "mostCommon": stats.most_common,
    }
