"""Abhyasa cycle endpoints under /me/programs/{program_id}.

Day numbers arrive as path strings and are validated here so that a bad
value yields a 400 envelope rather than a schema error.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from yogashna.core.abhyasa_cycle import (
    cycle_to_dict,
    generate_cycle,
    generate_playlist,
    generate_playlist_range,
    get_cycle_summary,
    get_day,
    get_today,
    preview_playlist,
)
from yogashna.web.auth import AuthenticatedUser, get_current_user
from yogashna.web.params import parse_day_number, parse_flag
from yogashna.web.schemas import CycleResponse, PlaylistRangeRequest

router = APIRouter(prefix="/me/programs", tags=["abhyasa-cycle"])


@router.get("/{program_id}/abhyasa-cycle")
async def read_cycle(
    program_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Whether the caller has a cycle for the program."""
    return get_cycle_summary(user.uid, program_id)


@router.get("/{program_id}/abhyasa-cycle/days/{day_number}")
async def read_cycle_day(
    program_id: str,
    day_number: str,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """One day of the caller's cycle, possibly locked."""
    return get_day(user.uid, program_id, parse_day_number(day_number))


@router.get("/{program_id}/abhyasa-cycle/today")
async def read_cycle_today(
    program_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """The cycle day matching today's date."""
    return get_today(user.uid, program_id)


@router.post(
    "/{program_id}/abhyasa-cycles/generate",
    response_model=CycleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_cycle(
    program_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
) -> CycleResponse:
    """Create the caller's 21-day cycle, or return the existing one."""
    cycle = generate_cycle(user.uid, program_id)
    return CycleResponse.model_validate(cycle_to_dict(cycle))


@router.post(
    "/{program_id}/abhyasa-cycle/days/{day_number}/playlist/preview",
    status_code=status.HTTP_201_CREATED,
)
async def preview_day_playlist(
    program_id: str,
    day_number: str,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Select a playlist for a day without storing it."""
    return preview_playlist(user.uid, program_id, parse_day_number(day_number))


@router.post(
    "/{program_id}/abhyasa-cycle/days/{day_number}/playlist/generate",
    status_code=status.HTTP_201_CREATED,
)
async def generate_day_playlist(
    program_id: str,
    day_number: str,
    regenerate: str | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Store the playlist of a day (kept unless regenerate=true)."""
    return generate_playlist(
        user.uid,
        program_id,
        parse_day_number(day_number),
        regenerate=parse_flag(regenerate),
    )


@router.post(
    "/{program_id}/abhyasa-cycle/playlist/generate",
    status_code=status.HTTP_201_CREATED,
)
async def generate_range_playlists(
    program_id: str,
    request: PlaylistRangeRequest | None = Body(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Store playlists for a range of days."""
    request = request or PlaylistRangeRequest()
    return generate_playlist_range(
        user.uid,
        program_id,
        from_day=request.from_day,
        to_day=request.to_day,
        regenerate=request.regenerate,
    )
