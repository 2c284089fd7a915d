"""Program template endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from yogashna.core.program_library import preview_library_day
from yogashna.core.video_catalog import (
    DEFAULT_LANGUAGE,
    find_program_template,
    find_program_templates,
)
from yogashna.web.auth import AuthenticatedUser, get_current_user
from yogashna.web.params import parse_day_number, parse_id_list, parse_limit, parse_offset

router = APIRouter(prefix="/program-templates", tags=["program-templates"])


@router.get("")
async def list_program_templates(
    limit: str | None = None,
    offset: str | None = None,
    access_level: str | None = Query(default=None, alias="accessLevel"),
    tag_ids: str | None = Query(default=None, alias="tagIds"),
    status: str | None = None,
    lang: str | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Page of program templates."""
    return find_program_templates(
        limit=parse_limit(limit, 20, 50),
        offset=parse_offset(offset),
        access_level=access_level or None,
        tag_ids=parse_id_list(tag_ids),
        status=status or "ACTIVE",
        lang=lang or DEFAULT_LANGUAGE,
    )


@router.get("/{template_id}")
async def get_program_template(
    template_id: str,
    status: str | None = None,
    lang: str | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Program template with sections, days and day videos."""
    return find_program_template(
        template_id, status=status or "ACTIVE", lang=lang or DEFAULT_LANGUAGE
    )


@router.get("/{template_id}/library-playlist/days/{day_number}")
async def get_library_playlist_day(
    template_id: str,
    day_number: str,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Preview of a library day built from the active asset pool."""
    return preview_library_day(template_id, parse_day_number(day_number))
