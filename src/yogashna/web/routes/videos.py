"""Catalog video endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from yogashna.core.video_catalog import DEFAULT_LANGUAGE, find_video, find_videos
from yogashna.web.auth import AuthenticatedUser, get_current_user
from yogashna.web.params import parse_id_list, parse_limit, parse_offset

router = APIRouter(prefix="/videos", tags=["videos"])

MAX_LIMIT = 50
DEFAULT_LIMIT = 20


@router.get("")
async def list_videos(
    limit: str | None = None,
    offset: str | None = None,
    primary_category: str | None = Query(default=None, alias="primaryCategory"),
    access_level: str | None = Query(default=None, alias="accessLevel"),
    tag_ids: str | None = Query(default=None, alias="tagIds"),
    status: str | None = None,
    lang: str | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Page of catalog videos with translated labels."""
    return find_videos(
        limit=parse_limit(limit, DEFAULT_LIMIT, MAX_LIMIT),
        offset=parse_offset(offset),
        primary_category=primary_category or None,
        access_level=access_level or None,
        tag_ids=parse_id_list(tag_ids),
        status=status or "ACTIVE",
        lang=lang or DEFAULT_LANGUAGE,
    )


@router.get("/{video_id}")
async def get_video(
    video_id: str,
    status: str | None = None,
    lang: str | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """One catalog video; 404 when missing or not in the requested status."""
    return find_video(video_id, status=status or "ACTIVE", lang=lang or DEFAULT_LANGUAGE)
