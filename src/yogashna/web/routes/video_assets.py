"""Video asset endpoints (playlist building blocks)."""

from typing import Any

from fastapi import APIRouter, Query

from yogashna.core.video_catalog import find_video_assets
from yogashna.web.params import parse_limit, parse_min_zero, parse_offset

router = APIRouter(prefix="/video-assets", tags=["video-assets"])


@router.get("")
async def list_video_assets(
    primary_category: str | None = Query(default=None, alias="primaryCategory"),
    goal: str | None = None,
    level: str | None = None,
    intensity: str | None = None,
    min_duration_sec: str | None = Query(default=None, alias="minDurationSec"),
    max_duration_sec: str | None = Query(default=None, alias="maxDurationSec"),
    status: str | None = None,
    take: str | None = None,
    skip: str | None = None,
) -> dict[str, Any]:
    """Filtered video assets with playback and thumbnail URLs."""
    return find_video_assets(
        primary_category=primary_category or None,
        goal=goal or None,
        level=level or None,
        intensity=intensity or None,
        min_duration_sec=parse_min_zero(min_duration_sec),
        max_duration_sec=parse_min_zero(max_duration_sec),
        status=status or "ACTIVE",
        take=parse_limit(take, 50, 100),
        skip=parse_offset(skip),
    )
