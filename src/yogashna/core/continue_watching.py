"""Continue-watching state (single resume point per user).

Storage: user_state key continue_watching_v1. The player saves the
position periodically; the last write wins.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from yogashna.db.state_repository import delete_state, get_state, set_state
from yogashna.utils.numbers import round_half_up

logger = structlog.get_logger(__name__)

CONTINUE_WATCHING_KEY = "continue_watching_v1"


@dataclass
class ContinueWatchingItem:
    """Where the user left off in a video."""

    video_id: str
    position_seconds: float = 0
    title: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: float | None = None
    video_url: str | None = None
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "videoId": self.video_id,
            "title": self.title,
            "thumbnailUrl": self.thumbnail_url,
            "durationSeconds": self.duration_seconds,
            "positionSeconds": self.position_seconds,
            "updatedAt": self.updated_at,
            "videoUrl": self.video_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContinueWatchingItem:
        return cls(
            video_id=str(data["videoId"]),
            position_seconds=data.get("positionSeconds", 0) or 0,
            title=data.get("title"),
            thumbnail_url=data.get("thumbnailUrl"),
            duration_seconds=data.get("durationSeconds"),
            video_url=data.get("videoUrl"),
            updated_at=str(data.get("updatedAt") or ""),
        )


def safe_position(position_seconds: float | None) -> float:
    """Clamp a playback position to >= 0; non-finite values become 0."""
    if position_seconds is None or not math.isfinite(position_seconds):
        return 0
    return max(0, position_seconds)


def get_continue_watching(user_id: str) -> ContinueWatchingItem | None:
    stored = get_state(user_id, CONTINUE_WATCHING_KEY)
    if not isinstance(stored, dict) or "videoId" not in stored:
        return None
    return ContinueWatchingItem.from_dict(stored)


def set_continue_watching(user_id: str, item: ContinueWatchingItem) -> ContinueWatchingItem:
    """Replace the resume point with a new item."""
    item.position_seconds = safe_position(item.position_seconds)
    item.updated_at = datetime.now(timezone.utc).isoformat()
    set_state(user_id, CONTINUE_WATCHING_KEY, item.to_dict())

    logger.debug("continue_watching.set", user_id=user_id, video_id=item.video_id)
    return item


def update_position(
    user_id: str,
    video_id: str,
    position_seconds: float,
) -> ContinueWatchingItem | None:
    """Move the resume position, only when it refers to the same video.

    Returns:
        The updated item, or None when there is no item for that video
    """
    current = get_continue_watching(user_id)
    if current is None or current.video_id != video_id:
        return None

    current.position_seconds = safe_position(position_seconds)
    current.updated_at = datetime.now(timezone.utc).isoformat()
    set_state(user_id, CONTINUE_WATCHING_KEY, current.to_dict())
    return current


def clear_continue_watching(user_id: str) -> None:
    delete_state(user_id, CONTINUE_WATCHING_KEY)


def get_progress_percent(item: ContinueWatchingItem | None) -> int:
    """Watched share of the video in whole percent, 0..100."""
    if item is None or not item.duration_seconds or item.duration_seconds <= 0:
        return 0
    raw = item.position_seconds / item.duration_seconds * 100
    if not math.isfinite(raw):
        return 0
    return max(0, min(100, round_half_up(raw)))
