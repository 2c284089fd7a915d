"""Achievements module.

Counts each completed session once and unlocks badges from progress.

Storage:
- progress_completed_sessions_v1: serialized session identifiers
- progress_badges_v1: unlocked badges in unlock order
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Literal

import structlog

from yogashna.core.progress_tracking import (
    ProgressData,
    get_progress_data,
    record_practice_session,
    record_program_completion,
)
from yogashna.db.state_repository import get_state, set_state

logger = structlog.get_logger(__name__)

BADGES_KEY = "progress_badges_v1"
COMPLETED_SESSIONS_KEY = "progress_completed_sessions_v1"

BadgeType = Literal[
    "FIRST_SESSION",
    "3_DAY_STREAK",
    "7_DAY_STREAK",
    "14_DAY_STREAK",
    "21_DAY_STREAK",
    "FIRST_PROGRAM_COMPLETED",
    "10_SESSIONS",
    "25_SESSIONS",
    "50_SESSIONS",
]

# Evaluated in this order; dict order is the unlock order within one check
BADGE_RULES: dict[str, Callable[[ProgressData], bool]] = {
    "FIRST_SESSION": lambda p: p.total_sessions >= 1,
    "3_DAY_STREAK": lambda p: p.current_streak >= 3,
    "7_DAY_STREAK": lambda p: p.current_streak >= 7,
    "14_DAY_STREAK": lambda p: p.current_streak >= 14,
    "21_DAY_STREAK": lambda p: p.current_streak >= 21,
    "FIRST_PROGRAM_COMPLETED": lambda p: p.programs_completed >= 1,
    "10_SESSIONS": lambda p: p.total_sessions >= 10,
    "25_SESSIONS": lambda p: p.total_sessions >= 25,
    "50_SESSIONS": lambda p: p.total_sessions >= 50,
}

BADGE_METADATA: dict[str, tuple[str, str]] = {
    "FIRST_SESSION": ("First Light", "Completed your first yoga session"),
    "3_DAY_STREAK": ("3-Day Warrior", "Practiced for 3 consecutive days"),
    "7_DAY_STREAK": ("Week Champion", "Maintained a 7-day practice streak"),
    "14_DAY_STREAK": ("Fortnight Master", "14 days of dedicated practice"),
    "21_DAY_STREAK": ("Habit Builder", "21 days - a true yoga habit formed"),
    "FIRST_PROGRAM_COMPLETED": ("Program Graduate", "Completed your first full program"),
    "10_SESSIONS": ("Dedicated Practitioner", "Completed 10 yoga sessions"),
    "25_SESSIONS": ("Committed Yogi", "Completed 25 yoga sessions"),
    "50_SESSIONS": ("Yoga Devotee", "Completed 50 yoga sessions"),
}


@dataclass
class Badge:
    """An unlocked achievement."""

    type: BadgeType
    unlocked_at: str
    title: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "unlockedAt": self.unlocked_at,
            "title": self.title,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Badge:
        return cls(
            type=data["type"],
            unlocked_at=str(data.get("unlockedAt", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
        )


@dataclass
class SessionIdentifier:
    """Identifies one completed video within an optional program day."""

    video_id: str
    program_id: str | None = None
    day_id: str | None = None

    def serialize(self) -> str:
        return f"{self.program_id or 'none'}::{self.day_id or 'none'}::{self.video_id}"


@dataclass
class SessionCompletionResult:
    """Outcome of mark_session_completed."""

    recorded: bool
    progress: ProgressData
    new_badges: list[Badge]


def get_badges(user_id: str) -> list[Badge]:
    stored = get_state(user_id, BADGES_KEY)
    if not isinstance(stored, list):
        return []
    return [
        Badge.from_dict(b)
        for b in stored
        if isinstance(b, dict) and b.get("type") in BADGE_RULES
    ]


def _completed_sessions(user_id: str) -> list[str]:
    stored = get_state(user_id, COMPLETED_SESSIONS_KEY)
    if not isinstance(stored, list):
        return []
    return [str(s) for s in stored]


def is_session_completed(user_id: str, session_id: SessionIdentifier) -> bool:
    return session_id.serialize() in _completed_sessions(user_id)


def check_and_unlock_badges(user_id: str, progress: ProgressData) -> list[Badge]:
    """Unlock every badge whose rule now holds and that is not yet unlocked.

    Args:
        user_id: Internal user id
        progress: Current progress

    Returns:
        Newly unlocked badges
    """
    badges = get_badges(user_id)
    unlocked = {b.type for b in badges}
    timestamp = datetime.now(timezone.utc).isoformat()

    new_badges = []
    for badge_type, rule in BADGE_RULES.items():
        if badge_type in unlocked or not rule(progress):
            continue
        title, description = BADGE_METADATA[badge_type]
        new_badges.append(
            Badge(
                type=badge_type,  # type: ignore[arg-type]
                unlocked_at=timestamp,
                title=title,
                description=description,
            )
        )

    if new_badges:
        set_state(user_id, BADGES_KEY, [b.to_dict() for b in badges + new_badges])
        logger.info(
            "achievements.unlocked",
            user_id=user_id,
            badges=[b.type for b in new_badges],
        )

    return new_badges


def mark_session_completed(
    user_id: str,
    session_id: SessionIdentifier,
    duration_min: float,
    today: date | None = None,
) -> SessionCompletionResult:
    """Record a completed session once and unlock any earned badges.

    A session identifier that was already recorded is a no-op.

    Args:
        user_id: Internal user id
        session_id: Program/day/video identifying the session
        duration_min: Minutes practiced
        today: Day of the practice (defaults to the current UTC day)

    Returns:
        SessionCompletionResult
    """
    serialized = session_id.serialize()
    completed = _completed_sessions(user_id)

    if serialized in completed:
        logger.debug("achievements.session_already_recorded", user_id=user_id, session=serialized)
        return SessionCompletionResult(
            recorded=False,
            progress=get_progress_data(user_id, today),
            new_badges=[],
        )

    progress = record_practice_session(user_id, duration_min, 1, today)
    set_state(user_id, COMPLETED_SESSIONS_KEY, completed + [serialized])

    new_badges = check_and_unlock_badges(user_id, progress)
    return SessionCompletionResult(recorded=True, progress=progress, new_badges=new_badges)


def mark_program_completed(user_id: str, today: date | None = None) -> SessionCompletionResult:
    progress = record_program_completion(user_id, today)
    new_badges = check_and_unlock_badges(user_id, progress)
    return SessionCompletionResult(recorded=True, progress=progress, new_badges=new_badges)
