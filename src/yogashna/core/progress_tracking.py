"""Progress tracking module.

Responsibilities:
- Daily practice streaks (current and longest)
- All-time totals of minutes, sessions and completed programs
- Per-day activity for the last 30 days and the 7-day weekly view

Storage: user_state key YOGA_PROGRESS_DATA, JSON with camelCase keys.
Dates are calendar days in YYYY-MM-DD form (UTC).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any

import structlog

from yogashna.db.state_repository import delete_state, get_state, set_state
from yogashna.utils.numbers import round_half_up

logger = structlog.get_logger(__name__)

PROGRESS_KEY = "YOGA_PROGRESS_DATA"

ACTIVITY_RETENTION_DAYS = 30
WEEKLY_SESSIONS_TARGET = 5
WEEK_DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class DailyActivity:
    """Practice done on one calendar day."""

    date: str
    minutes_practiced: float = 0
    sessions_completed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "minutesPracticed": self.minutes_practiced,
            "sessionsCompleted": self.sessions_completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DailyActivity:
        return cls(
            date=str(data.get("date", "")),
            minutes_practiced=data.get("minutesPracticed", 0) or 0,
            sessions_completed=int(data.get("sessionsCompleted", 0) or 0),
        )


@dataclass
class ProgressData:
    """Aggregated practice progress of a user."""

    current_streak: int = 0
    longest_streak: int = 0
    total_minutes: float = 0
    total_sessions: int = 0
    programs_completed: int = 0
    weekly_activity: list[DailyActivity] = field(default_factory=list)
    last_practice_date: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "totalMinutes": self.total_minutes,
            "totalSessions": self.total_sessions,
            "programsCompleted": self.programs_completed,
            "weeklyActivity": [a.to_dict() for a in self.weekly_activity],
            "lastPracticeDate": self.last_practice_date,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProgressData:
        """Create from stored dictionary."""
        activity = data.get("weeklyActivity") or []
        return cls(
            current_streak=int(data.get("currentStreak", 0) or 0),
            longest_streak=int(data.get("longestStreak", 0) or 0),
            total_minutes=data.get("totalMinutes", 0) or 0,
            total_sessions=int(data.get("totalSessions", 0) or 0),
            programs_completed=int(data.get("programsCompleted", 0) or 0),
            weekly_activity=[
                DailyActivity.from_dict(a) for a in activity if isinstance(a, dict)
            ],
            last_practice_date=str(data.get("lastPracticeDate") or ""),
            updated_at=str(data.get("updatedAt") or ""),
        )


# =============================================================================
# DATE HELPERS
# =============================================================================


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def days_between(first: str, second: str) -> int:
    """Whole days between two YYYY-MM-DD dates (0 if either is empty)."""
    if not first or not second:
        return 0
    try:
        d1 = date.fromisoformat(first[:10])
        d2 = date.fromisoformat(second[:10])
    except ValueError:
        return 0
    return abs((d2 - d1).days)


def get_week_day_label(date_str: str) -> str:
    """Short weekday label (Sun..Sat) of a YYYY-MM-DD date."""
    day = date.fromisoformat(date_str[:10])
    # date.weekday(): Monday is 0
    return WEEK_DAY_LABELS[(day.weekday() + 1) % 7]


# =============================================================================
# STORAGE
# =============================================================================


def _load(user_id: str) -> ProgressData | None:
    stored = get_state(user_id, PROGRESS_KEY)
    if not isinstance(stored, dict):
        return None
    return ProgressData.from_dict(stored)


def get_progress_data(user_id: str, today: date | None = None) -> ProgressData:
    """Get progress, with the streak reported as 0 once it has lapsed.

    Args:
        user_id: Internal user id
        today: Reference day (defaults to the current UTC day)

    Returns:
        ProgressData (defaults for users without progress)
    """
    data = _load(user_id)
    if data is None:
        return ProgressData(updated_at=_now_iso())

    today_str = (today or _today()).isoformat()
    if days_between(data.last_practice_date, today_str) > 1:
        data.current_streak = 0

    return data


def record_practice_session(
    user_id: str,
    duration_minutes: float,
    session_count: int = 1,
    today: date | None = None,
) -> ProgressData:
    """Record completed practice and update streaks, totals and activity.

    Args:
        user_id: Internal user id
        duration_minutes: Minutes practiced
        session_count: Sessions completed
        today: Day of the practice (defaults to the current UTC day)

    Returns:
        Updated ProgressData
    """
    day = today or _today()
    today_str = day.isoformat()
    current = get_progress_data(user_id, day)

    gap = days_between(current.last_practice_date, today_str)
    if not current.last_practice_date:
        new_streak = 1
    elif gap == 0:
        new_streak = current.current_streak
    elif gap == 1:
        new_streak = current.current_streak + 1
    else:
        new_streak = 1

    activity = list(current.weekly_activity)
    todays = next((a for a in activity if a.date == today_str), None)
    if todays is not None:
        todays.minutes_practiced += duration_minutes
        todays.sessions_completed += session_count
    else:
        activity.append(
            DailyActivity(
                date=today_str,
                minutes_practiced=duration_minutes,
                sessions_completed=session_count,
            )
        )

    cutoff = (day - timedelta(days=ACTIVITY_RETENTION_DAYS)).isoformat()
    activity = [a for a in activity if a.date >= cutoff]
    activity.sort(key=lambda a: a.date, reverse=True)

    updated = ProgressData(
        current_streak=new_streak,
        longest_streak=max(current.longest_streak, new_streak),
        total_minutes=current.total_minutes + duration_minutes,
        total_sessions=current.total_sessions + session_count,
        programs_completed=current.programs_completed,
        weekly_activity=activity,
        last_practice_date=today_str,
        updated_at=_now_iso(),
    )
    set_state(user_id, PROGRESS_KEY, updated.to_dict())

    logger.info(
        "progress.session_recorded",
        user_id=user_id,
        minutes=duration_minutes,
        streak=new_streak,
    )
    return updated


def record_program_completion(user_id: str, today: date | None = None) -> ProgressData:
    current = get_progress_data(user_id, today)
    current.programs_completed += 1
    current.updated_at = _now_iso()
    set_state(user_id, PROGRESS_KEY, current.to_dict())

    logger.info("progress.program_completed", user_id=user_id, total=current.programs_completed)
    return current


def get_weekly_activity(user_id: str, today: date | None = None) -> list[DailyActivity]:
    """Activity of today and the previous six days, oldest first.

    Days without practice are zero-filled.
    """
    day = today or _today()
    progress = get_progress_data(user_id, day)
    by_date = {a.date: a for a in progress.weekly_activity}

    result = []
    for offset in range(6, -1, -1):
        date_str = (day - timedelta(days=offset)).isoformat()
        activity = by_date.get(date_str)
        result.append(
            DailyActivity(
                date=date_str,
                minutes_practiced=activity.minutes_practiced if activity else 0,
                sessions_completed=activity.sessions_completed if activity else 0,
            )
        )
    return result


def get_weekly_sessions_target() -> int:
    return WEEKLY_SESSIONS_TARGET


def get_weekly_completion_percentage(user_id: str, today: date | None = None) -> int:
    """Sessions of the last 7 days as a percentage of the weekly target, capped at 100."""
    completed = sum(a.sessions_completed for a in get_weekly_activity(user_id, today))
    target = get_weekly_sessions_target()
    return min(100, round_half_up(completed / target * 100))


def reset_progress_data(user_id: str) -> None:
    delete_state(user_id, PROGRESS_KEY)
    logger.info("progress.reset", user_id=user_id)
