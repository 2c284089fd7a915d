"""Session mood check-ins.

Storage: user_state key session_mood_v1, newest entry first, at most
MAX_ENTRIES entries.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Literal, get_args

import structlog

from yogashna.db.state_repository import get_state, set_state

logger = structlog.get_logger(__name__)

MOOD_KEY = "session_mood_v1"
MAX_ENTRIES = 100

MoodType = Literal["Relaxed", "Energized", "Neutral", "Tired"]
MOODS: tuple[str, ...] = get_args(MoodType)


@dataclass
class SessionMood:
    """One post-session mood check-in."""

    id: str
    mood: MoodType
    session_date: str
    timestamp: int
    program_id: str | None = None
    day_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "sessionDate": self.session_date,
            "mood": self.mood,
            "timestamp": self.timestamp,
        }
        if self.program_id is not None:
            result["programId"] = self.program_id
        if self.day_number is not None:
            result["dayNumber"] = self.day_number
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionMood:
        return cls(
            id=str(data.get("id", "")),
            mood=data["mood"],
            session_date=str(data.get("sessionDate", "")),
            timestamp=int(data.get("timestamp", 0)),
            program_id=data.get("programId"),
            day_number=data.get("dayNumber"),
        )


@dataclass
class MoodStats:
    total: int
    by_mood: dict[str, int]
    most_common: MoodType | None


def load_mood_history(user_id: str) -> list[SessionMood]:
    """All stored check-ins, newest first."""
    stored = get_state(user_id, MOOD_KEY)
    if not isinstance(stored, list):
        return []
    return [
        SessionMood.from_dict(entry)
        for entry in stored
        if isinstance(entry, dict) and entry.get("mood") in MOODS
    ]


def save_mood_checkin(
    user_id: str,
    mood: MoodType,
    program_id: str | None = None,
    day_number: int | None = None,
    now: datetime | None = None,
) -> SessionMood:
    """Prepend a mood check-in, trimming history to MAX_ENTRIES.

    Args:
        user_id: Internal user id
        mood: One of MOODS
        program_id: Program the session belonged to
        day_number: Program day of the session
        now: Check-in time (defaults to now, UTC)

    Returns:
        The stored SessionMood

    Raises:
        ValueError: If mood is not a known mood
    """
    if mood not in MOODS:
        raise ValueError(f"Unknown mood: {mood}")

    moment = now or datetime.now(timezone.utc)
    timestamp = int(moment.timestamp() * 1000)
    entry = SessionMood(
        id=f"{timestamp}-{uuid.uuid4().hex[:8]}",
        mood=mood,
        session_date=moment.date().isoformat(),
        timestamp=timestamp,
        program_id=program_id,
        day_number=day_number,
    )

    history = [entry] + load_mood_history(user_id)
    set_state(user_id, MOOD_KEY, [e.to_dict() for e in history[:MAX_ENTRIES]])

    logger.info("mood.checkin_saved", user_id=user_id, mood=mood)
    return entry


def get_mood_stats(user_id: str, days: int = 30, now: datetime | None = None) -> MoodStats:
    """Mood counts over the last `days` days.

    The most common mood is the one with the highest count; on ties the
    mood listed first in MOODS wins. None when there are no check-ins.
    """
    moment = now or datetime.now(timezone.utc)
    cutoff = int((moment - timedelta(days=days)).timestamp() * 1000)

    recent = [e for e in load_mood_history(user_id) if e.timestamp >= cutoff]
    by_mood = {mood: 0 for mood in MOODS}
    for entry in recent:
        by_mood[entry.mood] += 1

    most_common = None
    max_count = 0
    for mood in MOODS:
        if by_mood[mood] > max_count:
            max_count = by_mood[mood]
            most_common = mood

    return MoodStats(total=len(recent), by_mood=by_mood, most_common=most_common)  # type: ignore[arg-type]
