"""Practice preferences module.

Responsibilities:
- Store and read the user's Abhyasa preferences (focus, goals, level,
  session length, best time)
- Fall back to defaults before onboarding is complete
- Merge the server profile's focus/goal codes into the stored preferences

Storage: user_state key YOGA_PRACTICE_PREFERENCES, JSON with camelCase keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, get_args

import structlog

from yogashna.config.wellness_tags import get_wellness_focus_label, get_wellness_goal_label
from yogashna.db.state_repository import delete_state, get_state, set_state

logger = structlog.get_logger(__name__)

PREFERENCES_KEY = "YOGA_PRACTICE_PREFERENCES"

WellnessFocus = Literal[
    "Health Support",
    "Lifestyle & Habits",
    "Fitness & Flexibility",
    "Beginners & Mindfulness",
    "Office Yoga",
]
PracticeLevel = Literal["Beginner", "Intermediate", "Expert"]
SessionLength = Literal["Quick", "Balanced", "Deep"]
BestTime = Literal["Morning", "Evening", "Anytime"]

WELLNESS_FOCUSES: tuple[str, ...] = get_args(WellnessFocus)
PRACTICE_LEVELS: tuple[str, ...] = get_args(PracticeLevel)
SESSION_LENGTHS: tuple[str, ...] = get_args(SessionLength)
BEST_TIMES: tuple[str, ...] = get_args(BestTime)

SESSION_LENGTH_MINUTES = {"Quick": 10, "Balanced": 20, "Deep": 30}
DEFAULT_SESSION_MINUTES = 20


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PracticePreferences:
    """User's Abhyasa preferences."""

    focus: WellnessFocus | None = "Health Support"
    goals: list[str] = field(default_factory=lambda: ["Back Pain Relief"])
    level: PracticeLevel | None = "Beginner"
    length: SessionLength | None = "Balanced"
    time: BestTime | None = "Morning"
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "focus": self.focus,
            "goals": list(self.goals),
            "level": self.level,
            "length": self.length,
            "time": self.time,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PracticePreferences:
        """Create from stored dictionary, keeping defaults for missing keys."""
        defaults = cls()
        goals = data.get("goals", defaults.goals)
        return cls(
            focus=_pick(data, "focus", WELLNESS_FOCUSES, defaults.focus),
            goals=[str(g) for g in goals] if isinstance(goals, list) else defaults.goals,
            level=_pick(data, "level", PRACTICE_LEVELS, defaults.level),
            length=_pick(data, "length", SESSION_LENGTHS, defaults.length),
            time=_pick(data, "time", BEST_TIMES, defaults.time),
            updated_at=str(data.get("updatedAt") or ""),
        )


def _pick(data: dict[str, Any], key: str, allowed: tuple[str, ...], default: Any) -> Any:
    if key not in data:
        return default
    value = data[key]
    if value is None or value in allowed:
        return value
    return default


def default_preferences() -> PracticePreferences:
    """Preferences used for new users or before onboarding completes."""
    return PracticePreferences(updated_at=_now_iso())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# STORAGE
# =============================================================================


def get_practice_preferences(user_id: str) -> PracticePreferences:
    """Get stored preferences, or defaults when none are saved.

    Args:
        user_id: Internal user id

    Returns:
        PracticePreferences
    """
    stored = get_state(user_id, PREFERENCES_KEY)
    if not isinstance(stored, dict):
        return default_preferences()
    return PracticePreferences.from_dict(stored)


def save_practice_preferences(user_id: str, updates: dict[str, Any]) -> PracticePreferences:
    """Merge a partial update into the stored preferences.

    Args:
        user_id: Internal user id
        updates: Subset of focus/goals/level/length/time

    Returns:
        The saved preferences, stamped with a new updated_at
    """
    current = get_practice_preferences(user_id).to_dict()
    merged = {**current, **{k: v for k, v in updates.items() if k != "updatedAt"}}
    merged["updatedAt"] = _now_iso()

    preferences = PracticePreferences.from_dict(merged)
    set_state(user_id, PREFERENCES_KEY, preferences.to_dict())

    logger.info("practice_preferences.saved", user_id=user_id, fields=sorted(updates))
    return preferences


def clear_practice_preferences(user_id: str) -> None:
    delete_state(user_id, PREFERENCES_KEY)
    logger.info("practice_preferences.cleared", user_id=user_id)


# =============================================================================
# HELPERS
# =============================================================================


def get_session_length_minutes(length: str | None) -> int:
    """Session length in minutes (Quick 10, Balanced 20, Deep 30, else 20)."""
    return SESSION_LENGTH_MINUTES.get(length or "", DEFAULT_SESSION_MINUTES)


def format_session_length(length: str | None) -> str:
    return f"{get_session_length_minutes(length)} min"


def format_focus_category(focus: str | None) -> str:
    return focus or "General Wellness"


def merge_preferences_with_profile(
    preferences: PracticePreferences,
    wellness_focus_id: str | None,
    primary_goal_id: str | None,
) -> PracticePreferences:
    """Overlay the profile's focus and goal onto stored preferences.

    A known focus code replaces the focus; an unknown one keeps it. A
    known goal code replaces the goals with that single goal.

    Args:
        preferences: Stored preferences
        wellness_focus_id: Focus tag code from the user profile
        primary_goal_id: Goal tag code from the user profile

    Returns:
        New PracticePreferences (input is not modified)
    """
    focus_label = get_wellness_focus_label(wellness_focus_id) if wellness_focus_id else None
    goal_label = get_wellness_goal_label(primary_goal_id) if primary_goal_id else None

    return PracticePreferences(
        focus=focus_label or preferences.focus,  # type: ignore[arg-type]
        goals=[goal_label] if goal_label else list(preferences.goals),
        level=preferences.level,
        length=preferences.length,
        time=preferences.time,
        updated_at=preferences.updated_at,
    )
