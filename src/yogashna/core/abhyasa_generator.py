"""Abhyasa generator module.

Builds today's personalized practice from the user's preferences as a
three-part sequence: warm-up, main practice, cool-down.

Durations come from the session length (10/20/30 minutes): warm-up gets
20%, main practice 60% (both rounded down) and cool-down the remainder.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from yogashna.core.practice_preferences import PracticePreferences, get_session_length_minutes

logger = structlog.get_logger(__name__)

SequenceType = Literal["warmup", "main", "cooldown"]

_SAMPLE_BASE = "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample"
WARMUP_VIDEO_URL = f"{_SAMPLE_BASE}/BigBuckBunny.mp4"
MAIN_VIDEO_URL = f"{_SAMPLE_BASE}/ElephantsDream.mp4"
COOLDOWN_VIDEO_URL = f"{_SAMPLE_BASE}/ForBiggerBlazes.mp4"
FALLBACK_VIDEO_URL = WARMUP_VIDEO_URL

DEFAULT_GOAL = "General Wellness"

# Checked in order against the lowercased primary goal
_GOAL_TITLES = [
    ("back", "Spine Care Flow"),
    ("stress", "Calming Stress Relief Flow"),
    ("sleep", "Evening Unwind Flow"),
    ("flexibility", "Deep Stretch Flow"),
    ("strength", "Strengthening Flow"),
]

_FOCUS_TITLES = {
    "Health Support": "Therapeutic Healing Flow",
    "Lifestyle & Habits": "Daily Wellness Flow",
    "Fitness & Flexibility": "Dynamic Flexibility Flow",
    "Beginners & Mindfulness": "Mindful Beginner Flow",
    "Office Yoga": "Desk Relief Flow",
}

_FOCUS_SANSKRIT = {
    "Health Support": "Cikitsā Yoga",
    "Lifestyle & Habits": "Dina Abhyāsa",
    "Fitness & Flexibility": "Śakti Vikāsa",
    "Beginners & Mindfulness": "Sthira Sukham",
    "Office Yoga": "Kāryālaya Yoga",
}

_GOAL_TAGS = [
    ("back", ["Back Care", "Spinal Health"]),
    ("stress", ["Stress Relief", "Calming"]),
    ("sleep", ["Sleep Support", "Relaxation"]),
    ("flexibility", ["Flexibility", "Deep Stretch"]),
]

_FOCUS_TAGS = {
    "Health Support": ["Therapeutic", "Gentle"],
    "Fitness & Flexibility": ["Strength Building", "Flexibility"],
    "Office Yoga": ["Desk Relief", "Posture Correction"],
}

MAX_MAIN_TAGS = 3


@dataclass
class AbhyasaPlaylistItem:
    """One session of today's Abhyasa."""

    id: str
    title: str
    sanskrit_title: str
    duration_min: int
    style: str
    focus_tags: list[str] = field(default_factory=list)
    video_url: str = ""
    sequence_type: SequenceType = "main"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "sanskritTitle": self.sanskrit_title,
            "durationMin": self.duration_min,
            "style": self.style,
            "focusTags": list(self.focus_tags),
            "videoUrl": self.video_url,
            "sequenceType": self.sequence_type,
        }


def generate_todays_abhyasa(
    preferences: PracticePreferences,
    now_ms: int | None = None,
) -> list[AbhyasaPlaylistItem]:
    """Generate today's warm-up, main practice and cool-down.

    Args:
        preferences: User practice preferences
        now_ms: Epoch milliseconds used in item ids (defaults to now)

    Returns:
        Three AbhyasaPlaylistItem in sequence order
    """
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)

    total_minutes = get_session_length_minutes(preferences.length)
    warmup_min = math.floor(total_minutes * 0.2)
    main_min = math.floor(total_minutes * 0.6)
    cooldown_min = total_minutes - warmup_min - main_min

    primary_goal = preferences.goals[0] if preferences.goals else DEFAULT_GOAL

    sessions = [
        AbhyasaPlaylistItem(
            id=f"abhyasa-warmup-{stamp}",
            title=get_warmup_title(preferences.time),
            sanskrit_title="Sūkṣma Vyāyāma",
            duration_min=warmup_min,
            style="Hatha",
            focus_tags=["Gentle Movement", "Joint Mobility", "Breath Awareness"],
            video_url=WARMUP_VIDEO_URL,
            sequence_type="warmup",
        ),
        AbhyasaPlaylistItem(
            id=f"abhyasa-main-{stamp}",
            title=get_main_practice_title(preferences.focus, primary_goal),
            sanskrit_title=_FOCUS_SANSKRIT.get(preferences.focus or "", "Yoga Sādhana"),
            duration_min=main_min,
            style=get_main_practice_style(preferences.level),
            focus_tags=get_main_practice_tags(preferences.focus, primary_goal),
            video_url=MAIN_VIDEO_URL,
            sequence_type="main",
        ),
        AbhyasaPlaylistItem(
            id=f"abhyasa-cooldown-{stamp}",
            title="Restorative Wind-Down",
            sanskrit_title="Śavāsana Prāṇāyāma",
            duration_min=cooldown_min,
            style="Restorative",
            focus_tags=["Deep Relaxation", "Breath Work", "Stillness"],
            video_url=COOLDOWN_VIDEO_URL,
            sequence_type="cooldown",
        ),
    ]

    for session in sessions:
        session.video_url = ensure_valid_video_url(session.video_url)

    logger.debug(
        "abhyasa.generated",
        total_minutes=total_minutes,
        focus=preferences.focus,
        primary_goal=primary_goal,
    )
    return sessions


def ensure_valid_video_url(url: str | None) -> str:
    trimmed = (url or "").strip()
    return trimmed or FALLBACK_VIDEO_URL


def get_warmup_title(best_time: str | None) -> str:
    if best_time == "Morning":
        return "Awakening Sun Warm-Up"
    if best_time == "Evening":
        return "Gentle Evening Warm-Up"
    return "Mindful Body Warm-Up"


def get_main_practice_title(focus: str | None, goal: str) -> str:
    """Title from the goal keyword, else from the focus."""
    lowered = goal.lower()
    for keyword, title in _GOAL_TITLES:
        if keyword in lowered:
            return title
    return _FOCUS_TITLES.get(focus or "", "Balanced Yoga Flow")


def get_main_practice_style(level: str | None) -> str:
    if level in ("Intermediate", "Expert"):
        return "Vinyasa"
    return "Hatha"


def get_main_practice_tags(focus: str | None, goal: str) -> list[str]:
    """Goal tags, then focus tags, always with Breath Awareness; at most three."""
    lowered = goal.lower()
    tags: list[str] = []
    for keyword, goal_tags in _GOAL_TAGS:
        if keyword in lowered:
            tags.extend(goal_tags)

    tags.extend(_FOCUS_TAGS.get(focus or "", ["Balanced Practice"]))

    if "Breath Awareness" not in tags:
        tags.append("Breath Awareness")

    return tags[:MAX_MAIN_TAGS]
