"""Daily practice reminder settings.

Storage: user_state key notif_settings_v1, JSON {enabled, time, days}
with time as 24-hour "HH:MM" and days drawn from Mon..Sun.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal, get_args

import structlog

from yogashna.core.errors import BadRequestError
from yogashna.db.state_repository import delete_state, get_state, set_state

logger = structlog.get_logger(__name__)

NOTIFICATION_KEY = "notif_settings_v1"

Weekday = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
WEEKDAYS: tuple[str, ...] = get_args(Weekday)

DEFAULT_TIME = "09:00"
TIME_PATTERN = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


@dataclass
class NotificationSettings:
    """Reminder settings for one user."""

    enabled: bool = False
    time: str = DEFAULT_TIME
    days: list[str] = field(default_factory=lambda: list(WEEKDAYS))

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "time": self.time, "days": list(self.days)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotificationSettings:
        """Create from stored dictionary, keeping defaults for unusable values."""
        defaults = cls()
        time = data.get("time")
        days = data.get("days")
        return cls(
            enabled=bool(data.get("enabled", defaults.enabled)),
            time=time if isinstance(time, str) and is_valid_time(time) else defaults.time,
            days=normalize_days(days) if isinstance(days, list) else defaults.days,
        )


def default_notification_settings() -> NotificationSettings:
    return NotificationSettings()


def is_valid_time(value: str) -> bool:
    """True for a 24-hour HH:MM time."""
    return bool(TIME_PATTERN.fullmatch(value))


def normalize_days(days: list[Any]) -> list[str]:
    """Known weekdays from days, once each, in Mon..Sun order."""
    return [day for day in WEEKDAYS if day in days]


def get_notification_settings(user_id: str) -> NotificationSettings:
    """Stored settings, or the defaults when none are saved."""
    stored = get_state(user_id, NOTIFICATION_KEY)
    if not isinstance(stored, dict):
        return default_notification_settings()
    return NotificationSettings.from_dict(stored)


def save_notification_settings(
    user_id: str,
    settings: NotificationSettings,
) -> NotificationSettings:
    """Validate and store settings.

    Args:
        user_id: Internal user id
        settings: Settings to store

    Returns:
        The stored settings with days in Mon..Sun order

    Raises:
        BadRequestError: If time is not HH:MM or a day is not Mon..Sun
    """
    if not is_valid_time(settings.time):
        raise BadRequestError(f"time must be HH:MM, got {settings.time!r}")
    unknown = [day for day in settings.days if day not in WEEKDAYS]
    if unknown:
        raise BadRequestError(f"Unknown day(s): {', '.join(map(str, unknown))}")

    saved = NotificationSettings(
        enabled=settings.enabled,
        time=settings.time,
        days=normalize_days(settings.days),
    )
    set_state(user_id, NOTIFICATION_KEY, saved.to_dict())

    logger.info(
        "notification_settings.saved",
        user_id=user_id,
        enabled=saved.enabled,
        days=len(saved.days),
    )
    return saved


def clear_notification_settings(user_id: str) -> None:
    delete_state(user_id, NOTIFICATION_KEY)
