"""Pydantic schemas for the Web API.

Request bodies and response models. Field names are snake_case in Python
and camelCase on the wire.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from yogashna.core.notification_settings import (
    DEFAULT_TIME,
    WEEKDAYS,
    Weekday,
    is_valid_time,
)
from yogashna.core.practice_preferences import (
    BestTime,
    PracticeLevel,
    SessionLength,
    WellnessFocus,
)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictCamelModel(CamelModel):
    """CamelModel that rejects unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str


# =============================================================================
# PROFILE SCHEMAS
# =============================================================================


class HeightRequest(StrictCamelModel):
    unit: Literal["cm", "ft_in"]
    value_cm: int | None = Field(default=None, ge=120, le=220)
    feet: int | None = Field(default=None, ge=3, le=8)
    inches: int | None = Field(default=None, ge=0, le=11)


class WeightRequest(StrictCamelModel):
    unit: Literal["kg", "lbs"]
    value_kg: int | None = Field(default=None, ge=30, le=250)
    lbs: int | None = Field(default=None, ge=66, le=551)


class ProfilePreferencesRequest(StrictCamelModel):
    session_length: Literal["quick", "balanced", "deep"] | None = None
    preferred_time: Literal["morning", "evening", "anytime"] | None = None
    experience_level: Literal["beginner", "intermediate"] | None = None


class ProfileUpdateRequest(StrictCamelModel):
    """PATCH /me body; every field is optional."""

    name: str | None = Field(default=None, max_length=100)
    age: int | None = Field(default=None, ge=16, le=80)
    gender: Literal["male", "female", "other", "prefer_not_to_say"] | None = None
    height: HeightRequest | None = None
    weight: WeightRequest | None = None
    wellness_focus_id: str | None = None
    primary_goal_id: str | None = None
    preferences: ProfilePreferencesRequest | None = None


class ProfileDetails(CamelModel):
    name: str | None
    age: int | None
    gender: str | None
    height_cm: int | None
    weight_kg: int | None


class OnboardingStatus(CamelModel):
    is_complete: bool
    completed_at: str | None


class ProfileResponse(CamelModel):
    id: str
    firebase_uid: str
    phone_number: str | None
    profile: ProfileDetails
    wellness_focus_id: str | None
    primary_goal_id: str | None
    preferences: dict[str, Any] | None
    onboarding: OnboardingStatus


# =============================================================================
# ENROLLMENT SCHEMAS
# =============================================================================


class EnrollmentCreateRequest(CamelModel):
    program_template_id: str

    @field_validator("program_template_id")
    @classmethod
    def _check_uuid(cls, value: str) -> str:
        if not UUID_PATTERN.match(value):
            raise ValueError("programTemplateId must be a valid UUID format")
        return value


class EnrollmentResponse(CamelModel):
    id: str
    program_template_id: str
    status: str
    created_at: str
    updated_at: str


class EnrollmentListResponse(BaseModel):
    data: list[EnrollmentResponse]
    total: int


# =============================================================================
# ABHYASA SCHEMAS
# =============================================================================


class PlaylistRangeRequest(StrictCamelModel):
    from_day: int = 1
    to_day: int = 21
    regenerate: bool = False


class CycleResponse(CamelModel):
    id: str
    program_template_id: str
    start_date: str | None
    cycle_days: int
    minutes_preference: int | None
    created_at: str


# =============================================================================
# PRACTICE STATE SCHEMAS
# =============================================================================


class PracticePreferencesUpdate(CamelModel):
    """Partial update of the stored practice preferences."""

    focus: WellnessFocus | None = None
    goals: list[str] | None = None
    level: PracticeLevel | None = None
    length: SessionLength | None = None
    time: BestTime | None = None


class SessionCompleteRequest(CamelModel):
    video_id: str = Field(..., min_length=1)
    program_id: str | None = None
    day_id: str | None = None
    duration_min: float = Field(..., ge=0)


class MoodCheckinRequest(CamelModel):
    mood: Literal["Relaxed", "Energized", "Neutral", "Tired"]
    program_id: str | None = None
    day_number: int | None = None


class ContinueWatchingRequest(CamelModel):
    video_id: str = Field(..., min_length=1)
    position_seconds: float = 0
    title: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: float | None = None
    video_url: str | None = None


class PositionUpdateRequest(CamelModel):
    video_id: str = Field(..., min_length=1)
    position_seconds: float


class NotificationSettingsRequest(StrictCamelModel):
    enabled: bool
    time: str = DEFAULT_TIME
    days: list[Weekday] = Field(default_factory=lambda: list(WEEKDAYS))

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not is_valid_time(value):
            raise ValueError("time must be HH:MM in 24-hour format")
        return value
