"""Abhyasa cycle service.

A cycle is a 21-day sequence of day plans for one user and program.
Each day plan gets a playlist of video assets selected by role for the
user's preferred practice length.

Responsibilities:
- Cycle summary, creation and day lookup (including "today")
- Subscription locking of days beyond the free unlock window
- Playlist preview, generation and range generation

Unknown users are never created here; lookups return `exists: false`.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

import structlog

from yogashna.core.assets import get_playback_url, get_thumbnail_url
from yogashna.core.errors import (
    BadRequestError,
    DomainError,
    ForbiddenError,
    NotAvailableError,
    NotFoundError,
)
from yogashna.core.playlist_selection import resolve_day_type_from_schedule, select_by_role
from yogashna.core.subscription_policy import SubscriptionPolicy, get_policy
from yogashna.db.abhyasa_repository import (
    CycleRecord,
    DayPlanRecord,
    PlaylistItemRecord,
    count_day_plans,
    create_cycle_with_day_plans,
    get_day_plan,
    get_latest_cycle,
    get_recent_video_asset_ids,
    list_days_with_items,
    list_playlist_items,
    replace_playlist_items,
)
from yogashna.db.catalog_repository import (
    VideoAssetRecord,
    find_candidate_assets,
    get_library_schedule_days,
    get_program_template,
)
from yogashna.db.users_repository import (
    UserRecord,
    get_enrollment,
    get_practice_preferences_record,
    get_user_by_firebase_uid,
)

logger = structlog.get_logger(__name__)

CYCLE_LENGTH_DAYS = 21
DEFAULT_MINUTES_PER_DAY = 20
RECENT_DAYS_WINDOW = 7
SECONDS_PER_DAY = 86400

NOT_ENROLLED_CODE = "PROGRAM_NOT_ENROLLED"
LOCK_REASON = "SUBSCRIPTION_REQUIRED_AFTER_FREE_DAYS"


# =============================================================================
# HELPERS
# =============================================================================


def _require_enrollment(user: UserRecord | None, program_id: str, action: str) -> UserRecord:
    """The user when ACTIVE-enrolled in the program, else ForbiddenError."""
    if user is not None:
        enrollment = get_enrollment(user.id, program_id)
        if enrollment is not None and enrollment.status == "ACTIVE":
            return user
    raise ForbiddenError(
        f"Program enrollment required before {action}",
        code=NOT_ENROLLED_CODE,
    )


def _require_cycle(user_id: str, program_id: str) -> CycleRecord:
    cycle = get_latest_cycle(user_id, program_id)
    if cycle is None:
        raise NotFoundError("Abhyasa cycle not found")
    return cycle


def _require_day_plan(cycle_id: str, day_number: int) -> DayPlanRecord:
    plan = get_day_plan(cycle_id, day_number)
    if plan is None:
        raise NotFoundError("Abhyasa day plan not found")
    return plan


def is_day_locked(policy: SubscriptionPolicy, day_number: int) -> bool:
    return not policy.is_paid_active and day_number > policy.free_unlock_days


def locked_day(day_number: int, day_type: str | None, free_unlock_days: int) -> dict[str, Any]:
    """Response for a day beyond the free unlock window."""
    return {
        "dayNumber": day_number,
        "dayType": day_type,
        "totalDurationSec": 0,
        "isLocked": True,
        "lock": {
            "reason": LOCK_REASON,
            "freeUnlockDays": free_unlock_days,
            "lockedFromDay": free_unlock_days + 1,
        },
        "playlistItems": [],
    }


def _locked_day_for(
    user: UserRecord | None,
    program_id: str,
    day_number: int,
    policy: SubscriptionPolicy,
) -> dict[str, Any]:
    day_type = None
    if user is not None:
        cycle = get_latest_cycle(user.id, program_id)
        if cycle is not None:
            plan = get_day_plan(cycle.id, day_number)
            day_type = plan.day_type if plan is not None else None
    return locked_day(day_number, day_type, policy.free_unlock_days)


def _day_with_items(plan: DayPlanRecord) -> dict[str, Any]:
    items = list_playlist_items(plan.id)
    return {
        "dayNumber": plan.day_number,
        "dayType": plan.day_type,
        "totalDurationSec": plan.total_duration_sec,
        "isLocked": False,
        "playlistItems": [
            {
                "order": item.position,
                "role": item.sequence_role,
                "durationSec": item.duration_sec,
                "videoAsset": {
                    "id": item.video_asset_id,
                    "title": item.asset_name,
                    "streamUid": item.asset_stream_uid,
                    "playbackUrl": get_playback_url(item.asset_stream_uid),
                    "thumbnailUrl": get_thumbnail_url(item.asset_thumbnail_key),
                },
            }
            for item in items
        ],
    }


def _parse_start_date(value: str) -> datetime:
    start = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return start


def compute_day_number(start_date: str, cycle_days: int, now: datetime | None = None) -> int:
    """1-based day of a cycle at `now`, clamped to 1..cycle_days."""
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    elapsed = (current - _parse_start_date(start_date)).total_seconds()
    day_number = math.floor(elapsed / SECONDS_PER_DAY) + 1
    return min(max(day_number, 1), cycle_days)


# =============================================================================
# CYCLE LOOKUPS
# =============================================================================


def get_cycle_summary(firebase_uid: str, program_id: str) -> dict[str, Any]:
    """Whether the user has a cycle for a program, and its basics."""
    user = get_user_by_firebase_uid(firebase_uid)
    cycle = get_latest_cycle(user.id, program_id) if user is not None else None
    if cycle is None:
        return {
            "hasCycle": False,
            "cycleId": None,
            "startDate": None,
            "cycleLengthDays": CYCLE_LENGTH_DAYS,
        }

    return {
        "hasCycle": True,
        "cycleId": cycle.id,
        "startDate": cycle.start_date,
        "cycleLengthDays": cycle.cycle_days,
    }


def get_day(firebase_uid: str, program_id: str, day_number: int) -> dict[str, Any]:
    """A cycle day with its playlist, a locked day, or `exists: false`.

    Args:
        firebase_uid: Identity of the caller
        program_id: Program template id
        day_number: 1-based day of the cycle

    Returns:
        Day response dict
    """
    user = get_user_by_firebase_uid(firebase_uid)
    policy = get_policy(user.id if user is not None else None)
    if is_day_locked(policy, day_number):
        return _locked_day_for(user, program_id, day_number, policy)

    cycle = get_latest_cycle(user.id, program_id) if user is not None else None
    plan = get_day_plan(cycle.id, day_number) if cycle is not None else None
    if plan is None:
        return {"exists": False, "dayNumber": day_number}

    return _day_with_items(plan)


def get_today(
    firebase_uid: str,
    program_id: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """The cycle day matching the current date.

    Raises:
        NotAvailableError: If the cycle has no start date
    """
    user = get_user_by_firebase_uid(firebase_uid)
    cycle = get_latest_cycle(user.id, program_id) if user is not None else None
    if user is None or cycle is None:
        return {"exists": False, "dayNumber": 1}

    if not cycle.start_date:
        raise NotAvailableError("today not available until cycle has start date")

    day_number = compute_day_number(cycle.start_date, cycle.cycle_days, now)
    policy = get_policy(user.id)
    if is_day_locked(policy, day_number):
        return _locked_day_for(user, program_id, day_number, policy)

    plan = get_day_plan(cycle.id, day_number)
    if plan is None:
        return {"exists": False, "dayNumber": day_number}

    return _day_with_items(plan)


# =============================================================================
# CYCLE GENERATION
# =============================================================================


def generate_cycle(firebase_uid: str, program_id: str) -> CycleRecord:
    """Create the user's cycle for a program, or return the existing one.

    Raises:
        ForbiddenError: If the user is not actively enrolled
        NotFoundError: If the program template does not exist
    """
    user = _require_enrollment(
        get_user_by_firebase_uid(firebase_uid),
        program_id,
        "generating Abhyasa cycle",
    )

    template = get_program_template(program_id)
    if template is None:
        raise NotFoundError("Program template not found")

    existing = get_latest_cycle(user.id, program_id)
    if existing is not None:
        return existing

    schedule_days = get_library_schedule_days(program_id)
    day_types = [
        resolve_day_type_from_schedule(schedule_days, day_number)
        for day_number in range(1, CYCLE_LENGTH_DAYS + 1)
    ]
    minutes = template.default_minutes_per_day or DEFAULT_MINUTES_PER_DAY

    cycle, created = create_cycle_with_day_plans(
        user.id,
        program_id,
        start_date=datetime.now(timezone.utc).isoformat(),
        minutes_preference=minutes,
        day_types=day_types,
    )
    if created:
        logger.info("abhyasa_cycle.generated", user_id=user.id, cycle_id=cycle.id)
    return cycle


def cycle_to_dict(cycle: CycleRecord) -> dict[str, Any]:
    return {
        "id": cycle.id,
        "programTemplateId": cycle.program_template_id,
        "startDate": cycle.start_date,
        "cycleDays": cycle.cycle_days,
        "minutesPreference": cycle.minutes_preference,
        "createdAt": cycle.created_at,
    }


# =============================================================================
# PLAYLIST SELECTION
# =============================================================================


def filter_contraindications(
    candidates: list[VideoAssetRecord],
    user_contraindications: list[str],
) -> list[VideoAssetRecord]:
    """Drop assets contraindicated for any of the user's conditions."""
    if not user_contraindications:
        return candidates
    blocked = set(user_contraindications)
    return [c for c in candidates if not blocked.intersection(c.contra_indications)]


def _select_for_day(
    user: UserRecord,
    cycle: CycleRecord,
    plan: DayPlanRecord,
) -> tuple[list[VideoAssetRecord], int, int]:
    """Select assets for a day plan.

    Returns:
        Tuple of (selected assets, total seconds, target seconds)
    """
    record = get_practice_preferences_record(user.id)
    if record is not None and record.minutes_preference is not None:
        minutes = record.minutes_preference
    elif cycle.minutes_preference is not None:
        minutes = cycle.minutes_preference
    else:
        minutes = DEFAULT_MINUTES_PER_DAY
    target_duration_sec = minutes * 60
    level = record.level if record else None

    recent_ids = get_recent_video_asset_ids(cycle.id, plan.day_number, RECENT_DAYS_WINDOW)
    candidates = find_candidate_assets(level=level, exclude_ids=recent_ids)
    candidates = filter_contraindications(candidates, [])

    selection = select_by_role(candidates, target_duration_sec)
    return selection.items, selection.total_duration_sec, target_duration_sec


def _to_playlist_item(asset: VideoAssetRecord) -> PlaylistItemRecord:
    return PlaylistItemRecord(
        id="",
        abhyasa_day_plan_id="",
        video_asset_id=asset.id,
        primary_category=asset.primary_category,
        yoga_sub_category=asset.yoga_sub_category,
        breathing_sub_category=asset.breathing_sub_category,
        meditation_sub_category=asset.meditation_sub_category,
        sequence_role=asset.sequence_role,
        duration_sec=asset.duration_sec,
        position=0,
    )


def _generate_for_plan(
    user: UserRecord,
    cycle: CycleRecord,
    plan: DayPlanRecord,
) -> list[PlaylistItemRecord]:
    assets, total, _ = _select_for_day(user, cycle, plan)
    stored = replace_playlist_items(plan.id, [_to_playlist_item(a) for a in assets], total)
    logger.info(
        "abhyasa_cycle.playlist_generated",
        cycle_id=cycle.id,
        day_number=plan.day_number,
        items=len(stored),
        total_duration_sec=total,
    )
    return stored


def _stored_playlist(day_number: int, day_type: str, items: list[PlaylistItemRecord]) -> dict[str, Any]:
    return {
        "isPreview": False,
        "dayNumber": day_number,
        "dayType": day_type,
        "totalDurationSec": sum(item.duration_sec for item in items),
        "playlistItems": [
            {
                "id": item.id,
                "videoAssetId": item.video_asset_id,
                "role": item.sequence_role,
                "durationSec": item.duration_sec,
                "order": item.position,
            }
            for item in items
        ],
    }


def preview_playlist(firebase_uid: str, program_id: str, day_number: int) -> dict[str, Any]:
    """Playlist that would be generated for a day, without saving it.

    Raises:
        ForbiddenError: If the user is not actively enrolled
        NotFoundError: If the cycle or the day plan does not exist
    """
    user = _require_enrollment(
        get_user_by_firebase_uid(firebase_uid), program_id, "previewing playlist"
    )
    cycle = _require_cycle(user.id, program_id)
    plan = _require_day_plan(cycle.id, day_number)

    assets, total, target = _select_for_day(user, cycle, plan)
    return {
        "isPreview": True,
        "dayNumber": day_number,
        "targetDurationSec": target,
        "dayType": plan.day_type,
        "totalDurationSec": total,
        "playlistItems": [
            {
                "videoAssetId": asset.id,
                "role": asset.sequence_role,
                "durationSec": asset.duration_sec,
                "order": order,
            }
            for order, asset in enumerate(assets, start=1)
        ],
    }


def generate_playlist(
    firebase_uid: str,
    program_id: str,
    day_number: int,
    regenerate: bool = False,
) -> dict[str, Any]:
    """Persist the playlist of a day.

    Existing items are returned unchanged unless regenerate is set.
    Locked days return the locked-day response.

    Raises:
        ForbiddenError: If the user is not actively enrolled
        NotFoundError: If the cycle or the day plan does not exist
    """
    user = _require_enrollment(
        get_user_by_firebase_uid(firebase_uid), program_id, "generating playlist"
    )
    policy = get_policy(user.id)
    if is_day_locked(policy, day_number):
        return _locked_day_for(user, program_id, day_number, policy)

    cycle = _require_cycle(user.id, program_id)
    plan = _require_day_plan(cycle.id, day_number)

    existing = list_playlist_items(plan.id)
    if existing and not regenerate:
        return _stored_playlist(day_number, plan.day_type, existing)

    stored = _generate_for_plan(user, cycle, plan)
    return _stored_playlist(day_number, plan.day_type, stored)


def generate_playlist_range(
    firebase_uid: str,
    program_id: str,
    from_day: int = 1,
    to_day: int = CYCLE_LENGTH_DAYS,
    regenerate: bool = False,
) -> dict[str, Any]:
    """Generate playlists for a range of days.

    Free users only get days inside their unlock window; later days of
    the range are reported as locked. Failures of single days are
    collected instead of aborting the range.

    Args:
        firebase_uid: Identity of the caller
        program_id: Program template id
        from_day: First day (1..21)
        to_day: Last day (from_day..21)
        regenerate: Replace playlists that already exist

    Returns:
        Summary with generated, skipped and locked days and errors

    Raises:
        BadRequestError: If the range is invalid
        ForbiddenError: If the user is not actively enrolled
        NotFoundError: If the cycle or its day plans do not exist
    """
    if not (1 <= from_day <= to_day <= CYCLE_LENGTH_DAYS):
        raise BadRequestError("fromDay and toDay must be within 1..21 and fromDay <= toDay")

    user = _require_enrollment(
        get_user_by_firebase_uid(firebase_uid), program_id, "generating playlist range"
    )
    cycle = _require_cycle(user.id, program_id)

    policy = get_policy(user.id)
    effective_to = to_day if policy.is_paid_active else min(to_day, policy.free_unlock_days)
    locked_days = list(range(max(from_day, policy.free_unlock_days + 1), to_day + 1))
    if policy.is_paid_active:
        locked_days = []

    generated: list[int] = []
    skipped: list[int] = []
    errors: list[dict[str, Any]] = []

    if effective_to >= from_day:
        expected = effective_to - from_day + 1
        if count_day_plans(cycle.id, from_day, effective_to) < expected:
            raise NotFoundError("Abhyasa day plans not found")

        existing_days = set() if regenerate else list_days_with_items(cycle.id, from_day, effective_to)
        for day_number in range(from_day, effective_to + 1):
            if day_number in existing_days:
                skipped.append(day_number)
                continue
            try:
                plan = _require_day_plan(cycle.id, day_number)
                _generate_for_plan(user, cycle, plan)
                generated.append(day_number)
            except DomainError as exc:
                errors.append(
                    {"dayNumber": day_number, "code": exc.code or "ERROR", "message": exc.message}
                )
                logger.warning(
                    "abhyasa_cycle.day_generation_failed",
                    cycle_id=cycle.id,
                    day_number=day_number,
                    error=exc.message,
                )

    logger.info(
        "abhyasa_cycle.range_generated",
        cycle_id=cycle.id,
        generated=len(generated),
        skipped=len(skipped),
        locked=len(locked_days),
    )
    return {
        "fromDay": from_day,
        "toDayRequested": to_day,
        "toDayEffective": effective_to,
        "regenerate": regenerate,
        "generatedDays": generated,
        "skippedDays": skipped,
        "lockedDays": sorted(locked_days),
        "errors": errors,
    }
