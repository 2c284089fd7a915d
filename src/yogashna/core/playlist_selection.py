"""Playlist selection rules shared by library previews and Abhyasa cycles.

Responsibilities:
- Duration-bounded selection by sequence role
- Library ordering buckets (warm-up, main, cool-down, breathing, meditation)
- Day type resolution from schedules and library rhythms
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, Protocol, Sequence, TypeVar

import structlog

logger = structlog.get_logger(__name__)

SequenceRole = Literal["MANDATORY", "ADJUSTABLE", "OPTIONAL"]
DayType = Literal["GENTLE", "BUILD", "RESTORE"]

DAY_TYPES: tuple[str, ...] = ("GENTLE", "BUILD", "RESTORE")
ROLE_ORDER = {"MANDATORY": 0, "ADJUSTABLE": 1, "OPTIONAL": 2}

# Library previews look back this many generated days to avoid repeats
LIBRARY_HISTORY_DAYS = 5


class SequencedCandidate(Protocol):
    sequence_role: str
    duration_sec: int


class LibraryCandidate(SequencedCandidate, Protocol):
    id: str
    primary_category: str
    yoga_sub_category: str | None


T = TypeVar("T", bound=SequencedCandidate)
L = TypeVar("L", bound=LibraryCandidate)


@dataclass
class Selection(Generic[T]):
    """Selected items and their summed duration."""

    items: list[T] = field(default_factory=list)
    total_duration_sec: int = 0


def select_by_role(candidates: Sequence[T], target_duration_sec: int) -> Selection[T]:
    """Select candidates for a target duration.

    Every MANDATORY candidate is taken. ADJUSTABLE then OPTIONAL
    candidates follow in input order, each only if it still fits.

    Args:
        candidates: Items with sequence_role and duration_sec
        target_duration_sec: Target total duration in seconds

    Returns:
        Selection with items in selection order
    """
    selection: Selection[T] = Selection()

    for item in candidates:
        if item.sequence_role == "MANDATORY":
            selection.items.append(item)
            selection.total_duration_sec += item.duration_sec

    for role in ("ADJUSTABLE", "OPTIONAL"):
        for item in candidates:
            if item.sequence_role != role:
                continue
            if selection.total_duration_sec + item.duration_sec <= target_duration_sec:
                selection.items.append(item)
                selection.total_duration_sec += item.duration_sec

    return selection


# =============================================================================
# LIBRARY ORDERING
# =============================================================================


def get_library_bucket(candidate: LibraryCandidate) -> int:
    """Position group of a candidate in a library playlist (1..6)."""
    if candidate.primary_category == "YOGA":
        if candidate.yoga_sub_category == "WARM_UP":
            return 1
        if candidate.yoga_sub_category == "COOL_DOWN":
            return 3
        return 2
    if candidate.primary_category == "BREATHING":
        return 4
    if candidate.primary_category == "MEDITATION":
        return 5
    return 6


def sort_library_candidates(candidates: Sequence[L]) -> list[L]:
    """Stable sort by bucket; input order (creation order) breaks ties."""
    return sorted(candidates, key=get_library_bucket)


def sort_library_items(items: Sequence[L], ordered_candidates: Sequence[L]) -> list[L]:
    """Order selected items by bucket, then role, then candidate position."""
    position = {candidate.id: index for index, candidate in enumerate(ordered_candidates)}
    return sorted(
        items,
        key=lambda item: (
            get_library_bucket(item),
            ROLE_ORDER.get(item.sequence_role, len(ROLE_ORDER)),
            position.get(item.id, 0),
        ),
    )


def select_library_items(candidates: Sequence[L], target_duration_sec: int) -> Selection[L]:
    """Select one library day.

    The first YOGA warm-up and the first YOGA cool-down are always
    included; the rest of the target is filled by role.
    """
    forced: list[L] = []
    has_yoga = any(c.primary_category == "YOGA" for c in candidates)
    if has_yoga:
        warmup = next(
            (c for c in candidates
             if c.primary_category == "YOGA" and c.yoga_sub_category == "WARM_UP"),
            None,
        )
        cooldown = next(
            (c for c in candidates
             if c.primary_category == "YOGA" and c.yoga_sub_category == "COOL_DOWN"),
            None,
        )
        if warmup is not None:
            forced.append(warmup)
        if cooldown is not None and (warmup is None or cooldown.id != warmup.id):
            forced.append(cooldown)

    forced_ids = {item.id for item in forced}
    remaining = [c for c in candidates if c.id not in forced_ids]
    forced_duration = sum(item.duration_sec for item in forced)
    remaining_target = max(0, target_duration_sec - forced_duration)

    rest = select_by_role(remaining, remaining_target)
    ordered = sort_library_items(forced + rest.items, candidates)
    return Selection(items=ordered, total_duration_sec=forced_duration + rest.total_duration_sec)


def generate_library_sequence(
    candidates: Sequence[L],
    target_duration_sec: int,
    day_number: int,
) -> Selection[L]:
    """Selection for a library day, avoiding assets of the preceding days.

    Days 1..day_number are generated in turn; each day excludes the items
    chosen in the previous LIBRARY_HISTORY_DAYS days.
    """
    history: list[list[str]] = []
    selection: Selection[L] = Selection()

    for _ in range(day_number):
        excluded = {asset_id for day in history for asset_id in day}
        available = [c for c in candidates if c.id not in excluded]
        selection = select_library_items(available, target_duration_sec)

        history.append([item.id for item in selection.items])
        if len(history) > LIBRARY_HISTORY_DAYS:
            history.pop(0)

    return selection


# =============================================================================
# DAY TYPES
# =============================================================================


def normalize_day_type(value: Any) -> DayType | None:
    """Case-insensitive GENTLE/BUILD/RESTORE, else None."""
    if not isinstance(value, str):
        return None
    normalized = value.strip().upper()
    return normalized if normalized in DAY_TYPES else None  # type: ignore[return-value]


def resolve_day_type_from_schedule(schedule_days: Any, day_number: int) -> DayType:
    """Day type from a stored schedule.

    An entry whose dayNumber matches wins; otherwise the entry at
    position day_number - 1 is used. Anything unusable gives GENTLE.
    """
    if not isinstance(schedule_days, list) or not schedule_days:
        return "GENTLE"

    direct = next(
        (d for d in schedule_days if isinstance(d, dict) and d.get("dayNumber") == day_number),
        None,
    )
    raw_type = None
    if direct is not None:
        raw_type = direct.get("dayType")
    if raw_type is None and 0 < day_number <= len(schedule_days):
        fallback = schedule_days[day_number - 1]
        if isinstance(fallback, dict):
            raw_type = fallback.get("dayType")

    return normalize_day_type(raw_type) or "GENTLE"


def resolve_rhythm_day_type(rhythm: Any, day_number: int) -> DayType | None:
    """Day type from a repeating rhythm `{pattern: [counts], types: [...]}`.

    Each type is repeated `count` times and the expanded cycle repeats.
    Returns None for malformed rhythms.
    """
    if not isinstance(rhythm, dict):
        return None

    pattern = rhythm.get("pattern")
    types = rhythm.get("types")
    if not isinstance(pattern, list) or not isinstance(types, list):
        return None
    if not pattern or len(pattern) != len(types):
        return None

    cycle: list[DayType] = []
    for raw_count, raw_type in zip(pattern, types):
        day_type = normalize_day_type(raw_type)
        try:
            count = float(raw_count)
        except (TypeError, ValueError):
            return None
        if day_type is None or not math.isfinite(count) or count <= 0:
            return None
        cycle.extend([day_type] * math.floor(count))

    if not cycle:
        return None

    return cycle[(day_number - 1) % len(cycle)]


def resolve_library_day_type(rhythm: Any, day_number: int) -> DayType:
    """Library day type: the rhythm if valid, else RESTORE every 7th day.

    BUILD days are shown as GENTLE in the library.
    """
    day_type = resolve_rhythm_day_type(rhythm, day_number)
    if day_type is None:
        day_type = "RESTORE" if day_number % 7 == 0 else "GENTLE"
    return "GENTLE" if day_type == "BUILD" else day_type
