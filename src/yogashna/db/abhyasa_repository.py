"""Repository functions for Abhyasa cycles, day plans and playlist items."""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass

import structlog

from yogashna.db.database import get_db, now_iso

logger = structlog.get_logger(__name__)


@dataclass
class CycleRecord:
    """Abhyasa cycle of a user for one program template."""

    id: str
    user_id: str
    program_template_id: str
    start_date: str | None
    cycle_days: int
    minutes_preference: int | None
    created_at: str


@dataclass
class DayPlanRecord:
    id: str
    abhyasa_cycle_id: str
    day_number: int
    day_type: str
    total_duration_sec: int


@dataclass
class PlaylistItemRecord:
    """Persisted playlist entry of a day plan.

    The asset_* fields are filled when the item is loaded together with
    its video asset.
    """

    id: str
    abhyasa_day_plan_id: str
    video_asset_id: str
    primary_category: str
    yoga_sub_category: str | None
    breathing_sub_category: str | None
    meditation_sub_category: str | None
    sequence_role: str
    duration_sec: int
    position: int
    asset_name: str | None = None
    asset_stream_uid: str | None = None
    asset_thumbnail_key: str | None = None


_LATEST_CYCLE_SQL = """
    SELECT * FROM abhyasa_cycles
    WHERE user_id = ? AND program_template_id = ?
    ORDER BY created_at DESC, rowid DESC
    LIMIT 1
"""


def get_latest_cycle(user_id: str, program_template_id: str) -> CycleRecord | None:
    """Most recently created cycle of a user for a program."""
    with get_db() as conn:
        row = conn.execute(_LATEST_CYCLE_SQL, (user_id, program_template_id)).fetchone()

    if row is None:
        return None

    return _row_to_cycle(row)


def create_cycle_with_day_plans(
    user_id: str,
    program_template_id: str,
    start_date: str,
    minutes_preference: int | None,
    day_types: list[str],
) -> tuple[CycleRecord, bool]:
    """Create a cycle and one day plan per entry of day_types.

    Runs in a single transaction. When a cycle already exists for the
    user and program it is returned unchanged.

    Args:
        user_id: Internal user id
        program_template_id: Program template id
        start_date: ISO start timestamp
        minutes_preference: Minutes per day recorded on the cycle
        day_types: Day type of day 1..N

    Returns:
        Tuple of (cycle, created flag)
    """
    with get_db() as conn:
        existing = conn.execute(_LATEST_CYCLE_SQL, (user_id, program_template_id)).fetchone()
        if existing is not None:
            return _row_to_cycle(existing), False

        cycle_id = str(uuid.uuid4())
        conn.execute(
            """
            INSERT INTO abhyasa_cycles
                (id, user_id, program_template_id, start_date, cycle_days,
                 minutes_preference, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                cycle_id,
                user_id,
                program_template_id,
                start_date,
                len(day_types),
                minutes_preference,
                now_iso(),
            ),
        )
        conn.executemany(
            """
            INSERT INTO abhyasa_day_plans
                (id, abhyasa_cycle_id, day_number, day_type, total_duration_sec)
            VALUES (?, ?, ?, ?, 0)
            """,
            [
                (str(uuid.uuid4()), cycle_id, day_number, day_type)
                for day_number, day_type in enumerate(day_types, start=1)
            ],
        )
        row = conn.execute("SELECT * FROM abhyasa_cycles WHERE id = ?", (cycle_id,)).fetchone()

    logger.info(
        "abhyasa_cycles.created",
        cycle_id=cycle_id,
        user_id=user_id,
        program_template_id=program_template_id,
        days=len(day_types),
    )
    return _row_to_cycle(row), True


def get_day_plan(cycle_id: str, day_number: int) -> DayPlanRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM abhyasa_day_plans WHERE abhyasa_cycle_id = ? AND day_number = ?",
            (cycle_id, day_number),
        ).fetchone()

    if row is None:
        return None

    return _row_to_day_plan(row)


def count_day_plans(cycle_id: str, from_day: int, to_day: int) -> int:
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT COUNT(*) AS n FROM abhyasa_day_plans
            WHERE abhyasa_cycle_id = ? AND day_number BETWEEN ? AND ?
            """,
            (cycle_id, from_day, to_day),
        ).fetchone()

    return int(row["n"])


def list_days_with_items(cycle_id: str, from_day: int, to_day: int) -> set[int]:
    """Day numbers in a range whose plan already has playlist items."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT d.day_number FROM abhyasa_day_plans d
            WHERE d.abhyasa_cycle_id = ? AND d.day_number BETWEEN ? AND ?
              AND EXISTS (SELECT 1 FROM playlist_items p WHERE p.abhyasa_day_plan_id = d.id)
            """,
            (cycle_id, from_day, to_day),
        ).fetchall()

    return {row["day_number"] for row in rows}


def get_recent_video_asset_ids(cycle_id: str, day_number: int, window: int = 7) -> list[str]:
    """Video assets used in the `window` days before a day of a cycle.

    Args:
        cycle_id: Cycle id
        day_number: Day being planned
        window: How many previous days to look back

    Returns:
        Distinct asset ids in first-seen order
    """
    if day_number <= 1:
        return []

    start_day = max(1, day_number - window)
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT p.video_asset_id FROM playlist_items p
            JOIN abhyasa_day_plans d ON d.id = p.abhyasa_day_plan_id
            WHERE d.abhyasa_cycle_id = ? AND d.day_number BETWEEN ? AND ?
            ORDER BY d.day_number, p.position
            """,
            (cycle_id, start_day, day_number - 1),
        ).fetchall()

    return list(dict.fromkeys(row["video_asset_id"] for row in rows))


def list_playlist_items(day_plan_id: str) -> list[PlaylistItemRecord]:
    """Items of a day plan in playlist order, with their asset fields."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT p.*, a.name AS asset_name, a.stream_uid AS asset_stream_uid,
                   a.thumbnail_key AS asset_thumbnail_key
            FROM playlist_items p
            JOIN video_assets a ON a.id = p.video_asset_id
            WHERE p.abhyasa_day_plan_id = ?
            ORDER BY p.position ASC, p.created_at ASC
            """,
            (day_plan_id,),
        ).fetchall()

    return [_row_to_item(row) for row in rows]


def replace_playlist_items(
    day_plan_id: str,
    items: list[PlaylistItemRecord],
    total_duration_sec: int,
) -> list[PlaylistItemRecord]:
    """Persist a generated playlist for a day plan.

    Existing items are deleted, the new ones inserted in order and the
    plan total updated, all in one transaction.

    Args:
        day_plan_id: Day plan id
        items: Items to store; ids and positions are assigned here
        total_duration_sec: New plan total

    Returns:
        The stored items
    """
    stored: list[PlaylistItemRecord] = []
    created_at = now_iso()

    with get_db() as conn:
        conn.execute("DELETE FROM playlist_items WHERE abhyasa_day_plan_id = ?", (day_plan_id,))
        for position, item in enumerate(items, start=1):
            item_id = str(uuid.uuid4())
            conn.execute(
                """
                INSERT INTO playlist_items
                    (id, abhyasa_day_plan_id, video_asset_id, primary_category,
                     yoga_sub_category, breathing_sub_category, meditation_sub_category,
                     sequence_role, duration_sec, position, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item_id,
                    day_plan_id,
                    item.video_asset_id,
                    item.primary_category,
                    item.yoga_sub_category,
                    item.breathing_sub_category,
                    item.meditation_sub_category,
                    item.sequence_role,
                    item.duration_sec,
                    position,
                    created_at,
                ),
            )
            stored.append(
                PlaylistItemRecord(
                    id=item_id,
                    abhyasa_day_plan_id=day_plan_id,
                    video_asset_id=item.video_asset_id,
                    primary_category=item.primary_category,
                    yoga_sub_category=item.yoga_sub_category,
                    breathing_sub_category=item.breathing_sub_category,
                    meditation_sub_category=item.meditation_sub_category,
                    sequence_role=item.sequence_role,
                    duration_sec=item.duration_sec,
                    position=position,
                )
            )
        conn.execute(
            "UPDATE abhyasa_day_plans SET total_duration_sec = ? WHERE id = ?",
            (total_duration_sec, day_plan_id),
        )

    logger.debug("playlist_items.replaced", day_plan_id=day_plan_id, count=len(stored))
    return stored


def _row_to_cycle(row: sqlite3.Row) -> CycleRecord:
    return CycleRecord(
        id=row["id"],
        user_id=row["user_id"],
        program_template_id=row["program_template_id"],
        start_date=row["start_date"],
        cycle_days=row["cycle_days"],
        minutes_preference=row["minutes_preference"],
        created_at=row["created_at"],
    )


def _row_to_day_plan(row: sqlite3.Row) -> DayPlanRecord:
    return DayPlanRecord(
        id=row["id"],
        abhyasa_cycle_id=row["abhyasa_cycle_id"],
        day_number=row["day_number"],
        day_type=row["day_type"],
        total_duration_sec=row["total_duration_sec"],
    )


def _row_to_item(row: sqlite3.Row) -> PlaylistItemRecord:
    keys = row.keys()
    return PlaylistItemRecord(
        id=row["id"],
        abhyasa_day_plan_id=row["abhyasa_day_plan_id"],
        video_asset_id=row["video_asset_id"],
        primary_category=row["primary_category"],
        yoga_sub_category=row["yoga_sub_category"],
        breathing_sub_category=row["breathing_sub_category"],
        meditation_sub_category=row["meditation_sub_category"],
        sequence_role=row["sequence_role"],
        duration_sec=row["duration_sec"],
        position=row["position"],
        asset_name=row["asset_name"] if "asset_name" in keys else None,
        asset_stream_uid=row["asset_stream_uid"] if "asset_stream_uid" in keys else None,
        asset_thumbnail_key=row["asset_thumbnail_key"] if "asset_thumbnail_key" in keys else None,
    )
