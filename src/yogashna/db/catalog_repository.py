"""Repository functions for the content catalog.

Covers videos, video assets, program templates (with sections, days and
day items), tags, library schedules and entity translations.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Iterable

import structlog

from yogashna.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class TagRecord:
    """Tag attached to a video or program template."""

    id: str
    code: str
    label: str
    tag_type_code: str


@dataclass
class VideoRecord:
    """Catalog video from database."""

    id: str
    name: str
    description_short: str | None
    primary_category: str
    duration_sec: int
    level: str | None
    intensity: str | None
    strength_demand: str | None
    access_level: str
    required_entitlement_key: str | None
    cloudflare_stream_uid: str | None
    thumbnail_r2_key: str | None
    status: str
    version: int
    created_at: str


@dataclass
class VideoAssetRecord:
    """Video asset used as a playlist building block."""

    id: str
    name: str
    short_description: str | None
    stream_uid: str | None
    thumbnail_key: str | None
    primary_category: str
    yoga_sub_category: str | None
    breathing_sub_category: str | None
    meditation_sub_category: str | None
    level: str | None
    intensity: str | None
    strength_demand: str | None
    sequence_role: str
    duration_sec: int
    goals: list[str] = field(default_factory=list)
    focus_areas: list[str] = field(default_factory=list)
    contra_indications: list[str] = field(default_factory=list)
    import_tags: list[str] = field(default_factory=list)
    status: str = "ACTIVE"
    version: str = "1.0"
    created_at: str = ""


@dataclass
class ProgramTemplateRecord:
    """Program template from database."""

    id: str
    title: str
    sanskrit_title: str | None
    subtitle: str | None
    description_short: str | None
    hero_image_key: str | None
    default_days: int
    default_minutes_per_day: int | None
    level_label: str | None
    recommended_level: str | None
    access_level: str
    required_entitlement_key: str | None
    status: str
    version: int
    library_rhythm: dict[str, Any] | None
    created_at: str


@dataclass
class ProgramSectionRecord:
    type: str
    sort_order: int
    text: str


@dataclass
class ProgramDayItemRecord:
    order_index: int
    sequence_role: str
    video_id: str


@dataclass
class ProgramDayRecord:
    day_number: int
    title: str | None
    intent: str | None
    items: list[ProgramDayItemRecord] = field(default_factory=list)


# Columns writable through insert/update_video_asset
VIDEO_ASSET_COLUMNS = (
    "name",
    "short_description",
    "stream_uid",
    "thumbnail_key",
    "primary_category",
    "yoga_sub_category",
    "breathing_sub_category",
    "meditation_sub_category",
    "level",
    "intensity",
    "strength_demand",
    "sequence_role",
    "duration_sec",
    "goals",
    "focus_areas",
    "contra_indications",
    "import_tags",
    "status",
    "version",
)

_JSON_LIST_COLUMNS = {"goals", "focus_areas", "contra_indications", "import_tags"}


def _placeholders(values: Iterable[Any]) -> str:
    return ", ".join("?" for _ in values)


# =============================================================================
# TAGS AND TRANSLATIONS
# =============================================================================


def get_translations(
    entity_type: str,
    entity_ids: list[str],
    language_code: str,
) -> dict[str, dict[str, str]]:
    """Fetch translated fields for a batch of entities.

    Args:
        entity_type: 'video', 'tag' or 'program_template'
        entity_ids: Entity ids to look up
        language_code: ISO language code (e.g. 'en', 'hi')

    Returns:
        Mapping of entity id to {field: value}
    """
    if not entity_ids:
        return {}

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT entity_id, field, value FROM entity_translations
            WHERE entity_type = ? AND language_code = ?
              AND entity_id IN ({_placeholders(entity_ids)})
            """,
            (entity_type, language_code, *entity_ids),
        ).fetchall()

    result: dict[str, dict[str, str]] = {}
    for row in rows:
        result.setdefault(row["entity_id"], {})[row["field"]] = row["value"]
    return result


def get_video_tags(video_ids: list[str]) -> dict[str, list[TagRecord]]:
    """Tags of each video, keyed by video id."""
    return _get_entity_tags("video_tags", "video_id", video_ids)


def get_program_template_tags(template_ids: list[str]) -> dict[str, list[TagRecord]]:
    return _get_entity_tags("program_template_tags", "program_template_id", template_ids)


def _get_entity_tags(
    link_table: str,
    link_column: str,
    entity_ids: list[str],
) -> dict[str, list[TagRecord]]:
    if not entity_ids:
        return {}

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT l.{link_column} AS entity_id, t.id, t.code, t.label,
                   tt.code AS tag_type_code
            FROM {link_table} l
            JOIN tags t ON t.id = l.tag_id
            JOIN tag_types tt ON tt.id = t.tag_type_id
            WHERE l.{link_column} IN ({_placeholders(entity_ids)})
            ORDER BY tt.code, t.code
            """,
            entity_ids,
        ).fetchall()

    result: dict[str, list[TagRecord]] = {}
    for row in rows:
        result.setdefault(row["entity_id"], []).append(
            TagRecord(
                id=row["id"],
                code=row["code"],
                label=row["label"],
                tag_type_code=row["tag_type_code"],
            )
        )
    return result


def _tag_filter(link_table: str, link_column: str, owner: str, tag_ids: list[str]) -> str:
    return (
        f"EXISTS (SELECT 1 FROM {link_table} l WHERE l.{link_column} = {owner}.id "
        f"AND l.tag_id IN ({_placeholders(tag_ids)}))"
    )


# =============================================================================
# VIDEOS
# =============================================================================


def list_videos(
    limit: int = 20,
    offset: int = 0,
    primary_category: str | None = None,
    access_level: str | None = None,
    tag_ids: list[str] | None = None,
    status: str = "ACTIVE",
) -> tuple[list[VideoRecord], int]:
    """List catalog videos, newest first.

    Args:
        limit: Page size
        offset: Rows to skip
        primary_category: Optional YOGA/BREATHING/MEDITATION filter
        access_level: Optional FREE/SUBSCRIPTION filter
        tag_ids: Keep videos carrying at least one of these tags
        status: Content status filter

    Returns:
        Tuple of (page of VideoRecord, total matching count)
    """
    where = ["v.status = ?"]
    params: list[Any] = [status]

    if primary_category:
        where.append("v.primary_category = ?")
        params.append(primary_category)
    if access_level:
        where.append("v.access_level = ?")
        params.append(access_level)
    if tag_ids:
        where.append(_tag_filter("video_tags", "video_id", "v", tag_ids))
        params.extend(tag_ids)

    clause = " AND ".join(where)
    with get_db() as conn:
        total = conn.execute(
            f"SELECT COUNT(*) AS n FROM videos v WHERE {clause}", params
        ).fetchone()["n"]
        rows = conn.execute(
            f"""
            SELECT v.* FROM videos v WHERE {clause}
            ORDER BY v.created_at DESC, v.rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()

    return [_row_to_video(row) for row in rows], int(total)


def get_video(video_id: str, status: str | None = None) -> VideoRecord | None:
    """Get a catalog video, optionally requiring a status."""
    query = "SELECT * FROM videos WHERE id = ?"
    params: list[Any] = [video_id]
    if status:
        query += " AND status = ?"
        params.append(status)

    with get_db() as conn:
        row = conn.execute(query, params).fetchone()

    if row is None:
        return None

    return _row_to_video(row)


def get_videos_by_ids(video_ids: list[str]) -> dict[str, VideoRecord]:
    if not video_ids:
        return {}

    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM videos WHERE id IN ({_placeholders(video_ids)})",
            video_ids,
        ).fetchall()

    return {row["id"]: _row_to_video(row) for row in rows}


def _row_to_video(row: sqlite3.Row) -> VideoRecord:
    return VideoRecord(
        id=row["id"],
        name=row["name"],
        description_short=row["description_short"],
        primary_category=row["primary_category"],
        duration_sec=row["duration_sec"],
        level=row["level"],
        intensity=row["intensity"],
        strength_demand=row["strength_demand"],
        access_level=row["access_level"],
        required_entitlement_key=row["required_entitlement_key"],
        cloudflare_stream_uid=row["cloudflare_stream_uid"],
        thumbnail_r2_key=row["thumbnail_r2_key"],
        status=row["status"],
        version=row["version"],
        created_at=row["created_at"],
    )


# =============================================================================
# VIDEO ASSETS
# =============================================================================


def list_video_assets(
    primary_category: str | None = None,
    goal: str | None = None,
    level: str | None = None,
    intensity: str | None = None,
    min_duration_sec: int | None = None,
    max_duration_sec: int | None = None,
    status: str = "ACTIVE",
    take: int = 50,
    skip: int = 0,
) -> tuple[list[VideoAssetRecord], int]:
    """List video assets, newest first.

    Returns:
        Tuple of (page of VideoAssetRecord, total matching count)
    """
    where = ["status = ?"]
    params: list[Any] = [status]

    if primary_category:
        where.append("primary_category = ?")
        params.append(primary_category)
    if level:
        where.append("level = ?")
        params.append(level)
    if intensity:
        where.append("intensity = ?")
        params.append(intensity)
    if min_duration_sec is not None:
        where.append("duration_sec >= ?")
        params.append(min_duration_sec)
    if max_duration_sec is not None:
        where.append("duration_sec <= ?")
        params.append(max_duration_sec)
    if goal:
        where.append("EXISTS (SELECT 1 FROM json_each(video_assets.goals) WHERE value = ?)")
        params.append(goal)

    clause = " AND ".join(where)
    with get_db() as conn:
        total = conn.execute(
            f"SELECT COUNT(*) AS n FROM video_assets WHERE {clause}", params
        ).fetchone()["n"]
        rows = conn.execute(
            f"""
            SELECT * FROM video_assets WHERE {clause}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, take, skip),
        ).fetchall()

    return [_row_to_asset(row) for row in rows], int(total)


def find_candidate_assets(
    level: str | None = None,
    exclude_ids: Iterable[str] = (),
) -> list[VideoAssetRecord]:
    """ACTIVE video assets eligible for playlist selection, oldest first.

    Args:
        level: Keep only assets at this level when given
        exclude_ids: Asset ids to leave out

    Returns:
        List of VideoAssetRecord in creation order
    """
    excluded = list(exclude_ids)
    where = ["status = 'ACTIVE'", "primary_category IN ('YOGA', 'BREATHING', 'MEDITATION')"]
    params: list[Any] = []

    if level:
        where.append("level = ?")
        params.append(level)
    if excluded:
        where.append(f"id NOT IN ({_placeholders(excluded)})")
        params.extend(excluded)

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM video_assets WHERE {' AND '.join(where)}
            ORDER BY created_at ASC, rowid ASC
            """,
            params,
        ).fetchall()

    return [_row_to_asset(row) for row in rows]


def get_video_asset(asset_id: str) -> VideoAssetRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM video_assets WHERE id = ?", (asset_id,)).fetchone()

    if row is None:
        return None

    return _row_to_asset(row)


def get_video_asset_by_stream_uid(stream_uid: str) -> VideoAssetRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM video_assets WHERE stream_uid = ?", (stream_uid,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_asset(row)


def insert_video_asset(asset_id: str, created_at: str, **fields: Any) -> None:
    """Insert a video asset.

    Args:
        asset_id: New asset id
        created_at: ISO creation timestamp
        **fields: Values for VIDEO_ASSET_COLUMNS; JSON list columns take lists
    """
    columns, values = _asset_columns(fields)
    with get_db() as conn:
        conn.execute(
            f"""
            INSERT INTO video_assets (id, created_at, {', '.join(columns)})
            VALUES (?, ?, {_placeholders(values)})
            """,
            (asset_id, created_at, *values),
        )

    logger.debug("video_assets.inserted", asset_id=asset_id)


def update_video_asset(asset_id: str, **fields: Any) -> None:
    columns, values = _asset_columns(fields)
    assignments = ", ".join(f"{column} = ?" for column in columns)
    with get_db() as conn:
        conn.execute(
            f"UPDATE video_assets SET {assignments} WHERE id = ?",
            (*values, asset_id),
        )

    logger.debug("video_assets.updated", asset_id=asset_id)


def list_assets_with_import_tag(tag: str) -> list[VideoAssetRecord]:
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM video_assets
            WHERE EXISTS (SELECT 1 FROM json_each(video_assets.import_tags) WHERE value = ?)
            ORDER BY created_at ASC, rowid ASC
            """,
            (tag,),
        ).fetchall()

    return [_row_to_asset(row) for row in rows]


def delete_assets_with_import_tag(tag: str) -> int:
    """Delete every video asset carrying an import tag.

    Playlist items referencing those assets are removed first.

    Returns:
        Number of assets deleted
    """
    match = "SELECT id FROM video_assets WHERE EXISTS (SELECT 1 FROM json_each(video_assets.import_tags) WHERE value = ?)"
    with get_db() as conn:
        conn.execute(f"DELETE FROM playlist_items WHERE video_asset_id IN ({match})", (tag,))
        cursor = conn.execute(f"DELETE FROM video_assets WHERE id IN ({match})", (tag,))
        deleted = cursor.rowcount

    logger.info("video_assets.deleted_by_tag", tag=tag, count=deleted)
    return deleted


def _asset_columns(fields: dict[str, Any]) -> tuple[list[str], list[Any]]:
    unknown = set(fields) - set(VIDEO_ASSET_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown video asset fields: {sorted(unknown)}")

    columns = list(fields)
    values = [
        json.dumps(fields[column]) if column in _JSON_LIST_COLUMNS else fields[column]
        for column in columns
    ]
    return columns, values


def _json_list(value: str | None) -> list[str]:
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return []
    return [str(item) for item in parsed] if isinstance(parsed, list) else []


def _row_to_asset(row: sqlite3.Row) -> VideoAssetRecord:
    return VideoAssetRecord(
        id=row["id"],
        name=row["name"],
        short_description=row["short_description"],
        stream_uid=row["stream_uid"],
        thumbnail_key=row["thumbnail_key"],
        primary_category=row["primary_category"],
        yoga_sub_category=row["yoga_sub_category"],
        breathing_sub_category=row["breathing_sub_category"],
        meditation_sub_category=row["meditation_sub_category"],
        level=row["level"],
        intensity=row["intensity"],
        strength_demand=row["strength_demand"],
        sequence_role=row["sequence_role"],
        duration_sec=row["duration_sec"],
        goals=_json_list(row["goals"]),
        focus_areas=_json_list(row["focus_areas"]),
        contra_indications=_json_list(row["contra_indications"]),
        import_tags=_json_list(row["import_tags"]),
        status=row["status"],
        version=row["version"],
        created_at=row["created_at"],
    )


# =============================================================================
# PROGRAM TEMPLATES
# =============================================================================


def list_program_templates(
    limit: int = 20,
    offset: int = 0,
    access_level: str | None = None,
    tag_ids: list[str] | None = None,
    status: str = "ACTIVE",
) -> tuple[list[ProgramTemplateRecord], int]:
    """List program templates, newest first.

    Returns:
        Tuple of (page of ProgramTemplateRecord, total matching count)
    """
    where = ["p.status = ?"]
    params: list[Any] = [status]

    if access_level:
        where.append("p.access_level = ?")
        params.append(access_level)
    if tag_ids:
        where.append(_tag_filter("program_template_tags", "program_template_id", "p", tag_ids))
        params.extend(tag_ids)

    clause = " AND ".join(where)
    with get_db() as conn:
        total = conn.execute(
            f"SELECT COUNT(*) AS n FROM program_templates p WHERE {clause}", params
        ).fetchone()["n"]
        rows = conn.execute(
            f"""
            SELECT p.* FROM program_templates p WHERE {clause}
            ORDER BY p.created_at DESC, p.rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()

    return [_row_to_template(row) for row in rows], int(total)


def get_program_template(
    template_id: str,
    status: str | None = None,
) -> ProgramTemplateRecord | None:
    """Get a program template, optionally requiring a status."""
    query = "SELECT * FROM program_templates WHERE id = ?"
    params: list[Any] = [template_id]
    if status:
        query += " AND status = ?"
        params.append(status)

    with get_db() as conn:
        row = conn.execute(query, params).fetchone()

    if row is None:
        return None

    return _row_to_template(row)


def list_program_sections(template_id: str) -> list[ProgramSectionRecord]:
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT type, sort_order, text FROM program_template_sections
            WHERE program_template_id = ?
            ORDER BY type ASC, sort_order ASC
            """,
            (template_id,),
        ).fetchall()

    return [
        ProgramSectionRecord(type=row["type"], sort_order=row["sort_order"], text=row["text"])
        for row in rows
    ]


def list_program_days(template_id: str) -> list[ProgramDayRecord]:
    """Days of a template in day order, each with its ordered items."""
    with get_db() as conn:
        day_rows = conn.execute(
            """
            SELECT id, day_number, title, intent FROM program_days
            WHERE program_template_id = ?
            ORDER BY day_number ASC
            """,
            (template_id,),
        ).fetchall()
        item_rows = conn.execute(
            """
            SELECT i.program_day_id, i.order_index, i.sequence_role, i.video_id
            FROM program_day_items i
            JOIN program_days d ON d.id = i.program_day_id
            WHERE d.program_template_id = ?
            ORDER BY i.order_index ASC
            """,
            (template_id,),
        ).fetchall()

    items_by_day: dict[str, list[ProgramDayItemRecord]] = {}
    for row in item_rows:
        items_by_day.setdefault(row["program_day_id"], []).append(
            ProgramDayItemRecord(
                order_index=row["order_index"],
                sequence_role=row["sequence_role"],
                video_id=row["video_id"],
            )
        )

    return [
        ProgramDayRecord(
            day_number=row["day_number"],
            title=row["title"],
            intent=row["intent"],
            items=items_by_day.get(row["id"], []),
        )
        for row in day_rows
    ]


def get_library_schedule_days(template_id: str) -> list[Any]:
    """Stored `{dayNumber, dayType}` entries of a library schedule."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT days FROM library_program_schedules WHERE program_template_id = ?",
            (template_id,),
        ).fetchone()

    if row is None:
        return []

    try:
        days = json.loads(row["days"])
    except json.JSONDecodeError:
        return []
    return days if isinstance(days, list) else []


def _row_to_template(row: sqlite3.Row) -> ProgramTemplateRecord:
    rhythm = None
    if row["library_rhythm"]:
        try:
            rhythm = json.loads(row["library_rhythm"])
        except json.JSONDecodeError:
            rhythm = None

    return ProgramTemplateRecord(
        id=row["id"],
        title=row["title"],
        sanskrit_title=row["sanskrit_title"],
        subtitle=row["subtitle"],
        description_short=row["description_short"],
        hero_image_key=row["hero_image_key"],
        default_days=row["default_days"],
        default_minutes_per_day=row["default_minutes_per_day"],
        level_label=row["level_label"],
        recommended_level=row["recommended_level"],
        access_level=row["access_level"],
        required_entitlement_key=row["required_entitlement_key"],
        status=row["status"],
        version=row["version"],
        library_rhythm=rhythm if isinstance(rhythm, dict) else None,
        created_at=row["created_at"],
    )
