"""SQLite database connection and schema management.

Provides connection management and schema initialization for the
Yogashna service.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/yogashna.db")

# Current database path (module-level, set by init_db)
_db_path: Path | None = None


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string (microsecond precision)."""
    return datetime.now(timezone.utc).isoformat()


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/yogashna.db
    """
    global _db_path
    _db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    # Ensure directory exists
    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def get_db_path() -> Path:
    """Path of the active database file."""
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    One `with` block is one transaction: committed on normal exit,
    rolled back when the block raises.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM videos").fetchall()
    """
    db_path = get_db_path()

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Users and account state
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            firebase_uid TEXT NOT NULL UNIQUE,
            phone TEXT,
            name TEXT,
            age INTEGER,
            gender TEXT,
            height_cm INTEGER,
            weight_kg INTEGER,
            wellness_focus_id TEXT,
            primary_goal_id TEXT,
            preferences_json TEXT,
            is_onboarding_complete INTEGER NOT NULL DEFAULT 0,
            onboarding_completed_at TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS user_subscriptions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
            tier TEXT NOT NULL DEFAULT 'FREE' CHECK(tier IN ('FREE', 'PAID')),
            is_active INTEGER NOT NULL DEFAULT 0,
            store TEXT,
            entitlement TEXT,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS practice_preferences (
            user_id TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            minutes_preference INTEGER,
            level TEXT
        );

        -- Key-value state mirrored from the mobile client storage
        CREATE TABLE IF NOT EXISTS user_state (
            user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            PRIMARY KEY (user_id, key)
        );

        -- Catalog
        CREATE TABLE IF NOT EXISTS tag_types (
            id TEXT PRIMARY KEY,
            code TEXT NOT NULL UNIQUE,
            label TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS tags (
            id TEXT PRIMARY KEY,
            tag_type_id TEXT NOT NULL REFERENCES tag_types(id),
            code TEXT NOT NULL,
            label TEXT NOT NULL,
            UNIQUE (tag_type_id, code)
        );

        CREATE TABLE IF NOT EXISTS videos (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description_short TEXT,
            primary_category TEXT NOT NULL CHECK(primary_category IN ('YOGA', 'BREATHING', 'MEDITATION')),
            duration_sec INTEGER NOT NULL,
            level TEXT,
            intensity TEXT,
            strength_demand TEXT,
            access_level TEXT NOT NULL DEFAULT 'FREE' CHECK(access_level IN ('FREE', 'SUBSCRIPTION')),
            required_entitlement_key TEXT,
            cloudflare_stream_uid TEXT,
            thumbnail_r2_key TEXT,
            status TEXT NOT NULL DEFAULT 'ACTIVE' CHECK(status IN ('ACTIVE', 'INACTIVE')),
            version INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS video_tags (
            video_id TEXT NOT NULL REFERENCES videos(id) ON DELETE CASCADE,
            tag_id TEXT NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
            PRIMARY KEY (video_id, tag_id)
        );

        CREATE TABLE IF NOT EXISTS entity_translations (
            entity_type TEXT NOT NULL,
            entity_id TEXT NOT NULL,
            language_code TEXT NOT NULL,
            field TEXT NOT NULL,
            value TEXT NOT NULL,
            PRIMARY KEY (entity_type, entity_id, language_code, field)
        );

        CREATE TABLE IF NOT EXISTS video_assets (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            short_description TEXT,
            stream_uid TEXT UNIQUE,
            thumbnail_key TEXT,
            primary_category TEXT NOT NULL CHECK(primary_category IN ('YOGA', 'BREATHING', 'MEDITATION')),
            yoga_sub_category TEXT,
            breathing_sub_category TEXT,
            meditation_sub_category TEXT,
            level TEXT,
            intensity TEXT,
            strength_demand TEXT,
            sequence_role TEXT NOT NULL CHECK(sequence_role IN ('MANDATORY', 'ADJUSTABLE', 'OPTIONAL')),
            duration_sec INTEGER NOT NULL,
            goals TEXT NOT NULL DEFAULT '[]',
            focus_areas TEXT NOT NULL DEFAULT '[]',
            contra_indications TEXT NOT NULL DEFAULT '[]',
            import_tags TEXT NOT NULL DEFAULT '[]',
            status TEXT NOT NULL DEFAULT 'ACTIVE' CHECK(status IN ('ACTIVE', 'INACTIVE')),
            version TEXT NOT NULL DEFAULT '1.0',
            created_at TEXT NOT NULL
        );

        -- Programs
        CREATE TABLE IF NOT EXISTS program_templates (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            sanskrit_title TEXT,
            subtitle TEXT,
            description_short TEXT,
            hero_image_key TEXT,
            default_days INTEGER NOT NULL DEFAULT 21,
            default_minutes_per_day INTEGER,
            level_label TEXT,
            recommended_level TEXT,
            access_level TEXT NOT NULL DEFAULT 'FREE' CHECK(access_level IN ('FREE', 'SUBSCRIPTION')),
            required_entitlement_key TEXT,
            status TEXT NOT NULL DEFAULT 'ACTIVE' CHECK(status IN ('ACTIVE', 'INACTIVE')),
            version INTEGER NOT NULL DEFAULT 1,
            library_rhythm TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS program_template_sections (
            id TEXT PRIMARY KEY,
            program_template_id TEXT NOT NULL REFERENCES program_templates(id) ON DELETE CASCADE,
            type TEXT NOT NULL CHECK(type IN ('BENEFIT', 'SAFETY_NOTE', 'WHAT_YOU_NEED')),
            sort_order INTEGER NOT NULL DEFAULT 1,
            text TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS program_days (
            id TEXT PRIMARY KEY,
            program_template_id TEXT NOT NULL REFERENCES program_templates(id) ON DELETE CASCADE,
            day_number INTEGER NOT NULL,
            title TEXT,
            intent TEXT,
            UNIQUE (program_template_id, day_number)
        );

        CREATE TABLE IF NOT EXISTS program_day_items (
            id TEXT PRIMARY KEY,
            program_day_id TEXT NOT NULL REFERENCES program_days(id) ON DELETE CASCADE,
            order_index INTEGER NOT NULL,
            video_id TEXT NOT NULL REFERENCES videos(id),
            sequence_role TEXT NOT NULL CHECK(sequence_role IN ('warmup', 'main', 'cooldown')),
            UNIQUE (program_day_id, order_index)
        );

        CREATE TABLE IF NOT EXISTS program_template_tags (
            program_template_id TEXT NOT NULL REFERENCES program_templates(id) ON DELETE CASCADE,
            tag_id TEXT NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
            PRIMARY KEY (program_template_id, tag_id)
        );

        CREATE TABLE IF NOT EXISTS library_program_schedules (
            program_template_id TEXT PRIMARY KEY REFERENCES program_templates(id) ON DELETE CASCADE,
            days TEXT NOT NULL DEFAULT '[]'
        );

        -- Enrollments and Abhyasa cycles
        CREATE TABLE IF NOT EXISTS program_enrollments (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            program_template_id TEXT NOT NULL REFERENCES program_templates(id),
            status TEXT NOT NULL DEFAULT 'ACTIVE' CHECK(status IN ('ACTIVE', 'PAUSED', 'COMPLETED')),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE (user_id, program_template_id)
        );

        CREATE TABLE IF NOT EXISTS abhyasa_cycles (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            program_template_id TEXT NOT NULL REFERENCES program_templates(id),
            start_date TEXT,
            cycle_days INTEGER NOT NULL DEFAULT 21,
            minutes_preference INTEGER,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS abhyasa_day_plans (
            id TEXT PRIMARY KEY,
            abhyasa_cycle_id TEXT NOT NULL REFERENCES abhyasa_cycles(id) ON DELETE CASCADE,
            day_number INTEGER NOT NULL,
            day_type TEXT NOT NULL CHECK(day_type IN ('GENTLE', 'BUILD', 'RESTORE')),
            total_duration_sec INTEGER NOT NULL DEFAULT 0,
            UNIQUE (abhyasa_cycle_id, day_number)
        );

        CREATE TABLE IF NOT EXISTS playlist_items (
            id TEXT PRIMARY KEY,
            abhyasa_day_plan_id TEXT NOT NULL REFERENCES abhyasa_day_plans(id) ON DELETE CASCADE,
            video_asset_id TEXT NOT NULL REFERENCES video_assets(id),
            primary_category TEXT NOT NULL,
            yoga_sub_category TEXT,
            breathing_sub_category TEXT,
            meditation_sub_category TEXT,
            sequence_role TEXT NOT NULL,
            duration_sec INTEGER NOT NULL,
            position INTEGER NOT NULL,
            created_at TEXT NOT NULL
        );

        -- Indices
        CREATE INDEX IF NOT EXISTS idx_videos_status ON videos(status);
        CREATE INDEX IF NOT EXISTS idx_video_assets_status ON video_assets(status);
        CREATE INDEX IF NOT EXISTS idx_enrollments_user ON program_enrollments(user_id, status);
        CREATE INDEX IF NOT EXISTS idx_cycles_user_program ON abhyasa_cycles(user_id, program_template_id);
        CREATE INDEX IF NOT EXISTS idx_playlist_items_plan ON playlist_items(abhyasa_day_plan_id, position);
        """
    )
