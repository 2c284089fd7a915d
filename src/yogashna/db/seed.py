"""Development seed data.

Seeds tag types and tags, six catalog videos, two program templates with
sections, days and day items, a library schedule and a pool of video
assets for playlist generation. Every insert is INSERT OR IGNORE, so
seeding twice leaves the database unchanged.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import structlog

from yogashna.db.database import get_db

logger = structlog.get_logger(__name__)

_SEED_NAMESPACE = uuid.UUID("6f1d8a52-3c1e-4a8e-9d7b-2f5e0c4b9a11")
_SEED_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)

BACK_PAIN_PROGRAM_ID = "10000000-0000-0000-0000-000000000001"
STRESS_RELIEF_PROGRAM_ID = "10000000-0000-0000-0000-000000000002"


def _seed_id(*parts: str) -> str:
    return str(uuid.uuid5(_SEED_NAMESPACE, ":".join(parts)))


def _created_at(index: int) -> str:
    """Deterministic, strictly increasing creation timestamps."""
    return (_SEED_EPOCH + timedelta(minutes=index)).isoformat()


def _video_id(n: int) -> str:
    return f"00000000-0000-0000-0000-{n:012d}"


def _asset_id(n: int) -> str:
    return f"20000000-0000-0000-0000-{n:012d}"


# =============================================================================
# SEED DATA
# =============================================================================

TAG_TYPES = [
    ("goal", "Goal"),
    ("style", "Style"),
    ("duration_bucket", "Duration Bucket"),
    ("level", "Level"),
    ("focus_area", "Focus Area"),
    ("contraindication", "Contraindication"),
    ("sub_category", "Sub Category"),
]

# (tag type code, tag code, label)
TAGS = [
    ("goal", "back_pain", "Back Pain"),
    ("goal", "stress_relief", "Stress Relief"),
    ("focus_area", "health_support", "Health Support"),
    ("level", "beginner", "Beginner"),
    ("duration_bucket", "5_7_min", "5-7 min"),
    ("duration_bucket", "12_20_min", "12-20 min"),
    ("style", "hatha", "Hatha"),
    ("sub_category", "warmup", "WarmUp"),
    ("sub_category", "main_practice", "MainPractice"),
]

# (n, name, description, category, duration, level, intensity, strength,
#  access, entitlement, stream uid, thumbnail key)
VIDEOS = [
    (1, "Gentle Morning Warm-Up", "Start your day with gentle stretches to wake up your body",
     "YOGA", 360, "BEGINNER", "LOW", "VERY_LIGHT", "FREE", None,
     "cfstream-warmup-001", "thumbnails/warmup-001.jpg"),
    (2, "Lower Back Relief Flow", "Gentle yoga flow targeting lower back tension and pain",
     "YOGA", 720, "BEGINNER", "LOW", "LIGHT", "SUBSCRIPTION", "premium_access",
     "cfstream-backpain-001", "thumbnails/backpain-001.jpg"),
    (3, "Deep Breathing for Stress", "Pranayama practice to calm the mind and reduce stress",
     "BREATHING", 480, "ALL_LEVELS", "LOW", "VERY_LIGHT", "FREE", None,
     "cfstream-breathing-001", "thumbnails/breathing-001.jpg"),
    (4, "Evening Relaxation", "Guided meditation to release tension and prepare for rest",
     "MEDITATION", 600, "ALL_LEVELS", "LOW", "VERY_LIGHT", "SUBSCRIPTION", "premium_access",
     "cfstream-meditation-001", "thumbnails/meditation-001.jpg"),
    (5, "Core Strengthening Practice", "Build core stability to support your back and posture",
     "YOGA", 900, "INTERMEDIATE", "MEDIUM", "MODERATE", "SUBSCRIPTION", "premium_access",
     "cfstream-core-001", "thumbnails/core-001.jpg"),
    (6, "Spinal Mobility Flow", "Improve flexibility and range of motion in your spine",
     "YOGA", 780, "BEGINNER", "MEDIUM", "LIGHT", "FREE", None,
     "cfstream-spine-001", "thumbnails/spine-001.jpg"),
]

# video number -> (tag type code, tag code) pairs
VIDEO_TAGS = {
    1: [("sub_category", "warmup"), ("level", "beginner"), ("duration_bucket", "5_7_min")],
    2: [("goal", "back_pain"), ("focus_area", "health_support"),
        ("duration_bucket", "12_20_min"), ("style", "hatha")],
    3: [("goal", "stress_relief")],
    4: [("goal", "stress_relief")],
    5: [("goal", "back_pain"), ("focus_area", "health_support")],
    6: [("goal", "back_pain"), ("duration_bucket", "12_20_min")],
}

PROGRAMS = [
    {
        "id": BACK_PAIN_PROGRAM_ID,
        "title": "Back Pain Relief Program",
        "sanskrit_title": "Pṛṣṭha Śūla Nivāraṇa",
        "subtitle": "Gentle practice for a healthy spine",
        "description_short": "A 3-day program designed to relieve back pain through targeted yoga flows",
        "hero_image_key": "programs/back-pain-hero.jpg",
        "default_days": 3,
        "default_minutes_per_day": 15,
        "level_label": "Beginner Friendly",
        "recommended_level": "BEGINNER",
        "library_rhythm": {"pattern": [3, 1], "types": ["GENTLE", "RESTORE"]},
        "sections": [
            ("BENEFIT", 1, "Reduces lower back tension and pain"),
            ("BENEFIT", 2, "Improves spinal flexibility and posture"),
            ("SAFETY_NOTE", 1, "Consult your doctor if you have severe or chronic back pain"),
        ],
        "days": [
            (1, "Gentle Introduction", "Warm up the body and assess your current state",
             [(1, "warmup"), (2, "main")]),
            (2, "Deepen the Practice", "Target deeper layers of tension in the back",
             [(6, "main"), (3, "cooldown")]),
            (3, "Strengthen & Release", "Build core strength while releasing remaining tension",
             [(1, "warmup"), (5, "main"), (4, "cooldown")]),
        ],
        "tags": [("goal", "back_pain"), ("focus_area", "health_support")],
    },
    {
        "id": STRESS_RELIEF_PROGRAM_ID,
        "title": "Stress Relief Journey",
        "sanskrit_title": "Tanāva Mukti Yātrā",
        "subtitle": "Find calm in your daily life",
        "description_short": "A 3-day program combining breath, movement, and meditation to reduce stress",
        "hero_image_key": "programs/stress-relief-hero.jpg",
        "default_days": 3,
        "default_minutes_per_day": 12,
        "level_label": "All Levels",
        "recommended_level": None,
        "library_rhythm": None,
        "sections": [
            ("BENEFIT", 1, "Reduces anxiety and mental tension"),
            ("BENEFIT", 2, "Improves sleep quality and emotional balance"),
            ("WHAT_YOU_NEED", 1, "A quiet space where you can practice without interruption"),
        ],
        "days": [
            (1, "Breathe & Release", "Learn foundational breathing techniques for stress relief",
             [(3, "main"), (4, "cooldown")]),
            (2, "Move & Flow", "Release physical tension through gentle movement",
             [(1, "warmup"), (6, "main")]),
            (3, "Rest & Restore", "Deep relaxation to integrate the practice",
             [(3, "main"), (4, "cooldown")]),
        ],
        "tags": [("goal", "stress_relief")],
    },
]

# Repeating week of the back pain program's 21-day schedule
BACK_PAIN_WEEK = ["GENTLE", "BUILD", "BUILD", "GENTLE", "BUILD", "BUILD", "RESTORE"]

# (n, name, category, sub-category field, sub-category, role, duration, level)
VIDEO_ASSETS = [
    (1, "Sunrise Joint Warm-Up", "YOGA", "yoga_sub_category", "WARM_UP", "MANDATORY", 300, "BEGINNER"),
    (2, "Gentle Hatha Flow", "YOGA", "yoga_sub_category", "MAIN_PRACTICE", "ADJUSTABLE", 600, "BEGINNER"),
    (3, "Core and Spine Stability", "YOGA", "yoga_sub_category", "STRENGTH_STABILITY", "ADJUSTABLE", 540, "BEGINNER"),
    (4, "Hip Mobility Sequence", "YOGA", "yoga_sub_category", "MOBILITY", "ADJUSTABLE", 420, "BEGINNER"),
    (5, "Slow Cool-Down Stretch", "YOGA", "yoga_sub_category", "COOL_DOWN", "ADJUSTABLE", 240, "BEGINNER"),
    (6, "Balancing Breath", "BREATHING", "breathing_sub_category", "BALANCING", "ADJUSTABLE", 180, "BEGINNER"),
    (7, "Guided Body Scan", "MEDITATION", "meditation_sub_category", "GUIDED_RELAXATION", "OPTIONAL", 300, "BEGINNER"),
    (8, "Supported Restorative Poses", "YOGA", "yoga_sub_category", "RESTORATIVE", "ADJUSTABLE", 480, "BEGINNER"),
    (9, "Standing Strength Flow", "YOGA", "yoga_sub_category", "MAIN_PRACTICE", "ADJUSTABLE", 900, "INTERMEDIATE"),
    (10, "Short Yoga Nidra", "MEDITATION", "meditation_sub_category", "YOGA_NIDRA_SHORT", "OPTIONAL", 600, "ALL_LEVELS"),
]

# (entity type, entity id, language, field, value)
TRANSLATIONS = [
    ("video", _video_id(1), "hi", "name", "सौम्य प्रातः वार्म-अप"),
    ("video", _video_id(3), "hi", "name", "तनाव के लिए गहरी श्वास"),
    ("program_template", BACK_PAIN_PROGRAM_ID, "hi", "title", "पीठ दर्द राहत कार्यक्रम"),
    ("tag", _seed_id("tag", "goal", "back_pain"), "hi", "label", "पीठ दर्द"),
]


# =============================================================================
# SEEDING
# =============================================================================


def seed_database() -> dict[str, int]:
    """Insert the seed data that is not present yet.

    Returns:
        Number of rows inserted per table
    """
    inserted: dict[str, int] = {}

    def run(table: str, sql: str, rows: list[tuple]) -> None:
        count = 0
        for row in rows:
            count += conn.execute(sql, row).rowcount
        inserted[table] = inserted.get(table, 0) + count

    with get_db() as conn:
        run(
            "tag_types",
            "INSERT OR IGNORE INTO tag_types (id, code, label) VALUES (?, ?, ?)",
            [(_seed_id("tag_type", code), code, label) for code, label in TAG_TYPES],
        )
        run(
            "tags",
            "INSERT OR IGNORE INTO tags (id, tag_type_id, code, label) VALUES (?, ?, ?, ?)",
            [
                (_seed_id("tag", type_code, code), _seed_id("tag_type", type_code), code, label)
                for type_code, code, label in TAGS
            ],
        )
        run(
            "videos",
            """
            INSERT OR IGNORE INTO videos
                (id, name, description_short, primary_category, duration_sec, level,
                 intensity, strength_demand, access_level, required_entitlement_key,
                 cloudflare_stream_uid, thumbnail_r2_key, status, version, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'ACTIVE', 1, ?)
            """,
            [(_video_id(n), *fields, _created_at(n)) for n, *fields in VIDEOS],
        )
        run(
            "video_tags",
            "INSERT OR IGNORE INTO video_tags (video_id, tag_id) VALUES (?, ?)",
            [
                (_video_id(n), _seed_id("tag", type_code, code))
                for n, tags in VIDEO_TAGS.items()
                for type_code, code in tags
            ],
        )

        for index, program in enumerate(PROGRAMS, start=1):
            _seed_program(conn, program, index, run)

        run(
            "library_program_schedules",
            "INSERT OR IGNORE INTO library_program_schedules (program_template_id, days) VALUES (?, ?)",
            [
                (
                    BACK_PAIN_PROGRAM_ID,
                    json.dumps(
                        [
                            {"dayNumber": day, "dayType": BACK_PAIN_WEEK[(day - 1) % 7]}
                            for day in range(1, 22)
                        ]
                    ),
                )
            ],
        )
        run(
            "video_assets",
            """
            INSERT OR IGNORE INTO video_assets
                (id, name, short_description, stream_uid, thumbnail_key, primary_category,
                 yoga_sub_category, breathing_sub_category, meditation_sub_category,
                 level, intensity, strength_demand, sequence_role, duration_sec,
                 goals, focus_areas, contra_indications, import_tags, status, version,
                 created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'LOW', 'VERY_LIGHT', ?, ?, ?, '[]', '[]', '[]',
                    'ACTIVE', '1.0', ?)
            """,
            [_asset_row(asset) for asset in VIDEO_ASSETS],
        )
        run(
            "entity_translations",
            """
            INSERT OR IGNORE INTO entity_translations
                (entity_type, entity_id, language_code, field, value)
            VALUES (?, ?, ?, ?, ?)
            """,
            TRANSLATIONS,
        )

    logger.info("seed.completed", **inserted)
    return inserted


def _seed_program(
    conn: sqlite3.Connection,
    program: dict[str, Any],
    index: int,
    run: Callable[[str, str, list[tuple]], None],
) -> None:
    template_id = program["id"]
    run(
        "program_templates",
        """
        INSERT OR IGNORE INTO program_templates
            (id, title, sanskrit_title, subtitle, description_short, hero_image_key,
             default_days, default_minutes_per_day, level_label, recommended_level,
             access_level, required_entitlement_key, status, version, library_rhythm,
             created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'SUBSCRIPTION', 'premium_access', 'ACTIVE', 1, ?, ?)
        """,
        [
            (
                template_id,
                program["title"],
                program["sanskrit_title"],
                program["subtitle"],
                program["description_short"],
                program["hero_image_key"],
                program["default_days"],
                program["default_minutes_per_day"],
                program["level_label"],
                program["recommended_level"],
                json.dumps(program["library_rhythm"]) if program["library_rhythm"] else None,
                _created_at(100 + index),
            )
        ],
    )
    run(
        "program_template_sections",
        """
        INSERT OR IGNORE INTO program_template_sections
            (id, program_template_id, type, sort_order, text)
        VALUES (?, ?, ?, ?, ?)
        """,
        [
            (_seed_id("section", template_id, section_type, str(order)), template_id, section_type, order, text)
            for section_type, order, text in program["sections"]
        ],
    )

    for day_number, title, intent, items in program["days"]:
        day_id = _seed_id("day", template_id, str(day_number))
        run(
            "program_days",
            """
            INSERT OR IGNORE INTO program_days (id, program_template_id, day_number, title, intent)
            VALUES (?, ?, ?, ?, ?)
            """,
            [(day_id, template_id, day_number, title, intent)],
        )
        run(
            "program_day_items",
            """
            INSERT OR IGNORE INTO program_day_items
                (id, program_day_id, order_index, video_id, sequence_role)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (_seed_id("item", day_id, str(order)), day_id, order, _video_id(video_n), role)
                for order, (video_n, role) in enumerate(items, start=1)
            ],
        )

    run(
        "program_template_tags",
        "INSERT OR IGNORE INTO program_template_tags (program_template_id, tag_id) VALUES (?, ?)",
        [(template_id, _seed_id("tag", type_code, code)) for type_code, code in program["tags"]],
    )


def _asset_row(asset: tuple) -> tuple:
    n, name, category, sub_field, sub_category, role, duration, level = asset
    subs = {
        "yoga_sub_category": None,
        "breathing_sub_category": None,
        "meditation_sub_category": None,
    }
    subs[sub_field] = sub_category
    slug = name.lower().replace(" ", "-")
    return (
        _asset_id(n),
        name,
        f"{name} practice",
        f"cfstream-asset-{n:03d}",
        f"thumbnails/assets/{slug}.jpg",
        category,
        subs["yoga_sub_category"],
        subs["breathing_sub_category"],
        subs["meditation_sub_category"],
        level,
        role,
        duration,
        json.dumps(["back_pain"] if category == "YOGA" else ["stress_relief"]),
        _created_at(200 + n),
    )
