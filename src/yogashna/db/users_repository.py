"""Repository functions for users and per-user account records.

Covers the users, user_subscriptions, practice_preferences and
program_enrollments tables.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from dataclasses import dataclass
from typing import Any

import structlog

from yogashna.db.database import get_db, now_iso

logger = structlog.get_logger(__name__)

# Columns that update_user() may write
_UPDATABLE_USER_COLUMNS = {
    "phone",
    "name",
    "age",
    "gender",
    "height_cm",
    "weight_kg",
    "wellness_focus_id",
    "primary_goal_id",
    "preferences",
    "is_onboarding_complete",
    "onboarding_completed_at",
}


@dataclass
class UserRecord:
    """User record from database."""

    id: str
    firebase_uid: str
    phone: str | None
    name: str | None
    age: int | None
    gender: str | None
    height_cm: int | None
    weight_kg: int | None
    wellness_focus_id: str | None
    primary_goal_id: str | None
    preferences: dict[str, Any] | None
    is_onboarding_complete: bool
    onboarding_completed_at: str | None
    created_at: str
    updated_at: str


@dataclass
class SubscriptionRecord:
    """Subscription state for a user."""

    user_id: str
    tier: str
    is_active: bool
    store: str | None
    entitlement: str | None
    updated_at: str


@dataclass
class PracticePreferencesRecord:
    """Server-side practice preferences used for playlist selection."""

    user_id: str
    minutes_preference: int | None
    level: str | None


@dataclass
class EnrollmentRecord:
    """Program enrollment of a user."""

    id: str
    user_id: str
    program_template_id: str
    status: str
    created_at: str
    updated_at: str


# =============================================================================
# USERS
# =============================================================================


def get_user_by_firebase_uid(firebase_uid: str) -> UserRecord | None:
    """Get user by Firebase uid.

    Args:
        firebase_uid: Identity from the verified bearer token

    Returns:
        UserRecord if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE firebase_uid = ?", (firebase_uid,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_user(row)


def get_user_by_id(user_id: str) -> UserRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        return None

    return _row_to_user(row)


def get_or_create_user(firebase_uid: str, phone: str | None = None) -> UserRecord:
    """Get the user for a Firebase uid, creating it on first sight.

    Concurrent first requests for the same uid resolve to a single row.

    Args:
        firebase_uid: Identity from the verified bearer token
        phone: Phone number claim, stored only at creation

    Returns:
        Existing or newly created UserRecord
    """
    existing = get_user_by_firebase_uid(firebase_uid)
    if existing is not None:
        return existing

    timestamp = now_iso()
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO users (id, firebase_uid, phone, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (str(uuid.uuid4()), firebase_uid, phone, timestamp, timestamp),
        )
        created = cursor.rowcount > 0

    if created:
        logger.info("users.created", firebase_uid=firebase_uid)

    user = get_user_by_firebase_uid(firebase_uid)
    assert user is not None
    return user


def update_user(user_id: str, **fields: Any) -> UserRecord:
    """Update selected user columns.

    Args:
        user_id: Internal user id
        **fields: Column values; `preferences` is stored as JSON

    Returns:
        Updated UserRecord

    Raises:
        ValueError: If an unknown column is passed
    """
    unknown = set(fields) - _UPDATABLE_USER_COLUMNS
    if unknown:
        raise ValueError(f"Unknown user fields: {sorted(unknown)}")

    columns: list[str] = []
    values: list[Any] = []
    for name, value in fields.items():
        if name == "preferences":
            columns.append("preferences_json = ?")
            values.append(json.dumps(value) if value is not None else None)
        elif name == "is_onboarding_complete":
            columns.append("is_onboarding_complete = ?")
            values.append(1 if value else 0)
        else:
            columns.append(f"{name} = ?")
            values.append(value)

    columns.append("updated_at = ?")
    values.append(now_iso())
    values.append(user_id)

    with get_db() as conn:
        conn.execute(
            f"UPDATE users SET {', '.join(columns)} WHERE id = ?",
            values,
        )

    logger.debug("users.updated", user_id=user_id, fields=sorted(fields))

    user = get_user_by_id(user_id)
    assert user is not None
    return user


def _row_to_user(row: sqlite3.Row) -> UserRecord:
    preferences = json.loads(row["preferences_json"]) if row["preferences_json"] else None
    return UserRecord(
        id=row["id"],
        firebase_uid=row["firebase_uid"],
        phone=row["phone"],
        name=row["name"],
        age=row["age"],
        gender=row["gender"],
        height_cm=row["height_cm"],
        weight_kg=row["weight_kg"],
        wellness_focus_id=row["wellness_focus_id"],
        primary_goal_id=row["primary_goal_id"],
        preferences=preferences,
        is_onboarding_complete=bool(row["is_onboarding_complete"]),
        onboarding_completed_at=row["onboarding_completed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================


def get_subscription(user_id: str) -> SubscriptionRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM user_subscriptions WHERE user_id = ?", (user_id,)
        ).fetchone()

    if row is None:
        return None

    return SubscriptionRecord(
        user_id=row["user_id"],
        tier=row["tier"],
        is_active=bool(row["is_active"]),
        store=row["store"],
        entitlement=row["entitlement"],
        updated_at=row["updated_at"],
    )


def upsert_subscription(
    user_id: str,
    tier: str,
    is_active: bool,
    store: str | None = None,
    entitlement: str | None = None,
) -> None:
    """Create or replace the subscription of a user.

    Args:
        user_id: Internal user id
        tier: 'FREE' or 'PAID'
        is_active: Whether the subscription is currently active
        store: Purchase store (e.g. 'app_store', 'play_store', 'web')
        entitlement: Entitlement key granted by the purchase
    """
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO user_subscriptions (id, user_id, tier, is_active, store, entitlement, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                tier = excluded.tier,
                is_active = excluded.is_active,
                store = excluded.store,
                entitlement = excluded.entitlement,
                updated_at = excluded.updated_at
            """,
            (
                str(uuid.uuid4()),
                user_id,
                tier,
                1 if is_active else 0,
                store,
                entitlement,
                now_iso(),
            ),
        )

    logger.info("subscriptions.upserted", user_id=user_id, tier=tier, is_active=is_active)


# =============================================================================
# PRACTICE PREFERENCES (server side)
# =============================================================================


def get_practice_preferences_record(user_id: str) -> PracticePreferencesRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM practice_preferences WHERE user_id = ?", (user_id,)
        ).fetchone()

    if row is None:
        return None

    return PracticePreferencesRecord(
        user_id=row["user_id"],
        minutes_preference=row["minutes_preference"],
        level=row["level"],
    )


def upsert_practice_preferences_record(
    user_id: str,
    minutes_preference: int | None,
    level: str | None,
) -> None:
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO practice_preferences (user_id, minutes_preference, level)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                minutes_preference = excluded.minutes_preference,
                level = excluded.level
            """,
            (user_id, minutes_preference, level),
        )

    logger.debug("practice_preferences.upserted", user_id=user_id)


# =============================================================================
# PROGRAM ENROLLMENTS
# =============================================================================


def get_enrollment(user_id: str, program_template_id: str) -> EnrollmentRecord | None:
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT * FROM program_enrollments
            WHERE user_id = ? AND program_template_id = ?
            """,
            (user_id, program_template_id),
        ).fetchone()

    if row is None:
        return None

    return _row_to_enrollment(row)


def list_enrollments(user_id: str) -> list[EnrollmentRecord]:
    """List enrollments of a user, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM program_enrollments
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (user_id,),
        ).fetchall()

    return [_row_to_enrollment(row) for row in rows]


def count_active_enrollments(user_id: str) -> int:
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT COUNT(*) AS n FROM program_enrollments
            WHERE user_id = ? AND status = 'ACTIVE'
            """,
            (user_id,),
        ).fetchone()

    return int(row["n"])


def upsert_enrollment(
    user_id: str,
    program_template_id: str,
    status: str = "ACTIVE",
) -> EnrollmentRecord:
    """Create an enrollment or set the status of the existing one.

    Args:
        user_id: Internal user id
        program_template_id: Program template id
        status: 'ACTIVE', 'PAUSED' or 'COMPLETED'

    Returns:
        The stored EnrollmentRecord
    """
    timestamp = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO program_enrollments
                (id, user_id, program_template_id, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, program_template_id) DO UPDATE SET
                status = excluded.status,
                updated_at = excluded.updated_at
            """,
            (str(uuid.uuid4()), user_id, program_template_id, status, timestamp, timestamp),
        )

    logger.info(
        "enrollments.upserted",
        user_id=user_id,
        program_template_id=program_template_id,
        status=status,
    )

    enrollment = get_enrollment(user_id, program_template_id)
    assert enrollment is not None
    return enrollment


def _row_to_enrollment(row: sqlite3.Row) -> EnrollmentRecord:
    return EnrollmentRecord(
        id=row["id"],
        user_id=row["user_id"],
        program_template_id=row["program_template_id"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
