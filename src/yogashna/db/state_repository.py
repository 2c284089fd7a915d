"""Repository functions for the user_state key-value table.

Each (user_id, key) pair holds one JSON document, mirroring the storage
the mobile client keeps on device.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from yogashna.db.database import get_db, now_iso

logger = structlog.get_logger(__name__)


def get_state(user_id: str, key: str) -> Any | None:
    """Read the JSON value stored under a key.

    Args:
        user_id: Internal user id
        key: Storage key (e.g. "favorites_v1")

    Returns:
        Decoded value, or None when nothing is stored or the stored
        document is not valid JSON
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT value FROM user_state WHERE user_id = ? AND key = ?",
            (user_id, key),
        ).fetchone()

    if row is None:
        return None

    try:
        return json.loads(row["value"])
    except json.JSONDecodeError:
        logger.warning("user_state.corrupt_value", user_id=user_id, key=key)
        return None


def set_state(user_id: str, key: str, value: Any) -> None:
    """Store a JSON-serializable value under a key (last write wins)."""
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO user_state (user_id, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id, key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (user_id, key, json.dumps(value, ensure_ascii=False), now_iso()),
        )

    logger.debug("user_state.saved", user_id=user_id, key=key)


def delete_state(user_id: str, key: str) -> bool:
    """Remove a key.

    Returns:
        True if a value was deleted
    """
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM user_state WHERE user_id = ? AND key = ?",
            (user_id, key),
        )
        deleted = cursor.rowcount > 0

    if deleted:
        logger.debug("user_state.deleted", user_id=user_id, key=key)

    return deleted
