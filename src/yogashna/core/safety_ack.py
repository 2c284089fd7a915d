"""Safety note acknowledgments per program.

An acknowledgment stays valid for ACK_VALIDITY_DAYS days, after which
the user is asked to confirm the program's safety notes again.

Storage: user_state key safety_ack_v1, list of {programId, timestamp}
with timestamps in epoch milliseconds.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from yogashna.db.state_repository import delete_state, get_state, set_state

logger = structlog.get_logger(__name__)

SAFETY_ACK_KEY = "safety_ack_v1"
ACK_VALIDITY_DAYS = 30
ACK_VALIDITY_MS = ACK_VALIDITY_DAYS * 24 * 60 * 60 * 1000


def _now_ms(now: datetime | None) -> int:
    return int((now or datetime.now(timezone.utc)).timestamp() * 1000)


def _load_records(user_id: str) -> list[dict[str, Any]]:
    stored = get_state(user_id, SAFETY_ACK_KEY)
    if not isinstance(stored, list):
        return []
    return [
        r for r in stored
        if isinstance(r, dict) and "programId" in r and isinstance(r.get("timestamp"), (int, float))
    ]


def has_safety_acknowledgment(
    user_id: str,
    program_id: str,
    now: datetime | None = None,
) -> bool:
    """True when the program was acknowledged less than 30 days ago."""
    record = next((r for r in _load_records(user_id) if r["programId"] == program_id), None)
    if record is None:
        return False
    return _now_ms(now) - record["timestamp"] < ACK_VALIDITY_MS


def save_safety_acknowledgment(
    user_id: str,
    program_id: str,
    now: datetime | None = None,
) -> None:
    """Record an acknowledgment, replacing the program's previous one.

    Expired records of other programs are pruned.
    """
    now_ms = _now_ms(now)
    records = [r for r in _load_records(user_id) if r["programId"] != program_id]
    records.append({"programId": program_id, "timestamp": now_ms})
    records = [r for r in records if now_ms - r["timestamp"] < ACK_VALIDITY_MS]

    set_state(user_id, SAFETY_ACK_KEY, records)
    logger.info("safety_ack.saved", user_id=user_id, program_id=program_id)


def clear_all_acknowledgments(user_id: str) -> None:
    delete_state(user_id, SAFETY_ACK_KEY)
    logger.info("safety_ack.cleared", user_id=user_id)
