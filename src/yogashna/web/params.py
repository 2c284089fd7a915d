"""Lenient parsing of path and query string parameters.

Paging values that do not parse fall back to their defaults instead of
failing the request. Day numbers must parse to a positive integer.
"""

from __future__ import annotations

import re

from yogashna.core.errors import BadRequestError

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: str | None) -> int | None:
    """Leading integer of a string ("12abc" -> 12), or None."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_limit(value: str | None, default: int, maximum: int) -> int:
    """Positive page size capped at maximum."""
    parsed = parse_int(value)
    if parsed is None or parsed <= 0:
        return default
    return min(parsed, maximum)


def parse_offset(value: str | None) -> int:
    parsed = parse_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def parse_min_zero(value: str | None) -> int | None:
    parsed = parse_int(value)
    if parsed is None or parsed < 0:
        return None
    return parsed


def parse_id_list(value: str | None) -> list[str] | None:
    """Comma separated ids, or None when empty."""
    if not value or not value.strip():
        return None
    ids = [part.strip() for part in value.split(",") if part.strip()]
    return ids or None


def parse_day_number(value: str) -> int:
    """Day number from a path segment.

    Raises:
        BadRequestError: If the value is not a positive integer
    """
    parsed = parse_int(value)
    if parsed is None or parsed <= 0:
        raise BadRequestError("dayNumber must be a positive integer")
    return parsed


def parse_flag(value: str | None) -> bool:
    """Only the literal string "true" enables a flag."""
    return value == "true"
