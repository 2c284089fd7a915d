"""Library playlist preview for program templates.

A library day is built from every ACTIVE video asset at the template's
recommended level, without any per-user state.
"""

from __future__ import annotations

from typing import Any

import structlog

from yogashna.core.errors import BadRequestError, NotFoundError
from yogashna.core.playlist_selection import (
    generate_library_sequence,
    resolve_library_day_type,
    sort_library_candidates,
)
from yogashna.db.catalog_repository import find_candidate_assets, get_program_template

logger = structlog.get_logger(__name__)

# Upper bound on previewable days when a template runs shorter than this
LIBRARY_MIN_HORIZON_DAYS = 21


def library_day_limit(default_days: int | None) -> int:
    """Last previewable day for a template."""
    return max(default_days or 0, LIBRARY_MIN_HORIZON_DAYS)


def preview_library_day(template_id: str, day_number: int) -> dict[str, Any]:
    """Preview the library playlist of a template day.

    Args:
        template_id: Program template id
        day_number: 1-based day

    Returns:
        Preview dict with ordered playlist items

    Raises:
        NotFoundError: If the template does not exist
        BadRequestError: If day_number is outside 1..library_day_limit
    """
    template = get_program_template(template_id)
    if template is None:
        raise NotFoundError(f"Program template with id {template_id} not found")

    last_day = library_day_limit(template.default_days)
    if not 1 <= day_number <= last_day:
        raise BadRequestError(f"dayNumber must be between 1 and {last_day}")

    target_duration_sec = (template.default_minutes_per_day or 0) * 60
    day_type = resolve_library_day_type(template.library_rhythm, day_number)

    candidates = sort_library_candidates(
        find_candidate_assets(level=template.recommended_level)
    )
    selection = generate_library_sequence(candidates, target_duration_sec, day_number)

    logger.debug(
        "program_library.previewed",
        template_id=template_id,
        day_number=day_number,
        items=len(selection.items),
    )
    return {
        "isPreview": True,
        "mode": "LIBRARY",
        "dayNumber": day_number,
        "dayType": day_type,
        "targetDurationSec": target_duration_sec,
        "totalDurationSec": selection.total_duration_sec,
        "playlistItems": [
            {
                "videoAssetId": item.id,
                "role": item.sequence_role,
                "durationSec": item.duration_sec,
                "order": order,
            }
            for order, item in enumerate(selection.items, start=1)
        ],
    }
