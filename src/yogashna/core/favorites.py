"""Favorite videos and programs.

Storage: user_state key favorites_v1, list of ids in insertion order.
"""

from __future__ import annotations

import structlog

from yogashna.db.state_repository import get_state, set_state

logger = structlog.get_logger(__name__)

FAVORITES_KEY = "favorites_v1"


def list_favorites(user_id: str) -> list[str]:
    stored = get_state(user_id, FAVORITES_KEY)
    if not isinstance(stored, list):
        return []
    # Drop duplicates while keeping first insertion
    return list(dict.fromkeys(str(item) for item in stored))


def is_favorite(user_id: str, item_id: str) -> bool:
    return item_id in list_favorites(user_id)


def count_favorites(user_id: str) -> int:
    return len(list_favorites(user_id))


def toggle_favorite(user_id: str, item_id: str) -> bool:
    """Add the id if absent, remove it if present.

    Returns:
        True when the id is a favorite after the call
    """
    favorites = list_favorites(user_id)
    if item_id in favorites:
        favorites.remove(item_id)
        now_favorite = False
    else:
        favorites.append(item_id)
        now_favorite = True

    set_state(user_id, FAVORITES_KEY, favorites)
    logger.info("favorites.toggled", user_id=user_id, item_id=item_id, favorite=now_favorite)
    return now_favorite
