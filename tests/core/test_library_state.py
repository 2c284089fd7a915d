"""Tests for favorites, continue watching and safety acknowledgments."""

from datetime import datetime, timedelta, timezone

from yogashna.core.continue_watching import (
    ContinueWatchingItem,
    clear_continue_watching,
    get_continue_watching,
    get_progress_percent,
    safe_position,
    set_continue_watching,
    update_position,
)
from yogashna.core.favorites import count_favorites, is_favorite, list_favorites, toggle_favorite
from yogashna.core.safety_ack import (
    clear_all_acknowledgments,
    has_safety_acknowledgment,
    save_safety_acknowledgment,
)

NOW = datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)


class TestFavorites:
    """Tests for favorite toggling."""

    def test_toggle_adds_then_removes(self, user_id):
        assert toggle_favorite(user_id, "video-1") is True
        assert is_favorite(user_id, "video-1")
        assert toggle_favorite(user_id, "video-1") is False
        assert not is_favorite(user_id, "video-1")

    def test_insertion_order_kept(self, user_id):
        for item in ("b", "a", "c"):
            toggle_favorite(user_id, item)
        assert list_favorites(user_id) == ["b", "a", "c"]
        assert count_favorites(user_id) == 3

    def test_favorites_are_per_user(self, user_id, db):
        """Another user's favorites are separate."""
        from yogashna.db.users_repository import get_or_create_user

        other = get_or_create_user("uid-other").id
        toggle_favorite(user_id, "video-1")
        assert list_favorites(other) == []


class TestContinueWatching:
    """Tests for the resume point."""

    def test_empty_by_default(self, user_id):
        assert get_continue_watching(user_id) is None

    def test_set_and_get(self, user_id):
        set_continue_watching(
            user_id,
            ContinueWatchingItem(video_id="v1", position_seconds=30, title="Warm-Up", duration_seconds=300),
        )
        item = get_continue_watching(user_id)
        assert item.video_id == "v1"
        assert item.position_seconds == 30
        assert item.title == "Warm-Up"
        assert item.updated_at

    def test_negative_position_clamped(self, user_id):
        item = set_continue_watching(user_id, ContinueWatchingItem(video_id="v1", position_seconds=-5))
        assert item.position_seconds == 0

    def test_update_position_same_video(self, user_id):
        set_continue_watching(user_id, ContinueWatchingItem(video_id="v1", duration_seconds=200))
        item = update_position(user_id, "v1", 50)
        assert item.position_seconds == 50
        assert get_continue_watching(user_id).position_seconds == 50

    def test_update_position_other_video_ignored(self, user_id):
        """A position for a different video leaves the item untouched."""
        set_continue_watching(user_id, ContinueWatchingItem(video_id="v1", position_seconds=10))
        assert update_position(user_id, "v2", 99) is None
        assert get_continue_watching(user_id).position_seconds == 10

    def test_clear(self, user_id):
        set_continue_watching(user_id, ContinueWatchingItem(video_id="v1"))
        clear_continue_watching(user_id)
        assert get_continue_watching(user_id) is None

    def test_safe_position(self):
        assert safe_position(None) == 0
        assert safe_position(float("nan")) == 0
        assert safe_position(float("inf")) == 0
        assert safe_position(12.5) == 12.5

    def test_progress_percent(self):
        """Percent rounds half up and is clamped to 0..100."""
        assert get_progress_percent(None) == 0
        assert get_progress_percent(ContinueWatchingItem("v", 10, duration_seconds=0)) == 0
        assert get_progress_percent(ContinueWatchingItem("v", 1, duration_seconds=200)) == 1
        assert get_progress_percent(ContinueWatchingItem("v", 50, duration_seconds=200)) == 25
        assert get_progress_percent(ContinueWatchingItem("v", 500, duration_seconds=200)) == 100


class TestSafetyAcknowledgment:
    """Tests for per-program safety acknowledgments."""

    def test_not_acknowledged_by_default(self, user_id):
        assert not has_safety_acknowledgment(user_id, "p1", now=NOW)

    def test_acknowledgment_valid_for_30_days(self, user_id):
        save_safety_acknowledgment(user_id, "p1", now=NOW)
        assert has_safety_acknowledgment(user_id, "p1", now=NOW + timedelta(days=29))
        assert not has_safety_acknowledgment(user_id, "p1", now=NOW + timedelta(days=30))

    def test_acknowledgment_is_per_program(self, user_id):
        save_safety_acknowledgment(user_id, "p1", now=NOW)
        assert not has_safety_acknowledgment(user_id, "p2", now=NOW)

    def test_resave_refreshes_timestamp(self, user_id):
        save_safety_acknowledgment(user_id, "p1", now=NOW)
        save_safety_acknowledgment(user_id, "p1", now=NOW + timedelta(days=20))
        assert has_safety_acknowledgment(user_id, "p1", now=NOW + timedelta(days=40))

    def test_clear_all(self, user_id):
        save_safety_acknowledgment(user_id, "p1", now=NOW)
        clear_all_acknowledgments(user_id)
        assert not has_safety_acknowledgment(user_id, "p1", now=NOW)
