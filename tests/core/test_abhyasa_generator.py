"""Tests for today's three-part Abhyasa."""

import pytest

from yogashna.core.abhyasa_generator import (
    COOLDOWN_VIDEO_URL,
    FALLBACK_VIDEO_URL,
    ensure_valid_video_url,
    generate_todays_abhyasa,
    get_main_practice_style,
    get_main_practice_tags,
    get_main_practice_title,
    get_warmup_title,
)
from yogashna.core.practice_preferences import PracticePreferences

NOW_MS = 1773129600000


class TestGenerateTodaysAbhyasa:
    """Tests for generate_todays_abhyasa."""

    @pytest.mark.parametrize(
        "length, expected",
        [("Quick", [2, 6, 2]), ("Balanced", [4, 12, 4]), ("Deep", [6, 18, 6])],
    )
    def test_duration_split(self, length, expected):
        """Warm-up 20%, main 60%, cool-down the rest."""
        items = generate_todays_abhyasa(PracticePreferences(length=length), now_ms=NOW_MS)
        assert [item.duration_min for item in items] == expected

    def test_sequence_and_ids(self):
        items = generate_todays_abhyasa(PracticePreferences(), now_ms=NOW_MS)
        assert [item.sequence_type for item in items] == ["warmup", "main", "cooldown"]
        assert items[0].id == f"abhyasa-warmup-{NOW_MS}"
        assert items[2].id == f"abhyasa-cooldown-{NOW_MS}"
        assert items[2].video_url == COOLDOWN_VIDEO_URL

    def test_default_preferences(self):
        """Morning back-pain beginner practice."""
        warmup, main, cooldown = generate_todays_abhyasa(PracticePreferences(), now_ms=NOW_MS)
        assert warmup.title == "Awakening Sun Warm-Up"
        assert main.title == "Spine Care Flow"
        assert main.sanskrit_title == "Cikitsā Yoga"
        assert main.style == "Hatha"
        assert main.focus_tags == ["Back Care", "Spinal Health", "Therapeutic"]
        assert cooldown.title == "Restorative Wind-Down"

    def test_no_goals_uses_general_wellness(self):
        preferences = PracticePreferences(focus="Office Yoga", goals=[], time="Anytime")
        warmup, main, _ = generate_todays_abhyasa(preferences, now_ms=NOW_MS)
        assert warmup.title == "Mindful Body Warm-Up"
        assert main.title == "Desk Relief Flow"
        assert main.focus_tags == ["Desk Relief", "Posture Correction", "Breath Awareness"]

    def test_to_dict_keys(self):
        data = generate_todays_abhyasa(PracticePreferences(), now_ms=NOW_MS)[1].to_dict()
        assert data["sanskritTitle"] == "Cikitsā Yoga"
        assert data["durationMin"] == 12
        assert data["sequenceType"] == "main"


class TestTitlesAndStyles:
    """Tests for the title and style helpers."""

    def test_warmup_titles(self):
        assert get_warmup_title("Evening") == "Gentle Evening Warm-Up"
        assert get_warmup_title(None) == "Mindful Body Warm-Up"

    def test_goal_keyword_wins_over_focus(self):
        assert get_main_practice_title("Office Yoga", "Better Sleep") == "Evening Unwind Flow"

    def test_unknown_focus_and_goal(self):
        assert get_main_practice_title(None, "General Wellness") == "Balanced Yoga Flow"

    def test_style_by_level(self):
        assert get_main_practice_style("Expert") == "Vinyasa"
        assert get_main_practice_style("Intermediate") == "Vinyasa"
        assert get_main_practice_style(None) == "Hatha"

    def test_tags_fallback(self):
        assert get_main_practice_tags(None, "General Wellness") == [
            "Balanced Practice",
            "Breath Awareness",
        ]

    def test_ensure_valid_video_url(self):
        assert ensure_valid_video_url("  ") == FALLBACK_VIDEO_URL
        assert ensure_valid_video_url(None) == FALLBACK_VIDEO_URL
        assert ensure_valid_video_url(" https://x/y.mp4 ") == "https://x/y.mp4"
