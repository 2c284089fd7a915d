"""Tests for practice preferences storage and helpers."""

from yogashna.core.practice_preferences import (
    PracticePreferences,
    clear_practice_preferences,
    format_focus_category,
    format_session_length,
    get_practice_preferences,
    get_session_length_minutes,
    merge_preferences_with_profile,
    save_practice_preferences,
)


class TestStorage:
    """Tests for reading and saving preferences."""

    def test_defaults_when_nothing_saved(self, user_id):
        preferences = get_practice_preferences(user_id)
        assert preferences.focus == "Health Support"
        assert preferences.goals == ["Back Pain Relief"]
        assert preferences.level == "Beginner"
        assert preferences.length == "Balanced"
        assert preferences.time == "Morning"
        assert preferences.updated_at

    def test_partial_update_merges(self, user_id):
        """Only the given fields change."""
        save_practice_preferences(user_id, {"length": "Deep"})
        preferences = save_practice_preferences(user_id, {"time": "Evening"})
        assert preferences.length == "Deep"
        assert preferences.time == "Evening"
        assert preferences.focus == "Health Support"

    def test_saved_preferences_read_back(self, user_id):
        save_practice_preferences(user_id, {"goals": ["Calm Mind"], "level": "Expert"})
        preferences = get_practice_preferences(user_id)
        assert preferences.goals == ["Calm Mind"]
        assert preferences.level == "Expert"

    def test_unknown_values_fall_back_to_defaults(self, user_id):
        """Values outside the allowed choices are not stored."""
        preferences = save_practice_preferences(user_id, {"length": "Forever"})
        assert preferences.length == "Balanced"

    def test_clear_restores_defaults(self, user_id):
        save_practice_preferences(user_id, {"length": "Quick"})
        clear_practice_preferences(user_id)
        assert get_practice_preferences(user_id).length == "Balanced"


class TestHelpers:
    """Tests for formatting helpers."""

    def test_session_length_minutes(self):
        assert get_session_length_minutes("Quick") == 10
        assert get_session_length_minutes("Balanced") == 20
        assert get_session_length_minutes("Deep") == 30
        assert get_session_length_minutes(None) == 20

    def test_format_session_length(self):
        assert format_session_length("Deep") == "30 min"

    def test_format_focus_category(self):
        assert format_focus_category("Office Yoga") == "Office Yoga"
        assert format_focus_category(None) == "General Wellness"


class TestMergeWithProfile:
    """Tests for overlaying profile codes onto preferences."""

    def test_known_codes_replace_focus_and_goals(self):
        merged = merge_preferences_with_profile(PracticePreferences(), "office_yoga", "desk_stretching")
        assert merged.focus == "Office Yoga"
        assert merged.goals == ["Desk Stretching"]

    def test_unknown_codes_keep_preferences(self):
        preferences = PracticePreferences(focus="Office Yoga", goals=["Energy at Work"])
        merged = merge_preferences_with_profile(preferences, "nope", None)
        assert merged.focus == "Office Yoga"
        assert merged.goals == ["Energy at Work"]

    def test_input_not_modified(self):
        preferences = PracticePreferences()
        merge_preferences_with_profile(preferences, "office_yoga", "desk_stretching")
        assert preferences.focus == "Health Support"
        assert preferences.goals == ["Back Pain Relief"]
