"""Tests for streaks, totals and weekly activity."""

from datetime import date, timedelta

from yogashna.core.progress_tracking import (
    days_between,
    get_progress_data,
    get_week_day_label,
    get_weekly_activity,
    get_weekly_completion_percentage,
    get_weekly_sessions_target,
    record_practice_session,
    record_program_completion,
    reset_progress_data,
)

DAY = date(2026, 3, 10)


class TestDefaults:
    """Tests for users without stored progress."""

    def test_new_user_gets_zeroed_progress(self, user_id):
        """New users start at zero."""
        progress = get_progress_data(user_id, DAY)
        assert progress.current_streak == 0
        assert progress.longest_streak == 0
        assert progress.total_sessions == 0
        assert progress.weekly_activity == []
        assert progress.last_practice_date == ""

    def test_to_dict_uses_camel_case(self, user_id):
        """Serialized progress uses the client's key names."""
        data = get_progress_data(user_id, DAY).to_dict()
        assert "currentStreak" in data
        assert "weeklyActivity" in data
        assert "lastPracticeDate" in data


class TestStreaks:
    """Tests for streak bookkeeping."""

    def test_first_session_starts_streak(self, user_id):
        """The first practice sets the streak to 1."""
        progress = record_practice_session(user_id, 20, today=DAY)
        assert progress.current_streak == 1
        assert progress.longest_streak == 1
        assert progress.total_minutes == 20
        assert progress.total_sessions == 1
        assert progress.last_practice_date == "2026-03-10"

    def test_same_day_keeps_streak(self, user_id):
        """A second practice on the same day does not extend the streak."""
        record_practice_session(user_id, 10, today=DAY)
        progress = record_practice_session(user_id, 15, today=DAY)
        assert progress.current_streak == 1
        assert progress.total_sessions == 2
        assert progress.weekly_activity[0].minutes_practiced == 25
        assert progress.weekly_activity[0].sessions_completed == 2

    def test_consecutive_days_extend_streak(self, user_id):
        """Practicing on the next day adds one."""
        for offset in range(3):
            progress = record_practice_session(user_id, 10, today=DAY + timedelta(days=offset))
        assert progress.current_streak == 3
        assert progress.longest_streak == 3

    def test_gap_resets_streak_and_keeps_longest(self, user_id):
        """Missing a day restarts the streak at 1."""
        record_practice_session(user_id, 10, today=DAY)
        record_practice_session(user_id, 10, today=DAY + timedelta(days=1))
        progress = record_practice_session(user_id, 10, today=DAY + timedelta(days=3))
        assert progress.current_streak == 1
        assert progress.longest_streak == 2

    def test_lapsed_streak_reported_as_zero(self, user_id):
        """Reading progress two days after the last practice shows streak 0."""
        record_practice_session(user_id, 10, today=DAY)
        assert get_progress_data(user_id, DAY + timedelta(days=1)).current_streak == 1
        assert get_progress_data(user_id, DAY + timedelta(days=2)).current_streak == 0


class TestActivity:
    """Tests for the activity history."""

    def test_activity_sorted_newest_first(self, user_id):
        """Stored activity lists the most recent day first."""
        record_practice_session(user_id, 10, today=DAY)
        progress = record_practice_session(user_id, 10, today=DAY + timedelta(days=1))
        assert [a.date for a in progress.weekly_activity] == ["2026-03-11", "2026-03-10"]

    def test_old_activity_dropped(self, user_id):
        """Activity older than 30 days is pruned."""
        record_practice_session(user_id, 10, today=DAY)
        progress = record_practice_session(user_id, 10, today=DAY + timedelta(days=31))
        assert [a.date for a in progress.weekly_activity] == ["2026-04-10"]

    def test_weekly_activity_has_seven_days_oldest_first(self, user_id):
        """The weekly view is zero-filled and ordered oldest first."""
        record_practice_session(user_id, 12, today=DAY - timedelta(days=2))
        week = get_weekly_activity(user_id, DAY)
        assert len(week) == 7
        assert week[0].date == "2026-03-04"
        assert week[-1].date == "2026-03-10"
        assert week[4].minutes_practiced == 12
        assert week[-1].sessions_completed == 0

    def test_weekly_completion_percentage(self, user_id):
        """Sessions in the last seven days against a target of five."""
        assert get_weekly_sessions_target() == 5
        record_practice_session(user_id, 10, today=DAY)
        record_practice_session(user_id, 10, today=DAY)
        assert get_weekly_completion_percentage(user_id, DAY) == 40

    def test_weekly_completion_capped_at_100(self, user_id):
        """More sessions than the target still report 100."""
        record_practice_session(user_id, 10, session_count=7, today=DAY)
        assert get_weekly_completion_percentage(user_id, DAY) == 100


class TestProgramsAndReset:
    """Tests for program completion and reset."""

    def test_program_completion_increments(self, user_id):
        """Each completion adds one."""
        record_program_completion(user_id, DAY)
        progress = record_program_completion(user_id, DAY)
        assert progress.programs_completed == 2

    def test_reset_clears_progress(self, user_id):
        """Reset returns the user to defaults."""
        record_practice_session(user_id, 10, today=DAY)
        reset_progress_data(user_id)
        assert get_progress_data(user_id, DAY).total_sessions == 0


class TestDateHelpers:
    """Tests for date helpers."""

    def test_days_between(self):
        """Absolute whole days, 0 for missing dates."""
        assert days_between("2026-03-10", "2026-03-13") == 3
        assert days_between("2026-03-13", "2026-03-10") == 3
        assert days_between("", "2026-03-10") == 0

    def test_week_day_label(self):
        """Labels start on Sunday."""
        assert get_week_day_label("2026-03-08") == "Sun"
        assert get_week_day_label("2026-03-10") == "Tue"
