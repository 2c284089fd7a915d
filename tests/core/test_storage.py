"""Tests for the database layer: schema, seed data and user state."""

from yogashna.db.database import get_db
from yogashna.db.seed import seed_database
from yogashna.db.state_repository import delete_state, get_state, set_state
from yogashna.db.users_repository import (
    get_or_create_user,
    get_user_by_firebase_uid,
    list_enrollments,
    update_user,
    upsert_enrollment,
)


class TestSeed:
    """Tests for seed_database."""

    def test_inserts_catalog(self, db):
        inserted = seed_database()
        assert inserted["videos"] == 6
        assert inserted["program_templates"] == 2
        assert inserted["video_assets"] == 10

    def test_second_run_inserts_nothing(self, seeded_db):
        assert all(count == 0 for count in seed_database().values())
        with get_db() as conn:
            assert conn.execute("SELECT COUNT(*) AS n FROM videos").fetchone()["n"] == 6


class TestUserState:
    """Tests for the per-user key-value store."""

    def test_missing_key(self, user_id):
        assert get_state(user_id, "favorites_v1") is None

    def test_round_trip_unicode(self, user_id):
        set_state(user_id, "k", {"label": "पीठ दर्द", "n": [1, 2]})
        assert get_state(user_id, "k") == {"label": "पीठ दर्द", "n": [1, 2]}

    def test_last_write_wins(self, user_id):
        set_state(user_id, "k", 1)
        set_state(user_id, "k", 2)
        assert get_state(user_id, "k") == 2

    def test_corrupt_value_reads_as_none(self, user_id):
        with get_db() as conn:
            conn.execute(
                "INSERT INTO user_state (user_id, key, value, updated_at) VALUES (?, ?, ?, ?)",
                (user_id, "k", "{not json", "2026-03-10T00:00:00+00:00"),
            )
        assert get_state(user_id, "k") is None

    def test_delete(self, user_id):
        set_state(user_id, "k", 1)
        assert delete_state(user_id, "k") is True
        assert delete_state(user_id, "k") is False


class TestUsers:
    """Tests for the users repository."""

    def test_get_or_create_is_stable(self, db):
        first = get_or_create_user("uid-a", "+15550001")
        second = get_or_create_user("uid-a", "+15550002")
        assert first.id == second.id
        assert second.phone == "+15550001"

    def test_unknown_user(self, db):
        assert get_user_by_firebase_uid("uid-missing") is None

    def test_update_preferences_json(self, user_id):
        user = update_user(user_id, preferences={"sessionLength": "20"}, age=40)
        assert user.preferences == {"sessionLength": "20"}
        assert user.age == 40

    def test_enrollment_upsert(self, seeded_db, user_id):
        program_id = "10000000-0000-0000-0000-000000000001"
        upsert_enrollment(user_id, program_id, status="ACTIVE")
        upsert_enrollment(user_id, program_id, status="PAUSED")
        enrollments = list_enrollments(user_id)
        assert len(enrollments) == 1
        assert enrollments[0].status == "PAUSED"
