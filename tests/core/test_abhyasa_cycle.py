"""Tests for Abhyasa cycles, day locking and playlist generation."""

from datetime import datetime, timezone

import pytest

from yogashna.core.abhyasa_cycle import (
    CYCLE_LENGTH_DAYS,
    compute_day_number,
    generate_cycle,
    generate_playlist,
    generate_playlist_range,
    get_cycle_summary,
    get_day,
    get_today,
    preview_playlist,
)
from yogashna.core.enrollments import create_enrollment, get_capabilities
from yogashna.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from yogashna.db.seed import BACK_PAIN_PROGRAM_ID, STRESS_RELIEF_PROGRAM_ID
from yogashna.db.users_repository import (
    get_or_create_user,
    upsert_practice_preferences_record,
    upsert_subscription,
)

UID = "uid-cycle"
ASSET_1 = "20000000-0000-0000-0000-000000000001"
ASSET_2 = "20000000-0000-0000-0000-000000000002"
ASSET_3 = "20000000-0000-0000-0000-000000000003"
ASSET_5 = "20000000-0000-0000-0000-000000000005"


@pytest.fixture
def enrolled(seeded_db) -> str:
    """Internal id of a free user enrolled in the back pain program."""
    user = get_or_create_user(UID)
    create_enrollment(UID, BACK_PAIN_PROGRAM_ID)
    return user.id


@pytest.fixture
def cycle(enrolled):
    return generate_cycle(UID, BACK_PAIN_PROGRAM_ID)


class TestComputeDayNumber:
    """Tests for compute_day_number."""

    def test_counts_whole_days_from_start(self):
        now = datetime(2026, 3, 3, 12, 0, tzinfo=timezone.utc)
        assert compute_day_number("2026-03-01T00:00:00+00:00", 21, now) == 3

    def test_clamped_to_cycle(self):
        start = "2026-03-01T00:00:00Z"
        assert compute_day_number(start, 21, datetime(2026, 2, 1, tzinfo=timezone.utc)) == 1
        assert compute_day_number(start, 21, datetime(2026, 6, 1, tzinfo=timezone.utc)) == 21


class TestEnrollments:
    """Tests for enrollment limits and capabilities."""

    def test_free_capabilities(self, seeded_db):
        caps = get_capabilities(UID)
        assert caps.tier == "FREE"
        assert caps.program_enrollment_limit == 1
        assert caps.can_enroll_new_program is True
        assert caps.to_dict()["abhyasa"] == {"maxActivePrograms": 1, "freeUnlockDays": 5}

    def test_free_user_limited_to_one_program(self, enrolled):
        with pytest.raises(ConflictError) as exc_info:
            create_enrollment(UID, STRESS_RELIEF_PROGRAM_ID)
        assert exc_info.value.code == "ABHYASA_SLOT_LIMIT_REACHED"
        caps = get_capabilities(UID)
        assert caps.can_enroll_new_program is False
        assert caps.reasons == ["PROGRAM_LIMIT_REACHED"]

    def test_paid_user_gets_more_slots(self, enrolled):
        upsert_subscription(enrolled, "PAID", True, store="play_store", entitlement="premium_access")
        create_enrollment(UID, STRESS_RELIEF_PROGRAM_ID)
        caps = get_capabilities(UID)
        assert caps.enrolled_programs_count == 2
        assert caps.subscription_source == "PLAY_STORE"
        assert caps.to_dict()["usage"]["remainingAbhyasaSlots"] == 3

    def test_unknown_program(self, seeded_db):
        get_or_create_user(UID)
        with pytest.raises(NotFoundError):
            create_enrollment(UID, "10000000-0000-0000-0000-000000000099")


class TestCycle:
    """Tests for cycle creation and lookups."""

    def test_summary_without_cycle(self, seeded_db):
        assert get_cycle_summary(UID, BACK_PAIN_PROGRAM_ID) == {
            "hasCycle": False,
            "cycleId": None,
            "startDate": None,
            "cycleLengthDays": CYCLE_LENGTH_DAYS,
        }

    def test_generate_requires_enrollment(self, seeded_db):
        get_or_create_user(UID)
        with pytest.raises(ForbiddenError) as exc_info:
            generate_cycle(UID, BACK_PAIN_PROGRAM_ID)
        assert exc_info.value.code == "PROGRAM_NOT_ENROLLED"

    def test_generate_is_idempotent(self, cycle):
        assert generate_cycle(UID, BACK_PAIN_PROGRAM_ID).id == cycle.id
        assert cycle.cycle_days == 21
        assert cycle.minutes_preference == 15

    def test_summary_with_cycle(self, cycle):
        summary = get_cycle_summary(UID, BACK_PAIN_PROGRAM_ID)
        assert summary["hasCycle"] is True
        assert summary["cycleId"] == cycle.id

    def test_day_types_follow_schedule(self, cycle):
        assert get_day(UID, BACK_PAIN_PROGRAM_ID, 1)["dayType"] == "GENTLE"
        assert get_day(UID, BACK_PAIN_PROGRAM_ID, 2)["dayType"] == "BUILD"

    def test_day_without_cycle(self, enrolled):
        assert get_day(UID, BACK_PAIN_PROGRAM_ID, 1) == {"exists": False, "dayNumber": 1}

    def test_free_user_day_six_locked(self, cycle):
        day = get_day(UID, BACK_PAIN_PROGRAM_ID, 6)
        assert day["isLocked"] is True
        assert day["playlistItems"] == []
        assert day["lock"] == {
            "reason": "SUBSCRIPTION_REQUIRED_AFTER_FREE_DAYS",
            "freeUnlockDays": 5,
            "lockedFromDay": 6,
        }

    def test_paid_user_day_six_unlocked(self, cycle, enrolled):
        upsert_subscription(enrolled, "PAID", True)
        day = get_day(UID, BACK_PAIN_PROGRAM_ID, 6)
        assert day["isLocked"] is False
        assert day["dayType"] == "BUILD"

    def test_today_on_new_cycle_is_day_one(self, cycle):
        today = get_today(UID, BACK_PAIN_PROGRAM_ID)
        assert today["dayNumber"] == 1
        assert today["isLocked"] is False

    def test_today_without_cycle(self, seeded_db):
        assert get_today(UID, BACK_PAIN_PROGRAM_ID) == {"exists": False, "dayNumber": 1}


class TestPlaylists:
    """Tests for playlist preview and generation."""

    def test_preview_selects_by_role(self, cycle):
        preview = preview_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        assert preview["isPreview"] is True
        assert preview["targetDurationSec"] == 900
        assert preview["totalDurationSec"] == 900
        assert [i["videoAssetId"] for i in preview["playlistItems"]] == [ASSET_1, ASSET_2]
        assert [i["role"] for i in preview["playlistItems"]] == ["MANDATORY", "ADJUSTABLE"]
        assert get_day(UID, BACK_PAIN_PROGRAM_ID, 1)["playlistItems"] == []

    def test_preview_uses_practice_preferences(self, cycle, enrolled):
        """Server-side minutes override the cycle's default."""
        upsert_practice_preferences_record(enrolled, 5, None)
        preview = preview_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        assert preview["targetDurationSec"] == 300
        assert [i["videoAssetId"] for i in preview["playlistItems"]] == [ASSET_1]

    def test_preview_zero_minutes_preference(self, cycle, enrolled):
        """A stored 0 is kept rather than falling back to the cycle's minutes."""
        upsert_practice_preferences_record(enrolled, 0, None)
        preview = preview_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        assert preview["targetDurationSec"] == 0
        assert [i["role"] for i in preview["playlistItems"]] == ["MANDATORY"]

    def test_preview_without_cycle(self, enrolled):
        with pytest.raises(NotFoundError):
            preview_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)

    def test_generate_persists_items(self, cycle):
        result = generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        assert result["isPreview"] is False
        assert result["totalDurationSec"] == 900
        assert [i["order"] for i in result["playlistItems"]] == [1, 2]

        day = get_day(UID, BACK_PAIN_PROGRAM_ID, 1)
        assert day["totalDurationSec"] == 900
        first = day["playlistItems"][0]["videoAsset"]
        assert first["id"] == ASSET_1
        assert first["streamUid"] == "cfstream-asset-001"
        assert first["playbackUrl"] == (
            "https://customer-test.cloudflarestream.com/cfstream-asset-001/manifest/video.m3u8"
        )
        assert first["thumbnailUrl"] == "https://media.example.com/thumbnails/assets/sunrise-joint-warm-up.jpg"

    def test_generate_keeps_existing_unless_regenerate(self, cycle):
        first = generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        again = generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        assert [i["id"] for i in again["playlistItems"]] == [i["id"] for i in first["playlistItems"]]

        regenerated = generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 1, regenerate=True)
        assert [i["id"] for i in regenerated["playlistItems"]] != [i["id"] for i in first["playlistItems"]]

    def test_next_day_avoids_recent_assets(self, cycle):
        generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        day_two = generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 2)
        assert [i["videoAssetId"] for i in day_two["playlistItems"]] == [ASSET_3, ASSET_5]
        assert day_two["totalDurationSec"] == 780

    def test_generate_locked_day(self, cycle):
        assert generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 6)["isLocked"] is True


class TestPlaylistRange:
    """Tests for generate_playlist_range."""

    def test_free_user_range(self, cycle):
        result = generate_playlist_range(UID, BACK_PAIN_PROGRAM_ID, 1, 21)
        assert result["generatedDays"] == [1, 2, 3, 4, 5]
        assert result["lockedDays"] == list(range(6, 22))
        assert result["toDayEffective"] == 5
        assert result["skippedDays"] == []
        assert result["errors"] == []

    def test_existing_days_skipped(self, cycle):
        generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        result = generate_playlist_range(UID, BACK_PAIN_PROGRAM_ID, 1, 3)
        assert result["skippedDays"] == [1]
        assert result["generatedDays"] == [2, 3]

    def test_regenerate_replaces_existing(self, cycle):
        generate_playlist(UID, BACK_PAIN_PROGRAM_ID, 1)
        result = generate_playlist_range(UID, BACK_PAIN_PROGRAM_ID, 1, 2, regenerate=True)
        assert result["generatedDays"] == [1, 2]
        assert result["skippedDays"] == []

    def test_paid_user_range_unlocked(self, cycle, enrolled):
        upsert_subscription(enrolled, "PAID", True)
        result = generate_playlist_range(UID, BACK_PAIN_PROGRAM_ID, 1, 21)
        assert result["generatedDays"] == list(range(1, 22))
        assert result["lockedDays"] == []

    def test_range_fully_locked(self, cycle):
        result = generate_playlist_range(UID, BACK_PAIN_PROGRAM_ID, 8, 10)
        assert result["generatedDays"] == []
        assert result["lockedDays"] == [8, 9, 10]

    @pytest.mark.parametrize("from_day, to_day", [(0, 3), (3, 2), (1, 22)])
    def test_invalid_range(self, cycle, from_day, to_day):
        with pytest.raises(BadRequestError):
            generate_playlist_range(UID, BACK_PAIN_PROGRAM_ID, from_day, to_day)
