"""Tests for practice, progress, mood and library state endpoints."""

import pytest

ME = "/api/v1/me"


class TestPracticePreferences:
    """Tests for /me/practice-preferences and /me/abhyasa/today."""

    def test_defaults(self, client):
        data = client.get(f"{ME}/practice-preferences").json()
        assert data["focus"] == "Health Support"
        assert data["length"] == "Balanced"
        assert data["updatedAt"] == ""

    def test_partial_update(self, client):
        data = client.patch(f"{ME}/practice-preferences", json={"length": "Deep"}).json()
        assert data["length"] == "Deep"
        assert data["level"] == "Beginner"
        assert data["updatedAt"]
        assert client.get(f"{ME}/practice-preferences").json()["length"] == "Deep"

    def test_unknown_value_rejected(self, client):
        """A bad value is a 400 and the stored preference is kept."""
        client.patch(f"{ME}/practice-preferences", json={"length": "Deep"})
        response = client.patch(f"{ME}/practice-preferences", json={"length": "deep"})
        assert response.status_code == 400
        assert response.json()["message"][0].startswith("length:")
        assert client.get(f"{ME}/practice-preferences").json()["length"] == "Deep"

    @pytest.mark.parametrize(
        "body",
        [{"focus": "Yoga"}, {"level": "Master"}, {"time": "Night"}],
    )
    def test_unknown_choice_fields(self, client, body):
        assert client.patch(f"{ME}/practice-preferences", json=body).status_code == 400

    def test_null_clears_field(self, client):
        data = client.patch(f"{ME}/practice-preferences", json={"time": None}).json()
        assert data["time"] is None

    def test_delete_restores_defaults(self, client):
        client.patch(f"{ME}/practice-preferences", json={"length": "Quick"})
        assert client.delete(f"{ME}/practice-preferences").status_code == 204
        assert client.get(f"{ME}/practice-preferences").json()["length"] == "Balanced"

    def test_todays_abhyasa(self, client):
        data = client.get(f"{ME}/abhyasa/today").json()
        assert data["sessionLength"] == "20 min"
        assert data["focusCategory"] == "Health Support"
        assert len(data["items"]) == 3
        assert sum(item["durationMin"] for item in data["items"]) == 20

    def test_todays_abhyasa_quick(self, client):
        client.patch(f"{ME}/practice-preferences", json={"length": "Quick"})
        data = client.get(f"{ME}/abhyasa/today").json()
        assert data["sessionLength"] == "10 min"
        assert [item["durationMin"] for item in data["items"]] == [2, 6, 2]


class TestProgress:
    """Tests for progress and badges."""

    def test_empty_progress(self, client):
        data = client.get(f"{ME}/progress").json()
        assert data["totalSessions"] == 0
        assert data["currentStreak"] == 0

    def test_complete_session(self, client):
        response = client.post(
            f"{ME}/progress/sessions", json={"videoId": "v1", "durationMin": 15}
        )
        assert response.status_code == 201
        data = response.json()
        assert data["recorded"] is True
        assert data["progress"]["totalSessions"] == 1
        assert data["progress"]["currentStreak"] == 1
        assert [b["type"] for b in data["newBadges"]] == ["FIRST_SESSION"]

        assert [b["type"] for b in client.get(f"{ME}/badges").json()] == ["FIRST_SESSION"]

    def test_repeat_session_not_recorded(self, client):
        body = {"videoId": "v1", "programId": "p1", "dayId": "d1", "durationMin": 10}
        client.post(f"{ME}/progress/sessions", json=body)
        data = client.post(f"{ME}/progress/sessions", json=body).json()
        assert data["recorded"] is False
        assert data["progress"]["totalSessions"] == 1

    def test_session_requires_video(self, client):
        response = client.post(f"{ME}/progress/sessions", json={"durationMin": 10})
        assert response.status_code == 400

    def test_weekly(self, client):
        client.post(f"{ME}/progress/sessions", json={"videoId": "v1", "durationMin": 10})
        data = client.get(f"{ME}/progress/weekly").json()
        assert len(data["activity"]) == 7
        assert data["target"] == 5
        assert data["completionPercentage"] == 20

    def test_complete_program(self, client):
        response = client.post(f"{ME}/progress/programs/complete")
        assert response.status_code == 201
        data = response.json()
        assert data["progress"]["programsCompleted"] == 1
        assert [b["type"] for b in data["newBadges"]] == ["FIRST_PROGRAM_COMPLETED"]

    def test_reset(self, client):
        client.post(f"{ME}/progress/sessions", json={"videoId": "v1", "durationMin": 10})
        assert client.delete(f"{ME}/progress").status_code == 204
        assert client.get(f"{ME}/progress").json()["totalSessions"] == 0


class TestMoods:
    """Tests for mood check-ins."""

    def test_checkin(self, client):
        response = client.post(
            f"{ME}/moods", json={"mood": "Energized", "programId": "p1", "dayNumber": 2}
        )
        assert response.status_code == 201
        entry = response.json()
        assert entry["mood"] == "Energized"
        assert entry["programId"] == "p1"
        assert entry["dayNumber"] == 2

    def test_history_and_stats(self, client):
        client.post(f"{ME}/moods", json={"mood": "Tired"})
        client.post(f"{ME}/moods", json={"mood": "Tired"})
        client.post(f"{ME}/moods", json={"mood": "Neutral"})

        history = client.get(f"{ME}/moods").json()
        assert [e["mood"] for e in history] == ["Neutral", "Tired", "Tired"]

        stats = client.get(f"{ME}/moods/stats", params={"days": 7}).json()
        assert stats["total"] == 3
        assert stats["byMood"]["Tired"] == 2
        assert stats["mostCommon"] == "Tired"

    def test_unknown_mood(self, client):
        response = client.post(f"{ME}/moods", json={"mood": "Grumpy"})
        assert response.status_code == 400
        assert response.json()["message"][0].startswith("mood:")


class TestFavorites:
    """Tests for favorites."""

    def test_toggle(self, client):
        assert client.post(f"{ME}/favorites/video-1").json() == {
            "itemId": "video-1",
            "isFavorite": True,
        }
        assert client.get(f"{ME}/favorites/video-1").json()["isFavorite"] is True
        assert client.get(f"{ME}/favorites").json() == {"data": ["video-1"], "total": 1}

        assert client.post(f"{ME}/favorites/video-1").json()["isFavorite"] is False
        assert client.get(f"{ME}/favorites").json()["total"] == 0


class TestContinueWatching:
    """Tests for the resume point."""

    def test_empty(self, client):
        assert client.get(f"{ME}/continue-watching").json() == {
            "item": None,
            "progressPercent": 0,
        }

    def test_set_and_update(self, client):
        data = client.put(
            f"{ME}/continue-watching",
            json={"videoId": "v1", "positionSeconds": 30, "durationSeconds": 120, "title": "Flow"},
        ).json()
        assert data["item"]["videoId"] == "v1"
        assert data["progressPercent"] == 25

        data = client.patch(
            f"{ME}/continue-watching", json={"videoId": "v1", "positionSeconds": 60}
        ).json()
        assert data["item"]["positionSeconds"] == 60
        assert data["item"]["title"] == "Flow"
        assert data["progressPercent"] == 50

    def test_update_other_video(self, client):
        client.put(f"{ME}/continue-watching", json={"videoId": "v1", "durationSeconds": 100})
        response = client.patch(
            f"{ME}/continue-watching", json={"videoId": "v2", "positionSeconds": 10}
        )
        assert response.status_code == 404
        assert response.json()["message"] == "No continue watching item for video v2"

    def test_clear(self, client):
        client.put(f"{ME}/continue-watching", json={"videoId": "v1"})
        assert client.delete(f"{ME}/continue-watching").status_code == 204
        assert client.get(f"{ME}/continue-watching").json()["item"] is None


class TestSafetyAcks:
    """Tests for safety acknowledgments."""

    def test_acknowledge(self, client):
        assert client.get(f"{ME}/safety-acks/p1").json() == {
            "programId": "p1",
            "acknowledged": False,
        }
        response = client.post(f"{ME}/safety-acks/p1")
        assert response.status_code == 201
        assert client.get(f"{ME}/safety-acks/p1").json()["acknowledged"] is True
        assert client.get(f"{ME}/safety-acks/p2").json()["acknowledged"] is False

    def test_clear(self, client):
        client.post(f"{ME}/safety-acks/p1")
        assert client.delete(f"{ME}/safety-acks").status_code == 204
        assert client.get(f"{ME}/safety-acks/p1").json()["acknowledged"] is False


class TestNotificationSettings:
    """Tests for /me/notification-settings."""

    def test_defaults(self, client):
        assert client.get(f"{ME}/notification-settings").json() == {
            "enabled": False,
            "time": "09:00",
            "days": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        }

    def test_replace(self, client):
        data = client.put(
            f"{ME}/notification-settings",
            json={"enabled": True, "time": "18:45", "days": ["Sat", "Wed"]},
        ).json()
        assert data == {"enabled": True, "time": "18:45", "days": ["Wed", "Sat"]}
        assert client.get(f"{ME}/notification-settings").json() == data

    def test_omitted_fields_use_defaults(self, client):
        data = client.put(f"{ME}/notification-settings", json={"enabled": True}).json()
        assert data["time"] == "09:00"
        assert len(data["days"]) == 7

    @pytest.mark.parametrize(
        "body, field",
        [
            ({"enabled": True, "time": "7pm"}, "time"),
            ({"enabled": True, "days": ["Someday"]}, "days"),
            ({"time": "09:00"}, "enabled"),
        ],
    )
    def test_invalid(self, client, body, field):
        response = client.put(f"{ME}/notification-settings", json=body)
        assert response.status_code == 400
        assert response.json()["message"][0].startswith(field)
        assert client.get(f"{ME}/notification-settings").json()["enabled"] is False

    def test_unknown_field(self, client):
        response = client.put(
            f"{ME}/notification-settings", json={"enabled": True, "sound": "bell"}
        )
        assert response.status_code == 400

    def test_delete(self, client):
        client.put(f"{ME}/notification-settings", json={"enabled": True})
        assert client.delete(f"{ME}/notification-settings").status_code == 204
        assert client.get(f"{ME}/notification-settings").json()["enabled"] is False
