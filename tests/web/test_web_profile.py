"""Tests for GET/PATCH /api/v1/me."""

COMPLETE_PROFILE = {
    "name": "Asha",
    "age": 34,
    "gender": "female",
    "height": {"unit": "ft_in", "feet": 5, "inches": 10},
    "weight": {"unit": "lbs", "lbs": 150},
    "wellnessFocusId": "health_support",
    "primaryGoalId": "reduce_back_pain",
    "preferences": {
        "sessionLength": "balanced",
        "preferredTime": "morning",
        "experienceLevel": "beginner",
    },
}


class TestReadProfile:
    """Tests for GET /me."""

    def test_creates_dev_user(self, client):
        """With auth disabled the caller is the development user."""
        response = client.get("/api/v1/me")
        assert response.status_code == 200
        data = response.json()
        assert data["firebaseUid"] == "DEV_USER"
        assert data["profile"] == {
            "name": None,
            "age": None,
            "gender": None,
            "heightCm": None,
            "weightKg": None,
        }
        assert data["onboarding"] == {"isComplete": False, "completedAt": None}

    def test_same_user_on_repeat(self, client):
        first = client.get("/api/v1/me").json()["id"]
        assert client.get("/api/v1/me").json()["id"] == first


class TestPatchProfile:
    """Tests for PATCH /me."""

    def test_complete_profile_finishes_onboarding(self, client):
        response = client.patch("/api/v1/me", json=COMPLETE_PROFILE)
        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["heightCm"] == 178
        assert data["profile"]["weightKg"] == 68
        assert data["wellnessFocusId"] == "health_support"
        assert data["preferences"]["sessionLength"] == "balanced"
        assert data["onboarding"]["isComplete"] is True
        assert data["onboarding"]["completedAt"]

    def test_partial_update_keeps_other_fields(self, client):
        client.patch("/api/v1/me", json={"name": "Asha", "age": 30})
        data = client.patch("/api/v1/me", json={"age": 31}).json()
        assert data["profile"]["name"] == "Asha"
        assert data["profile"]["age"] == 31

    def test_explicit_null_clears_field(self, client):
        client.patch("/api/v1/me", json=COMPLETE_PROFILE)
        data = client.patch("/api/v1/me", json={"gender": None}).json()
        assert data["profile"]["gender"] is None
        assert data["onboarding"]["isComplete"] is False

    def test_age_out_of_range(self, client):
        response = client.patch("/api/v1/me", json={"age": 12})
        assert response.status_code == 400
        body = response.json()
        assert body["statusCode"] == 400
        assert body["error"] == "Bad Request"
        assert body["path"] == "/api/v1/me"
        assert isinstance(body["message"], list)
        assert body["message"][0].startswith("age:")

    def test_unknown_field_rejected(self, client):
        response = client.patch("/api/v1/me", json={"nickname": "A"})
        assert response.status_code == 400
        assert response.json()["message"][0].startswith("nickname:")

    def test_nested_validation(self, client):
        response = client.patch("/api/v1/me", json={"height": {"unit": "cm", "valueCm": 300}})
        assert response.status_code == 400
        assert response.json()["message"][0].startswith("height.valueCm:")

    def test_invalid_gender(self, client):
        assert client.patch("/api/v1/me", json={"gender": "robot"}).status_code == 400
