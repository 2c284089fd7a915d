"""Tests for capabilities and program enrollments."""

import pytest

BACK_PAIN = "10000000-0000-0000-0000-000000000001"
STRESS_RELIEF = "10000000-0000-0000-0000-000000000002"
ENROLLMENTS = "/api/v1/me/program-enrollments"


@pytest.fixture
def user_client(client):
    """Client whose development user already exists."""
    client.get("/api/v1/me")
    return client


class TestCapabilities:
    """Tests for GET /me/capabilities."""

    def test_free_plan(self, client):
        data = client.get("/api/v1/me/capabilities").json()
        assert data["tier"] == "FREE"
        assert data["isPaidActive"] is False
        assert data["programEnrollmentLimit"] == 1
        assert data["canEnrollNewProgram"] is True
        assert data["subscription"] == {"isActive": False, "plan": "FREE", "source": "NONE"}
        assert data["abhyasa"] == {"maxActivePrograms": 1, "freeUnlockDays": 5}
        assert data["usage"] == {"activeAbhyasaCount": 0, "remainingAbhyasaSlots": 1}

    def test_after_enrollment(self, user_client):
        user_client.post(ENROLLMENTS, json={"programTemplateId": BACK_PAIN})
        data = user_client.get("/api/v1/me/capabilities").json()
        assert data["enrolledProgramsCount"] == 1
        assert data["canEnrollNewProgram"] is False
        assert data["reasons"] == ["PROGRAM_LIMIT_REACHED"]


class TestEnrollments:
    """Tests for /me/program-enrollments."""

    def test_enroll(self, user_client):
        response = user_client.post(ENROLLMENTS, json={"programTemplateId": BACK_PAIN})
        assert response.status_code == 201
        data = response.json()
        assert data["programTemplateId"] == BACK_PAIN
        assert data["status"] == "ACTIVE"

    def test_list(self, user_client):
        user_client.post(ENROLLMENTS, json={"programTemplateId": BACK_PAIN})
        data = user_client.get(ENROLLMENTS).json()
        assert data["total"] == 1
        assert data["data"][0]["programTemplateId"] == BACK_PAIN

    def test_list_empty(self, client):
        assert client.get(ENROLLMENTS).json() == {"data": [], "total": 0}

    def test_slot_limit(self, user_client):
        user_client.post(ENROLLMENTS, json={"programTemplateId": BACK_PAIN})
        response = user_client.post(ENROLLMENTS, json={"programTemplateId": STRESS_RELIEF})
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "ABHYASA_SLOT_LIMIT_REACHED"
        assert body["message"] == "Upgrade to unlock more Abhyasa slots"
        assert body["maxActivePrograms"] == 1
        assert body["activeCount"] == 1

    def test_re_enroll_same_program_hits_limit(self, user_client):
        """An active enrollment already uses the only free slot."""
        user_client.post(ENROLLMENTS, json={"programTemplateId": BACK_PAIN})
        assert user_client.post(ENROLLMENTS, json={"programTemplateId": BACK_PAIN}).status_code == 409

    def test_invalid_uuid(self, client):
        response = client.post(ENROLLMENTS, json={"programTemplateId": "abc"})
        assert response.status_code == 400
        assert response.json()["message"] == ["programTemplateId must be a valid UUID format"]

    def test_unknown_program(self, user_client):
        response = user_client.post(
            ENROLLMENTS, json={"programTemplateId": "10000000-0000-0000-0000-000000000099"}
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Program template not found"

    def test_unknown_user(self, client):
        """Enrolling before the profile exists is a 404."""
        response = client.post(ENROLLMENTS, json={"programTemplateId": BACK_PAIN})
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"
