"""Tests for bearer-token authentication and the error envelope."""

import pytest
from fastapi.testclient import TestClient

from yogashna.config.app_config import clear_config_cache
from yogashna.db.users_repository import get_user_by_firebase_uid


def fake_verify(token: str) -> dict:
    if token != "good-token":
        raise ValueError("bad token")
    return {"uid": "firebase-uid-1", "phone_number": "+15550199"}


@pytest.fixture
def auth_client(seeded_db, monkeypatch):
    """Client with auth enabled and a fake token verifier."""
    monkeypatch.setenv("AUTH_DISABLED", "false")
    clear_config_cache()

    from yogashna.web.api import create_app
    from yogashna.web.auth import get_token_verifier

    app = create_app()
    app.dependency_overrides[get_token_verifier] = lambda: fake_verify
    with TestClient(app) as test_client:
        yield test_client


class TestAuthentication:
    """Tests for the Authorization header."""

    def test_missing_header(self, auth_client):
        response = auth_client.get("/api/v1/me")
        assert response.status_code == 401
        body = response.json()
        assert body["statusCode"] == 401
        assert body["error"] == "Unauthorized"
        assert body["message"] == "Missing or invalid Authorization header"
        assert body["path"] == "/api/v1/me"
        assert body["timestamp"]

    def test_not_bearer(self, auth_client):
        response = auth_client.get("/api/v1/me", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_invalid_token(self, auth_client):
        response = auth_client.get("/api/v1/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_valid_token_creates_user(self, auth_client):
        response = auth_client.get("/api/v1/me", headers={"Authorization": "Bearer good-token"})
        assert response.status_code == 200
        data = response.json()
        assert data["firebaseUid"] == "firebase-uid-1"
        assert data["phoneNumber"] == "+15550199"
        assert get_user_by_firebase_uid("firebase-uid-1") is not None

    def test_health_needs_no_token(self, auth_client):
        assert auth_client.get("/health").status_code == 200

    def test_video_assets_need_no_token(self, auth_client):
        assert auth_client.get("/api/v1/video-assets").status_code == 200

    def test_videos_need_token(self, auth_client):
        assert auth_client.get("/api/v1/videos").status_code == 401


class TestErrorEnvelope:
    """Tests for error responses."""

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"

    def test_unexpected_error(self, seeded_db, monkeypatch):
        """Unhandled exceptions become a 500 envelope."""
        from yogashna.web.api import create_app
        from yogashna.web.routes import practice

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(practice, "generate_todays_abhyasa", explode)
        with TestClient(create_app(), raise_server_exceptions=False) as test_client:
            response = test_client.get("/api/v1/me/abhyasa/today")

        assert response.status_code == 500
        assert response.json()["message"] == "Unexpected error"
