"""Tests for the health endpoint."""


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_ok(self, client):
        """Health endpoint returns status ok."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_returns_version(self, client):
        """Health endpoint returns the package version."""
        assert client.get("/health").json()["version"] == "0.1.0"

    def test_health_returns_timestamp(self, client):
        """Health endpoint returns an ISO timestamp."""
        assert "T" in client.get("/health").json()["timestamp"]

    def test_health_not_under_api_prefix(self, client):
        """Health lives at the root, not under /api/v1."""
        assert client.get("/api/v1/health").status_code == 404
