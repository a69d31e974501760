"""Tests for health endpoint and app factory."""

from mathsolve import __version__


class TestHealth:
    """Tests for GET /health."""

    def test_health_returns_ok(self, client):
        """Health check returns status ok."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__
        assert "timestamp" in data

    def test_openapi_lists_routes(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert "/api/solve" in paths
        assert "/api/leaderboard" in paths
        assert "/api/auth/signin" in paths
