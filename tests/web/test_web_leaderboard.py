"""Tests for leaderboard, history and rank endpoints."""

from mathsolve.core.demo_data import DEMO_LEADERS


class TestLeaderboard:
    """Tests for GET /api/leaderboard."""

    def test_demo_board_when_empty(self, client):
        data = client.get("/api/leaderboard").json()
        assert data["count"] == len(DEMO_LEADERS)
        assert data["entries"][0]["position"] == 1
        assert data["entries"][0]["username"] == DEMO_LEADERS[0][0]

    def test_demo_board_when_unreachable(self, failing_client):
        response = failing_client.get("/api/leaderboard")
        assert response.status_code == 200
        assert response.json()["count"] == len(DEMO_LEADERS)

    def test_real_profiles(self, client, signed_in):
        session_id = client.post("/api/solve", json={"category": "CALCULUS"}, headers=signed_in).json()["session_id"]
        client.post(f"/api/solve/{session_id}/answer", json={"answer": "2x"}, headers=signed_in)

        entries = client.get("/api/leaderboard").json()["entries"]

        assert entries == [
            {
                "position": 1,
                "username": "ada",
                "total_score": 100,
                "elo_rating": 1000,
                "rank": "Bronze",
                "rank_color": entries[0]["rank_color"],
            }
        ]


class TestHistory:
    """Tests for GET /api/history."""

    def test_requires_sign_in(self, client):
        assert client.get("/api/history").status_code == 401

    def test_lists_submissions(self, client, signed_in):
        for category, answer in [("CALCULUS", "2x"), ("GEOMETRY", "4")]:
            session_id = client.post("/api/solve", json={"category": category}, headers=signed_in).json()["session_id"]
            client.post(f"/api/solve/{session_id}/answer", json={"answer": answer}, headers=signed_in)

        data = client.get("/api/history", headers=signed_in).json()

        assert data["count"] == 2
        assert {i["problem_id"] for i in data["items"]} == {"p-calc-2", "p-geo-8"}
        assert data["items"][0]["submitted_at"] >= data["items"][1]["submitted_at"]
        assert all(i["points_earned"] == 100 for i in data["items"])

    def test_empty_history(self, client, signed_in):
        data = client.get("/api/history", headers=signed_in).json()
        assert data == {"items": [], "count": 0}


class TestRanks:
    """Tests for GET /api/ranks/{score}."""

    def test_rank_for_score(self, client):
        data = client.get("/api/ranks/2500").json()
        assert data["rank"] == "Platinum"
        assert data["color"]

    def test_below_threshold(self, client):
        assert client.get("/api/ranks/399").json()["rank"] == "Bronze"
