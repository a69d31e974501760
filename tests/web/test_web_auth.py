"""Tests for account endpoints."""


def _signup(client, email="ada@example.com", password="secret", username="ada"):
    return client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "username": username},
    )


class TestSignUp:
    """Tests for POST /api/auth/signup."""

    def test_signup_returns_session_and_profile(self, client):
        response = _signup(client)
        assert response.status_code == 201
        data = response.json()
        assert data["session"]["email"] == "ada@example.com"
        assert data["profile"]["total_score"] == 0
        assert data["profile"]["elo_rating"] == 1000
        assert data["profile"]["rank"] == "Bronze"
        assert "password_hash" not in data["profile"]

    def test_duplicate_email_conflict(self, client):
        _signup(client)
        response = _signup(client, username="other")
        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_missing_username(self, client):
        response = client.post(
            "/api/auth/signup", json={"email": "ada@example.com", "password": "secret"}
        )
        assert response.status_code == 400

    def test_store_unreachable(self, failing_client):
        response = _signup(failing_client)
        assert response.status_code == 502


class TestSignIn:
    """Tests for POST /api/auth/signin."""

    def test_signin_after_signup(self, client):
        user_id = _signup(client).json()["session"]["user_id"]

        response = client.post(
            "/api/auth/signin", json={"email": "ada@example.com", "password": "secret"}
        )

        assert response.status_code == 200
        assert response.json()["session"]["user_id"] == user_id

    def test_wrong_password(self, client):
        _signup(client)
        response = client.post(
            "/api/auth/signin", json={"email": "ada@example.com", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect password. Please try again."

    def test_unknown_email(self, client):
        response = client.post(
            "/api/auth/signin", json={"email": "ghost@example.com", "password": "x"}
        )
        assert response.status_code == 401

    def test_empty_fields(self, client):
        response = client.post("/api/auth/signin", json={"email": "", "password": ""})
        assert response.status_code == 400


class TestMe:
    """Tests for GET /api/auth/me."""

    def test_me_with_header(self, client, signed_in):
        response = client.get("/api/auth/me", headers=signed_in)
        assert response.status_code == 200
        assert response.json()["username"] == "ada"

    def test_me_anonymous(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_me_unknown_user(self, client):
        response = client.get("/api/auth/me", headers={"X-User-Id": "ghost"})
        assert response.status_code == 401

    def test_me_store_unreachable(self, failing_client):
        response = failing_client.get("/api/auth/me", headers={"X-User-Id": "u-1"})
        assert response.status_code == 502
