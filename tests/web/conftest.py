"""Fixtures for Web API tests."""

import pytest
from fastapi.testclient import TestClient

from mathsolve.config.app_config import CONFIG_ENV, clear_config_cache
from mathsolve.web.api import create_app


@pytest.fixture
def web_config(tmp_path, monkeypatch):
    """Config with a cheap password hash, loaded from a temp directory."""
    path = tmp_path / "app_config.yaml"
    path.write_text("auth:\n  pbkdf2_iterations: 1000\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV, str(path))
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    return path


@pytest.fixture
def client(web_config, seeded_store):
    """Test client over the seeded SQLite store."""
    return TestClient(create_app(store=seeded_store))


@pytest.fixture
def failing_client(web_config, failing_store):
    """Test client whose store is unreachable."""
    return TestClient(create_app(store=failing_store))


@pytest.fixture
def signed_in(client):
    """Sign up a user and return the X-User-Id headers."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "ada@example.com", "password": "secret", "username": "ada"},
    )
    assert response.status_code == 201
    return {"X-User-Id": response.json()["session"]["user_id"]}
