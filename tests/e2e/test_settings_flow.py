"""End-to-end tests for account settings endpoints."""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from desk.interface.api.app import create_app
from tests.di import build_test_container


@pytest.fixture
def client():
    """Create test client with test container."""
    return TestClient(create_app(build_test_container()))


@pytest.fixture
def password_client(client):
    """Client signed in as a password user."""
    client.post(
        "/auth/register",
        json={
            "username": "ada",
            "email": "ada@example.com",
            "password": "correct horse",
            "confirm_password": "correct horse",
        },
    )
    client.post("/auth/login", json={"username": "ada", "password": "correct horse"})
    return client


@pytest.fixture
def google_client(client):
    """Client signed in as a Google-only user."""
    response = client.get("/auth/login/google", follow_redirects=False)
    state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]
    client.get(
        "/auth/callback/google",
        params={"code": "alice", "state": state},
        follow_redirects=False,
    )
    return client


class TestProfileEndpoints:
    """End-to-end tests for /settings/profile."""

    def test_requires_auth(self, client):
        response = client.get("/settings/profile")

        assert response.status_code == 401

    def test_get_profile(self, password_client):
        response = password_client.get("/settings/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "ada"
        assert data["email"] == "ada@example.com"
        assert data["has_password"] is True
        assert data["google_linked"] is False

    def test_update_profile_refreshes_session(self, password_client):
        """The session reflects a changed email straight away."""
        response = password_client.patch(
            "/settings/profile",
            json={"first_name": "Ada", "last_name": "Lovelace", "email": "ada@new.org"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ada Lovelace"
        assert data["email"] == "ada@new.org"
        assert "token" not in data

        session = password_client.get("/auth/session").json()
        assert session["user"]["email"] == "ada@new.org"

    def test_malformed_email(self, password_client):
        response = password_client.patch("/settings/profile", json={"email": "foo"})

        assert response.status_code == 422
        profile = password_client.get("/settings/profile").json()
        assert profile["email"] == "ada@example.com"

    def test_invalid_image(self, password_client):
        response = password_client.patch(
            "/settings/profile", json={"image": "data:text/plain;base64,aGVsbG8="}
        )

        assert response.status_code == 400


class TestDisconnectGoogle:
    """End-to-end tests for DELETE /settings/integrations/google."""

    def test_not_linked(self, password_client):
        response = password_client.delete("/settings/integrations/google")

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Google integration is already disconnected."
        )

    def test_passwordless_user_needs_password(self, google_client):
        response = google_client.delete("/settings/integrations/google")

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Set a password before disconnecting Google."
        )

    def test_requires_auth_before_body_checks(self, client):
        response = client.request(
            "DELETE",
            "/settings/integrations/google",
            json={"password": "short", "confirm_password": "short"},
        )

        assert response.status_code == 401

    def test_short_password(self, google_client):
        response = google_client.request(
            "DELETE",
            "/settings/integrations/google",
            json={"password": "short", "confirm_password": "short"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Password must be 8-100 characters."
        assert google_client.get("/settings/profile").json()["google_linked"] is True

    def test_disconnect_sets_password(self, google_client):
        """After disconnecting, the new password signs in."""
        response = google_client.request(
            "DELETE",
            "/settings/integrations/google",
            json={"password": "new password", "confirm_password": "new password"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Google integration disconnected.",
            "linked": False,
            "has_password": True,
        }

        profile = google_client.get("/settings/profile").json()
        assert profile["google_linked"] is False
        assert profile["has_password"] is True

        login = google_client.post(
            "/auth/login", json={"username": "alice", "password": "new password"}
        )
        assert login.status_code == 200


class TestAgentSettings:
    """End-to-end tests for /settings/agent."""

    def test_requires_auth(self, client):
        response = client.get("/settings/agent")

        assert response.status_code == 401

    def test_keys_are_write_only(self, password_client):
        """Stored keys come back only as masks."""
        response = password_client.patch(
            "/settings/agent",
            json={"provider": "openai", "openai_api_key": "sk-test-abcdef"},
        )

        assert response.status_code == 200
        assert "sk-test-abcdef" not in response.text

        data = password_client.get("/settings/agent").json()
        assert data["provider"] == "openai"
        assert data["has_openai_api_key"] is True
        assert data["openai_api_key_mask"] == "*" * 12
        assert data["encryption_available"] is True
        assert "sk-test-abcdef" not in str(data)

    def test_clear_key(self, password_client):
        password_client.patch(
            "/settings/agent", json={"openai_api_key": "sk-test-abcdef"}
        )

        response = password_client.patch(
            "/settings/agent", json={"clear_openai_api_key": True}
        )

        assert response.json()["has_openai_api_key"] is False

    def test_short_key_rejected(self, password_client):
        response = password_client.patch(
            "/settings/agent", json={"openai_api_key": "short"}
        )

        assert response.status_code == 422
