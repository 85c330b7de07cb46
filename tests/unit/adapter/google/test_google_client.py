"""Unit tests for the Google OAuth clients."""

from urllib.parse import parse_qs, urlparse

import pytest

from desk.adapter.google.client import (
    GoogleOAuthError,
    MockGoogleOAuthClient,
    RealGoogleOAuthClient,
)
from desk.domain.value import AuthProvider


class TestRealGoogleOAuthClient:
    """Tests for the authorization URL (no network)."""

    @pytest.mark.asyncio
    async def test_authorization_url(self):
        client = RealGoogleOAuthClient(
            client_id="client-123",
            client_secret="secret",
            redirect_uri="http://localhost:8000/auth/callback/google",
        )

        url = await client.initiate_authorization("state-abc")

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert parsed.netloc == "accounts.google.com"
        assert query["client_id"] == ["client-123"]
        assert query["redirect_uri"] == ["http://localhost:8000/auth/callback/google"]
        assert query["response_type"] == ["code"]
        assert query["state"] == ["state-abc"]
        assert query["code_challenge_method"] == ["S256"]
        assert "openid" in query["scope"][0]
        assert "email" in query["scope"][0]

    @pytest.mark.asyncio
    async def test_unknown_state_is_rejected(self):
        client = RealGoogleOAuthClient(
            client_id="client-123", client_secret="secret", redirect_uri="http://x"
        )

        with pytest.raises(GoogleOAuthError, match="Invalid state"):
            await client.complete_authorization("code", "never-issued")

    @pytest.mark.asyncio
    async def test_pending_logins_are_bounded(self):
        client = RealGoogleOAuthClient(
            client_id="client-123",
            client_secret="secret",
            redirect_uri="http://x",
            max_pending=3,
        )

        for i in range(5000):
            await client.initiate_authorization(f"state-{i}")

        assert len(client._pkce_verifiers) == 3
        assert set(client._pkce_verifiers) == {
            "state-4997",
            "state-4998",
            "state-4999",
        }
        with pytest.raises(GoogleOAuthError, match="Invalid state"):
            await client.complete_authorization("code", "state-0")

    @pytest.mark.asyncio
    async def test_abandoned_logins_expire(self):
        client = RealGoogleOAuthClient(
            client_id="client-123",
            client_secret="secret",
            redirect_uri="http://x",
            verifier_ttl_seconds=0,
        )

        await client.initiate_authorization("state-old")
        await client.initiate_authorization("state-new")

        assert "state-old" not in client._pkce_verifiers
        with pytest.raises(GoogleOAuthError, match="Invalid state"):
            await client.complete_authorization("code", "state-new")
        assert client._pkce_verifiers == {}


class TestMockGoogleOAuthClient:
    """Tests for the deterministic mock client."""

    @pytest.mark.asyncio
    async def test_identity_from_code(self):
        info = await MockGoogleOAuthClient().complete_authorization("alice", "s")

        assert info.provider == AuthProvider.GOOGLE
        assert info.provider_account_id == "google-alice"
        assert info.email == "alice@example.com"
        assert info.display_name == "Alice Example"
        assert info.email_verified is True

    @pytest.mark.asyncio
    async def test_identity_without_email(self):
        info = await MockGoogleOAuthClient().complete_authorization("noemail", "s")

        assert info.email is None

    @pytest.mark.asyncio
    async def test_failed_exchange(self):
        with pytest.raises(GoogleOAuthError):
            await MockGoogleOAuthClient().complete_authorization("invalid", "s")
