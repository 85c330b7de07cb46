"""Google OAuth 2.0 / OpenID Connect client implementation.

Implements the authorization code flow with PKCE. Only the identity (subject,
email, name, picture) is kept; provider access tokens are discarded once the
userinfo request is done.
"""

import hashlib
import secrets
import time
from base64 import urlsafe_b64encode
from urllib.parse import urlencode

import httpx
import logfire

from desk.adapter.error import ProviderError
from desk.domain.service.auth_service import OAuthClient
from desk.domain.value.types import AuthProvider, OAuthProviderInfo


class GoogleOAuthError(ProviderError):
    """Google OAuth error."""

    pass


class GoogleOAuthClient(OAuthClient):
    """Base class for Google OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGoogleOAuthClient(GoogleOAuthClient):
    """Google OAuth 2.0 client with PKCE support."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        verifier_ttl_seconds: float = 600,
        max_pending: int = 1000,
    ) -> None:
        """Initialize Google OAuth client.

        Args:
            client_id: Google OAuth client ID
            client_secret: Google OAuth client secret
            redirect_uri: Callback URL registered with Google
            verifier_ttl_seconds: How long an unfinished login stays valid
            max_pending: Upper bound on unfinished logins held in memory
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

        # OAuth endpoints
        self.authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
        self.token_url = "https://oauth2.googleapis.com/token"
        self.user_info_url = "https://openidconnect.googleapis.com/v1/userinfo"

        # PKCE verifiers per state, in issue order: state -> (verifier, expiry)
        self.verifier_ttl_seconds = verifier_ttl_seconds
        self.max_pending = max_pending
        self._pkce_verifiers: dict[str, tuple[str, float]] = {}

    def _generate_pkce_pair(self) -> tuple[str, str]:
        """Generate PKCE code verifier and challenge.

        Returns:
            Tuple of (verifier, challenge)
        """
        code_verifier = urlsafe_b64encode(secrets.token_bytes(32)).decode("utf-8")
        code_verifier = code_verifier.rstrip("=")

        challenge_bytes = hashlib.sha256(code_verifier.encode("utf-8")).digest()
        code_challenge = urlsafe_b64encode(challenge_bytes).decode("utf-8")
        code_challenge = code_challenge.rstrip("=")

        return code_verifier, code_challenge

    def _prune_verifiers(self, now: float) -> None:
        """Drop expired verifiers, then the oldest ones above ``max_pending``."""
        expired = [
            state
            for state, (_, expires_at) in self._pkce_verifiers.items()
            if expires_at <= now
        ]
        for state in expired:
            del self._pkce_verifiers[state]

        overflow = len(self._pkce_verifiers) - self.max_pending + 1
        for state in list(self._pkce_verifiers)[: max(overflow, 0)]:
            del self._pkce_verifiers[state]

    async def initiate_authorization(self, state: str) -> str:
        """Initiate Google OAuth authorization flow.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        now = time.monotonic()
        self._prune_verifiers(now)

        code_verifier, code_challenge = self._generate_pkce_pair()
        self._pkce_verifiers[state] = (
            code_verifier,
            now + self.verifier_ttl_seconds,
        )

        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "openid email profile",
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
            "prompt": "select_account",
        }

        auth_url = f"{self.authorize_url}?{urlencode(params)}"

        logfire.info(
            "Google OAuth authorization initiated",
            state=state,
            redirect_uri=self.redirect_uri,
        )

        return auth_url

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Complete Google OAuth authorization flow.

        Args:
            code: Authorization code from Google callback
            state: State parameter for verification

        Returns:
            Identity asserted by Google

        Raises:
            GoogleOAuthError: If OAuth flow fails
        """
        pending = self._pkce_verifiers.pop(state, None)
        if not pending or pending[1] <= time.monotonic():
            raise GoogleOAuthError("Invalid state or PKCE verifier not found")
        code_verifier = pending[0]

        access_token = await self._exchange_code_for_token(code, code_verifier)
        user_info = await self._get_user_info(access_token)

        subject = user_info.get("sub")
        if not subject:
            raise GoogleOAuthError("Userinfo response has no subject")

        logfire.info("Google OAuth completed", provider_account_id=subject)

        return OAuthProviderInfo(
            provider=AuthProvider.GOOGLE,
            provider_account_id=subject,
            email=user_info.get("email"),
            display_name=user_info.get("name"),
            avatar_url=user_info.get("picture"),
            email_verified=bool(user_info.get("email_verified", False)),
        )

    async def _exchange_code_for_token(self, code: str, code_verifier: str) -> str:
        """Exchange authorization code for access token.

        Args:
            code: Authorization code from callback
            code_verifier: PKCE code verifier

        Returns:
            Access token

        Raises:
            GoogleOAuthError: If token exchange fails
        """
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code_verifier": code_verifier,
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.token_url,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    timeout=30.0,
                )

                if response.status_code != 200:
                    logfire.error(
                        "Google token exchange failed",
                        status_code=response.status_code,
                        error=response.text,
                    )
                    raise GoogleOAuthError(
                        f"Token exchange failed: {response.status_code}"
                    )

                return response.json()["access_token"]

        except httpx.HTTPError as e:
            logfire.error("Google token exchange HTTP error", error=str(e))
            raise GoogleOAuthError(f"HTTP error during token exchange: {e}")

    async def _get_user_info(self, access_token: str) -> dict:
        """Get the OpenID Connect userinfo document.

        Args:
            access_token: OAuth access token

        Returns:
            Userinfo claims

        Raises:
            GoogleOAuthError: If API request fails
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.user_info_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                    timeout=30.0,
                )

                if response.status_code != 200:
                    logfire.error(
                        "Google userinfo request failed",
                        status_code=response.status_code,
                        error=response.text,
                    )
                    raise GoogleOAuthError(
                        f"User info request failed: {response.status_code}"
                    )

                return response.json()

        except httpx.HTTPError as e:
            logfire.error("Google userinfo HTTP error", error=str(e))
            raise GoogleOAuthError(f"HTTP error fetching user info: {e}")


class MockGoogleOAuthClient(GoogleOAuthClient):
    """Mock Google OAuth client for testing.

    Returns deterministic test data without making real API calls. The
    authorization code selects the identity: ``code="alice"`` yields subject
    ``google-alice`` with email ``alice@example.com``; ``code="noemail"``
    yields an identity without email.
    """

    def __init__(self) -> None:
        """Initialize mock client without real OAuth configuration."""
        pass

    async def initiate_authorization(self, state: str) -> str:
        """Return mock authorization URL."""
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Return mock identity derived from the code.

        Raises:
            GoogleOAuthError: If the code is ``"invalid"``
        """
        if code == "invalid":
            raise GoogleOAuthError("Token exchange failed: 400")

        if code == "noemail":
            return OAuthProviderInfo(
                provider=AuthProvider.GOOGLE,
                provider_account_id="google-noemail",
                display_name="No Email",
            )

        return OAuthProviderInfo(
            provider=AuthProvider.GOOGLE,
            provider_account_id=f"google-{code}",
            email=f"{code}@example.com",
            display_name=f"{code.capitalize()} Example",
            avatar_url="https://example.com/avatar.jpg",
            email_verified=True,
        )
