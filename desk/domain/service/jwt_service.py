"""JWT token domain service."""

import logfire

from desk.config import AuthSettings
from desk.util.jwt import JWTError, TokenPayload, create_token, verify_token

from .base import Service


class JWTService(Service):
    """Domain service for signing and verifying session tokens."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
        """
        self.auth_settings = auth_settings

    def create_token(
        self,
        user_id: str,
        username: str | None = None,
        email: str | None = None,
        username_setup_complete: bool | None = None,
        name: str | None = None,
    ) -> str:
        """Create a signed session token.

        Args:
            user_id: Subject (user ID)
            username: Username claim
            email: Email claim
            username_setup_complete: Username setup flag claim
            name: Display name claim

        Returns:
            JWT token string
        """
        with logfire.span("jwt_service.create_token", user_id=user_id):
            token = create_token(
                user_id,
                self.auth_settings,
                username=username,
                email=email,
                username_setup_complete=username_setup_complete,
                name=name,
            )
            logfire.info("JWT token created", user_id=user_id, username=username)
            return token

    def verify_token(self, token: str) -> TokenPayload:
        """Verify a session token and extract its payload.

        Args:
            token: JWT token string

        Returns:
            Token payload

        Raises:
            JWTError: If token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            try:
                payload = verify_token(token, self.auth_settings)
                logfire.info("JWT token verified", user_id=payload.sub)
                return payload
            except JWTError as e:
                logfire.warn("JWT token verification failed", error=str(e))
                raise
