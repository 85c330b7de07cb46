"""Credential (username + password) authentication."""

import logfire

from desk.domain.model import User
from desk.domain.repository import UserRepository

from .base import Service
from .password_hasher import PasswordHasher


class CredentialAuthenticator(Service):
    """Verifies a username/password pair.

    Every failure looks the same to the caller: unknown user, passwordless
    user and wrong password all return None after one bcrypt verification.
    """

    def __init__(
        self, user_repository: UserRepository, password_hasher: PasswordHasher
    ) -> None:
        """Initialize credential authenticator.

        Args:
            user_repository: User repository
            password_hasher: bcrypt password hasher
        """
        self.user_repository = user_repository
        self.password_hasher = password_hasher

    async def authenticate(
        self, username: str | None, password: str | None
    ) -> User | None:
        """Authenticate a user.

        Args:
            username: Raw username as typed (trimmed and lowercased here)
            password: Raw password

        Returns:
            The user on success, None otherwise
        """
        normalized = (username or "").strip().lower()
        if not normalized or not password:
            return None

        with logfire.span("credential_authenticator.authenticate", username=normalized):
            user = await self.user_repository.find_by_username(normalized)

            password_hash = user.password_hash if user else None
            if not password_hash:
                await self.password_hasher.verify(
                    password, self.password_hasher.dummy_hash
                )
                logfire.info("Credential login failed", username=normalized)
                return None

            if not await self.password_hasher.verify(password, password_hash):
                logfire.info("Credential login failed", username=normalized)
                return None

            logfire.info("Credential login succeeded", user_id=str(user.id))
            return user
