"""Credential login use case."""

import logfire
from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.error import InvalidCredentialsError
from desk.domain.service import CredentialAuthenticator, SessionEnricher


class LoginRequest(BaseModel):
    """Credential login request."""

    username: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    """Credential login response."""

    token: str
    id: str
    username: str
    email: str | None
    image: str | None


class LoginUseCase(BaseUseCase):
    """Use case for username/password login."""

    def __init__(
        self,
        credential_authenticator: CredentialAuthenticator,
        session_enricher: SessionEnricher,
    ) -> None:
        """Initialize login use case.

        Args:
            credential_authenticator: Credential verification domain service
            session_enricher: Session claim pipeline
        """
        self.credential_authenticator = credential_authenticator
        self.session_enricher = session_enricher

    async def execute(self, request: LoginRequest) -> LoginResponse:
        """Verify credentials and mint a session token.

        Raises:
            InvalidCredentialsError: On any failure, with one uniform message
        """
        user = await self.credential_authenticator.authenticate(
            request.username, request.password
        )
        if not user:
            raise InvalidCredentialsError()

        token = self.session_enricher.issue(self.session_enricher.mint(user))
        logfire.info("Credential login succeeded", user_id=str(user.id))

        return LoginResponse(
            token=token,
            id=str(user.id),
            username=user.username.root,
            email=user.email,
            image=user.image,
        )
