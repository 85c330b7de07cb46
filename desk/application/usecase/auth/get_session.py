"""Get session use case."""

from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.service import SessionEnricher, SessionUser


class GetSessionRequest(BaseModel):
    """Get session request."""

    token: str | None  # Session cookie


class GetSessionResponse(BaseModel):
    """Refreshed session."""

    token: str  # Re-issued with refreshed claims
    user: SessionUser


class GetSessionUseCase(BaseUseCase):
    """Use case for resolving the current session on every request."""

    def __init__(self, session_enricher: SessionEnricher) -> None:
        """Initialize get session use case.

        Args:
            session_enricher: Session claim pipeline
        """
        self.session_enricher = session_enricher

    async def execute(self, request: GetSessionRequest) -> GetSessionResponse:
        """Verify the token, refresh its claims and expose the allow-list.

        Raises:
            NotAuthenticatedError: If the token is missing, invalid, expired
                or its subject no longer exists
        """
        claims = await self.session_enricher.from_token(request.token)
        return GetSessionResponse(
            token=self.session_enricher.issue(claims),
            user=self.session_enricher.expose(claims),
        )
