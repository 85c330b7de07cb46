"""Complete username use case."""

from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.service import SessionEnricher, UserService
from desk.domain.value import UserId


class CompleteUsernameRequest(BaseModel):
    """Complete username request."""

    user_id: UserId
    username: str


class CompleteUsernameResponse(BaseModel):
    """Complete username response."""

    message: str
    username: str
    token: str  # Re-minted so the session carries the new username


class CompleteUsernameUseCase(BaseUseCase):
    """Use case for replacing a placeholder username after federated signup."""

    def __init__(
        self, user_service: UserService, session_enricher: SessionEnricher
    ) -> None:
        """Initialize complete username use case.

        Args:
            user_service: User domain service
            session_enricher: Session claim pipeline
        """
        self.user_service = user_service
        self.session_enricher = session_enricher

    async def execute(
        self, request: CompleteUsernameRequest
    ) -> CompleteUsernameResponse:
        """Lock in the chosen username and re-mint the session.

        Raises:
            ValidationError: If the username breaks the policy
            NotFoundError: If the user does not exist
            ConflictError: If the username is already locked or taken
        """
        user = await self.user_service.complete_username(
            request.user_id, request.username
        )
        return CompleteUsernameResponse(
            message="Username saved.",
            username=user.username.root,
            token=self.session_enricher.issue(self.session_enricher.mint(user)),
        )
