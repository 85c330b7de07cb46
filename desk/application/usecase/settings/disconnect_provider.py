"""Disconnect federated provider use case."""

from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.service import AccountLinkManager
from desk.domain.value import AuthProvider, UserId


class DisconnectProviderRequest(BaseModel):
    """Disconnect request.

    ``password``/``confirm_password`` are required only when the user has no
    password yet.
    """

    user_id: UserId
    provider: AuthProvider
    password: str | None = None
    confirm_password: str | None = None


class DisconnectProviderResponse(BaseModel):
    """Disconnect response."""

    message: str
    linked: bool
    has_password: bool


class DisconnectProviderUseCase(BaseUseCase):
    """Use case for unlinking a federated identity from the signed-in user."""

    def __init__(self, account_link_manager: AccountLinkManager) -> None:
        self.account_link_manager = account_link_manager

    async def execute(
        self, request: DisconnectProviderRequest
    ) -> DisconnectProviderResponse:
        """Unlink the provider, setting a password first when needed.

        Raises:
            NotFoundError: If the user does not exist
            AlreadyDisconnectedError: If the provider is not linked
            ValidationError: If a required password is missing or mismatched
        """
        result = await self.account_link_manager.disconnect(
            request.user_id,
            request.provider,
            password=request.password,
            confirm_password=request.confirm_password,
        )
        return DisconnectProviderResponse(
            message=result.message,
            linked=result.linked,
            has_password=result.has_password,
        )
