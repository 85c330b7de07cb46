"""Get profile use case."""

from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.model import User
from desk.domain.service import AccountLinkManager, LinkStatus, UserService
from desk.domain.value import AuthProvider, UserId


class GetProfileRequest(BaseModel):
    """Get profile request."""

    user_id: UserId


class ProfileResponse(BaseModel):
    """Profile state shown on the settings page."""

    username: str
    name: str | None
    first_name: str | None
    last_name: str | None
    email: str | None
    email_verified: bool
    image: str | None
    google_linked: bool
    has_password: bool


def build_profile(user: User, link_status: LinkStatus) -> ProfileResponse:
    """Assemble the profile state from a user and its sign-in methods."""
    return ProfileResponse(
        username=user.username.root,
        name=user.name,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        email_verified=user.email_verified is not None,
        image=user.image,
        google_linked=link_status.is_linked(AuthProvider.GOOGLE),
        has_password=link_status.has_password,
    )


class GetProfileUseCase(BaseUseCase):
    """Use case for reading the signed-in user's profile."""

    def __init__(
        self, user_service: UserService, account_link_manager: AccountLinkManager
    ) -> None:
        self.user_service = user_service
        self.account_link_manager = account_link_manager

    async def execute(self, request: GetProfileRequest) -> ProfileResponse:
        """Load the profile.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.user_service.get_by_id(request.user_id)
        link_status = await self.account_link_manager.status(request.user_id)
        return build_profile(user, link_status)
