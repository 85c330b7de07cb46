"""Update profile use case."""

from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.service import AccountLinkManager, SessionEnricher, UserService
from desk.domain.value import UserId

from .get_profile import ProfileResponse, build_profile


class UpdateProfileRequest(BaseModel):
    """Update profile request. None means "leave unchanged"."""

    user_id: UserId
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    image: str | None = None  # data URL
    remove_image: bool = False


class UpdateProfileResponse(ProfileResponse):
    """Updated profile plus a session token carrying the new claims."""

    token: str


class UpdateProfileUseCase(BaseUseCase):
    """Use case for updating the signed-in user's profile."""

    def __init__(
        self,
        user_service: UserService,
        account_link_manager: AccountLinkManager,
        session_enricher: SessionEnricher,
    ) -> None:
        """Initialize update profile use case.

        Args:
            user_service: User domain service
            account_link_manager: Link management domain service
            session_enricher: Session claim pipeline (re-mint after email change)
        """
        self.user_service = user_service
        self.account_link_manager = account_link_manager
        self.session_enricher = session_enricher

    async def execute(self, request: UpdateProfileRequest) -> UpdateProfileResponse:
        """Apply the changes and return the new profile state.

        Raises:
            ValidationError: If the image is invalid or both set and removed
            NotFoundError: If the user does not exist
            ConflictError: If the email belongs to another user
        """
        user = await self.user_service.update_profile(
            request.user_id,
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            image=request.image,
            remove_image=request.remove_image,
        )
        link_status = await self.account_link_manager.status(request.user_id)
        profile = build_profile(user, link_status)

        return UpdateProfileResponse(
            **profile.model_dump(),
            token=self.session_enricher.issue(self.session_enricher.mint(user)),
        )
