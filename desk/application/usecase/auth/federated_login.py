"""Federated (OAuth) login use case."""

import logfire
from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.error import AccountNotLinkedError, NotAuthenticatedError
from desk.domain.model import User
from desk.domain.service import (
    AccountLinkManager,
    AuthService,
    IdentityProvisioner,
    SessionEnricher,
    UserService,
)
from desk.domain.service.identity_provisioner import normalize_email
from desk.domain.value import AuthProvider
from desk.domain.value.types import OAuthProviderInfo


class FederatedLoginRequest(BaseModel):
    """OAuth callback parameters.

    These parameters come from the OAuth provider in the callback URL.
    """

    provider: AuthProvider
    code: str  # OAuth authorization code
    state: str  # State parameter for session verification
    session_token: str | None = None  # Current session cookie, if any


class FederatedLoginResponse(BaseModel):
    """Federated login response."""

    token: str
    user_id: str
    username: str
    username_setup_complete: bool
    created: bool  # A new user was provisioned
    linked: bool  # The identity was linked to the current session's user


class FederatedLoginUseCase(BaseUseCase):
    """Use case for completing a federated login.

    Resolution order:
    1. A valid session: link the identity to the signed-in user
    2. An existing link: sign in as the linked user
    3. The email belongs to an unlinked account: refuse (no silent takeover)
    4. Otherwise: provision a new user with the identity linked
    """

    def __init__(
        self,
        auth_service: AuthService,
        identity_provisioner: IdentityProvisioner,
        account_link_manager: AccountLinkManager,
        user_service: UserService,
        session_enricher: SessionEnricher,
    ) -> None:
        """Initialize federated login use case.

        Args:
            auth_service: Authentication domain service (all providers)
            identity_provisioner: Identity provisioning domain service
            account_link_manager: Link management domain service
            user_service: User domain service
            session_enricher: Session claim pipeline
        """
        self.auth_service = auth_service
        self.identity_provisioner = identity_provisioner
        self.account_link_manager = account_link_manager
        self.user_service = user_service
        self.session_enricher = session_enricher

    async def execute(self, request: FederatedLoginRequest) -> FederatedLoginResponse:
        """Execute federated login flow.

        Args:
            request: OAuth callback parameters

        Returns:
            Login response with a session token

        Raises:
            AccountNotLinkedError: If the email belongs to an unlinked account
            ConflictError: If the identity is linked to another user
            ProviderError: If the OAuth exchange fails
        """
        provider_info = await self.auth_service.complete_login(
            request.provider, request.code, request.state
        )

        logfire.info(
            "OAuth completed",
            provider=provider_info.provider.value,
            provider_account_id=provider_info.provider_account_id,
        )

        created = False
        linked = False

        with logfire.span(
            "federated_login",
            provider=provider_info.provider.value,
            has_session=bool(request.session_token),
        ):
            current = await self._current_user(request.session_token)
            if current:
                await self.account_link_manager.connect(current.id, provider_info)
                user = current
                linked = True
            else:
                user = await self._linked_user(provider_info)
                if not user:
                    email = normalize_email(provider_info.email)
                    if email and await self.user_service.get_user_by_email(email):
                        logfire.warn(
                            "Federated login for unlinked email",
                            provider=provider_info.provider.value,
                        )
                        raise AccountNotLinkedError(provider_info.provider.label)

                    user, _ = await self.identity_provisioner.provision_federated(
                        provider_info
                    )
                    created = True

            token = self.session_enricher.issue(self.session_enricher.mint(user))

            return FederatedLoginResponse(
                token=token,
                user_id=str(user.id),
                username=user.username.root,
                username_setup_complete=user.username_setup_complete,
                created=created,
                linked=linked,
            )

    async def _current_user(self, session_token: str | None) -> User | None:
        if not session_token:
            return None
        try:
            claims = await self.session_enricher.from_token(session_token)
        except NotAuthenticatedError:
            return None
        return await self.user_service.get_by_id(
            self.session_enricher.expose(claims).user_id
        )

    async def _linked_user(self, provider_info: OAuthProviderInfo) -> User | None:
        account = await self.account_link_manager.find_link(
            provider_info.provider, provider_info.provider_account_id
        )
        if not account:
            return None
        return await self.user_service.get_by_id(account.user_id)
