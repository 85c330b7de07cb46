"""Domain layer DI providers."""

from dishka import Scope, provide

from desk.config import AuthSettings, UsernamePolicySettings
from desk.domain.repository import (
    LinkedAccountRepository,
    LlmSettingsRepository,
    TransactionManager,
    UserRepository,
)
from desk.domain.service import (
    AccountLinkManager,
    AuthService,
    CredentialAuthenticator,
    IdentityProvisioner,
    JWTService,
    LlmSettingsService,
    OAuthClient,
    PasswordHasher,
    SecretCipher,
    SessionEnricher,
    UserService,
    UsernameAllocator,
)
from desk.domain.value import AuthProvider
from desk.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[AuthProvider, OAuthClient]
    ) -> AuthService:
        """Provide multi-provider authentication domain service."""
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_username_allocator(
        self, user_repository: UserRepository, policy: UsernamePolicySettings
    ) -> UsernameAllocator:
        """Provide username allocator."""
        return UsernameAllocator(user_repository=user_repository, policy=policy)

    @provide
    def get_credential_authenticator(
        self, user_repository: UserRepository, password_hasher: PasswordHasher
    ) -> CredentialAuthenticator:
        """Provide credential authenticator."""
        return CredentialAuthenticator(
            user_repository=user_repository, password_hasher=password_hasher
        )

    @provide
    def get_identity_provisioner(
        self,
        user_repository: UserRepository,
        linked_account_repository: LinkedAccountRepository,
        transaction_manager: TransactionManager,
        username_allocator: UsernameAllocator,
        auth_settings: AuthSettings,
    ) -> IdentityProvisioner:
        """Provide identity provisioner."""
        return IdentityProvisioner(
            user_repository=user_repository,
            linked_account_repository=linked_account_repository,
            transaction_manager=transaction_manager,
            username_allocator=username_allocator,
            auth_settings=auth_settings,
        )

    @provide
    def get_session_enricher(
        self,
        user_repository: UserRepository,
        jwt_service: JWTService,
        auth_settings: AuthSettings,
    ) -> SessionEnricher:
        """Provide session claim pipeline."""
        return SessionEnricher(
            user_repository=user_repository,
            jwt_service=jwt_service,
            auth_settings=auth_settings,
        )

    @provide
    def get_account_link_manager(
        self,
        user_repository: UserRepository,
        linked_account_repository: LinkedAccountRepository,
        transaction_manager: TransactionManager,
        password_hasher: PasswordHasher,
    ) -> AccountLinkManager:
        """Provide account link manager."""
        return AccountLinkManager(
            user_repository=user_repository,
            linked_account_repository=linked_account_repository,
            transaction_manager=transaction_manager,
            password_hasher=password_hasher,
        )

    @provide
    def get_user_service(
        self, user_repository: UserRepository, username_allocator: UsernameAllocator
    ) -> UserService:
        """Provide user domain service."""
        return UserService(
            user_repository=user_repository, username_allocator=username_allocator
        )

    @provide
    def get_llm_settings_service(
        self, llm_settings_repository: LlmSettingsRepository, cipher: SecretCipher
    ) -> LlmSettingsService:
        """Provide LLM settings domain service."""
        return LlmSettingsService(
            llm_settings_repository=llm_settings_repository, cipher=cipher
        )
