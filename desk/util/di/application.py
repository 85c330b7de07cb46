"""Application layer DI providers."""

from dishka import Scope, provide

from desk.application.usecase.auth import (
    CompleteUsernameUseCase,
    FederatedLoginUseCase,
    GetSessionUseCase,
    LoginUseCase,
    RegisterUseCase,
)
from desk.application.usecase.settings import (
    DisconnectProviderUseCase,
    GetLlmSettingsUseCase,
    GetProfileUseCase,
    UpdateLlmSettingsUseCase,
    UpdateProfileUseCase,
)
from desk.domain.service import (
    AccountLinkManager,
    AuthService,
    CredentialAuthenticator,
    IdentityProvisioner,
    LlmSettingsService,
    PasswordHasher,
    SessionEnricher,
    UserService,
)
from desk.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_register_use_case(
        self,
        identity_provisioner: IdentityProvisioner,
        password_hasher: PasswordHasher,
    ) -> RegisterUseCase:
        """Provide register use case."""
        return RegisterUseCase(
            identity_provisioner=identity_provisioner,
            password_hasher=password_hasher,
        )

    @provide(scope=Scope.REQUEST)
    def get_login_use_case(
        self,
        credential_authenticator: CredentialAuthenticator,
        session_enricher: SessionEnricher,
    ) -> LoginUseCase:
        """Provide credential login use case."""
        return LoginUseCase(
            credential_authenticator=credential_authenticator,
            session_enricher=session_enricher,
        )

    @provide(scope=Scope.REQUEST)
    def get_federated_login_use_case(
        self,
        auth_service: AuthService,
        identity_provisioner: IdentityProvisioner,
        account_link_manager: AccountLinkManager,
        user_service: UserService,
        session_enricher: SessionEnricher,
    ) -> FederatedLoginUseCase:
        """Provide federated login use case."""
        return FederatedLoginUseCase(
            auth_service=auth_service,
            identity_provisioner=identity_provisioner,
            account_link_manager=account_link_manager,
            user_service=user_service,
            session_enricher=session_enricher,
        )

    @provide(scope=Scope.REQUEST)
    def get_get_session_use_case(
        self, session_enricher: SessionEnricher
    ) -> GetSessionUseCase:
        """Provide get session use case."""
        return GetSessionUseCase(session_enricher=session_enricher)

    @provide(scope=Scope.REQUEST)
    def get_complete_username_use_case(
        self, user_service: UserService, session_enricher: SessionEnricher
    ) -> CompleteUsernameUseCase:
        """Provide complete username use case."""
        return CompleteUsernameUseCase(
            user_service=user_service, session_enricher=session_enricher
        )

    # Settings use cases
    @provide(scope=Scope.REQUEST)
    def get_get_profile_use_case(
        self, user_service: UserService, account_link_manager: AccountLinkManager
    ) -> GetProfileUseCase:
        """Provide get profile use case."""
        return GetProfileUseCase(
            user_service=user_service, account_link_manager=account_link_manager
        )

    @provide(scope=Scope.REQUEST)
    def get_update_profile_use_case(
        self,
        user_service: UserService,
        account_link_manager: AccountLinkManager,
        session_enricher: SessionEnricher,
    ) -> UpdateProfileUseCase:
        """Provide update profile use case."""
        return UpdateProfileUseCase(
            user_service=user_service,
            account_link_manager=account_link_manager,
            session_enricher=session_enricher,
        )

    @provide(scope=Scope.REQUEST)
    def get_disconnect_provider_use_case(
        self, account_link_manager: AccountLinkManager
    ) -> DisconnectProviderUseCase:
        """Provide disconnect provider use case."""
        return DisconnectProviderUseCase(account_link_manager=account_link_manager)

    @provide(scope=Scope.REQUEST)
    def get_get_llm_settings_use_case(
        self, llm_settings_service: LlmSettingsService
    ) -> GetLlmSettingsUseCase:
        """Provide get LLM settings use case."""
        return GetLlmSettingsUseCase(llm_settings_service=llm_settings_service)

    @provide(scope=Scope.REQUEST)
    def get_update_llm_settings_use_case(
        self, llm_settings_service: LlmSettingsService
    ) -> UpdateLlmSettingsUseCase:
        """Provide update LLM settings use case."""
        return UpdateLlmSettingsUseCase(llm_settings_service=llm_settings_service)
