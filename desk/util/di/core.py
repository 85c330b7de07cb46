"""Core DI providers (non-mockable)."""

import logfire
from dishka import Scope, provide

from desk.config import AuthSettings, Settings, UsernamePolicySettings
from desk.domain.service import PasswordHasher, SecretCipher
from desk.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    Stateless crypto helpers are built once per container from settings.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide(scope=Scope.APP)
    def provide_username_policy(
        self, auth_settings: AuthSettings
    ) -> UsernamePolicySettings:
        """Provide username policy."""
        return auth_settings.username

    @provide(scope=Scope.APP)
    def provide_secret_cipher(self, settings: Settings) -> SecretCipher:
        """Provide the API-key cipher, keyed once at startup."""
        cipher = SecretCipher.from_secret(
            settings.encryption_secret, settings.encryption.min_secret_length
        )
        if not cipher.available:
            logfire.warn("Encryption secret missing or too short, cipher disabled")
        return cipher

    @provide(scope=Scope.APP)
    def provide_password_hasher(self, auth_settings: AuthSettings) -> PasswordHasher:
        """Provide bcrypt password hasher."""
        return PasswordHasher(rounds=auth_settings.bcrypt_rounds)
