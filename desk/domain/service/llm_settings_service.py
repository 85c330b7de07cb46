"""Per-user LLM settings and encrypted API key storage."""

from uuid import uuid4

import logfire
from pydantic import BaseModel

from desk.domain.model import UserLlmSettings
from desk.domain.model.user import utcnow
from desk.domain.repository import LlmSettingsRepository
from desk.domain.value import LlmProvider, LlmSettingsId, UserId

from .base import Service
from .secret_cipher import SecretCipher

LLM_MODELS: dict[LlmProvider, list[str]] = {
    LlmProvider.OPENAI: ["gpt-4o-mini", "gpt-4.1-mini", "gpt-4.1"],
    LlmProvider.ANTHROPIC: ["claude-3-5-sonnet-latest", "claude-3-5-haiku-latest"],
    LlmProvider.GOOGLE: ["gemini-1.5-flash", "gemini-1.5-pro"],
}

UNREADABLE_MASK = "******"


def default_model_for(provider: LlmProvider) -> str:
    """First catalog model of a provider."""
    return LLM_MODELS[provider][0]


def mask_length(secret: str) -> int:
    """Mask width: secret length clamped to 6..12."""
    return min(12, max(6, len(secret)))


class LlmSettingsView(BaseModel):
    """Public view of a user's LLM settings. Never carries a key."""

    provider: LlmProvider
    model: str
    has_openai_api_key: bool
    has_anthropic_api_key: bool
    has_google_api_key: bool
    openai_api_key_mask: str | None
    anthropic_api_key_mask: str | None
    google_api_key_mask: str | None
    available_models: dict[LlmProvider, list[str]]
    encryption_available: bool
    # Keys submitted in this request that could not be stored
    unsaved_api_keys: list[LlmProvider] = []


class LlmSettingsService(Service):
    """Stores LLM preferences and API keys encrypted with ``SecretCipher``.

    An unavailable cipher never fails a request: submitted keys are dropped,
    previously stored keys are kept, and the view reports
    ``encryption_available=False``.
    """

    def __init__(
        self, llm_settings_repository: LlmSettingsRepository, cipher: SecretCipher
    ) -> None:
        """Initialize LLM settings service.

        Args:
            llm_settings_repository: LLM settings repository
            cipher: Secret cipher for API keys
        """
        self.llm_settings_repository = llm_settings_repository
        self.cipher = cipher

    def mask(self, payload: str | None) -> str | None:
        """Mask a stored key without revealing it.

        Returns:
            None if no key is stored, ``"******"`` if it cannot be decrypted,
            otherwise asterisks as wide as the key (clamped to 6..12)
        """
        if not payload:
            return None
        plaintext = self.cipher.decrypt(payload)
        if not plaintext:
            return UNREADABLE_MASK
        return "*" * mask_length(plaintext)

    def decrypt_api_key(
        self, settings: UserLlmSettings | None, provider: LlmProvider
    ) -> str | None:
        """Plaintext key for outbound calls, or None if absent or unreadable."""
        if settings is None:
            return None
        return self.cipher.decrypt(settings.encrypted_key_for(provider))

    def _default(self, user_id: UserId) -> UserLlmSettings:
        return UserLlmSettings(
            id=LlmSettingsId(uuid4()),
            user_id=user_id,
            provider=LlmProvider.OPENAI,
            model=default_model_for(LlmProvider.OPENAI),
        )

    def _view(
        self,
        settings: UserLlmSettings,
        unsaved: list[LlmProvider] | None = None,
    ) -> LlmSettingsView:
        return LlmSettingsView(
            provider=settings.provider,
            model=settings.model,
            has_openai_api_key=bool(settings.openai_api_key_enc),
            has_anthropic_api_key=bool(settings.anthropic_api_key_enc),
            has_google_api_key=bool(settings.google_api_key_enc),
            openai_api_key_mask=self.mask(settings.openai_api_key_enc),
            anthropic_api_key_mask=self.mask(settings.anthropic_api_key_enc),
            google_api_key_mask=self.mask(settings.google_api_key_enc),
            available_models=LLM_MODELS,
            encryption_available=self.cipher.available,
            unsaved_api_keys=unsaved or [],
        )

    async def get(self, user_id: UserId) -> LlmSettingsView:
        """Get the public view of a user's settings (defaults if none saved)."""
        with logfire.span("llm_settings_service.get", user_id=str(user_id)):
            settings = await self.llm_settings_repository.find_by_user_id(user_id)
            return self._view(settings or self._default(user_id))

    async def update(
        self,
        user_id: UserId,
        provider: LlmProvider | None = None,
        model: str | None = None,
        api_keys: dict[LlmProvider, str] | None = None,
        clear: set[LlmProvider] | None = None,
    ) -> LlmSettingsView:
        """Update provider/model and set or clear API keys.

        Args:
            user_id: The signed-in user
            provider: New preferred provider
            model: New model; falls back to the provider default when it is
                not in the provider's catalog
            api_keys: New plaintext keys per provider
            clear: Providers whose stored key is removed (wins over a new key)

        Returns:
            Public view of the saved settings
        """
        api_keys = api_keys or {}
        clear = clear or set()

        with logfire.span(
            "llm_settings_service.update",
            user_id=str(user_id),
            provider=provider.value if provider else None,
            new_keys=sorted(p.value for p in api_keys),
            cleared=sorted(p.value for p in clear),
        ):
            current = await self.llm_settings_repository.find_by_user_id(user_id)
            current = current or self._default(user_id)

            next_provider = provider or current.provider
            if model is None:
                model = (
                    current.model
                    if next_provider == current.provider
                    else default_model_for(next_provider)
                )
            if model not in LLM_MODELS[next_provider]:
                model = default_model_for(next_provider)

            update: dict = {
                "provider": next_provider,
                "model": model,
                "updated_at": utcnow(),
            }
            unsaved: list[LlmProvider] = []

            for key_provider in LlmProvider:
                field = f"{key_provider.value}_api_key_enc"
                if key_provider in clear:
                    update[field] = None
                    continue

                plaintext = (api_keys.get(key_provider) or "").strip()
                if not plaintext:
                    continue

                payload = self.cipher.encrypt(plaintext)
                if payload is None:
                    unsaved.append(key_provider)
                    continue
                update[field] = payload

            if unsaved:
                logfire.warn(
                    "Encryption unavailable, API keys not stored",
                    user_id=str(user_id),
                    providers=[p.value for p in unsaved],
                )

            saved = await self.llm_settings_repository.save(
                current.model_copy(update=update)
            )
            logfire.info("LLM settings saved", user_id=str(user_id))
            return self._view(saved, unsaved)
