"""Unit tests for LlmSettingsService."""

from uuid import uuid4

import pytest

from desk.domain.service import LLM_MODELS, LlmSettingsService, SecretCipher
from desk.domain.value import LlmProvider, UserId
from desk.persistence.repository.inmemory import (
    InMemoryLlmSettingsRepository,
    InMemoryStore,
)


def build_service(
    cipher: SecretCipher, store: InMemoryStore | None = None
) -> LlmSettingsService:
    return LlmSettingsService(InMemoryLlmSettingsRepository(store), cipher)


class TestGet:
    """Tests for LlmSettingsService.get()."""

    @pytest.mark.asyncio
    async def test_defaults_when_nothing_saved(self, cipher):
        """Should report OpenAI defaults with no keys."""
        view = await build_service(cipher).get(UserId(uuid4()))

        assert view.provider == LlmProvider.OPENAI
        assert view.model == LLM_MODELS[LlmProvider.OPENAI][0]
        assert view.has_openai_api_key is False
        assert view.openai_api_key_mask is None
        assert view.encryption_available is True
        assert view.available_models == LLM_MODELS


class TestUpdate:
    """Tests for LlmSettingsService.update()."""

    @pytest.mark.asyncio
    async def test_stores_encrypted_key(self, cipher):
        """Keys are stored encrypted and only ever shown masked."""
        store = InMemoryStore()
        service = build_service(cipher, store)
        user_id = UserId(uuid4())

        view = await service.update(
            user_id, api_keys={LlmProvider.OPENAI: "sk-test-123"}
        )

        saved = store.llm_settings[user_id]
        assert saved.openai_api_key_enc is not None
        assert "sk-test-123" not in saved.openai_api_key_enc
        assert cipher.decrypt(saved.openai_api_key_enc) == "sk-test-123"
        assert service.decrypt_api_key(saved, LlmProvider.OPENAI) == "sk-test-123"

        assert view.has_openai_api_key is True
        assert view.openai_api_key_mask == "*" * len("sk-test-123")
        assert "sk-test-123" not in view.model_dump_json()

    @pytest.mark.asyncio
    async def test_mask_width_is_clamped(self, cipher):
        """Masks are between 6 and 12 characters wide."""
        service = build_service(cipher)

        assert service.mask(cipher.encrypt("abc")) == "******"
        assert service.mask(cipher.encrypt("k" * 50)) == "*" * 12
        assert service.mask(None) is None

    @pytest.mark.asyncio
    async def test_unreadable_key_is_masked(self, cipher):
        """A key stored under another secret still shows as present."""
        foreign = SecretCipher.from_secret("fedcba9876543210")
        service = build_service(cipher)

        assert service.mask(foreign.encrypt("sk-test-123")) == "******"

    @pytest.mark.asyncio
    async def test_clear_wins_over_new_key(self, cipher):
        """Clearing and setting the same key in one request clears it."""
        store = InMemoryStore()
        service = build_service(cipher, store)
        user_id = UserId(uuid4())
        await service.update(user_id, api_keys={LlmProvider.OPENAI: "sk-old-0000"})

        view = await service.update(
            user_id,
            api_keys={LlmProvider.OPENAI: "sk-new-1111"},
            clear={LlmProvider.OPENAI},
        )

        assert view.has_openai_api_key is False
        assert store.llm_settings[user_id].openai_api_key_enc is None

    @pytest.mark.asyncio
    async def test_untouched_keys_are_kept(self, cipher):
        """Updating one key leaves the others alone."""
        store = InMemoryStore()
        service = build_service(cipher, store)
        user_id = UserId(uuid4())
        await service.update(
            user_id, api_keys={LlmProvider.ANTHROPIC: "sk-ant-0000"}
        )

        view = await service.update(
            user_id, api_keys={LlmProvider.GOOGLE: "AIza-0000000"}
        )

        assert view.has_anthropic_api_key is True
        assert view.has_google_api_key is True
        assert view.has_openai_api_key is False

    @pytest.mark.asyncio
    async def test_provider_change_uses_provider_default_model(self, cipher):
        """Switching provider without a model picks the provider default."""
        service = build_service(cipher)

        view = await service.update(UserId(uuid4()), provider=LlmProvider.ANTHROPIC)

        assert view.provider == LlmProvider.ANTHROPIC
        assert view.model == LLM_MODELS[LlmProvider.ANTHROPIC][0]

    @pytest.mark.asyncio
    async def test_unknown_model_falls_back(self, cipher):
        """A model outside the provider catalog is replaced by the default."""
        service = build_service(cipher)

        view = await service.update(
            UserId(uuid4()), provider=LlmProvider.GOOGLE, model="gpt-4.1"
        )

        assert view.model == LLM_MODELS[LlmProvider.GOOGLE][0]

    @pytest.mark.asyncio
    async def test_known_model_is_kept(self, cipher):
        """A catalog model is saved as given."""
        service = build_service(cipher)

        view = await service.update(UserId(uuid4()), model="gpt-4.1")

        assert view.model == "gpt-4.1"

    @pytest.mark.asyncio
    async def test_save_keeps_row_identity(self, cipher):
        """Repeated saves update the same settings row."""
        store = InMemoryStore()
        service = build_service(cipher, store)
        user_id = UserId(uuid4())

        await service.update(user_id, model="gpt-4.1")
        first_id = store.llm_settings[user_id].id
        await service.update(user_id, model="gpt-4o-mini")

        assert store.llm_settings[user_id].id == first_id


class TestUnavailableCipher:
    """Behavior when no usable encryption secret is configured."""

    @pytest.mark.asyncio
    async def test_keys_are_not_stored(self):
        """Keys are dropped, the rest of the update is saved."""
        store = InMemoryStore()
        service = build_service(SecretCipher(None), store)
        user_id = UserId(uuid4())

        view = await service.update(
            user_id,
            provider=LlmProvider.ANTHROPIC,
            api_keys={LlmProvider.ANTHROPIC: "sk-ant-0000"},
        )

        assert view.encryption_available is False
        assert view.unsaved_api_keys == [LlmProvider.ANTHROPIC]
        assert view.has_anthropic_api_key is False
        assert view.provider == LlmProvider.ANTHROPIC
        assert store.llm_settings[user_id].anthropic_api_key_enc is None

    @pytest.mark.asyncio
    async def test_existing_keys_are_kept_but_unreadable(self, cipher):
        """Stored keys survive a lost secret and are masked as unreadable."""
        store = InMemoryStore()
        user_id = UserId(uuid4())
        await build_service(cipher, store).update(
            user_id, api_keys={LlmProvider.OPENAI: "sk-test-123"}
        )

        view = await build_service(SecretCipher(None), store).get(user_id)

        assert view.has_openai_api_key is True
        assert view.openai_api_key_mask == "******"
