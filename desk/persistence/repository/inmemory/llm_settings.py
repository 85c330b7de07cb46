"""In-memory LLM settings repository for testing."""

from typing import Optional

from desk.domain.model.llm_settings import UserLlmSettings
from desk.domain.repository.llm_settings import LlmSettingsRepository
from desk.domain.value import UserId

from .store import InMemoryStore


class InMemoryLlmSettingsRepository(LlmSettingsRepository):
    """In-memory implementation of LlmSettingsRepository for testing."""

    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()

    async def find_by_user_id(self, user_id: UserId) -> Optional[UserLlmSettings]:
        """Find a user's settings."""
        return self.store.llm_settings.get(user_id)

    async def save(self, settings: UserLlmSettings) -> UserLlmSettings:
        """Upsert a user's settings, keeping the original row identity."""
        existing = self.store.llm_settings.get(settings.user_id)
        if existing:
            settings = settings.model_copy(
                update={"id": existing.id, "created_at": existing.created_at}
            )
        self.store.llm_settings[settings.user_id] = settings
        return settings
