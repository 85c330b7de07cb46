"""LLM settings repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from desk.domain.model.llm_settings import UserLlmSettings
from desk.domain.value import UserId


class LlmSettingsRepository(ABC):
    """Repository for per-user LLM settings (one row per user)."""

    @abstractmethod
    async def find_by_user_id(self, user_id: UserId) -> Optional[UserLlmSettings]:
        """Find a user's settings.

        Args:
            user_id: The user's unique identifier

        Returns:
            The settings if the user saved any, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, settings: UserLlmSettings) -> UserLlmSettings:
        """Create or replace a user's settings.

        Args:
            settings: The settings to save

        Returns:
            The saved settings
        """
        pass
