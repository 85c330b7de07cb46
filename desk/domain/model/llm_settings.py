"""Per-user LLM provider settings."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from desk.domain.model.common import DomainModel
from desk.domain.model.user import utcnow
from desk.domain.value import LlmProvider, LlmSettingsId, UserId


class UserLlmSettings(DomainModel):
    """Preferred provider/model and encrypted third-party API keys.

    The ``*_api_key_enc`` fields hold ``iv:tag:ciphertext`` payloads produced
    by ``SecretCipher``; plaintext keys never reach this model.
    """

    id: LlmSettingsId
    user_id: UserId
    provider: LlmProvider = LlmProvider.OPENAI
    model: str = "gpt-4o-mini"
    openai_api_key_enc: Optional[str] = None
    anthropic_api_key_enc: Optional[str] = None
    google_api_key_enc: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def encrypted_key_for(self, provider: LlmProvider) -> Optional[str]:
        """Return the stored payload for a provider's API key."""
        return getattr(self, f"{provider.value}_api_key_enc")
