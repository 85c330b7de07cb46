"""Update LLM settings use case."""

from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.service import LlmSettingsService, LlmSettingsView
from desk.domain.value import LlmProvider, UserId


class UpdateLlmSettingsRequest(BaseModel):
    """Update LLM settings request.

    A non-empty ``*_api_key`` replaces the stored key; a ``clear_*`` flag
    removes it.
    """

    user_id: UserId
    provider: LlmProvider | None = None
    model: str | None = None
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    google_api_key: str | None = None
    clear_openai_api_key: bool = False
    clear_anthropic_api_key: bool = False
    clear_google_api_key: bool = False


class UpdateLlmSettingsUseCase(BaseUseCase):
    """Use case for saving provider/model choice and API keys."""

    def __init__(self, llm_settings_service: LlmSettingsService) -> None:
        """Initialize update LLM settings use case.

        Args:
            llm_settings_service: LLM settings domain service
        """
        self.llm_settings_service = llm_settings_service

    async def execute(self, request: UpdateLlmSettingsRequest) -> LlmSettingsView:
        """Save the settings.

        Returns:
            Masked view; ``encryption_available`` is False and
            ``unsaved_api_keys`` lists the dropped keys when the cipher is
            unavailable
        """
        api_keys: dict[LlmProvider, str] = {}
        clear: set[LlmProvider] = set()
        for provider in LlmProvider:
            key = getattr(request, f"{provider.value}_api_key")
            if key:
                api_keys[provider] = key
            if getattr(request, f"clear_{provider.value}_api_key"):
                clear.add(provider)

        return await self.llm_settings_service.update(
            request.user_id,
            provider=request.provider,
            model=request.model,
            api_keys=api_keys,
            clear=clear,
        )
