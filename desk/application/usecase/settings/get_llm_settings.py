"""Get LLM settings use case."""

from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.service import LlmSettingsService, LlmSettingsView
from desk.domain.value import UserId


class GetLlmSettingsRequest(BaseModel):
    """Get LLM settings request."""

    user_id: UserId


class GetLlmSettingsUseCase(BaseUseCase):
    """Use case for reading the agent settings (keys masked)."""

    def __init__(self, llm_settings_service: LlmSettingsService) -> None:
        self.llm_settings_service = llm_settings_service

    async def execute(self, request: GetLlmSettingsRequest) -> LlmSettingsView:
        return await self.llm_settings_service.get(request.user_id)
