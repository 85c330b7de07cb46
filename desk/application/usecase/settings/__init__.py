"""Account settings use cases."""

from .disconnect_provider import DisconnectProviderUseCase
from .get_llm_settings import GetLlmSettingsUseCase
from .get_profile import GetProfileUseCase
from .update_llm_settings import UpdateLlmSettingsUseCase
from .update_profile import UpdateProfileUseCase

__all__ = [
    "DisconnectProviderUseCase",
    "GetLlmSettingsUseCase",
    "GetProfileUseCase",
    "UpdateLlmSettingsUseCase",
    "UpdateProfileUseCase",
]
