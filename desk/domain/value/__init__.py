"""Domain value objects."""

from desk.domain.value.identifiers import LinkedAccountId, LlmSettingsId, UserId
from desk.domain.value.types import (
    AuthProvider,
    LlmProvider,
    OAuthProviderInfo,
    Username,
)

__all__ = [
    # Identifiers
    "UserId",
    "LinkedAccountId",
    "LlmSettingsId",
    # Types
    "AuthProvider",
    "LlmProvider",
    "OAuthProviderInfo",
    "Username",
]
