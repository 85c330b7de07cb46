"""Domain model entities."""

from desk.domain.model.linked_account import LinkedAccount
from desk.domain.model.llm_settings import UserLlmSettings
from desk.domain.model.user import User

__all__ = [
    "User",
    "LinkedAccount",
    "UserLlmSettings",
]
