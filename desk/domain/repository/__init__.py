"""Repository interfaces.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from desk.domain.repository.linked_account import LinkedAccountRepository
from desk.domain.repository.llm_settings import LlmSettingsRepository
from desk.domain.repository.transaction import TransactionManager
from desk.domain.repository.user import UserRepository

__all__ = [
    "UserRepository",
    "LinkedAccountRepository",
    "LlmSettingsRepository",
    "TransactionManager",
]
