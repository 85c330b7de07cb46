"""In-memory repository implementations for testing."""

from .linked_account import InMemoryLinkedAccountRepository
from .llm_settings import InMemoryLlmSettingsRepository
from .store import InMemoryStore
from .transaction import InMemoryTransactionManager
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryLinkedAccountRepository",
    "InMemoryLlmSettingsRepository",
    "InMemoryStore",
    "InMemoryTransactionManager",
    "InMemoryUserRepository",
]
