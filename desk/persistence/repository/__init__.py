"""PostgreSQL repository implementations."""

from desk.persistence.repository.linked_account import PostgresLinkedAccountRepository
from desk.persistence.repository.llm_settings import PostgresLlmSettingsRepository
from desk.persistence.repository.transaction import PostgresTransactionManager
from desk.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "PostgresLinkedAccountRepository",
    "PostgresLlmSettingsRepository",
    "PostgresTransactionManager",
]
