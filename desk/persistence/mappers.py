"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from desk.domain.model import LinkedAccount, User, UserLlmSettings
from desk.domain.value import (
    AuthProvider,
    LinkedAccountId,
    LlmProvider,
    LlmSettingsId,
    UserId,
    Username,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(_uuid(row["id"])),
        username=Username(row["username"]),
        email=row.get("email"),
        email_verified=row.get("email_verified"),
        password_hash=row.get("password_hash"),
        name=row.get("name"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        image=row.get("image"),
        username_setup_complete=row.get("username_setup_complete", True),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion/update
    """
    return user.model_dump()


def row_to_linked_account(row: Dict[str, Any]) -> LinkedAccount:
    """Convert database row to LinkedAccount domain model.

    Args:
        row: Database row as dict

    Returns:
        LinkedAccount domain model
    """
    return LinkedAccount(
        id=LinkedAccountId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        provider_account_id=row["provider_account_id"],
        provider_email=row.get("provider_email"),
        created_at=row["created_at"],
    )


def linked_account_to_dict(account: LinkedAccount) -> Dict[str, Any]:
    """Convert LinkedAccount domain model to database dict."""
    data = account.model_dump()
    data["provider"] = account.provider.value
    return data


def row_to_llm_settings(row: Dict[str, Any]) -> UserLlmSettings:
    """Convert database row to UserLlmSettings domain model."""
    return UserLlmSettings(
        id=LlmSettingsId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        provider=LlmProvider(row["provider"]),
        model=row["model"],
        openai_api_key_enc=row.get("openai_api_key_enc"),
        anthropic_api_key_enc=row.get("anthropic_api_key_enc"),
        google_api_key_enc=row.get("google_api_key_enc"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def llm_settings_to_dict(settings: UserLlmSettings) -> Dict[str, Any]:
    """Convert UserLlmSettings domain model to database dict."""
    data = settings.model_dump()
    data["provider"] = settings.provider.value
    return data
