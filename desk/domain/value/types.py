"""Domain value objects.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules.
"""

import re
from enum import Enum

from pydantic import field_validator

from desk.domain.value.common import RootValueObject, ValueObject


class AuthProvider(str, Enum):
    """Federated identity providers that can be linked to an account."""

    GOOGLE = "google"

    @property
    def label(self) -> str:
        """Human-readable provider name used in user-facing messages."""
        return self.value.capitalize()


class LlmProvider(str, Enum):
    """Third-party LLM vendors a user can store an API key for."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class Username(RootValueObject[str]):
    """Globally unique, lowercase account handle.

    Only the storage invariant is checked here (lowercase, ``[a-z0-9_]``).
    Length and underscore rules belong to the configured username policy,
    see ``UsernameAllocator.pattern``.
    """

    @field_validator("root")
    @classmethod
    def validate_username_format(cls, v: str) -> str:
        """Validate username is lowercase alphanumeric (plus underscore)."""
        if not re.match(r"^[a-z0-9_]{1,64}$", v):
            raise ValueError(
                "Username must be 1-64 characters of lowercase letters, digits "
                "or underscore"
            )
        return v


class OAuthProviderInfo(ValueObject):
    """Identity asserted by a federated provider after a successful callback."""

    provider: AuthProvider
    provider_account_id: str  # Stable subject id from the provider
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    email_verified: bool = False
