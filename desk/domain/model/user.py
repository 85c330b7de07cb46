"""User aggregate root.

A user signs in with a local password, a linked federated identity, or both.
At least one of the two must remain available at all times.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from desk.domain.model.common import DomainModel
from desk.domain.value import UserId, Username


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(DomainModel):
    """User aggregate root."""

    id: UserId
    username: Username
    email: Optional[str] = None  # Stored lowercase, unique when present
    email_verified: Optional[datetime] = None
    password_hash: Optional[str] = None  # bcrypt; None for federation-only users
    name: Optional[str] = None  # Display name, derived from first/last
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image: Optional[str] = None  # Avatar URL or data URL
    # False while a federated signup still carries a placeholder username
    username_setup_complete: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def has_password(self) -> bool:
        """Whether the user can sign in with credentials."""
        return bool(self.password_hash)
