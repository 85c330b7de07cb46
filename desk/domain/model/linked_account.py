"""Linked account entity.

Binds a federated provider identity to a local user. Provider access and
refresh tokens are never stored.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from desk.domain.model.common import DomainModel
from desk.domain.model.user import utcnow
from desk.domain.value import AuthProvider, LinkedAccountId, UserId


class LinkedAccount(DomainModel):
    """Federated identity linked to a user.

    Unique per ``(provider, provider_account_id)`` and per ``(user_id, provider)``.
    """

    id: LinkedAccountId
    user_id: UserId
    provider: AuthProvider
    provider_account_id: str
    provider_email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
