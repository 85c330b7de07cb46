"""In-memory linked account repository for testing."""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from desk.domain.model.linked_account import LinkedAccount
from desk.domain.repository.linked_account import LinkedAccountRepository
from desk.domain.value import AuthProvider, UserId

from .store import InMemoryStore


class InMemoryLinkedAccountRepository(LinkedAccountRepository):
    """In-memory implementation of LinkedAccountRepository for testing."""

    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()

    async def find_by_provider_account(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[LinkedAccount]:
        """Find a link by provider and provider account ID."""
        for account in self.store.linked_accounts:
            if (
                account.provider == provider
                and account.provider_account_id == provider_account_id
            ):
                return account
        return None

    async def find_by_user_and_provider(
        self, user_id: UserId, provider: AuthProvider
    ) -> Optional[LinkedAccount]:
        """Find the user's link for a provider."""
        for account in self.store.linked_accounts:
            if account.user_id == user_id and account.provider == provider:
                return account
        return None

    async def find_all_by_user_id(self, user_id: UserId) -> list[LinkedAccount]:
        """Find all links of a user."""
        matches = [a for a in self.store.linked_accounts if a.user_id == user_id]
        matches.sort(key=lambda a: a.created_at)
        return matches

    async def link(self, account: LinkedAccount) -> LinkedAccount:
        """Insert a new link.

        Raises:
            IntegrityError: If the identity or (user, provider) is already linked
        """
        if await self.find_by_provider_account(
            account.provider, account.provider_account_id
        ):
            raise IntegrityError("Duplicate provider account", None, Exception())
        if await self.find_by_user_and_provider(account.user_id, account.provider):
            raise IntegrityError("Duplicate user provider link", None, Exception())

        self.store.linked_accounts.append(account)
        return account

    async def unlink(self, user_id: UserId, provider: AuthProvider) -> int:
        """Delete the user's links for a provider."""
        before = len(self.store.linked_accounts)
        self.store.linked_accounts = [
            a
            for a in self.store.linked_accounts
            if not (a.user_id == user_id and a.provider == provider)
        ]
        return before - len(self.store.linked_accounts)
