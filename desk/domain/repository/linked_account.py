"""Linked account repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from desk.domain.model.linked_account import LinkedAccount
from desk.domain.value import AuthProvider, UserId


class LinkedAccountRepository(ABC):
    """Repository for LinkedAccount entity.

    Manages the relationship between users and their federated identities.
    """

    @abstractmethod
    async def find_by_provider_account(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[LinkedAccount]:
        """Find a link by provider and provider account ID.

        Args:
            provider: The federated provider
            provider_account_id: The subject id on that provider

        Returns:
            The linked account if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user_and_provider(
        self, user_id: UserId, provider: AuthProvider
    ) -> Optional[LinkedAccount]:
        """Find the user's link for a given provider.

        Args:
            user_id: The user's unique identifier
            provider: The federated provider

        Returns:
            The linked account if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_id(self, user_id: UserId) -> list[LinkedAccount]:
        """Get all links of a user.

        Args:
            user_id: The user's unique identifier

        Returns:
            List of linked accounts (may be empty)
        """
        pass

    @abstractmethod
    async def link(self, account: LinkedAccount) -> LinkedAccount:
        """Insert a new link.

        Args:
            account: The link to insert

        Returns:
            The inserted link

        Raises:
            IntegrityError: If the provider identity or the (user, provider)
                pair is already linked
        """
        pass

    @abstractmethod
    async def unlink(self, user_id: UserId, provider: AuthProvider) -> int:
        """Delete the user's links for a provider.

        Args:
            user_id: The user's unique identifier
            provider: The federated provider

        Returns:
            Number of links removed
        """
        pass
