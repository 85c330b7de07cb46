"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from desk.domain.model.user import User
from desk.domain.value import UserId


class UserRepository(ABC):
    """Repository for User aggregate.

    ``username`` and ``email`` are unique. Writes that violate either raise
    ``sqlalchemy.exc.IntegrityError``; the unique constraint is the source of
    truth for uniqueness, any prior existence check is advisory.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        """Find a user by exact (lowercase) username.

        Args:
            username: Normalized username

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by their email.

        Args:
            email: Lowercase email address

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def exists_by_username(self, username: str) -> bool:
        """Check whether a username is taken.

        Args:
            username: Normalized username

        Returns:
            True if a user holds this username
        """
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a new user.

        Args:
            user: The user to insert

        Returns:
            The created user

        Raises:
            IntegrityError: If the username or email is already taken
        """
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update an existing user.

        Args:
            user: The user with updated fields

        Returns:
            The updated user

        Raises:
            IntegrityError: If the new username or email is already taken
        """
        pass
