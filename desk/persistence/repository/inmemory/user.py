"""In-memory user repository for testing."""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from desk.domain.model.user import User
from desk.domain.repository.user import UserRepository
from desk.domain.value import UserId

from .store import InMemoryStore


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing.

    Enforces the same unique constraints as the ``users`` table.
    """

    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self.store.users.get(user_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        """Find a user by username."""
        for user in self.store.users.values():
            if user.username.root == username:
                return user
        return None

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by their email."""
        for user in self.store.users.values():
            if user.email == email:
                return user
        return None

    async def exists_by_username(self, username: str) -> bool:
        """Check whether a username is taken."""
        return await self.find_by_username(username) is not None

    def _check_unique(self, user: User) -> None:
        for other in self.store.users.values():
            if other.id == user.id:
                continue
            if other.username == user.username:
                raise IntegrityError("Duplicate username", None, Exception())
            if user.email and other.email == user.email:
                raise IntegrityError("Duplicate email", None, Exception())

    async def create(self, user: User) -> User:
        """Insert a new user.

        Raises:
            IntegrityError: If the ID, username or email is already taken
        """
        if user.id in self.store.users:
            raise IntegrityError("Duplicate user id", None, Exception())
        self._check_unique(user)
        self.store.users[user.id] = user
        return user

    async def update(self, user: User) -> User:
        """Update an existing user.

        Raises:
            IntegrityError: If the new username or email is already taken
        """
        self._check_unique(user)
        if user.id in self.store.users:
            self.store.users[user.id] = user
        return user
