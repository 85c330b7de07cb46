"""PostgreSQL implementation of User repository."""

from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from desk.domain.model import User
from desk.domain.repository import UserRepository
from desk.domain.value import UserId
from desk.persistence.mappers import row_to_user, user_to_dict
from desk.persistence.tables import users_table


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository.

    Writes run inside a savepoint so a unique violation leaves the request
    session usable and the caller can retry with another username.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.id == user_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_username(self, username: str) -> Optional[User]:
        """Find a user by username.

        Args:
            username: Normalized username

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.username == username)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by their email.

        Args:
            email: Email to search for

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.email == email)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def exists_by_username(self, username: str) -> bool:
        """Check whether a username is taken.

        Args:
            username: Normalized username

        Returns:
            True if a user holds this username
        """
        stmt = select(exists().where(users_table.c.username == username))
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def create(self, user: User) -> User:
        """Insert a new user.

        Args:
            user: User to insert

        Returns:
            Created user

        Raises:
            IntegrityError: If the username or email is already taken
        """
        stmt = users_table.insert().values(**user_to_dict(user))
        async with self.session.begin_nested():
            await self.session.execute(stmt)
        return user

    async def update(self, user: User) -> User:
        """Update an existing user.

        Args:
            user: User with updated fields

        Returns:
            Updated user

        Raises:
            IntegrityError: If the new username or email is already taken
        """
        values = user_to_dict(user)
        values.pop("id")
        values.pop("created_at")
        stmt = users_table.update().where(users_table.c.id == user.id).values(**values)
        async with self.session.begin_nested():
            await self.session.execute(stmt)
        return user
