"""LinkedAccount repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from desk.domain.model import LinkedAccount
from desk.domain.repository import LinkedAccountRepository
from desk.domain.value import AuthProvider, UserId
from desk.persistence.mappers import linked_account_to_dict, row_to_linked_account
from desk.persistence.tables import linked_accounts_table


class PostgresLinkedAccountRepository(LinkedAccountRepository):
    """PostgreSQL implementation of LinkedAccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_provider_account(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[LinkedAccount]:
        """Get a link by provider and provider account ID.

        Args:
            provider: Federated provider
            provider_account_id: Provider subject id

        Returns:
            LinkedAccount if found, None otherwise
        """
        stmt = select(linked_accounts_table).where(
            linked_accounts_table.c.provider == provider.value,
            linked_accounts_table.c.provider_account_id == provider_account_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_linked_account(dict(row))

    async def find_by_user_and_provider(
        self, user_id: UserId, provider: AuthProvider
    ) -> Optional[LinkedAccount]:
        """Get the user's link for a provider."""
        stmt = select(linked_accounts_table).where(
            linked_accounts_table.c.user_id == user_id,
            linked_accounts_table.c.provider == provider.value,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_linked_account(dict(row))

    async def find_all_by_user_id(self, user_id: UserId) -> list[LinkedAccount]:
        """Find all links of a user.

        Args:
            user_id: User ID to find links for

        Returns:
            List of LinkedAccount objects (may be empty)
        """
        stmt = (
            select(linked_accounts_table)
            .where(linked_accounts_table.c.user_id == user_id)
            .order_by(linked_accounts_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        rows = result.mappings().all()

        return [row_to_linked_account(dict(row)) for row in rows]

    async def link(self, account: LinkedAccount) -> LinkedAccount:
        """Insert a new link.

        Raises:
            IntegrityError: If the identity or (user, provider) is already linked
        """
        stmt = linked_accounts_table.insert().values(**linked_account_to_dict(account))
        async with self.session.begin_nested():
            await self.session.execute(stmt)
        return account

    async def unlink(self, user_id: UserId, provider: AuthProvider) -> int:
        """Delete the user's links for a provider.

        Returns:
            Number of links removed
        """
        stmt = delete(linked_accounts_table).where(
            linked_accounts_table.c.user_id == user_id,
            linked_accounts_table.c.provider == provider.value,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount  # type: ignore[attr-defined]
