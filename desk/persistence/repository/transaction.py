"""PostgreSQL transaction manager."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from desk.domain.repository import TransactionManager


class PostgresTransactionManager(TransactionManager):
    """Runs a unit of work inside a savepoint of the request session.

    The request session commits once at the end of the request; a failed
    unit rolls back to its savepoint only.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Open a savepoint; released on success, rolled back on error."""
        async with self.session.begin_nested():
            yield
