"""In-memory transaction manager for testing."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from desk.domain.repository import TransactionManager

from .store import InMemoryStore


class InMemoryTransactionManager(TransactionManager):
    """Restores a snapshot of the store when the unit of work fails."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Snapshot the store; restore it if the block raises."""
        snapshot = self.store.snapshot()
        try:
            yield
        except BaseException:
            self.store.restore(snapshot)
            raise
