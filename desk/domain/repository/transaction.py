"""Transaction manager interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class TransactionManager(ABC):
    """Groups several repository writes into one all-or-nothing unit.

    Usage:
        async with transaction_manager.atomic():
            await user_repository.update(user)
            await linked_account_repository.unlink(user.id, provider)

    If the block raises, every write made inside it is undone and the
    exception propagates.
    """

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Open an atomic unit of work."""
        pass
