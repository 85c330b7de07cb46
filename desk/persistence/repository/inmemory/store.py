"""Shared in-memory state for the in-memory repositories."""

from dataclasses import dataclass, field

from desk.domain.model import LinkedAccount, User, UserLlmSettings
from desk.domain.value import UserId


@dataclass
class InMemoryStore:
    """Tables shared by all in-memory repositories of one container.

    Entities are frozen, so a shallow copy is a consistent snapshot.
    """

    users: dict[UserId, User] = field(default_factory=dict)
    linked_accounts: list[LinkedAccount] = field(default_factory=list)
    llm_settings: dict[UserId, UserLlmSettings] = field(default_factory=dict)

    def snapshot(self) -> "InMemoryStore":
        return InMemoryStore(
            users=dict(self.users),
            linked_accounts=list(self.linked_accounts),
            llm_settings=dict(self.llm_settings),
        )

    def restore(self, snapshot: "InMemoryStore") -> None:
        self.users = snapshot.users
        self.linked_accounts = snapshot.linked_accounts
        self.llm_settings = snapshot.llm_settings
