"""Unit tests for AccountLinkManager."""

from uuid import uuid4

import pytest

from desk.domain.error import (
    AlreadyDisconnectedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from desk.domain.service import AccountLinkManager, PasswordHasher
from desk.domain.value import AuthProvider, UserId
from desk.persistence.repository.inmemory import (
    InMemoryLinkedAccountRepository,
    InMemoryStore,
    InMemoryTransactionManager,
    InMemoryUserRepository,
)
from tests.factories import google_identity, make_link, make_user


class FailingUnlinkRepository(InMemoryLinkedAccountRepository):
    """Fails the delete, after the password has been written."""

    async def unlink(self, user_id, provider) -> int:
        raise RuntimeError("connection lost")


def build_manager(
    store: InMemoryStore,
    password_hasher: PasswordHasher,
    link_repo: InMemoryLinkedAccountRepository | None = None,
) -> AccountLinkManager:
    return AccountLinkManager(
        user_repository=InMemoryUserRepository(store),
        linked_account_repository=link_repo or InMemoryLinkedAccountRepository(store),
        transaction_manager=InMemoryTransactionManager(store),
        password_hasher=password_hasher,
    )


def add_user(store: InMemoryStore, **kwargs):
    user = make_user(**kwargs)
    store.users[user.id] = user
    return user


class TestStatus:
    """Tests for AccountLinkManager.status()."""

    @pytest.mark.asyncio
    async def test_reports_links_and_password(self, password_hasher):
        """Should list linked providers and password presence."""
        store = InMemoryStore()
        user = add_user(store, username="alice", password_hash="hash")
        store.linked_accounts.append(make_link(user))
        manager = build_manager(store, password_hasher)

        status = await manager.status(user.id)

        assert status.linked_providers == [AuthProvider.GOOGLE]
        assert status.is_linked(AuthProvider.GOOGLE)
        assert status.has_password is True

    @pytest.mark.asyncio
    async def test_unknown_user(self, password_hasher):
        """Should raise for a missing user."""
        manager = build_manager(InMemoryStore(), password_hasher)

        with pytest.raises(NotFoundError):
            await manager.status(UserId(uuid4()))


class TestConnect:
    """Tests for AccountLinkManager.connect()."""

    @pytest.mark.asyncio
    async def test_links_identity(self, password_hasher):
        """Should link a new identity to the user."""
        store = InMemoryStore()
        user = add_user(store, username="alice", password_hash="hash")
        manager = build_manager(store, password_hasher)

        account = await manager.connect(
            user.id, google_identity(email="Alice@Example.com")
        )

        assert account.user_id == user.id
        assert account.provider_account_id == "google-alice"
        assert account.provider_email == "alice@example.com"
        assert store.linked_accounts == [account]

    @pytest.mark.asyncio
    async def test_relinking_same_identity_is_noop(self, password_hasher):
        """Connecting an identity already linked to the user returns it."""
        store = InMemoryStore()
        user = add_user(store, username="alice")
        existing = make_link(user)
        store.linked_accounts.append(existing)
        manager = build_manager(store, password_hasher)

        account = await manager.connect(user.id, google_identity())

        assert account == existing
        assert len(store.linked_accounts) == 1

    @pytest.mark.asyncio
    async def test_identity_linked_to_another_user(self, password_hasher):
        """Should not move an identity between users."""
        store = InMemoryStore()
        owner = add_user(store, username="owner")
        store.linked_accounts.append(make_link(owner))
        user = add_user(store, username="alice", password_hash="hash")
        manager = build_manager(store, password_hasher)

        with pytest.raises(ConflictError, match="linked to another user"):
            await manager.connect(user.id, google_identity())

    @pytest.mark.asyncio
    async def test_second_identity_same_provider(self, password_hasher):
        """A user holds at most one identity per provider."""
        store = InMemoryStore()
        user = add_user(store, username="alice", password_hash="hash")
        store.linked_accounts.append(make_link(user, "google-first"))
        manager = build_manager(store, password_hasher)

        with pytest.raises(ConflictError, match="already linked"):
            await manager.connect(user.id, google_identity(subject="google-second"))

    @pytest.mark.asyncio
    async def test_unknown_user(self, password_hasher):
        """Should raise for a missing user."""
        manager = build_manager(InMemoryStore(), password_hasher)

        with pytest.raises(NotFoundError):
            await manager.connect(UserId(uuid4()), google_identity())


class TestDisconnect:
    """Tests for AccountLinkManager.disconnect()."""

    @pytest.mark.asyncio
    async def test_user_with_password(self, password_hasher):
        """Should unlink without touching the existing password."""
        store = InMemoryStore()
        user = add_user(store, username="alice", password_hash="existing-hash")
        store.linked_accounts.append(make_link(user))
        manager = build_manager(store, password_hasher)

        result = await manager.disconnect(user.id, AuthProvider.GOOGLE)

        assert result.message == "Google integration disconnected."
        assert result.linked is False
        assert result.has_password is True
        assert store.linked_accounts == []
        assert store.users[user.id].password_hash == "existing-hash"

    @pytest.mark.asyncio
    async def test_passwordless_user_sets_password(self, password_hasher):
        """The new password is stored and the link removed together."""
        store = InMemoryStore()
        user = add_user(store, username="alice")
        store.linked_accounts.append(make_link(user))
        manager = build_manager(store, password_hasher)

        await manager.disconnect(
            user.id,
            AuthProvider.GOOGLE,
            password="new-password",
            confirm_password="new-password",
        )

        saved = store.users[user.id]
        assert saved.password_hash is not None
        assert await password_hasher.verify("new-password", saved.password_hash)
        assert store.linked_accounts == []

    @pytest.mark.asyncio
    async def test_passwordless_user_without_password(self, password_hasher):
        """Should refuse to leave the user with no sign-in method."""
        store = InMemoryStore()
        user = add_user(store, username="alice")
        store.linked_accounts.append(make_link(user))
        manager = build_manager(store, password_hasher)

        with pytest.raises(ValidationError, match="Set a password"):
            await manager.disconnect(user.id, AuthProvider.GOOGLE)

        assert len(store.linked_accounts) == 1
        assert store.users[user.id].password_hash is None

    @pytest.mark.asyncio
    async def test_passwordless_user_mismatched_confirmation(self, password_hasher):
        """Should reject a confirmation that differs."""
        store = InMemoryStore()
        user = add_user(store, username="alice")
        store.linked_accounts.append(make_link(user))
        manager = build_manager(store, password_hasher)

        with pytest.raises(ValidationError, match="Passwords do not match."):
            await manager.disconnect(
                user.id,
                AuthProvider.GOOGLE,
                password="new-password",
                confirm_password="other-password",
            )

        assert len(store.linked_accounts) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["short", "x", "p" * 101])
    async def test_passwordless_user_password_length(self, password_hasher, password):
        """New passwords must be 8-100 characters."""
        store = InMemoryStore()
        user = add_user(store, username="alice")
        store.linked_accounts.append(make_link(user))
        manager = build_manager(store, password_hasher)

        with pytest.raises(ValidationError, match="Password must be 8-100 characters."):
            await manager.disconnect(
                user.id,
                AuthProvider.GOOGLE,
                password=password,
                confirm_password=password,
            )

        assert len(store.linked_accounts) == 1
        assert store.users[user.id].password_hash is None

    @pytest.mark.asyncio
    async def test_not_linked(self, password_hasher):
        """Disconnecting twice should report already disconnected."""
        store = InMemoryStore()
        user = add_user(store, username="alice", password_hash="hash")
        manager = build_manager(store, password_hasher)

        with pytest.raises(AlreadyDisconnectedError) as exc_info:
            await manager.disconnect(user.id, AuthProvider.GOOGLE)

        assert str(exc_info.value) == "Google integration is already disconnected."

    @pytest.mark.asyncio
    async def test_unknown_user(self, password_hasher):
        """Should raise for a missing user."""
        manager = build_manager(InMemoryStore(), password_hasher)

        with pytest.raises(NotFoundError):
            await manager.disconnect(UserId(uuid4()), AuthProvider.GOOGLE)

    @pytest.mark.asyncio
    async def test_failed_unlink_rolls_back_password(self, password_hasher):
        """Password and unlink commit together or not at all."""
        store = InMemoryStore()
        user = add_user(store, username="alice")
        store.linked_accounts.append(make_link(user))
        manager = build_manager(
            store, password_hasher, link_repo=FailingUnlinkRepository(store)
        )

        with pytest.raises(RuntimeError):
            await manager.disconnect(
                user.id,
                AuthProvider.GOOGLE,
                password="new-password",
                confirm_password="new-password",
            )

        assert store.users[user.id].password_hash is None
        assert len(store.linked_accounts) == 1
