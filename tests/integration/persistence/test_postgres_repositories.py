"""Integration tests for the PostgreSQL repositories.

Requires a migrated database (``alembic upgrade head``); run with
``pytest -m integration``.
"""

from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from desk.domain.model import UserLlmSettings
from desk.domain.repository import (
    LinkedAccountRepository,
    LlmSettingsRepository,
    TransactionManager,
    UserRepository,
)
from desk.domain.value import AuthProvider, LlmProvider, LlmSettingsId
from tests.factories import make_link, make_user
from tests.harness import create_env_fixture

pytestmark = pytest.mark.integration

# Integration test fixture
integration_env = create_env_fixture(unmock={"persistence"})


def unique_username() -> str:
    return f"it_{uuid4().hex[:12]}"


class TestUserRepositoryIntegration:
    """Integration tests for PostgresUserRepository."""

    @pytest.mark.asyncio
    async def test_create_and_find(self, integration_env):
        user_repo = await integration_env.get(UserRepository)
        username = unique_username()
        user = await user_repo.create(make_user(username, email=f"{username}@test.io"))

        assert (await user_repo.find_by_id(user.id)).username.root == username
        assert (await user_repo.find_by_username(username)).id == user.id
        assert (await user_repo.find_by_email(f"{username}@test.io")).id == user.id
        assert await user_repo.exists_by_username(username) is True

    @pytest.mark.asyncio
    async def test_duplicate_username_keeps_session_usable(self, integration_env):
        """A rejected insert rolls back to its savepoint only."""
        user_repo = await integration_env.get(UserRepository)
        username = unique_username()
        await user_repo.create(make_user(username))

        with pytest.raises(IntegrityError):
            await user_repo.create(make_user(username))

        assert await user_repo.exists_by_username(username) is True

    @pytest.mark.asyncio
    async def test_atomic_rolls_back_unit(self, integration_env):
        user_repo = await integration_env.get(UserRepository)
        transaction_manager = await integration_env.get(TransactionManager)
        username = unique_username()

        with pytest.raises(RuntimeError):
            async with transaction_manager.atomic():
                await user_repo.create(make_user(username))
                raise RuntimeError("abort")

        assert await user_repo.exists_by_username(username) is False


class TestLinkedAccountRepositoryIntegration:
    """Integration tests for PostgresLinkedAccountRepository."""

    @pytest.mark.asyncio
    async def test_link_and_unlink(self, integration_env):
        user_repo = await integration_env.get(UserRepository)
        link_repo = await integration_env.get(LinkedAccountRepository)
        user = await user_repo.create(make_user(unique_username()))
        subject = f"google-{uuid4().hex}"

        await link_repo.link(make_link(user, provider_account_id=subject))

        found = await link_repo.find_by_provider_account(AuthProvider.GOOGLE, subject)
        assert found.user_id == user.id
        assert len(await link_repo.find_all_by_user_id(user.id)) == 1

        assert await link_repo.unlink(user.id, AuthProvider.GOOGLE) == 1
        assert await link_repo.find_by_user_and_provider(
            user.id, AuthProvider.GOOGLE
        ) is None

    @pytest.mark.asyncio
    async def test_identity_links_once(self, integration_env):
        """A provider identity belongs to at most one user."""
        user_repo = await integration_env.get(UserRepository)
        link_repo = await integration_env.get(LinkedAccountRepository)
        first = await user_repo.create(make_user(unique_username()))
        second = await user_repo.create(make_user(unique_username()))
        subject = f"google-{uuid4().hex}"
        await link_repo.link(make_link(first, provider_account_id=subject))

        with pytest.raises(IntegrityError):
            await link_repo.link(make_link(second, provider_account_id=subject))


class TestLlmSettingsRepositoryIntegration:
    """Integration tests for PostgresLlmSettingsRepository."""

    @pytest.mark.asyncio
    async def test_save_upserts_per_user(self, integration_env):
        user_repo = await integration_env.get(UserRepository)
        settings_repo = await integration_env.get(LlmSettingsRepository)
        user = await user_repo.create(make_user(unique_username()))

        first = await settings_repo.save(
            UserLlmSettings(id=LlmSettingsId(uuid4()), user_id=user.id)
        )
        second = await settings_repo.save(
            UserLlmSettings(
                id=LlmSettingsId(uuid4()),
                user_id=user.id,
                provider=LlmProvider.ANTHROPIC,
                model="claude-3-5-haiku-latest",
            )
        )

        assert second.id == first.id
        stored = await settings_repo.find_by_user_id(user.id)
        assert stored.provider == LlmProvider.ANTHROPIC
        assert stored.model == "claude-3-5-haiku-latest"
