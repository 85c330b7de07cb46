"""Unit tests for GetSessionUseCase and CompleteUsernameUseCase."""

from dishka import AsyncContainer
import pytest

from desk.application.usecase.auth import (
    CompleteUsernameUseCase,
    GetSessionUseCase,
)
from desk.application.usecase.auth.complete_username import CompleteUsernameRequest
from desk.application.usecase.auth.get_session import GetSessionRequest
from desk.domain.error import ConflictError, NotAuthenticatedError
from desk.domain.service import JWTService, SessionEnricher
from desk.domain.repository import UserRepository
from tests.factories import make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestGetSessionUseCase:
    """Tests for GetSessionUseCase."""

    @pytest.mark.asyncio
    async def test_resolves_and_reissues(self, unit_env: AsyncContainer):
        """A valid token yields the exposed user and a fresh token."""
        user_repo = await unit_env.get(UserRepository)
        jwt_service = await unit_env.get(JWTService)
        use_case = await unit_env.get(GetSessionUseCase)
        user = await user_repo.create(make_user("alice", email="alice@example.com"))

        # Token from an older release: only the subject
        session = await use_case.execute(
            GetSessionRequest(token=jwt_service.create_token(str(user.id)))
        )

        assert session.user.id == str(user.id)
        assert session.user.username == "alice"
        assert session.user.email == "alice@example.com"
        assert jwt_service.verify_token(session.token).username == "alice"

    @pytest.mark.asyncio
    async def test_missing_token(self, unit_env: AsyncContainer):
        use_case = await unit_env.get(GetSessionUseCase)

        with pytest.raises(NotAuthenticatedError):
            await use_case.execute(GetSessionRequest(token=None))


class TestCompleteUsernameUseCase:
    """Tests for CompleteUsernameUseCase."""

    @pytest.mark.asyncio
    async def test_completes_and_remints(self, unit_env: AsyncContainer):
        """The new username is locked and carried by the new token."""
        user_repo = await unit_env.get(UserRepository)
        enricher = await unit_env.get(SessionEnricher)
        use_case = await unit_env.get(CompleteUsernameUseCase)
        user = await user_repo.create(
            make_user("u0123456789abcdef", username_setup_complete=False)
        )

        response = await use_case.execute(
            CompleteUsernameRequest(user_id=user.id, username="alice")
        )

        assert response.message == "Username saved."
        assert response.username == "alice"
        claims = await enricher.from_token(response.token)
        assert claims.username == "alice"
        assert claims.username_setup_complete is True

    @pytest.mark.asyncio
    async def test_second_completion_conflicts(self, unit_env: AsyncContainer):
        """Usernames cannot be changed once locked."""
        user_repo = await unit_env.get(UserRepository)
        use_case = await unit_env.get(CompleteUsernameUseCase)
        user = await user_repo.create(
            make_user("u0123456789abcdef", username_setup_complete=False)
        )
        await use_case.execute(
            CompleteUsernameRequest(user_id=user.id, username="alice")
        )

        with pytest.raises(ConflictError):
            await use_case.execute(
                CompleteUsernameRequest(user_id=user.id, username="alicia")
            )
