"""Unit tests for UsernameAllocator."""

import re

import pytest

from desk.config import UsernamePolicySettings
from desk.domain.error import UsernameAllocationError
from desk.domain.service import UsernameAllocator
from desk.persistence.repository.inmemory import InMemoryUserRepository
from tests.factories import make_user


class AlwaysTakenUserRepository(InMemoryUserRepository):
    """Reports every username as taken."""

    async def exists_by_username(self, username: str) -> bool:
        return True


def build_allocator() -> UsernameAllocator:
    return UsernameAllocator(InMemoryUserRepository(), UsernamePolicySettings())


async def _seed(repo: InMemoryUserRepository, *usernames: str) -> None:
    for username in usernames:
        await repo.create(make_user(username))


class TestAllocate:
    """Tests for UsernameAllocator.allocate()."""

    @pytest.mark.asyncio
    async def test_free_seed_is_used_as_is(self):
        """Should return the normalized seed when it is free."""
        allocator = build_allocator()

        assert await allocator.allocate("alice") == "alice"

    @pytest.mark.asyncio
    async def test_seed_is_lowercased_and_stripped(self):
        """Should drop characters outside the policy charset."""
        allocator = build_allocator()

        assert await allocator.allocate("Alice.Smith-99") == "alicesmith99"
        assert await allocator.allocate("grace_hopper") == "grace_hopper"

    @pytest.mark.asyncio
    async def test_taken_seed_gets_hex_suffix(self):
        """Should append a random hex suffix on collision."""
        repo = InMemoryUserRepository()
        await _seed(repo, "alice")
        allocator = UsernameAllocator(repo, UsernamePolicySettings())

        username = await allocator.allocate("alice")

        assert re.fullmatch(r"alice_[0-9a-f]{4}", username)

    @pytest.mark.asyncio
    async def test_short_seed_gets_suffix(self):
        """A seed below the minimum length should be padded with a suffix."""
        allocator = build_allocator()

        username = await allocator.allocate("Al")

        assert re.fullmatch(r"al_[0-9a-f]{4}", username)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", [None, "", "!!!", "   ", "@.@"])
    async def test_empty_seed_gets_random_token(self, seed):
        """A seed with nothing usable should become marker + random hex."""
        allocator = build_allocator()

        username = await allocator.allocate(seed)

        assert re.fullmatch(r"u[0-9a-f]{16}", username)

    @pytest.mark.asyncio
    async def test_long_seed_is_truncated(self):
        """Should truncate the seed to the base length."""
        allocator = build_allocator()

        username = await allocator.allocate("a" * 40)

        assert username == "a" * 20

    @pytest.mark.asyncio
    async def test_suffixed_username_stays_within_max_length(self):
        """Base should be trimmed so base + suffix fits max_length."""
        repo = InMemoryUserRepository()
        await _seed(repo, "a" * 20)
        policy = UsernamePolicySettings()
        allocator = UsernameAllocator(repo, policy)

        username = await allocator.allocate("a" * 40)

        assert len(username) == policy.max_length
        assert allocator.is_valid(username)

    @pytest.mark.asyncio
    async def test_without_underscores(self):
        """Policy without underscores should strip them and suffix without one."""
        repo = InMemoryUserRepository()
        await _seed(repo, "alicesmith")
        allocator = UsernameAllocator(
            repo, UsernamePolicySettings(allow_underscore=False)
        )

        username = await allocator.allocate("alice_smith")

        assert re.fullmatch(r"alicesmith[0-9a-f]{4}", username)

    @pytest.mark.asyncio
    async def test_result_is_never_taken(self):
        """Every allocation should avoid existing usernames."""
        repo = InMemoryUserRepository()
        allocator = UsernameAllocator(repo, UsernamePolicySettings())

        allocated = set()
        for _ in range(20):
            username = await allocator.allocate("bob")
            assert username not in allocated
            assert allocator.is_valid(username)
            allocated.add(username)
            await repo.create(make_user(username))

    @pytest.mark.asyncio
    async def test_bounded_attempts_raise(self):
        """Should give up after max_attempts when every candidate is taken."""
        allocator = UsernameAllocator(
            AlwaysTakenUserRepository(), UsernamePolicySettings(max_attempts=3)
        )

        with pytest.raises(UsernameAllocationError) as exc_info:
            await allocator.allocate("alice")

        assert exc_info.value.attempts == 3

    @pytest.mark.asyncio
    async def test_placeholder_is_random(self):
        """Placeholder usernames should use the random token form."""
        allocator = build_allocator()

        username = await allocator.allocate_placeholder()

        assert re.fullmatch(r"u[0-9a-f]{16}", username)


class TestPolicy:
    """Tests for the user-chosen username policy."""

    @pytest.mark.parametrize(
        "username,valid",
        [
            ("alice", True),
            ("alice_99", True),
            ("abc", True),
            ("ab", False),
            ("a" * 24, True),
            ("a" * 25, False),
            ("Alice", False),
            ("alice-smith", False),
            ("alice smith", False),
        ],
    )
    def test_is_valid(self, username, valid):
        """Should enforce charset and length."""
        allocator = build_allocator()

        assert allocator.is_valid(username) is valid

    def test_underscore_rejected_when_disallowed(self):
        """Underscore should be invalid when the policy forbids it."""
        allocator = UsernameAllocator(
            InMemoryUserRepository(), UsernamePolicySettings(allow_underscore=False)
        )

        assert allocator.is_valid("alice_smith") is False
        assert "lowercase letters and numbers" in allocator.rule_message

    def test_rule_message_mentions_bounds(self):
        """Message should describe the configured lengths."""
        allocator = build_allocator()

        assert allocator.rule_message == (
            "Username must be 3-24 characters and use only lowercase letters, "
            "numbers, and underscores."
        )
