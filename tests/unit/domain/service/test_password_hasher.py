"""Unit tests for PasswordHasher."""

import pytest

from desk.domain.service import PasswordHasher


class TestPasswordHasher:
    """Tests for bcrypt hashing."""

    @pytest.mark.asyncio
    async def test_hash_and_verify(self, password_hasher: PasswordHasher):
        """Should verify the right password and reject others."""
        password_hash = await password_hasher.hash("correct horse")

        assert password_hash.startswith("$2")
        assert password_hash != "correct horse"
        assert await password_hasher.verify("correct horse", password_hash) is True
        assert await password_hasher.verify("wrong horse", password_hash) is False

    @pytest.mark.asyncio
    async def test_hashes_are_salted(self, password_hasher: PasswordHasher):
        """Same password should hash differently each time."""
        first = await password_hasher.hash("correct horse")
        second = await password_hasher.hash("correct horse")

        assert first != second

    @pytest.mark.asyncio
    async def test_malformed_hash_does_not_verify(
        self, password_hasher: PasswordHasher
    ):
        """A corrupt stored hash should fail verification instead of raising."""
        assert await password_hasher.verify("anything", "not-a-bcrypt-hash") is False

    @pytest.mark.asyncio
    async def test_long_passwords_are_accepted(self, password_hasher: PasswordHasher):
        """Passwords past bcrypt's 72-byte limit should still hash and verify."""
        password = "p" * 100

        password_hash = await password_hasher.hash(password)

        assert await password_hasher.verify(password, password_hash) is True

    def test_uses_configured_rounds(self):
        """Cost factor should show up in the hash."""
        hasher = PasswordHasher(rounds=5)

        assert hasher.hash_sync("secret")[4:6] == "05"
