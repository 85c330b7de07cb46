"""Password hashing with bcrypt."""

import asyncio

import bcrypt

from .base import Service

# bcrypt ignores everything past 72 bytes; newer releases raise instead
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher(Service):
    """Salted bcrypt hashing.

    Hashing and verification run in a worker thread so the event loop keeps
    serving other requests while bcrypt burns CPU.
    """

    def __init__(self, rounds: int = 10) -> None:
        """Initialize password hasher.

        Args:
            rounds: bcrypt cost factor
        """
        self.rounds = rounds
        # Verified against when the user has no hash, to keep latency uniform
        self.dummy_hash = self.hash_sync("dummy-password-for-timing")

    def hash_sync(self, password: str) -> str:
        """Hash a password on the calling thread."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify_sync(self, password: str, password_hash: str) -> bool:
        """Verify a password on the calling thread."""
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    async def hash(self, password: str) -> str:
        """Hash a password.

        Args:
            password: Plaintext password

        Returns:
            bcrypt hash string
        """
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            password: Plaintext password
            password_hash: Stored bcrypt hash

        Returns:
            True if the password matches
        """
        return await asyncio.to_thread(self.verify_sync, password, password_hash)
