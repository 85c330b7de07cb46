"""Test configuration and fixtures."""

import os

import logfire
import pytest

from desk.config import AuthSettings
from desk.domain.service import PasswordHasher, SecretCipher

# Low bcrypt cost keeps hashing fast; set before any Settings() is built
os.environ.setdefault("AUTH__BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH__JWT_SECRET", "test-jwt-secret-0123456789-abcdefghij")

logfire.configure(send_to_logfire=False, console=False)

TEST_SECRET = "0123456789abcdef"


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Fast bcrypt hasher."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def cipher() -> SecretCipher:
    """Cipher keyed from a fixed test secret."""
    return SecretCipher.from_secret(TEST_SECRET)


@pytest.fixture
def auth_settings() -> AuthSettings:
    """Auth settings with a fixed JWT secret."""
    return AuthSettings(jwt_secret="test-jwt-secret-0123456789-abcdefghij")
