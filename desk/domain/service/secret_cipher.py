"""Symmetric encryption for third-party API keys at rest.

Payload format: ``<base64 iv>:<base64 auth tag>:<base64 ciphertext>``.
"""

import base64
import binascii
import hashlib
import os

import logfire
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .base import Service

NONCE_BYTES = 12
TAG_BYTES = 16
SEPARATOR = ":"


def derive_key(secret: str | None, min_length: int = 16) -> bytes | None:
    """Derive the AES-256 key from a configuration secret.

    Args:
        secret: Configuration secret (encryption secret or its fallback)
        min_length: Shortest secret accepted

    Returns:
        SHA-256 digest of the secret, or None if the secret is missing or
        too short (the cipher is then unavailable)
    """
    if not secret or len(secret) < min_length:
        return None
    return hashlib.sha256(secret.encode("utf-8")).digest()


class SecretCipher(Service):
    """AES-256-GCM cipher with a key fixed at construction.

    When built without a key the cipher is unavailable: ``encrypt`` returns
    None and ``decrypt`` returns None. Neither method raises.
    """

    def __init__(self, key: bytes | None) -> None:
        """Initialize cipher.

        Args:
            key: 32-byte key from ``derive_key``, or None when unavailable
        """
        self._aesgcm = AESGCM(key) if key else None

    @classmethod
    def from_secret(cls, secret: str | None, min_length: int = 16) -> "SecretCipher":
        """Build a cipher straight from a configuration secret."""
        return cls(derive_key(secret, min_length))

    @property
    def available(self) -> bool:
        """Whether a key is configured."""
        return self._aesgcm is not None

    def encrypt(self, plaintext: str) -> str | None:
        """Encrypt a secret.

        Args:
            plaintext: Secret to encrypt (may be empty)

        Returns:
            Encoded payload, or None if the cipher is unavailable
        """
        if self._aesgcm is None:
            logfire.warn("Secret cipher unavailable, secret not encrypted")
            return None

        nonce = os.urandom(NONCE_BYTES)
        sealed = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]

        return SEPARATOR.join(
            base64.b64encode(part).decode("ascii") for part in (nonce, tag, ciphertext)
        )

    def decrypt(self, payload: str | None) -> str | None:
        """Decrypt a payload produced by ``encrypt``.

        Args:
            payload: Encoded payload

        Returns:
            The plaintext, or None if the payload is empty, malformed, was
            encrypted under another key, or fails authentication
        """
        if self._aesgcm is None or not payload:
            return None

        parts = payload.split(SEPARATOR)
        if len(parts) != 3:
            return None

        try:
            nonce, tag, ciphertext = (
                base64.b64decode(part, validate=True) for part in parts
            )
            if len(nonce) != NONCE_BYTES or len(tag) != TAG_BYTES:
                return None
            plaintext = self._aesgcm.decrypt(nonce, ciphertext + tag, None)
            return plaintext.decode("utf-8")
        except (InvalidTag, binascii.Error, ValueError):
            return None
