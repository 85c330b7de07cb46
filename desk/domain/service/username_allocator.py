"""Username allocation."""

import re
import secrets

import logfire

from desk.config import UsernamePolicySettings
from desk.domain.error import UsernameAllocationError
from desk.domain.repository import UserRepository

from .base import Service


class UsernameAllocator(Service):
    """Turns a free-form seed into a username that is free right now.

    Allocation is a check, not a reservation: the caller must create the user
    right after, and treat a unique-constraint violation on that create as
    "allocate again" (see ``IdentityProvisioner``).

    Policy (``UsernamePolicySettings``):
    - lowercase ``[a-z0-9]`` (plus ``_`` when underscores are allowed)
    - seed truncated to ``base_length``
    - empty seed: ``random_marker`` + hex token
    - short or taken candidate: base + random hex suffix, base trimmed so the
      total stays within ``max_length``
    """

    def __init__(
        self, user_repository: UserRepository, policy: UsernamePolicySettings
    ) -> None:
        """Initialize username allocator.

        Args:
            user_repository: User repository (uniqueness checks)
            policy: Username policy
        """
        self.user_repository = user_repository
        self.policy = policy

        charset = "a-z0-9_" if policy.allow_underscore else "a-z0-9"
        self._strip_pattern = re.compile(f"[^{charset}]+")
        self._pattern = re.compile(
            f"^[{charset}]{{{policy.min_length},{policy.max_length}}}$"
        )
        self._separator = "_" if policy.allow_underscore else ""

    @property
    def pattern(self) -> re.Pattern[str]:
        """Regex a user-chosen username must match."""
        return self._pattern

    @property
    def rule_message(self) -> str:
        """User-facing description of the policy."""
        allowed = (
            "lowercase letters, numbers, and underscores"
            if self.policy.allow_underscore
            else "lowercase letters and numbers"
        )
        return (
            f"Username must be {self.policy.min_length}-{self.policy.max_length} "
            f"characters and use only {allowed}."
        )

    def is_valid(self, username: str) -> bool:
        """Check a user-chosen username against the policy."""
        return bool(self._pattern.match(username))

    def normalize(self, seed: str | None) -> str:
        """Lowercase, strip disallowed characters and truncate a seed."""
        base = self._strip_pattern.sub("", (seed or "").lower())
        return base[: self.policy.base_length]

    def _random_token(self) -> str:
        token = self.policy.random_marker + secrets.token_hex(self.policy.random_bytes)
        return token[: self.policy.max_length]

    def _suffixed(self, base: str) -> str:
        suffix = secrets.token_hex(self.policy.suffix_bytes)
        room = self.policy.max_length - len(self._separator) - len(suffix)
        return f"{base[:room]}{self._separator}{suffix}"

    def _first_candidate(self, base: str) -> str:
        if not base:
            return self._random_token()
        if len(base) < self.policy.min_length:
            return self._suffixed(base)
        return base

    def _next_candidate(self, base: str) -> str:
        if not base:
            return self._random_token()
        return self._suffixed(base)

    async def allocate(self, seed: str | None) -> str:
        """Allocate a username from a seed.

        Args:
            seed: Email local part, display name, requested name... may be
                empty or contain only symbols

        Returns:
            A policy-conforming username not present in the store

        Raises:
            UsernameAllocationError: If ``max_attempts`` is set and exhausted
        """
        base = self.normalize(seed)
        with logfire.span("username_allocator.allocate", base=base):
            candidate = self._first_candidate(base)
            attempts = 0
            while True:
                attempts += 1
                if not await self.user_repository.exists_by_username(candidate):
                    logfire.info(
                        "Username allocated", username=candidate, attempts=attempts
                    )
                    return candidate

                if (
                    self.policy.max_attempts is not None
                    and attempts >= self.policy.max_attempts
                ):
                    logfire.error(
                        "Username allocation exhausted", base=base, attempts=attempts
                    )
                    raise UsernameAllocationError(base, attempts)

                candidate = self._next_candidate(base)

    async def allocate_placeholder(self) -> str:
        """Allocate a fully random username.

        Used for federated signups that pick their real username later.
        """
        return await self.allocate("")
