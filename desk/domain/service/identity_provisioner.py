"""Identity provisioning for first-time sign-ups."""

from collections.abc import Awaitable, Callable
from uuid import uuid4

import logfire
from sqlalchemy.exc import IntegrityError

from desk.config import AuthSettings
from desk.domain.error import ConflictError, UsernameAllocationError, ValidationError
from desk.domain.model import LinkedAccount, User
from desk.domain.model.user import utcnow
from desk.domain.repository import (
    LinkedAccountRepository,
    TransactionManager,
    UserRepository,
)
from desk.domain.value import LinkedAccountId, OAuthProviderInfo, UserId, Username
from desk.util.names import derive_name_parts, format_display_name

from .base import Service
from .username_allocator import UsernameAllocator

EMAIL_TAKEN_MESSAGE = "Email is already in use."
USERNAME_TAKEN_MESSAGE = "Username already exists."


def normalize_email(email: str | None) -> str | None:
    """Trim and lowercase an email; blank becomes None."""
    normalized = (email or "").strip().lower()
    return normalized or None


def email_local_part(email: str | None) -> str | None:
    """Return the part of an email before ``@``."""
    if not email or "@" not in email:
        return None
    return email.split("@", 1)[0] or None


class IdentityProvisioner(Service):
    """Creates brand new users, from local registration or a federated login.

    The username check and the insert are not atomic. The store's unique
    constraint decides: when the insert collides, the email is re-checked
    (a concurrent signup with the same email is a conflict) and otherwise a
    fresh username is allocated and the insert retried.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        linked_account_repository: LinkedAccountRepository,
        transaction_manager: TransactionManager,
        username_allocator: UsernameAllocator,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize identity provisioner.

        Args:
            user_repository: User repository
            linked_account_repository: Linked account repository
            transaction_manager: Transaction manager for user + link creation
            username_allocator: Username allocator
            auth_settings: Authentication settings (deferred username setup)
        """
        self.user_repository = user_repository
        self.linked_account_repository = linked_account_repository
        self.transaction_manager = transaction_manager
        self.username_allocator = username_allocator
        self.auth_settings = auth_settings

    async def provision_local(
        self,
        password_hash: str,
        username: str | None = None,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Create a user that signs in with a password.

        Args:
            password_hash: bcrypt hash of the chosen password
            username: Requested username, used verbatim when given
            email: Optional email; seeds the username when none is requested
            first_name: Optional first name
            last_name: Optional last name

        Returns:
            The created user

        Raises:
            ValidationError: If neither username nor email is given, or the
                requested username does not match the policy
            ConflictError: If the email or requested username is taken
        """
        email = normalize_email(email)
        requested = (username or "").strip().lower() or None

        if not requested and not email:
            raise ValidationError("Provide a username or an email.")

        with logfire.span(
            "identity_provisioner.provision_local", requested_username=requested
        ):
            # Email conflicts are rejected before any username is allocated
            await self._ensure_email_free(email)

            first, last = derive_name_parts(
                first_name=first_name, last_name=last_name, email=email
            )
            if not (first_name or last_name) and requested and not email:
                first, last = requested, ""

            def build(allocated: str) -> User:
                return User(
                    id=UserId(uuid4()),
                    username=Username(allocated),
                    email=email,
                    password_hash=password_hash,
                    name=format_display_name(first, last, email),
                    first_name=first,
                    last_name=last,
                    username_setup_complete=True,
                )

            if requested:
                user = await self._create_with_requested_username(requested, build)
            else:
                seed = email_local_part(email)
                user = await self._create_with_allocation(
                    lambda: self.username_allocator.allocate(seed), build, email
                )

            logfire.info(
                "Local user provisioned",
                user_id=str(user.id),
                username=user.username.root,
            )
            return user

    async def provision_federated(
        self, provider_info: OAuthProviderInfo
    ) -> tuple[User, LinkedAccount]:
        """Create a user and its linked account from a federated identity.

        Seed: email local part, else display name, else ``"user"``. With
        deferred username setup the user gets a random placeholder instead
        and ``username_setup_complete`` is False.

        Args:
            provider_info: Identity asserted by the provider

        Returns:
            The created user and linked account

        Raises:
            ConflictError: If the email or provider identity is already taken
        """
        email = normalize_email(provider_info.email)
        defer = self.auth_settings.defer_username_setup

        with logfire.span(
            "identity_provisioner.provision_federated",
            provider=provider_info.provider.value,
            provider_account_id=provider_info.provider_account_id,
            deferred=defer,
        ):
            await self._ensure_email_free(email)

            first, last = derive_name_parts(
                full_name=provider_info.display_name, email=email
            )
            display_name = provider_info.display_name or format_display_name(
                first, last, email
            )

            email_verified = (
                utcnow() if email and provider_info.email_verified else None
            )

            def build(allocated: str) -> User:
                return User(
                    id=UserId(uuid4()),
                    username=Username(allocated),
                    email=email,
                    email_verified=email_verified,
                    name=display_name,
                    first_name=first,
                    last_name=last,
                    image=provider_info.avatar_url,
                    username_setup_complete=not defer,
                )

            if defer:
                allocate = self.username_allocator.allocate_placeholder
            else:
                seed = (
                    email_local_part(email) or provider_info.display_name or "user"
                )

                def allocate() -> Awaitable[str]:
                    return self.username_allocator.allocate(seed)

            try:
                async with self.transaction_manager.atomic():
                    user = await self._create_with_allocation(allocate, build, email)
                    account = await self.linked_account_repository.link(
                        LinkedAccount(
                            id=LinkedAccountId(uuid4()),
                            user_id=user.id,
                            provider=provider_info.provider,
                            provider_account_id=provider_info.provider_account_id,
                            provider_email=email,
                        )
                    )
            except IntegrityError:
                logfire.warn(
                    "Provider identity linked concurrently",
                    provider=provider_info.provider.value,
                    provider_account_id=provider_info.provider_account_id,
                )
                raise ConflictError(
                    f"This {provider_info.provider.label} account is already linked."
                )

            logfire.info(
                "Federated user provisioned",
                user_id=str(user.id),
                username=user.username.root,
                provider=provider_info.provider.value,
            )
            return user, account

    async def _ensure_email_free(self, email: str | None) -> None:
        if email and await self.user_repository.find_by_email(email):
            logfire.info("Provisioning rejected, email taken")
            raise ConflictError(EMAIL_TAKEN_MESSAGE)

    async def _create_with_requested_username(
        self, requested: str, build: Callable[[str], User]
    ) -> User:
        if not self.username_allocator.is_valid(requested):
            raise ValidationError(self.username_allocator.rule_message)

        if await self.user_repository.exists_by_username(requested):
            raise ConflictError(USERNAME_TAKEN_MESSAGE)

        user = build(requested)
        try:
            return await self.user_repository.create(user)
        except IntegrityError:
            await self._ensure_email_free(user.email)
            raise ConflictError(USERNAME_TAKEN_MESSAGE)

    async def _create_with_allocation(
        self,
        allocate: Callable[[], Awaitable[str]],
        build: Callable[[str], User],
        email: str | None,
    ) -> User:
        max_attempts = self.username_allocator.policy.max_attempts
        attempts = 0
        while True:
            attempts += 1
            username = await allocate()
            try:
                return await self.user_repository.create(build(username))
            except IntegrityError:
                await self._ensure_email_free(email)
                logfire.warn(
                    "Allocated username taken concurrently, reallocating",
                    username=username,
                    attempts=attempts,
                )
                if max_attempts is not None and attempts >= max_attempts:
                    raise UsernameAllocationError(username, attempts)

