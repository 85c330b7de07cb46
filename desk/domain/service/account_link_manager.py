"""Linking and unlinking federated identities."""

from uuid import uuid4

import logfire
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from desk.domain.error import (
    AlreadyDisconnectedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from desk.domain.model import LinkedAccount, User
from desk.domain.model.user import utcnow
from desk.domain.repository import (
    LinkedAccountRepository,
    TransactionManager,
    UserRepository,
)
from desk.domain.value import AuthProvider, LinkedAccountId, OAuthProviderInfo, UserId

from .base import Service
from .password_hasher import PasswordHasher

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100


class LinkStatus(BaseModel):
    """Authentication methods available to a user."""

    linked_providers: list[AuthProvider]
    has_password: bool

    def is_linked(self, provider: AuthProvider) -> bool:
        """Whether the provider is linked."""
        return provider in self.linked_providers


class DisconnectResult(BaseModel):
    """Outcome of a successful disconnect."""

    message: str
    provider: AuthProvider
    linked: bool = False
    has_password: bool = True


class AccountLinkManager(Service):
    """Links and unlinks federated identities.

    A user must always keep a password or at least one linked account.
    Unlinking the last sign-in method of a passwordless user requires a new
    password in the same request; setting it and deleting the link commit
    together.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        linked_account_repository: LinkedAccountRepository,
        transaction_manager: TransactionManager,
        password_hasher: PasswordHasher,
    ) -> None:
        """Initialize account link manager.

        Args:
            user_repository: User repository
            linked_account_repository: Linked account repository
            transaction_manager: Transaction manager for password + unlink
            password_hasher: bcrypt password hasher
        """
        self.user_repository = user_repository
        self.linked_account_repository = linked_account_repository
        self.transaction_manager = transaction_manager
        self.password_hasher = password_hasher

    async def _get_user(self, user_id: UserId) -> User:
        user = await self.user_repository.find_by_id(user_id)
        if not user:
            logfire.warn("User not found", user_id=str(user_id))
            raise NotFoundError("User", str(user_id))
        return user

    async def find_link(
        self, provider: AuthProvider, provider_account_id: str
    ) -> LinkedAccount | None:
        """Find the link holding a provider identity, if any."""
        return await self.linked_account_repository.find_by_provider_account(
            provider, provider_account_id
        )

    async def status(self, user_id: UserId) -> LinkStatus:
        """Report which sign-in methods a user has.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self._get_user(user_id)
        accounts = await self.linked_account_repository.find_all_by_user_id(user_id)
        return LinkStatus(
            linked_providers=sorted(
                {a.provider for a in accounts}, key=lambda p: p.value
            ),
            has_password=user.has_password,
        )

    async def connect(
        self, user_id: UserId, provider_info: OAuthProviderInfo
    ) -> LinkedAccount:
        """Link a provider identity to an authenticated user.

        Linking an identity that is already linked to the same user is a
        no-op returning the existing link.

        Args:
            user_id: The signed-in user
            provider_info: Identity asserted by the provider

        Returns:
            The linked account

        Raises:
            NotFoundError: If the user does not exist
            ConflictError: If the identity belongs to another user, or the
                user already has a different identity from this provider
        """
        provider = provider_info.provider
        with logfire.span(
            "account_link_manager.connect",
            user_id=str(user_id),
            provider=provider.value,
        ):
            await self._get_user(user_id)

            existing = await self.linked_account_repository.find_by_provider_account(
                provider, provider_info.provider_account_id
            )
            if existing:
                if existing.user_id == user_id:
                    return existing
                logfire.warn(
                    "Provider identity linked to another user",
                    user_id=str(user_id),
                    provider=provider.value,
                )
                raise ConflictError(
                    f"This {provider.label} account is linked to another user."
                )

            if await self.linked_account_repository.find_by_user_and_provider(
                user_id, provider
            ):
                raise ConflictError(f"A {provider.label} account is already linked.")

            try:
                account = await self.linked_account_repository.link(
                    LinkedAccount(
                        id=LinkedAccountId(uuid4()),
                        user_id=user_id,
                        provider=provider,
                        provider_account_id=provider_info.provider_account_id,
                        provider_email=(provider_info.email or "").lower() or None,
                    )
                )
            except IntegrityError:
                raise ConflictError(
                    f"This {provider.label} account is linked to another user."
                )

            logfire.info(
                "Provider linked", user_id=str(user_id), provider=provider.value
            )
            return account

    async def disconnect(
        self,
        user_id: UserId,
        provider: AuthProvider,
        password: str | None = None,
        confirm_password: str | None = None,
    ) -> DisconnectResult:
        """Unlink a provider from a user.

        Checks, in order: user exists, provider is linked, and for a
        passwordless user a new password of 8-100 characters with matching
        confirmation.

        Args:
            user_id: The signed-in user
            provider: Provider to unlink
            password: New password (required only if the user has none)
            confirm_password: Confirmation of the new password

        Returns:
            Disconnect result (provider unlinked, password present)

        Raises:
            NotFoundError: If the user does not exist
            AlreadyDisconnectedError: If the provider is not linked
            ValidationError: If a required password is missing or mismatched
        """
        with logfire.span(
            "account_link_manager.disconnect",
            user_id=str(user_id),
            provider=provider.value,
        ):
            user = await self._get_user(user_id)

            if not await self.linked_account_repository.find_by_user_and_provider(
                user_id, provider
            ):
                raise AlreadyDisconnectedError(provider.label)

            new_password_hash = None
            if not user.has_password:
                password = (password or "").strip()
                confirm_password = (confirm_password or "").strip()
                if not password:
                    raise ValidationError(
                        f"Set a password before disconnecting {provider.label}."
                    )
                if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
                    raise ValidationError(
                        f"Password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} "
                        "characters."
                    )
                if password != confirm_password:
                    raise ValidationError("Passwords do not match.")
                new_password_hash = await self.password_hasher.hash(password)

            async with self.transaction_manager.atomic():
                if new_password_hash:
                    await self.user_repository.update(
                        user.model_copy(
                            update={
                                "password_hash": new_password_hash,
                                "updated_at": utcnow(),
                            }
                        )
                    )
                removed = await self.linked_account_repository.unlink(
                    user_id, provider
                )

            logfire.info(
                "Provider disconnected",
                user_id=str(user_id),
                provider=provider.value,
                removed=removed,
                password_set=bool(new_password_hash),
            )
            return DisconnectResult(
                message=f"{provider.label} integration disconnected.",
                provider=provider,
            )
