"""User domain service."""

import logfire
from sqlalchemy.exc import IntegrityError

from desk.domain.error import ConflictError, NotFoundError, ValidationError
from desk.domain.model import User
from desk.domain.model.user import utcnow
from desk.domain.repository import UserRepository
from desk.domain.value import UserId, Username
from desk.util.names import format_display_name
from desk.util.profile_image import validate_profile_image_data_url

from .base import Service
from .identity_provisioner import (
    EMAIL_TAKEN_MESSAGE,
    USERNAME_TAKEN_MESSAGE,
    normalize_email,
)
from .username_allocator import UsernameAllocator

USERNAME_LOCKED_MESSAGE = "Username is already locked for this account."


class UserService(Service):
    """Domain service for user reads and self-service updates."""

    def __init__(
        self,
        user_repository: UserRepository,
        username_allocator: UsernameAllocator,
    ) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
            username_allocator: Username allocator (policy checks)
        """
        self.user_repository = user_repository
        self.username_allocator = username_allocator

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            return user

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email (normalized to lowercase).

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        normalized = normalize_email(email)
        if not normalized:
            return None
        return await self.user_repository.find_by_email(normalized)

    async def complete_username(self, user_id: UserId, username: str) -> User:
        """Replace a placeholder username with the user's choice and lock it.

        Args:
            user_id: The signed-in user
            username: Chosen username (trimmed and lowercased here)

        Returns:
            Updated user

        Raises:
            ValidationError: If the username does not match the policy
            NotFoundError: If the user does not exist
            ConflictError: If the username is already locked or taken
        """
        normalized = username.strip().lower()
        with logfire.span(
            "user_service.complete_username", user_id=str(user_id), username=normalized
        ):
            if not self.username_allocator.is_valid(normalized):
                raise ValidationError(self.username_allocator.rule_message)

            user = await self.get_by_id(user_id)
            if user.username_setup_complete:
                raise ConflictError(USERNAME_LOCKED_MESSAGE)

            holder = await self.user_repository.find_by_username(normalized)
            if holder and holder.id != user.id:
                raise ConflictError(USERNAME_TAKEN_MESSAGE)

            try:
                updated = await self.user_repository.update(
                    user.model_copy(
                        update={
                            "username": Username(normalized),
                            "username_setup_complete": True,
                            "updated_at": utcnow(),
                        }
                    )
                )
            except IntegrityError:
                logfire.warn("Username taken concurrently", username=normalized)
                raise ConflictError(USERNAME_TAKEN_MESSAGE)

            logfire.info(
                "Username completed", user_id=str(user_id), username=normalized
            )
            return updated

    async def update_profile(
        self,
        user_id: UserId,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
        image: str | None = None,
        remove_image: bool = False,
    ) -> User:
        """Update profile fields. None means "leave unchanged".

        Changing the email clears ``email_verified``. The display name is
        recomputed from the resulting first/last name.

        Raises:
            ValidationError: If the image is not an acceptable data URL
            NotFoundError: If the user does not exist
            ConflictError: If the email belongs to another user
        """
        with logfire.span("user_service.update_profile", user_id=str(user_id)):
            if image and remove_image:
                raise ValidationError(
                    "Cannot upload and remove image in the same request."
                )
            if image:
                image_error = validate_profile_image_data_url(image)
                if image_error:
                    raise ValidationError(image_error)

            user = await self.get_by_id(user_id)
            update: dict = {"updated_at": utcnow()}

            if first_name is not None:
                update["first_name"] = first_name.strip()
            if last_name is not None:
                update["last_name"] = last_name.strip()

            next_email = normalize_email(email)
            if next_email and next_email != user.email:
                holder = await self.user_repository.find_by_email(next_email)
                if holder and holder.id != user.id:
                    raise ConflictError(EMAIL_TAKEN_MESSAGE)
                update["email"] = next_email
                update["email_verified"] = None

            if remove_image:
                update["image"] = None
            elif image:
                update["image"] = image

            update["name"] = format_display_name(
                update.get("first_name", user.first_name),
                update.get("last_name", user.last_name),
                update.get("email", user.email),
            )

            try:
                updated = await self.user_repository.update(
                    user.model_copy(update=update)
                )
            except IntegrityError:
                raise ConflictError(EMAIL_TAKEN_MESSAGE)

            logfire.info(
                "Profile updated",
                user_id=str(user_id),
                fields=sorted(k for k in update if k != "updated_at"),
            )
            return updated
