"""Local registration use case."""

import logfire
from pydantic import BaseModel

from desk.application.usecase.base import BaseUseCase
from desk.domain.error import ValidationError
from desk.domain.service import IdentityProvisioner, PasswordHasher


class RegisterRequest(BaseModel):
    """Registration form."""

    password: str
    confirm_password: str
    username: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class RegisterResponse(BaseModel):
    """Registration response."""

    message: str
    user_id: str
    username: str


class RegisterUseCase(BaseUseCase):
    """Use case for creating a password account."""

    def __init__(
        self,
        identity_provisioner: IdentityProvisioner,
        password_hasher: PasswordHasher,
    ) -> None:
        """Initialize register use case.

        Args:
            identity_provisioner: Identity provisioning domain service
            password_hasher: bcrypt password hasher
        """
        self.identity_provisioner = identity_provisioner
        self.password_hasher = password_hasher

    async def execute(self, request: RegisterRequest) -> RegisterResponse:
        """Create a user that signs in with a password.

        Raises:
            ValidationError: If the passwords differ, or neither username nor
                email is given, or the username breaks the policy
            ConflictError: If the username or email is taken
        """
        if request.password != request.confirm_password:
            raise ValidationError("Passwords do not match.")

        password_hash = await self.password_hasher.hash(request.password)
        user = await self.identity_provisioner.provision_local(
            password_hash=password_hash,
            username=request.username,
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
        )

        logfire.info("User registered", user_id=str(user.id))

        return RegisterResponse(
            message="Account created.",
            user_id=str(user.id),
            username=user.username.root,
        )
