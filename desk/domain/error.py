"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class ConflictError(DomainError):
    """Raised when a write collides with existing state (taken username, email...)."""

    pass


class NotAuthenticatedError(DomainError):
    """Raised when an operation requires a session and none is present."""

    def __init__(self, message: str = "Unauthorized."):
        super().__init__(message)


class InvalidCredentialsError(DomainError):
    """Raised when a credential login fails.

    The message is identical for every failure cause.
    """

    def __init__(self):
        super().__init__("Invalid username or password.")


class AlreadyDisconnectedError(DomainError):
    """Raised when unlinking a provider that is not linked."""

    def __init__(self, provider_label: str):
        self.provider_label = provider_label
        super().__init__(f"{provider_label} integration is already disconnected.")


class UsernameAllocationError(DomainError):
    """Raised when no free username could be found within the attempt limit."""

    def __init__(self, seed: str, attempts: int):
        self.seed = seed
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a username for seed '{seed}' after {attempts} attempts"
        )


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class AccountNotLinkedError(ConflictError):
    """Raised when a federated login's email belongs to an account that has
    not linked this provider yet."""

    def __init__(self, provider_label: str):
        self.provider_label = provider_label
        super().__init__(
            f"An account with this email exists. Sign in and connect "
            f"{provider_label} from settings."
        )
