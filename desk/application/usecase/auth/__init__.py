"""Authentication use cases."""

from .complete_username import CompleteUsernameUseCase
from .federated_login import FederatedLoginUseCase
from .get_session import GetSessionUseCase
from .login import LoginUseCase
from .register import RegisterUseCase

__all__ = [
    "CompleteUsernameUseCase",
    "FederatedLoginUseCase",
    "GetSessionUseCase",
    "LoginUseCase",
    "RegisterUseCase",
]
