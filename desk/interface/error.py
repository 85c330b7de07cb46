"""Interface layer errors.

Maps domain and adapter errors to HTTP responses at the API boundary.
"""

import logfire
from fastapi import HTTPException, status

from desk.domain.error import (
    AlreadyDisconnectedError,
    ConflictError,
    DomainError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
)

# Most specific first
_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (NotAuthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadyDisconnectedError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def to_http_exception(error: DomainError) -> HTTPException:
    """Translate a domain error into an HTTPException.

    ``NotFoundError`` carries internal identifiers, so its detail is replaced
    with a generic ``"<Resource> not found."``. Unmapped domain errors
    (e.g. ``UsernameAllocationError``) become a logged 500.
    """
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            detail = str(error)
            if isinstance(error, NotFoundError):
                detail = f"{error.resource} not found."
            return HTTPException(status_code=status_code, detail=detail)

    logfire.error("Unhandled domain error", error_type=type(error).__name__)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error.",
    )
