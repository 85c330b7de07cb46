"""JWT token utilities."""

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from desk.config import AuthSettings


class TokenPayload(BaseModel):
    """JWT token payload.

    Only ``sub`` is guaranteed. The remaining claims may be absent from older
    tokens and are filled in from the identity store on the next request.
    """

    sub: str
    username: str | None = None
    email: str | None = None
    username_setup_complete: bool | None = None
    name: str | None = None
    exp: datetime


class JWTError(Exception):
    """JWT-related error."""

    pass


def create_token(
    sub: str,
    settings: AuthSettings,
    username: str | None = None,
    email: str | None = None,
    username_setup_complete: bool | None = None,
    name: str | None = None,
) -> str:
    """Create a signed JWT for the user.

    Args:
        sub: User ID
        settings: Authentication settings
        username: Username claim
        email: Email claim
        username_setup_complete: Whether the user has chosen a username
        name: Display name claim

    Returns:
        Encoded JWT token
    """
    expiry = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expiry_days)

    payload = {
        "sub": sub,
        "username": username,
        "email": email,
        "username_setup_complete": username_setup_complete,
        "name": name,
        "exp": expiry,
    }
    # Absent claims are omitted rather than signed as null
    payload = {key: value for key, value in payload.items() if value is not None}

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Verify and decode a JWT token.

    Args:
        token: JWT token to verify
        settings: Authentication settings

    Returns:
        Token payload if valid

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return TokenPayload(**payload)
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")
