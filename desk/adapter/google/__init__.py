"""Google OAuth adapter."""

from .client import (
    GoogleOAuthClient,
    GoogleOAuthError,
    MockGoogleOAuthClient,
    RealGoogleOAuthClient,
)

__all__ = [
    "GoogleOAuthClient",
    "GoogleOAuthError",
    "RealGoogleOAuthClient",
    "MockGoogleOAuthClient",
]
