"""Domain services."""

from .account_link_manager import AccountLinkManager, DisconnectResult, LinkStatus
from .auth_service import AuthService, OAuthClient
from .base import Service
from .credential_authenticator import CredentialAuthenticator
from .identity_provisioner import IdentityProvisioner
from .jwt_service import JWTService
from .llm_settings_service import LLM_MODELS, LlmSettingsService, LlmSettingsView
from .password_hasher import PasswordHasher
from .secret_cipher import SecretCipher, derive_key
from .session_enricher import SessionClaims, SessionEnricher, SessionUser
from .user_service import UserService
from .username_allocator import UsernameAllocator

__all__ = [
    "AccountLinkManager",
    "AuthService",
    "CredentialAuthenticator",
    "DisconnectResult",
    "IdentityProvisioner",
    "JWTService",
    "LLM_MODELS",
    "LinkStatus",
    "LlmSettingsService",
    "LlmSettingsView",
    "OAuthClient",
    "PasswordHasher",
    "SecretCipher",
    "Service",
    "SessionClaims",
    "SessionEnricher",
    "SessionUser",
    "UserService",
    "UsernameAllocator",
    "derive_key",
]
