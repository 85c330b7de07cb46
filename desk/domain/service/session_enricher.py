"""Session claim pipeline.

Stage 1 produces the claim set carried by the signed token:
    - ``mint(user)`` at login, straight from the user row
    - ``refresh(claims)`` on every later request, re-reading the store for
      tracked claims that are missing from the token or that the freshness
      policy says to always re-read

Stage 2, ``expose(claims)``, copies an allow-list of claims into the object
handed to request handlers.

Freshness policy: ``sub`` is always trusted from the token. ``username``,
``email`` and ``username_setup_complete`` are trusted when present unless
listed in ``AuthSettings.session_always_reread``. Endpoints that change one
of them re-mint the token from the updated user.
"""

from uuid import UUID

import logfire
from pydantic import BaseModel

from desk.config import AuthSettings
from desk.domain.error import NotAuthenticatedError, NotFoundError
from desk.domain.model import User
from desk.domain.repository import UserRepository
from desk.domain.value import UserId
from desk.util.jwt import JWTError

from .base import Service
from .jwt_service import JWTService

TRACKED_CLAIMS = ("username", "email", "username_setup_complete")
FALLBACK_USERNAME = "user"


class SessionClaims(BaseModel):
    """Claims carried by the session token. Never holds secrets."""

    sub: str
    username: str | None = None
    email: str | None = None
    username_setup_complete: bool | None = None
    name: str | None = None


class SessionUser(BaseModel):
    """Claims downstream handlers may rely on."""

    id: str
    username: str
    username_setup_complete: bool
    email: str | None = None

    @property
    def user_id(self) -> UserId:
        """Subject as a typed identifier."""
        return UserId(UUID(self.id))


class SessionEnricher(Service):
    """Turns an authenticated user or a prior token into fresh session claims."""

    def __init__(
        self,
        user_repository: UserRepository,
        jwt_service: JWTService,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize session enricher.

        Args:
            user_repository: User repository (claim re-reads)
            jwt_service: JWT service (token signing/verification)
            auth_settings: Authentication settings (freshness policy)
        """
        self.user_repository = user_repository
        self.jwt_service = jwt_service
        self.always_reread = frozenset(auth_settings.session_always_reread)

    def mint(self, user: User) -> SessionClaims:
        """Seed claims from a freshly authenticated or updated user."""
        return SessionClaims(
            sub=str(user.id),
            username=user.username.root,
            email=user.email,
            username_setup_complete=user.username_setup_complete,
            name=user.name,
        )

    async def refresh(self, claims: SessionClaims) -> SessionClaims:
        """Fill stale or missing tracked claims from the store.

        Args:
            claims: Claims decoded from the token

        Returns:
            Claims with tracked fields filled in (unchanged when nothing is
            missing and nothing must be re-read)

        Raises:
            NotFoundError: If the subject no longer exists
        """
        stale = [
            field
            for field in TRACKED_CLAIMS
            if field in self.always_reread or getattr(claims, field) is None
        ]
        if not stale:
            return claims

        with logfire.span(
            "session_enricher.refresh", user_id=claims.sub, stale=stale
        ):
            user = await self.user_repository.find_by_id(UserId(UUID(claims.sub)))
            if not user:
                logfire.warn("Session subject not found", user_id=claims.sub)
                raise NotFoundError("User", claims.sub)

            fresh = self.mint(user)
            update = {field: getattr(fresh, field) for field in stale}
            if claims.name is None:
                update["name"] = fresh.name
            return claims.model_copy(update=update)

    def expose(self, claims: SessionClaims) -> SessionUser:
        """Copy the allow-listed claims into the handler-facing session."""
        return SessionUser(
            id=claims.sub,
            username=claims.username or claims.name or FALLBACK_USERNAME,
            username_setup_complete=(
                claims.username_setup_complete
                if claims.username_setup_complete is not None
                else True
            ),
            email=claims.email,
        )

    def issue(self, claims: SessionClaims) -> str:
        """Sign claims into a session token."""
        return self.jwt_service.create_token(
            claims.sub,
            username=claims.username,
            email=claims.email,
            username_setup_complete=claims.username_setup_complete,
            name=claims.name,
        )

    async def from_token(self, token: str | None) -> SessionClaims:
        """Verify a session token and run the refresh stage on it.

        Args:
            token: Session cookie value

        Returns:
            Refreshed claims

        Raises:
            NotAuthenticatedError: If the token is missing, invalid, expired,
                or its subject no longer exists
        """
        if not token:
            raise NotAuthenticatedError()

        try:
            payload = self.jwt_service.verify_token(token)
        except JWTError as e:
            raise NotAuthenticatedError(str(e))

        try:
            UUID(payload.sub)
        except ValueError:
            raise NotAuthenticatedError("Invalid token")

        claims = SessionClaims(
            sub=payload.sub,
            username=payload.username,
            email=payload.email,
            username_setup_complete=payload.username_setup_complete,
            name=payload.name,
        )
        try:
            return await self.refresh(claims)
        except NotFoundError:
            raise NotAuthenticatedError()
