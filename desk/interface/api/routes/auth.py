"""Authentication routes."""

import logging
import secrets
from urllib.parse import urlencode

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr, Field, field_validator

from desk.adapter.error import ProviderError
from desk.application.usecase.auth import (
    CompleteUsernameUseCase,
    FederatedLoginUseCase,
    GetSessionUseCase,
    LoginUseCase,
    RegisterUseCase,
)
from desk.application.usecase.auth.complete_username import CompleteUsernameRequest
from desk.application.usecase.auth.federated_login import FederatedLoginRequest
from desk.application.usecase.auth.get_session import GetSessionRequest
from desk.application.usecase.auth.login import LoginRequest
from desk.application.usecase.auth.register import RegisterRequest
from desk.config import Settings
from desk.domain.error import (
    AccountNotLinkedError,
    ConflictError,
    DomainError,
    NotAuthenticatedError,
)
from desk.domain.service import AuthService, SessionUser
from desk.domain.value import AuthProvider
from desk.interface.api.session import (
    clear_session_cookie,
    read_session_token,
    require_session,
    set_session_cookie,
)
from desk.interface.error import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)

OAUTH_STATE_COOKIE = "oauth_state"


class RegisterAPIRequest(BaseModel):
    """Registration form."""

    username: str | None = Field(None, max_length=64)
    email: EmailStr | None = None
    password: str = Field(..., min_length=8, max_length=100)
    confirm_password: str = Field(..., min_length=8, max_length=100)
    first_name: str | None = Field(None, max_length=60)
    last_name: str | None = Field(None, max_length=60)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class RegisterAPIResponse(BaseModel):
    """Registration response."""

    message: str
    username: str


class LoginAPIRequest(BaseModel):
    """Credential login request."""

    username: str | None = None
    password: str | None = None


class LoginAPIResponse(BaseModel):
    """Signed-in user."""

    id: str
    username: str
    email: str | None
    image: str | None


class SessionResponse(BaseModel):
    """Current session, if any."""

    authenticated: bool
    user: SessionUser | None = None


class LogoutResponse(BaseModel):
    """Logout response."""

    success: bool
    message: str


class CompleteUsernameAPIRequest(BaseModel):
    """Chosen username."""

    username: str = Field(..., max_length=64)


class CompleteUsernameAPIResponse(BaseModel):
    """Complete username response."""

    message: str
    username: str


@router.post(
    "/register",
    response_model=RegisterAPIResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterAPIRequest,
    register_use_case: FromDishka[RegisterUseCase],
) -> RegisterAPIResponse:
    """Create a password account.

    Either ``username`` or ``email`` is required. Without a username one is
    allocated from the email's local part.

    Example:
        POST /auth/register
        {"email": "ada@example.com", "password": "...", "confirm_password": "..."}

        Response (201):
        {"message": "Account created.", "username": "ada"}
    """
    try:
        result = await register_use_case.execute(
            RegisterRequest(**request.model_dump())
        )
    except DomainError as e:
        raise to_http_exception(e)

    logger.info(f"Account registered: {result.username}")
    return RegisterAPIResponse(message=result.message, username=result.username)


@router.post("/login", response_model=LoginAPIResponse)
async def login(
    request: LoginAPIRequest,
    response: Response,
    login_use_case: FromDishka[LoginUseCase],
    settings: FromDishka[Settings],
) -> LoginAPIResponse:
    """Sign in with username and password.

    Every failure returns the same 401 ``"Invalid username or password."``.
    """
    try:
        result = await login_use_case.execute(
            LoginRequest(username=request.username, password=request.password)
        )
    except DomainError as e:
        raise to_http_exception(e)

    set_session_cookie(response, result.token, settings)
    return LoginAPIResponse(
        id=result.id, username=result.username, email=result.email, image=result.image
    )


@router.get("/login/google")
async def initiate_google_login(
    auth_service: FromDishka[AuthService],
    settings: FromDishka[Settings],
) -> RedirectResponse:
    """Redirect to Google's consent screen.

    The OAuth state is kept in a short-lived cookie and checked on callback.
    """
    state = secrets.token_urlsafe(32)
    try:
        auth_url = await auth_service.initiate_login(AuthProvider.GOOGLE, state)
    except ProviderError as e:
        logger.error(f"Failed to initiate Google login: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to initiate login.",
        )

    redirect = RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)
    redirect.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        path="/auth",
        max_age=600,
    )
    return redirect


def _error_redirect(settings: Settings, error: str, message: str) -> RedirectResponse:
    query = urlencode({"error": error, "message": message})
    redirect = RedirectResponse(
        url=f"{settings.api.frontend_url}/auth/error?{query}",
        status_code=status.HTTP_302_FOUND,
    )
    redirect.delete_cookie(key=OAUTH_STATE_COOKIE, path="/auth")
    return redirect


@router.get("/callback/google")
async def google_callback(
    request: Request,
    federated_login_use_case: FromDishka[FederatedLoginUseCase],
    settings: FromDishka[Settings],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    """Handle Google OAuth callback and complete login.

    Links the identity when a session is present, signs in an already-linked
    user, or provisions a new one. Issues the session cookie and redirects to
    the frontend (to username setup when it is still pending).

    Errors redirect to ``{frontend}/auth/error?error=...``:
        access_denied / auth_failed / invalid_state / account_not_linked /
        account_conflict / unexpected
    """
    logger.info("OAuth callback received: provider=google")

    if error:
        return _error_redirect(settings, error, "Google sign-in was cancelled.")

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state:
        return _error_redirect(settings, "invalid_state", "Missing OAuth state.")
    if not secrets.compare_digest(state, expected_state):
        return _error_redirect(settings, "invalid_state", "OAuth state mismatch.")

    try:
        result = await federated_login_use_case.execute(
            FederatedLoginRequest(
                provider=AuthProvider.GOOGLE,
                code=code,
                state=state,
                session_token=read_session_token(request, settings),
            )
        )
    except AccountNotLinkedError as e:
        logger.warning("Federated login refused: email belongs to unlinked account")
        return _error_redirect(settings, "account_not_linked", str(e))
    except ConflictError as e:
        logger.warning(f"Federated login conflict: {e}")
        return _error_redirect(settings, "account_conflict", str(e))
    except ProviderError as e:
        logger.error(f"Google OAuth error during callback: {e}")
        return _error_redirect(settings, "auth_failed", "Google sign-in failed.")
    except Exception:
        logger.exception("Unexpected error during OAuth callback")
        return _error_redirect(settings, "unexpected", "Sign-in failed.")

    logger.info(
        f"Federated login for user {result.user_id}: "
        f"created={result.created}, linked={result.linked}"
    )

    if result.linked:
        redirect_url = f"{settings.api.frontend_url}/app/settings"
    elif not result.username_setup_complete:
        redirect_url = f"{settings.api.frontend_url}/auth/complete-username"
    else:
        redirect_url = settings.api.frontend_url

    redirect = RedirectResponse(url=redirect_url, status_code=status.HTTP_302_FOUND)
    set_session_cookie(redirect, result.token, settings)
    redirect.delete_cookie(key=OAUTH_STATE_COOKIE, path="/auth")
    return redirect


@router.get("/session", response_model=SessionResponse)
async def get_session(
    request: Request,
    response: Response,
    get_session_use_case: FromDishka[GetSessionUseCase],
    settings: FromDishka[Settings],
) -> SessionResponse:
    """Get the current session, refreshing its claims.

    Safe to call without a session: returns ``authenticated=false`` instead
    of an error. A valid session gets its cookie re-issued with refreshed
    claims.
    """
    try:
        session = await get_session_use_case.execute(
            GetSessionRequest(token=read_session_token(request, settings))
        )
    except NotAuthenticatedError:
        return SessionResponse(authenticated=False)

    set_session_cookie(response, session.token, settings)
    return SessionResponse(authenticated=True, user=session.user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    settings: FromDishka[Settings],
) -> LogoutResponse:
    """Logout user by clearing the session cookie."""
    clear_session_cookie(response, settings)
    return LogoutResponse(success=True, message="Successfully logged out")


@router.patch("/complete-username", response_model=CompleteUsernameAPIResponse)
async def complete_username(
    body: CompleteUsernameAPIRequest,
    request: Request,
    response: Response,
    get_session_use_case: FromDishka[GetSessionUseCase],
    complete_username_use_case: FromDishka[CompleteUsernameUseCase],
    settings: FromDishka[Settings],
) -> CompleteUsernameAPIResponse:
    """Choose the permanent username after a deferred federated signup.

    Returns 409 once the username is locked or when it is taken.
    """
    session_user = await require_session(request, settings, get_session_use_case)

    try:
        result = await complete_username_use_case.execute(
            CompleteUsernameRequest(
                user_id=session_user.user_id, username=body.username
            )
        )
    except DomainError as e:
        raise to_http_exception(e)

    set_session_cookie(response, result.token, settings)
    return CompleteUsernameAPIResponse(
        message=result.message, username=result.username
    )
