"""Session cookie helpers shared by routers."""

from fastapi import Request, Response

from desk.application.usecase.auth import GetSessionUseCase
from desk.application.usecase.auth.get_session import GetSessionRequest
from desk.config import Settings
from desk.domain.error import NotAuthenticatedError
from desk.domain.service import SessionUser
from desk.interface.error import to_http_exception


def read_session_token(request: Request, settings: Settings) -> str | None:
    """Read the session token from the request cookies."""
    return request.cookies.get(settings.auth.cookie_name)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the session cookie to a response.

    Production: secure, cookie domain from settings. Development: plain HTTP,
    current host.
    """
    is_production = settings.environment == "production"
    response.set_cookie(
        key=settings.auth.cookie_name,
        value=token,
        httponly=True,
        secure=is_production,
        samesite="lax",
        domain=settings.auth.cookie_domain if is_production else None,
        path="/",
        max_age=settings.auth.jwt_expiry_days * 24 * 60 * 60,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Delete the session cookie with the same domain/path it was set with."""
    is_production = settings.environment == "production"
    response.delete_cookie(
        key=settings.auth.cookie_name,
        domain=settings.auth.cookie_domain if is_production else None,
        path="/",
    )


async def require_session(
    request: Request,
    settings: Settings,
    get_session_use_case: GetSessionUseCase,
) -> SessionUser:
    """Resolve the signed-in user or fail with 401.

    Raises:
        HTTPException: 401 if there is no valid session
    """
    try:
        session = await get_session_use_case.execute(
            GetSessionRequest(token=read_session_token(request, settings))
        )
    except NotAuthenticatedError as e:
        raise to_http_exception(e)
    return session.user
