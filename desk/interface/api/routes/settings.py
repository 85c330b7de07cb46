"""Account settings routes (profile, integrations, agent API keys)."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response
from pydantic import BaseModel, EmailStr, Field, field_validator

from desk.application.usecase.auth import GetSessionUseCase
from desk.application.usecase.settings import (
    DisconnectProviderUseCase,
    GetLlmSettingsUseCase,
    GetProfileUseCase,
    UpdateLlmSettingsUseCase,
    UpdateProfileUseCase,
)
from desk.application.usecase.settings.disconnect_provider import (
    DisconnectProviderRequest,
    DisconnectProviderResponse,
)
from desk.application.usecase.settings.get_llm_settings import GetLlmSettingsRequest
from desk.application.usecase.settings.get_profile import (
    GetProfileRequest,
    ProfileResponse,
)
from desk.application.usecase.settings.update_llm_settings import (
    UpdateLlmSettingsRequest,
)
from desk.application.usecase.settings.update_profile import UpdateProfileRequest
from desk.config import Settings
from desk.domain.error import DomainError
from desk.domain.service import LlmSettingsView
from desk.domain.value import AuthProvider, LlmProvider
from desk.interface.api.session import require_session, set_session_cookie
from desk.interface.error import to_http_exception
from desk.util.profile_image import MAX_PROFILE_IMAGE_DATA_URL_LENGTH

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"], route_class=DishkaRoute)


class UpdateProfileAPIRequest(BaseModel):
    """Profile changes. Omitted fields are left unchanged."""

    first_name: str | None = Field(None, min_length=1, max_length=60)
    last_name: str | None = Field(None, min_length=1, max_length=60)
    email: EmailStr | None = None
    image: str | None = Field(None, max_length=MAX_PROFILE_IMAGE_DATA_URL_LENGTH)
    remove_image: bool = False

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DisconnectAPIRequest(BaseModel):
    """New password, required only when the account has none."""

    password: str | None = None
    confirm_password: str | None = None


class UpdateAgentSettingsAPIRequest(BaseModel):
    """Agent settings changes. API keys are write-only."""

    provider: LlmProvider | None = None
    model: str | None = Field(None, max_length=100)
    openai_api_key: str | None = Field(None, min_length=10, max_length=500)
    anthropic_api_key: str | None = Field(None, min_length=10, max_length=500)
    google_api_key: str | None = Field(None, min_length=10, max_length=500)
    clear_openai_api_key: bool = False
    clear_anthropic_api_key: bool = False
    clear_google_api_key: bool = False


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    request: Request,
    get_session_use_case: FromDishka[GetSessionUseCase],
    get_profile_use_case: FromDishka[GetProfileUseCase],
    settings: FromDishka[Settings],
) -> ProfileResponse:
    """Get the signed-in user's profile and sign-in methods."""
    session_user = await require_session(request, settings, get_session_use_case)
    try:
        return await get_profile_use_case.execute(
            GetProfileRequest(user_id=session_user.user_id)
        )
    except DomainError as e:
        raise to_http_exception(e)


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    body: UpdateProfileAPIRequest,
    request: Request,
    response: Response,
    get_session_use_case: FromDishka[GetSessionUseCase],
    update_profile_use_case: FromDishka[UpdateProfileUseCase],
    settings: FromDishka[Settings],
) -> ProfileResponse:
    """Update the signed-in user's profile.

    An email change clears verification and is reflected in the re-issued
    session cookie.
    """
    session_user = await require_session(request, settings, get_session_use_case)
    try:
        result = await update_profile_use_case.execute(
            UpdateProfileRequest(user_id=session_user.user_id, **body.model_dump())
        )
    except DomainError as e:
        raise to_http_exception(e)

    set_session_cookie(response, result.token, settings)
    return ProfileResponse(**result.model_dump(exclude={"token"}))


@router.delete("/integrations/google", response_model=DisconnectProviderResponse)
async def disconnect_google(
    request: Request,
    get_session_use_case: FromDishka[GetSessionUseCase],
    disconnect_use_case: FromDishka[DisconnectProviderUseCase],
    settings: FromDishka[Settings],
    body: DisconnectAPIRequest | None = None,
) -> DisconnectProviderResponse:
    """Disconnect Google from the signed-in user.

    Passwordless accounts must send ``password`` and ``confirm_password``;
    the password is set and Google unlinked together.

    Example:
        DELETE /settings/integrations/google
        {"password": "...", "confirm_password": "..."}

        Response:
        {"message": "Google integration disconnected.", "linked": false,
         "has_password": true}
    """
    session_user = await require_session(request, settings, get_session_use_case)
    body = body or DisconnectAPIRequest()
    try:
        result = await disconnect_use_case.execute(
            DisconnectProviderRequest(
                user_id=session_user.user_id,
                provider=AuthProvider.GOOGLE,
                password=body.password,
                confirm_password=body.confirm_password,
            )
        )
    except DomainError as e:
        raise to_http_exception(e)

    logger.info(f"Google disconnected for user {session_user.id}")
    return result


@router.get("/agent", response_model=LlmSettingsView)
async def get_agent_settings(
    request: Request,
    get_session_use_case: FromDishka[GetSessionUseCase],
    get_llm_settings_use_case: FromDishka[GetLlmSettingsUseCase],
    settings: FromDishka[Settings],
) -> LlmSettingsView:
    """Get provider/model choice and masked API key state."""
    session_user = await require_session(request, settings, get_session_use_case)
    return await get_llm_settings_use_case.execute(
        GetLlmSettingsRequest(user_id=session_user.user_id)
    )


@router.patch("/agent", response_model=LlmSettingsView)
async def update_agent_settings(
    body: UpdateAgentSettingsAPIRequest,
    request: Request,
    get_session_use_case: FromDishka[GetSessionUseCase],
    update_llm_settings_use_case: FromDishka[UpdateLlmSettingsUseCase],
    settings: FromDishka[Settings],
) -> LlmSettingsView:
    """Save provider/model choice and set or clear API keys.

    Keys are encrypted before storage and never returned. When encryption is
    unavailable the keys are not stored and ``encryption_available`` is false.
    """
    session_user = await require_session(request, settings, get_session_use_case)
    return await update_llm_settings_use_case.execute(
        UpdateLlmSettingsRequest(user_id=session_user.user_id, **body.model_dump())
    )
