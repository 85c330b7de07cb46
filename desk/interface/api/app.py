"""FastAPI application factory."""

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from desk.config import Settings
from desk.interface.api.routes import auth, health, settings as settings_routes
from desk.util.di.container import create_container, setup_di
from desk.util.observability import instrument_fastapi, instrument_httpx

# Local frontend dev server, allowed in every environment
DEV_FRONTEND_ORIGIN = "http://localhost:3000"


def cors_origins(settings: Settings) -> list[str]:
    """Origins allowed to send the session cookie cross-site."""
    return sorted({settings.api.frontend_url, DEV_FRONTEND_ORIGIN})


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create the FastAPI application.

    Logfire must be configured before calling this: ``scripts/start_app.py``
    does it for the server, ``tests/conftest.py`` for the test suite.

    Args:
        container: DI container; defaults to the production container
    """
    settings = Settings()

    instrument_httpx()

    app = FastAPI(
        title="Blackdesk API",
        description="Identity, account settings and API-key storage for Blackdesk",
        version="0.1.0",
    )
    instrument_fastapi(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=600,
    )

    setup_di(app, container or create_container())

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(settings_routes.router)

    return app
