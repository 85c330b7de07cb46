"""Observability configuration using Logfire.

Usage:
    import logfire

    logfire.info("User provisioned", user_id=str(user.id))

    with logfire.span("identity_provisioner.provision_local", has_email=True):
        ...

Passwords, password hashes, session tokens and API keys are never passed as
log attributes. The scrub patterns below catch them if one slips through.
"""

import logfire
from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from desk.config import Settings

SERVICE_NAME = "blackdesk-api"

# Redacted in addition to Logfire's default patterns
SCRUB_PATTERNS = [
    "password_hash",
    "confirm_password",
    "api_key",
    "session_token",
    "oauth_state",
    "code_verifier",
    "encryption_secret",
]

# Polled by the load balancer; not worth a trace each
UNTRACED_URLS = "/health"


def should_send_to_logfire(settings: Settings) -> bool:
    """Decide whether spans leave the process.

    An explicit ``OBSERVABILITY__SEND_TO_LOGFIRE`` wins; otherwise sending is
    enabled exactly when ``OBSERVABILITY__LOGFIRE_TOKEN`` is set.
    """
    explicit = settings.observability.send_to_logfire
    if explicit is not None:
        return explicit
    return bool(settings.observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire once per process (API server, scripts)."""
    send_to_logfire = should_send_to_logfire(settings)

    logfire.configure(
        service_name=SERVICE_NAME,
        service_version="0.1.0",
        environment=settings.environment,
        token=settings.observability.logfire_token,
        send_to_logfire=send_to_logfire,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
        scrubbing=logfire.ScrubbingOptions(extra_patterns=SCRUB_PATTERNS),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
    )


def _request_attributes(request: Request, attributes: dict) -> dict:
    # Only the route; query strings may carry OAuth codes
    return {**attributes, "method": request.method, "path": request.url.path}


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request except health checks.

    Headers are not captured since the session cookie travels in them.
    """
    logfire.instrument_fastapi(
        app,
        capture_headers=False,
        request_attributes_mapper=_request_attributes,
        excluded_urls=UNTRACED_URLS,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace statements issued through ``engine``."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)


def instrument_httpx() -> None:
    """Trace outbound HTTP calls (Google token and userinfo endpoints)."""
    logfire.instrument_httpx()
