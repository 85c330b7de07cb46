"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka

from desk.util.di import PROVIDERS, Component, ProviderBase, get_provider


def build_providers(mocked: set[Component] | None = None) -> list[ProviderBase]:
    """Instantiate one provider per entry of ``PROVIDERS``.

    Args:
        mocked: Components served by their mock implementation; every other
            mockable component gets its production implementation

    Returns:
        Provider instances, ready for ``make_async_container``
    """
    mocked = mocked or set()
    instances = []
    for base in PROVIDERS:
        use_mock = base.__mock_component__ in mocked
        instances.append(get_provider(base, use_mock=use_mock)())
    return instances


def create_container() -> AsyncContainer:
    """Build production container (all prod implementations).

    Settings are loaded from environment variables automatically.
    """
    # FastapiProvider exposes the current Request to REQUEST-scoped factories
    return make_async_container(*build_providers(), FastapiProvider())


def setup_di(app, container: AsyncContainer) -> None:
    """Attach the container to a FastAPI application."""
    setup_dishka(container, app)
