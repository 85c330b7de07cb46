"""Test container builder with selective unmocking."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from desk.util.di import Component, mockable_components
from desk.util.di.container import build_providers


def build_test_container(unmock: set[Component] | None = None) -> AsyncContainer:
    """Build a container that mocks every component except ``unmock``.

    Settings are loaded from environment variables.

    Args:
        unmock: Components to use production implementations for

    Raises:
        ValueError: If ``unmock`` names an unknown component

    Examples:
        # Unit tests - all mocks
        container = build_test_container()

        # Integration tests - real persistence
        container = build_test_container(unmock={"persistence"})
    """
    unmock = unmock or set()
    components = mockable_components()

    unknown = unmock - components
    if unknown:
        raise ValueError(f"Unknown components: {unknown}")

    # FastapiProvider lets the same container back a TestClient app
    return make_async_container(
        *build_providers(mocked=components - unmock), FastapiProvider()
    )
