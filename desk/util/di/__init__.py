"""Dependency injection module.

Mockable components (``google``, ``persistence``) are declared as a base
provider with one production and one mock subclass. The mock subclasses live
under ``tests/di`` and register themselves on import.
"""

from typing import Type

from desk.util.di.application import ProdApplicationProvider
from desk.util.di.base import Component, ProviderBase
from desk.util.di.core import ProdConfigProvider
from desk.util.di.domain import ProdDomainProvider
from desk.util.di.infrastructure import (
    GoogleProvider,
    OAuthAggregatorProvider,
    PersistenceProvider,
)

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    GoogleProvider,
    PersistenceProvider,
    OAuthAggregatorProvider,
]


def mockable_components() -> set[Component]:
    """Names of the components that have implementations to choose from."""
    return {
        base.__mock_component__
        for base in PROVIDERS
        if base.__mock_component__ is not None
    }


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve the provider class to instantiate for ``base``.

    Concrete providers (no ``__mock_component__``) are returned as-is. For a
    mockable component the subclass whose ``__is_mock__`` matches
    ``use_mock`` is picked.

    Raises:
        ValueError: If the requested implementation is not registered
    """
    if base.__mock_component__ is None:
        return base

    for impl in base.__subclasses__():
        if impl.__is_mock__ == use_mock:
            return impl

    kind = "mock" if use_mock else "production"
    raise ValueError(f"No {kind} implementation for {base.__mock_component__}")


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "mockable_components",
]
