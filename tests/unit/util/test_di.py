"""Unit tests for provider selection."""

import pytest

from desk.util.di import get_provider, mockable_components
from desk.util.di.core import ProdConfigProvider
from desk.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
)
from tests.di import MockPersistenceProvider, build_test_container


class TestGetProvider:
    def test_concrete_provider_is_returned_as_is(self):
        assert get_provider(ProdConfigProvider, use_mock=True) is ProdConfigProvider

    def test_mockable_component_picks_implementation(self):
        assert get_provider(PersistenceProvider) is ProdPersistenceProvider
        assert (
            get_provider(PersistenceProvider, use_mock=True)
            is MockPersistenceProvider
        )

    def test_components(self):
        assert mockable_components() == {"google", "persistence"}


class TestBuildTestContainer:
    def test_unknown_component(self):
        with pytest.raises(ValueError, match="Unknown components"):
            build_test_container(unmock={"twitter"})
