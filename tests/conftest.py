"""Shared pytest fixtures for cosmos-ioc tests."""

import pytest

from cosmos_ioc.container import Container
from cosmos_ioc.dependencies import ProviderDependenciesExtractor


@pytest.fixture()
def container() -> Container:
    """Default container without autowiring."""
    return Container()


@pytest.fixture()
def autowiring_container() -> Container:
    """Container that builds unregistered concrete classes on demand."""
    return Container(autowire_concrete_types=True)


@pytest.fixture()
def dependencies_extractor() -> ProviderDependenciesExtractor:
    """ProviderDependenciesExtractor instance."""
    return ProviderDependenciesExtractor()
