from __future__ import annotations

from typing import Annotated

import pytest

from cosmos_ioc import Container, Inject, Token

pytest_plugins = ["cosmos_ioc.integrations.pytest_plugin"]

CLOCK = Token("CLOCK")


class Logger:
    pass


class FakeLogger(Logger):
    pass


@pytest.fixture()
def cosmos_container() -> Container:
    container = Container()
    container.singleton("logger", FakeLogger)
    container.instance(CLOCK, "fixed-clock")
    return container


@pytest.fixture()
def value() -> int:
    return 42


def test_injected_parameters_are_resolved_from_cosmos_container(
    value: int,
    logger: Annotated[Logger, Inject("logger")],
) -> None:
    assert value == 42
    assert isinstance(logger, FakeLogger)


def test_token_identifiers_are_resolved(clock: Annotated[str, Inject(CLOCK)]) -> None:
    assert clock == "fixed-clock"


def test_injected_parameters_share_the_fixture_container(
    logger: Annotated[Logger, Inject("logger")],
    cosmos_container: Container,
) -> None:
    assert logger is cosmos_container.make("logger")


def test_regular_fixture_resolution_still_works_without_injected_parameters(value: int) -> None:
    assert value == 42
