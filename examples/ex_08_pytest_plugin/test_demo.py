from __future__ import annotations

from typing import Annotated

import pytest

from cosmos_ioc import Container, Inject

pytest_plugins = ["cosmos_ioc.integrations.pytest_plugin"]


class Mailer:
    pass


class FakeMailer(Mailer):
    pass


@pytest.fixture()
def cosmos_container() -> Container:
    container = Container()
    container.singleton("mailer", FakeMailer)
    return container


def test_plugin_injects_parameters(mailer: Annotated[Mailer, Inject("mailer")]) -> None:
    if not isinstance(mailer, FakeMailer):
        msg = "Injected mailer is not FakeMailer"
        raise TypeError(msg)
