"""pytest plugin resolving ``Inject``-annotated test parameters from a container.

Enable it with ``pytest_plugins = ["cosmos_ioc.integrations.pytest_plugin"]``
and override the ``cosmos_container`` fixture:

.. code-block:: python

    @pytest.fixture()
    def cosmos_container() -> Container:
        container = Container()
        container.bind("logger", ConsoleLogger)
        return container


    def test_logs(logger: Annotated[Logger, Inject("logger")]) -> None: ...

"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, cast, get_type_hints

import pytest

from cosmos_ioc.container import Container
from cosmos_ioc.markers import find_inject_marker

CONTAINER_FIXTURE_NAME = "cosmos_container"
_INJECTED_PARAMETERS_ATTR = "__cosmos_pytest_injected_parameters__"
_REQUESTS_CONTAINER_ATTR = "__cosmos_pytest_requests_container__"


@dataclass(frozen=True, slots=True)
class InjectedParameter:
    """A test parameter resolved from the container instead of a fixture."""

    name: str
    identifier: Any


@dataclass(frozen=True, slots=True)
class InjectedCallableInspection:
    injected_parameters: tuple[InjectedParameter, ...]
    public_signature: inspect.Signature
    requests_container: bool


def inspect_injected_callable(callable_obj: Callable[..., Any]) -> InjectedCallableInspection:
    """Split the parameters of ``callable_obj`` into fixtures and injected ones.

    The public signature drops injected parameters and asks for the
    ``cosmos_container`` fixture instead, so pytest supplies the container.
    """
    signature = inspect.signature(callable_obj)
    try:
        hints = get_type_hints(callable_obj, include_extras=True)
    except (AttributeError, NameError, TypeError):
        hints = {}

    injected: list[InjectedParameter] = []
    public_parameters: list[inspect.Parameter] = []
    for parameter in signature.parameters.values():
        marker = find_inject_marker(hints.get(parameter.name, parameter.annotation))
        if marker is None:
            public_parameters.append(parameter)
        else:
            injected.append(InjectedParameter(name=parameter.name, identifier=marker.identifier))

    requests_container = CONTAINER_FIXTURE_NAME in signature.parameters
    if injected and not requests_container:
        container_parameter = inspect.Parameter(
            CONTAINER_FIXTURE_NAME,
            inspect.Parameter.KEYWORD_ONLY,
        )
        insert_at = len(public_parameters)
        if public_parameters and public_parameters[-1].kind is inspect.Parameter.VAR_KEYWORD:
            insert_at -= 1
        public_parameters.insert(insert_at, container_parameter)

    return InjectedCallableInspection(
        injected_parameters=tuple(injected),
        public_signature=signature.replace(parameters=public_parameters),
        requests_container=requests_container,
    )


@pytest.fixture()
def cosmos_container() -> Container:
    """Fixture hook for the container used by injected test parameters.

    Override this fixture in your test suite to provide the registrations the
    tests need.

    """
    msg = (
        "The cosmos-ioc pytest plugin requires overriding the 'cosmos_container' fixture "
        "in your test suite. Define @pytest.fixture() def cosmos_container() -> Container: "
        "... and return a configured container."
    )
    raise RuntimeError(msg)


def pytest_pycollect_makeitem(
    collector: Any,
    name: str,
    obj: object,
) -> Any | None:
    """Hide injected parameters from pytest fixture name matching.

    Args:
        collector: Pytest collector instance.
        name: Collected object name.
        obj: Candidate object.

    Returns:
        ``None`` to continue default collection flow.

    """
    if not inspect.isfunction(obj):
        return None
    if not collector.istestfunction(obj, name):
        return None

    inspection = inspect_injected_callable(obj)
    if not inspection.injected_parameters:
        return None

    obj_as_any = cast("Any", obj)
    obj_as_any.__dict__[_INJECTED_PARAMETERS_ATTR] = inspection.injected_parameters
    obj_as_any.__dict__[_REQUESTS_CONTAINER_ATTR] = inspection.requests_container
    obj_as_any.__signature__ = inspection.public_signature
    return None


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Iterator[None]:
    """Resolve injected parameters around the test call.

    Args:
        pyfuncitem: Collected pytest function item.

    Yields:
        Control back to pytest around test execution.

    """
    original_callable = cast("Callable[..., Any]", pyfuncitem.obj)
    injected_parameters = cast(
        "tuple[InjectedParameter, ...] | None",
        getattr(original_callable, _INJECTED_PARAMETERS_ATTR, None),
    )
    if not injected_parameters:
        yield
        return

    requests_container = bool(getattr(original_callable, _REQUESTS_CONTAINER_ATTR, False))

    @functools.wraps(original_callable)
    def _invoke_with_container(*args: Any, **kwargs: Any) -> Any:
        if requests_container:
            container = cast("Container", kwargs[CONTAINER_FIXTURE_NAME])
        else:
            container = cast("Container", kwargs.pop(CONTAINER_FIXTURE_NAME))
        for parameter in injected_parameters:
            kwargs[parameter.name] = container.make(parameter.identifier)
        return original_callable(*args, **kwargs)

    pyfuncitem.obj = _invoke_with_container
    try:
        yield
    finally:
        pyfuncitem.obj = original_callable
