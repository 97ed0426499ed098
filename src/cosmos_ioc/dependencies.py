from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, get_type_hints

from cosmos_ioc.exceptions import CosmosDependencyInferenceError, CosmosInvalidRegistrationError
from cosmos_ioc.identifiers import (
    Identifier,
    describe_identifier,
    is_runtime_class,
    is_valid_identifier,
)
from cosmos_ioc.markers import dependency_key
from cosmos_ioc.providers import ExplicitDependencies

_MISSING_ANNOTATION: Any = object()
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}
_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ProviderDependency:
    """One dependency required by a constructor or factory."""

    provides: Identifier
    """The identifier to resolve for this dependency."""
    parameter: Parameter | None = None
    """The matching signature parameter; ``None`` for positional explicit dependencies."""

    @property
    def has_default(self) -> bool:
        """Whether the parameter can be left out of the call."""
        return self.parameter is not None and self.parameter.default is not Parameter.empty

    @property
    def passed_by_keyword(self) -> bool:
        """Whether the resolved value is passed as a keyword argument."""
        return self.parameter is not None and self.parameter.kind is not Parameter.POSITIONAL_ONLY


class ProviderDependenciesExtractor:
    """Describe the ordered dependencies of classes and factories.

    Dependencies are read from parameter annotations. ``Annotated[T, Inject(id)]``
    points a parameter at ``id``; any other ``Annotated[T, ...]`` asks for ``T``.
    Variadic parameters are ignored, and optional parameters without an
    annotation are left to their defaults.
    """

    def __init__(self) -> None:
        self._cache: dict[Any, tuple[ProviderDependency, ...]] = {}

    def extract(self, concrete: Callable[..., Any]) -> tuple[ProviderDependency, ...]:
        """Infer the dependencies of ``concrete`` from its annotations.

        Raises:
            CosmosDependencyInferenceError: If a required parameter has no
                usable annotation.

        """
        cacheable = is_valid_identifier(concrete)
        if cacheable:
            cached = self._cache.get(concrete)
            if cached is not None:
                return cached

        if is_runtime_class(concrete):
            dependencies = self._extract_dependencies(
                provider=concrete.__init__,
                provider_name=concrete.__qualname__,
                skip_first_parameter=True,
            )
        else:
            dependencies = self._extract_dependencies(
                provider=_call_target(concrete),
                provider_name=describe_identifier(concrete),
                skip_first_parameter=False,
            )
        if cacheable:
            self._cache[concrete] = dependencies
        return dependencies

    def from_explicit(
        self,
        concrete: Callable[..., Any],
        dependencies: ExplicitDependencies,
    ) -> tuple[ProviderDependency, ...]:
        """Turn dependencies declared at bind time into descriptors.

        Sequences are passed positionally in their declared order. Mappings are
        passed by parameter name.
        """
        if not isinstance(dependencies, Mapping):
            return tuple(ProviderDependency(provides=provides) for provides in dependencies)

        parameters = self._signature_parameters(concrete)
        return tuple(
            ProviderDependency(provides=provides, parameter=parameters.get(name))
            if name in parameters
            else ProviderDependency(
                provides=provides,
                parameter=Parameter(name, Parameter.KEYWORD_ONLY),
            )
            for name, provides in dependencies.items()
        )

    def validate_explicit(
        self,
        concrete: Callable[..., Any],
        dependencies: ExplicitDependencies,
    ) -> None:
        """Check that explicit dependencies fit the signature of ``concrete``.

        Raises:
            CosmosInvalidRegistrationError: If ``concrete`` is not callable, or
                if the declared dependencies cannot be bound to its signature.

        """
        provider_name = describe_identifier(concrete)
        if not callable(concrete):
            msg = (
                f"Explicit dependencies require a callable concrete, "
                f"got {provider_name} which is an identifier."
            )
            raise CosmosInvalidRegistrationError(msg)
        if isinstance(dependencies, str):
            msg = (
                f"Explicit dependencies for '{provider_name}' must be a sequence or a "
                "mapping of identifiers, not a string."
            )
            raise CosmosInvalidRegistrationError(msg)

        try:
            signature = inspect.signature(concrete)
        except (TypeError, ValueError):
            return

        try:
            if isinstance(dependencies, Mapping):
                signature.bind(**dict.fromkeys(dependencies))
            else:
                signature.bind(*[None] * len(dependencies))
        except TypeError as error:
            msg = f"Explicit dependencies do not match provider '{provider_name}': {error}"
            raise CosmosInvalidRegistrationError(msg) from error

    def clear(self) -> None:
        """Forget cached descriptors."""
        self._cache.clear()

    def _extract_dependencies(
        self,
        *,
        provider: Callable[..., Any],
        provider_name: str,
        skip_first_parameter: bool,
    ) -> tuple[ProviderDependency, ...]:
        parameters = self._provider_parameters(
            provider=provider,
            skip_first_parameter=skip_first_parameter,
        )
        annotations, annotation_error = self._resolved_type_hints(provider)
        dependencies: list[ProviderDependency] = []

        for parameter in parameters:
            if parameter.kind in _VARIADIC_KINDS:
                continue
            annotation = self._resolve_parameter_annotation(
                parameter=parameter,
                annotations=annotations,
                annotation_error=annotation_error,
                provider_name=provider_name,
            )
            if annotation is _MISSING_ANNOTATION:
                continue
            dependencies.append(
                ProviderDependency(provides=dependency_key(annotation), parameter=parameter),
            )

        return tuple(dependencies)

    def _resolve_parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
        annotation_error: Exception | None,
        provider_name: str,
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return raw_annotation

        if parameter.default is not Parameter.empty:
            return _MISSING_ANNOTATION

        error_message = (
            f"Unable to infer dependency for required parameter '{parameter.name}' "
            f"in provider '{provider_name}'. Add a type annotation or pass explicit dependencies."
        )
        if annotation_error is None:
            raise CosmosDependencyInferenceError(error_message)
        msg = f"{error_message} Original annotation error: {annotation_error}"
        raise CosmosDependencyInferenceError(msg) from annotation_error

    def _provider_parameters(
        self,
        *,
        provider: Callable[..., Any],
        skip_first_parameter: bool,
    ) -> tuple[Parameter, ...]:
        try:
            parameters = tuple(inspect.signature(provider).parameters.values())
        except (TypeError, ValueError):
            return ()
        if (
            skip_first_parameter
            and parameters
            and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES
        ):
            return parameters[1:]
        return parameters

    def _signature_parameters(self, concrete: Callable[..., Any]) -> dict[str, Parameter]:
        try:
            return dict(inspect.signature(concrete).parameters)
        except (TypeError, ValueError):
            return {}

    def _resolved_type_hints(
        self,
        provider: Callable[..., Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        try:
            return get_type_hints(provider, include_extras=True), None
        except (AttributeError, NameError, TypeError) as error:
            return {}, error


def _call_target(concrete: Callable[..., Any]) -> Callable[..., Any]:
    """Return the bound ``__call__`` of callable instances, else ``concrete`` itself."""
    if inspect.isroutine(concrete):
        return concrete
    if inspect.isfunction(getattr(type(concrete), "__call__", None)):
        return concrete.__call__
    return concrete
