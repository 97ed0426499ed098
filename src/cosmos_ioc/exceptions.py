from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from cosmos_ioc.identifiers import describe_identifier


class CosmosError(Exception):
    """Represent a base class for all cosmos-ioc failures.

    Catch this type when you want to handle any container error path without
    matching each concrete exception class individually.
    """


class CosmosInvalidRegistrationError(CosmosError):
    """Signal invalid registration input.

    Raised by ``Container.bind``, ``Container.singleton``, ``Container.instance``,
    ``Container.alias`` and ``Container.add_contextual_binding`` when an
    identifier is ``None`` or unhashable, or when explicit dependencies do not
    match the concrete's signature.
    """


class CosmosDuplicateBindingError(CosmosInvalidRegistrationError):
    """Signal a second binding for an identifier that is already bound.

    Bindings are never overwritten silently. The registry keeps the first
    binding untouched.

    Typical fix is flushing the container or binding under a new identifier.
    """

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(f"Identifier {describe_identifier(identifier)} is already bound.")


class CosmosDuplicateAliasError(CosmosInvalidRegistrationError):
    """Signal an alias name that is already registered as an alias."""

    def __init__(self, alias: Any) -> None:
        self.alias = alias
        super().__init__(f"Alias {describe_identifier(alias)} is already defined.")


class CosmosUnboundAliasTargetError(CosmosInvalidRegistrationError):
    """Signal an alias pointing to an identifier the container does not know.

    Register the target with ``bind``, ``singleton`` or ``instance`` before
    creating the alias.
    """

    def __init__(self, identifier: Any, alias: Any) -> None:
        self.identifier = identifier
        self.alias = alias
        super().__init__(
            f"Identifier {describe_identifier(identifier)} is not bound, "
            f"cannot create alias {describe_identifier(alias)}.",
        )


class CosmosAliasCycleError(CosmosInvalidRegistrationError):
    """Signal an alias whose chain would lead back to itself."""

    def __init__(self, identifier: Any, alias: Any) -> None:
        self.identifier = identifier
        self.alias = alias
        super().__init__(
            f"Alias {describe_identifier(alias)} -> {describe_identifier(identifier)} "
            "would create an alias cycle.",
        )


class CosmosCircularDependencyError(CosmosError):
    """Signal a dependency graph that loops back on an identifier being built.

    ``chain`` holds the identifiers under construction, in order, followed by
    the identifier that was requested again.
    """

    def __init__(self, chain: Sequence[Any]) -> None:
        self.chain = list(chain)
        rendered = " -> ".join(describe_identifier(identifier) for identifier in self.chain)
        super().__init__(f"Circular dependency detected: {rendered}")


class CosmosUnresolvedDependencyError(CosmosError):
    """Signal a dependency that the container cannot satisfy.

    Raised by ``Container.make`` when a constructor or factory requires an
    identifier that has no binding, no instance, no alias, no capability tag,
    and cannot be autowired.

    Typical fixes include binding the dependency, declaring a contextual
    implementation, or enabling ``autowire_concrete_types``.
    """

    def __init__(self, dependency: Any, requested_by: Any | None = None) -> None:
        self.dependency = dependency
        self.requested_by = requested_by
        msg = f"Dependency {describe_identifier(dependency)} is not bound in the container"
        if requested_by is not None:
            msg += f" (required by {describe_identifier(requested_by)})"
        super().__init__(f"{msg}.")


class CosmosDependencyInferenceError(CosmosError):
    """Signal that constructor dependencies cannot be inferred.

    Common trigger is a required parameter without a type annotation.

    Typical fixes include adding a parameter annotation, annotating with
    ``Annotated[T, Inject(identifier)]``, or passing ``dependencies=...`` at
    bind time.
    """
