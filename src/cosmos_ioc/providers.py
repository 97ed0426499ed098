from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from cosmos_ioc.exceptions import CosmosDuplicateBindingError
from cosmos_ioc.identifiers import Identifier

Concrete: TypeAlias = Callable[..., Any] | type[Any] | Identifier
"""A factory, a class, or another identifier to resolve in its place."""

ExplicitDependencies: TypeAlias = Sequence[Identifier] | Mapping[str, Identifier]
"""Dependency identifiers declared at bind time, positional or by parameter name."""


@dataclass(frozen=True, kw_only=True)
class Binding:
    """A registered association between an identifier and its concrete."""

    concrete: Concrete
    """The factory, class or identifier used to satisfy the binding."""
    shared: bool = False
    """Whether the built instance is cached and reused."""
    dependencies: ExplicitDependencies | None = None
    """Explicit dependency identifiers; ``None`` means infer them from annotations."""
    satisfies: frozenset[Any] = field(default_factory=frozenset)
    """Abstractions this binding declares it implements."""


class BindingsRegistry:
    """Holds at most one binding per identifier."""

    def __init__(self) -> None:
        self._bindings: dict[Identifier, Binding] = {}

    def add(self, identifier: Identifier, binding: Binding) -> None:
        """Register ``binding`` under ``identifier``.

        Raises:
            CosmosDuplicateBindingError: If ``identifier`` is already bound. The
                existing binding is kept.

        """
        if identifier in self._bindings:
            raise CosmosDuplicateBindingError(identifier)
        self._bindings[identifier] = binding

    def get(self, identifier: Identifier) -> Binding:
        """Get the binding registered for ``identifier``."""
        return self._bindings[identifier]

    def find(self, identifier: Identifier) -> Binding | None:
        """Get the binding registered for ``identifier``, if it exists."""
        return self._bindings.get(identifier)

    def find_satisfying(self, abstract: Identifier) -> Identifier | None:
        """Return the first identifier whose binding declares it satisfies ``abstract``."""
        for identifier, binding in self._bindings.items():
            if abstract in binding.satisfies:
                return identifier
        return None

    def items(self) -> list[tuple[Identifier, Binding]]:
        """Get all bindings in registration order."""
        return list(self._bindings.items())

    def clear(self) -> None:
        """Remove every binding."""
        self._bindings.clear()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)


class InstancesCache:
    """Stores shared instances that were already built or registered directly."""

    def __init__(self) -> None:
        self._instances: dict[Identifier, Any] = {}

    def store(self, identifier: Identifier, instance: Any) -> None:
        """Cache ``instance`` for ``identifier``, replacing any previous one."""
        self._instances[identifier] = instance

    def get(self, identifier: Identifier) -> Any:
        """Get the cached instance for ``identifier``."""
        return self._instances[identifier]

    def clear(self) -> None:
        """Drop every cached instance."""
        self._instances.clear()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._instances

    def __iter__(self) -> Iterator[Identifier]:
        return iter(self._instances)

    def __len__(self) -> int:
        return len(self._instances)
