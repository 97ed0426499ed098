from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from cosmos_ioc.identifiers import Identifier

if TYPE_CHECKING:
    from cosmos_ioc.container import Container


class _NoOverride:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_OVERRIDE"

    def __bool__(self) -> bool:
        return False


NO_OVERRIDE: Final[Any] = _NoOverride()
"""Returned by ``get_contextual_concrete`` when no override is registered."""


class ContextualBindingsStore:
    """Per-consumer overrides of an abstract's implementation.

    Entries are keyed by the consuming context first, then by the abstract it
    needs. Re-registering the same pair replaces the previous implementation.
    """

    def __init__(self) -> None:
        self._contextual: dict[Identifier, dict[Identifier, Any]] = {}

    def add(self, context: Identifier, abstract: Identifier, implementation: Any) -> None:
        """Record ``implementation`` for ``abstract`` while ``context`` is being built."""
        self._contextual.setdefault(context, {})[abstract] = implementation

    def find(self, abstract: Identifier, context: Identifier) -> Any:
        """Return the override for ``(context, abstract)`` or ``NO_OVERRIDE``."""
        overrides = self._contextual.get(context)
        if overrides is None:
            return NO_OVERRIDE
        return overrides.get(abstract, NO_OVERRIDE)

    def clear(self) -> None:
        """Remove every override."""
        self._contextual.clear()

    def __len__(self) -> int:
        return sum(len(overrides) for overrides in self._contextual.values())


class ContextualBindingBuilder:
    """First step of ``container.when(context).needs(abstract).give(implementation)``."""

    def __init__(self, container: Container, context: Identifier) -> None:
        self._container = container
        self._context = context

    def needs(self, abstract: Identifier) -> ContextualBindingNeedsBuilder:
        """Name the abstract whose implementation changes inside the context."""
        return ContextualBindingNeedsBuilder(self._container, self._context, abstract)


class ContextualBindingNeedsBuilder:
    """Final step of the contextual binding builder."""

    def __init__(self, container: Container, context: Identifier, abstract: Identifier) -> None:
        self._container = container
        self._context = context
        self._abstract = abstract

    def give(self, implementation: Any) -> None:
        """Register ``implementation`` for the abstract inside the context.

        ``implementation`` is an identifier known to the container, a class,
        or a factory callable.
        """
        self._container.add_contextual_binding(self._context, self._abstract, implementation)


__all__ = [
    "NO_OVERRIDE",
    "ContextualBindingBuilder",
    "ContextualBindingNeedsBuilder",
    "ContextualBindingsStore",
]
