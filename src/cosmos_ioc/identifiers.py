from __future__ import annotations

import types
from typing import Any, TypeAlias, TypeGuard

Identifier: TypeAlias = Any
"""A key naming a capability: a ``str``, a ``Token`` or a class used as its own key."""


class Token:
    """A unique identifier that cannot be forged by another caller.

    Two tokens are equal only when they are the same object, so two tokens
    sharing a description never collide. The description is for diagnostics
    only.

    Examples:
        .. code-block:: python

            PAYMENT_GATEWAY = Token("PAYMENT_GATEWAY")
            container.bind(PAYMENT_GATEWAY, StripeGateway)

    """

    __slots__ = ("description",)

    def __init__(self, description: str = "") -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"Token({self.description!r})"


def is_valid_identifier(candidate: object) -> bool:
    """Return whether ``candidate`` can be used as a registry key."""
    if candidate is None:
        return False
    try:
        hash(candidate)
    except TypeError:
        return False
    return True


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Parameterized generics such as ``list[int]`` are rejected because
    ``issubclass`` does not accept them.
    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def describe_identifier(identifier: Identifier) -> str:
    """Render an identifier for error messages and logs."""
    if is_runtime_class(identifier):
        return identifier.__qualname__
    if isinstance(identifier, str | Token):
        return repr(identifier)
    return getattr(identifier, "__qualname__", repr(identifier))


__all__ = [
    "Identifier",
    "Token",
    "describe_identifier",
    "is_runtime_class",
    "is_valid_identifier",
]
