from __future__ import annotations

from typing import Annotated, Any, NamedTuple, get_args, get_origin

_ANNOTATED_MARKER_MIN_ARGS = 2


class Inject(NamedTuple):
    """Point a parameter at a specific identifier.

    Attach ``Inject`` metadata to ``typing.Annotated`` when the dependency is
    registered under a name or a ``Token`` rather than under the parameter's
    type. The type stays available to type checkers.

    Examples:
        .. code-block:: python

            class PaymentService:
                def __init__(self, logger: Annotated[Logger, Inject("logger")]) -> None:
                    self.logger = logger

    """

    identifier: Any


def find_inject_marker(annotation: Any) -> Inject | None:
    """Return the first ``Inject`` marker attached to ``annotation``, if any."""
    if get_origin(annotation) is not Annotated:
        return None
    args = get_args(annotation)
    if len(args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None  # pragma: no cover - Annotated requires at least 2 args
    for metadata in args[1:]:
        if isinstance(metadata, Inject):
            return metadata
    return None


def strip_annotated(annotation: Any) -> Any:
    """Recursively unwrap ``Annotated[T, ...]`` into ``T``."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def dependency_key(annotation: Any) -> Any:
    """Return the identifier a parameter annotation asks for."""
    marker = find_inject_marker(annotation)
    if marker is not None:
        return marker.identifier
    return strip_annotated(annotation)


__all__ = ["Inject", "dependency_key", "find_inject_marker", "strip_annotated"]
