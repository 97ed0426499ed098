from __future__ import annotations

import datetime
import decimal
import inspect
import pathlib
import uuid
from dataclasses import dataclass
from typing import Any, TypeGuard

from cosmos_ioc.identifiers import is_runtime_class
from cosmos_ioc.integrations.pydantic_settings import is_pydantic_settings_subclass


@dataclass(frozen=True, slots=True)
class AutowiringDecision:
    """How an unregistered class gets bound when it is autowired."""

    shared: bool
    build_without_arguments: bool


@dataclass(frozen=True, slots=True)
class ConcreteTypeAutowiringPolicy:
    """Decide which unregistered classes the container may build on demand."""

    ignored_base_types: tuple[type[Any], ...] = (
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
    )

    def is_eligible_concrete(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return true when an unregistered class may be autowired.

        Builtins, abstract classes, metaclasses and the value types listed in
        ``ignored_base_types`` are never autowired.

        Args:
            candidate: Value being checked for eligibility.

        """
        if not is_runtime_class(candidate):
            return False
        if candidate.__module__ == "builtins":
            return False
        if inspect.isabstract(candidate):
            return False
        if issubclass(candidate, type):
            return False
        return not issubclass(candidate, self.ignored_base_types)

    def decide(self, concrete_type: type[Any]) -> AutowiringDecision:
        """Return the binding policy for an eligible class."""
        if is_pydantic_settings_subclass(concrete_type):
            return AutowiringDecision(shared=True, build_without_arguments=True)
        return AutowiringDecision(shared=False, build_without_arguments=False)
