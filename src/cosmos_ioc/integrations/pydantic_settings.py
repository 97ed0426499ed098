from __future__ import annotations

import importlib
import warnings
from typing import Any

from cosmos_ioc.identifiers import is_runtime_class

_SETTINGS_MODULES = ("pydantic_settings", "pydantic.v1")
# pydantic.v1 warns on import under Python 3.14+.
_IGNORED_IMPORT_WARNING = r"Core Pydantic V1 functionality isn't compatible with Python 3\.14"


def _load_base_settings(module_name: str) -> type[Any] | None:
    """Return ``module_name.BaseSettings`` when the module imports and exposes a class."""
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=_IGNORED_IMPORT_WARNING, category=UserWarning)
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None
    candidate = getattr(module, "BaseSettings", None)
    return candidate if isinstance(candidate, type) else None


def _discover_settings_bases() -> tuple[type[Any], ...]:
    discovered = (_load_base_settings(module_name) for module_name in _SETTINGS_MODULES)
    return tuple(dict.fromkeys(base for base in discovered if base is not None))


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()
"""Settings base classes importable in the current environment."""


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether ``candidate`` is a Pydantic settings model class.

    ``pydantic_settings.BaseSettings`` and the legacy ``pydantic.v1.BaseSettings``
    are recognized when importable. Without Pydantic installed every candidate
    is rejected.

    Autowired settings models are bound as singletons and built with no
    arguments, so their values come from the environment once per container.

    Args:
        candidate: Object to test.

    """
    return is_runtime_class(candidate) and issubclass(candidate, SETTINGS_BASES)


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
]
