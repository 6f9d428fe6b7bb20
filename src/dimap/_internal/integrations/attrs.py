from __future__ import annotations

import importlib
from typing import Any

from dimap._internal.type_checks import is_runtime_class


def _load_attrs() -> tuple[Any, Any] | None:
    try:
        attrs_module = importlib.import_module("attrs")
        make_module = importlib.import_module("attr._make")
    except ImportError:
        return None
    return attrs_module, getattr(make_module, "_frozen_setattrs", None)


_ATTRS_API = _load_attrs()


def is_attrs_class(candidate: object) -> bool:
    """Return whether a class was built by attrs.

    If attrs is not installed, this function returns ``False`` for every
    candidate.

    Args:
        candidate: Object to test.

    """
    if _ATTRS_API is None or not is_runtime_class(candidate):
        return False
    attrs_module, _ = _ATTRS_API
    return bool(attrs_module.has(candidate))


def is_frozen_attrs_class(attrs_class: type[Any]) -> bool:
    """Return whether instances of an attrs class reject attribute assignment.

    ``attrs.frozen`` and ``attrs.define(frozen=True)`` install the frozen
    ``__setattr__`` on the class.

    Args:
        attrs_class: Class for which ``is_attrs_class`` is true.

    """
    if _ATTRS_API is None:
        return False
    _, frozen_setattrs = _ATTRS_API
    return frozen_setattrs is not None and attrs_class.__setattr__ is frozen_setattrs


__all__ = ["is_attrs_class", "is_frozen_attrs_class"]
