from __future__ import annotations

import inspect
import types
from typing import Any, TypeGuard, get_origin

from typing_extensions import is_protocol


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def interface_class(annotation: Any) -> type[Any] | None:
    """Return the class describing an interface-shaped annotation, if any.

    Interface shapes are ``typing.Protocol`` classes and abstract base classes.
    Parametrized protocols such as ``SupportsRead[bytes]`` are reduced to
    their origin class.

    Args:
        annotation: Annotation being classified.

    """
    candidate = annotation
    if not is_runtime_class(candidate):
        candidate = get_origin(annotation)
        if not is_runtime_class(candidate):
            return None
    if is_protocol(candidate) or inspect.isabstract(candidate):
        return candidate
    return None


def type_name(annotation: Any) -> str:
    """Return a readable name for an annotation used in errors and logs."""
    if is_runtime_class(annotation):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


__all__ = ["interface_class", "is_runtime_class", "type_name"]
