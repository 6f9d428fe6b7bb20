from __future__ import annotations

import importlib
from typing import Any

from dimap._internal.markers import build_annotated_key
from dimap._internal.type_checks import is_runtime_class


def _load_base_model() -> type[Any] | None:
    try:
        module = importlib.import_module("pydantic")
    except ImportError:
        return None
    base_model = getattr(module, "BaseModel", None)
    if isinstance(base_model, type):
        return base_model
    return None


BASE_MODEL: type[Any] | None = _load_base_model()


def is_pydantic_model_class(candidate: object) -> bool:
    """Return whether a class is a Pydantic v2 model.

    If Pydantic is not installed, this function returns ``False`` for every
    candidate.

    Args:
        candidate: Object to test.

    """
    if BASE_MODEL is None or not is_runtime_class(candidate):
        return False
    try:
        return issubclass(candidate, BASE_MODEL)
    except TypeError:
        return False


def model_field_annotations(model_class: type[Any]) -> list[tuple[str, Any]]:
    """Return ``(name, annotation)`` pairs for every declared model field.

    Pydantic moves ``Annotated`` metadata into ``FieldInfo.metadata``; it is
    folded back so markers such as ``Injected`` stay visible.

    Args:
        model_class: Pydantic model class.

    """
    annotations: list[tuple[str, Any]] = []
    for name, field_info in model_class.model_fields.items():
        annotation = field_info.annotation
        if field_info.metadata:
            annotation = build_annotated_key((annotation, *field_info.metadata))
        annotations.append((name, annotation))
    return annotations


def is_frozen_model(model_class: type[Any]) -> bool:
    """Return whether instances of a Pydantic model reject attribute assignment."""
    return bool(model_class.model_config.get("frozen", False))


__all__ = [
    "BASE_MODEL",
    "is_frozen_model",
    "is_pydantic_model_class",
    "model_field_annotations",
]
