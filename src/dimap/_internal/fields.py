from __future__ import annotations

import dataclasses
import inspect
import weakref
from dataclasses import dataclass
from typing import Any, ClassVar, get_origin, get_type_hints

from dimap._internal.integrations.attrs import is_attrs_class, is_frozen_attrs_class
from dimap._internal.integrations.pydantic import (
    is_frozen_model,
    is_pydantic_model_class,
    model_field_annotations,
)
from dimap._internal.markers import is_injected_annotation
from dimap._internal.type_checks import type_name
from dimap._internal.type_keys import TypeKey
from dimap.exceptions import DIMapInvalidApplyTargetError


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Per-class description of one annotated field.

    ``key`` is ``None`` for fields without the ``Injected`` marker.
    """

    name: str
    key: TypeKey | None
    assignable: bool

    @property
    def injectable(self) -> bool:
        return self.key is not None


class StructFieldsInspector:
    """Build and cache field descriptor tables for ``Container.apply`` targets.

    Supported targets are instances of dataclasses, attrs classes, Pydantic
    models and plain classes with annotated attributes. Fields are listed base
    classes first, in declaration order; ``ClassVar`` annotations are not
    fields.
    """

    def __init__(self) -> None:
        self._descriptors_cache: weakref.WeakKeyDictionary[
            type[Any],
            tuple[FieldDescriptor, ...],
        ] = weakref.WeakKeyDictionary()

    def fields_of(self, target: object) -> tuple[FieldDescriptor, ...]:
        """Return the field descriptors of an apply target.

        Args:
            target: Object instance whose fields will be populated.

        Raises:
            DIMapInvalidApplyTargetError: If ``target`` is a class, a builtin
                value, or a class whose annotations cannot be evaluated.

        """
        self.validate_target(target)
        target_class = type(target)
        cached = self._descriptors_cache.get(target_class)
        if cached is not None:
            return cached

        frozen = _is_frozen_class(target_class)
        descriptors = tuple(
            FieldDescriptor(
                name=name,
                key=TypeKey.of(annotation) if is_injected_annotation(annotation) else None,
                assignable=not frozen
                and not name.startswith("_")
                and not _is_read_only_attribute(target_class, name),
            )
            for name, annotation in self._annotated_fields(target_class)
        )
        self._descriptors_cache[target_class] = descriptors
        return descriptors

    def validate_target(self, target: object) -> None:
        if isinstance(target, type):
            msg = f"Expected an object instance, got the class {type_name(target)}."
            raise DIMapInvalidApplyTargetError(msg)
        if type(target).__module__ == "builtins":
            msg = f"Expected an object instance with fields, got {type_name(type(target))}."
            raise DIMapInvalidApplyTargetError(msg)

    def _annotated_fields(self, target_class: type[Any]) -> list[tuple[str, Any]]:
        if is_pydantic_model_class(target_class):
            return model_field_annotations(target_class)

        try:
            type_hints = get_type_hints(target_class, include_extras=True)
        except (NameError, TypeError) as error:
            msg = f"Cannot evaluate field annotations of {type_name(target_class)}: {error}"
            raise DIMapInvalidApplyTargetError(msg) from error
        return [
            (name, annotation)
            for name, annotation in type_hints.items()
            if get_origin(annotation) is not ClassVar and annotation is not ClassVar
        ]


def _is_frozen_class(target_class: type[Any]) -> bool:
    if is_pydantic_model_class(target_class):
        return is_frozen_model(target_class)
    if is_attrs_class(target_class):
        return is_frozen_attrs_class(target_class)
    if dataclasses.is_dataclass(target_class):
        return target_class.__dataclass_params__.frozen  # type: ignore[attr-defined]
    return False


def _is_read_only_attribute(target_class: type[Any], name: str) -> bool:
    declared = inspect.getattr_static(target_class, name, None)
    return isinstance(declared, property) and declared.fset is None


__all__ = ["FieldDescriptor", "StructFieldsInspector"]
