from __future__ import annotations

from dataclasses import dataclass
from typing import Any, get_args, get_origin

from dimap._internal.markers import strip_injected_annotation
from dimap._internal.type_checks import interface_class, type_name
from dimap.exceptions import DIMapInvalidInterfaceError

_MAX_REFERENCE_LAYERS = 2


@dataclass(frozen=True, slots=True)
class TypeKey:
    """Normalized identifier of a type, used as the key of every binding.

    Identity is exact: ``Chan[str]`` and ``SendChan[str]`` are different keys,
    and so are ``Db`` and ``Annotated[Db, "replica"]``. The ``Injected``
    marker is the only metadata dropped during normalization, so a field
    annotated ``Injected[Db]`` looks up the ``Db`` binding.
    """

    annotation: Any

    @classmethod
    def of(cls, annotation: Any) -> TypeKey:
        """Build a key from an annotation; keys are returned unchanged."""
        if isinstance(annotation, TypeKey):
            return annotation
        return cls(annotation=strip_injected_annotation(annotation))

    @classmethod
    def of_value(cls, value: Any) -> TypeKey:
        """Build the key of a value's own runtime type."""
        return cls(annotation=type(value))

    @property
    def is_interface(self) -> bool:
        return interface_class(self.annotation) is not None

    def __str__(self) -> str:
        return type_name(self.annotation)


def interface_of(sample: Any) -> TypeKey:
    """Return the interface key described by ``sample``.

    ``sample`` is an interface class (a ``typing.Protocol`` or an abstract base
    class), optionally wrapped in one or two ``type[...]`` layers, which are
    unwrapped first. Anything whose unwrapped shape is not an interface is a
    programming error.

    Args:
        sample: Interface class, ``type[Interface]``, ``type[type[Interface]]``
            or an existing ``TypeKey``.

    Returns:
        The ``TypeKey`` of the unwrapped interface.

    Raises:
        DIMapInvalidInterfaceError: If the unwrapped shape is not an interface.

    Examples:
        .. code-block:: python

            class Greeter(Protocol):
                def greet(self) -> str: ...


            key = interface_of(type[Greeter])
            assert key == interface_of(Greeter)

    """
    shape = sample.annotation if isinstance(sample, TypeKey) else sample
    for _ in range(_MAX_REFERENCE_LAYERS):
        if get_origin(shape) is not type:
            break
        (shape,) = get_args(shape)

    if interface_class(shape) is None:
        msg = f"Expected an interface (Protocol or abstract class), got {type_name(shape)}."
        raise DIMapInvalidInterfaceError(msg)
    return TypeKey.of(shape)


__all__ = ["TypeKey", "interface_of"]
