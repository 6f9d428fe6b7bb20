from __future__ import annotations

from typing import Any


class DIMapError(Exception):
    """Represent a base class for all dimap-specific failures.

    Catch this type when you want to handle any dimap error path without
    matching each concrete exception class individually.
    """


class DIMapResolutionError(DIMapError):
    """Represent a failed lookup that the calling code may recover from.

    Raised by ``Container.resolve``, ``Container.invoke`` and
    ``Container.apply``. ``Container.get`` reports plain misses through its
    ``Lookup`` result instead, but still raises ambiguity errors.
    """


class DIMapDependencyNotFoundError(DIMapResolutionError):
    """Signal that no binding matches a requested key anywhere in the chain.

    The local store, the local interface scan and every parent container were
    consulted. ``target`` names the parameter or field that needed the value,
    or is ``None`` for direct ``resolve`` calls.

    Typical fixes include binding the value with ``Container.map``, binding an
    implementation under its interface with ``Container.map_to``, or attaching
    the parent container that owns the binding.
    """

    def __init__(self, key: Any, target: str | None = None) -> None:
        self.key = key
        self.target = target
        if target is None:
            msg = f"No binding found for {key}."
        else:
            msg = f"No binding found for {key} required by '{target}'."
        super().__init__(msg)


class DIMapAmbiguousImplementationError(DIMapResolutionError):
    """Signal that several bindings satisfy one requested interface.

    The container never picks one of the candidates on its own.

    Typical fixes include binding the chosen implementation directly under
    the interface with ``Container.map_to`` (exact matches win over the
    interface scan) or moving the competing bindings into separate containers.
    """

    def __init__(self, key: Any, candidates: tuple[Any, ...]) -> None:
        self.key = key
        self.candidates = candidates
        names = ", ".join(str(candidate) for candidate in candidates)
        msg = f"Ambiguous implementation for {key}: {len(candidates)} bindings match ({names})."
        super().__init__(msg)


class DIMapUsageError(DIMapError, TypeError):
    """Represent misuse of the container API by the calling code.

    These errors are raised at the point of misuse and are not meant to be
    recovered from.
    """


class DIMapInvalidInterfaceError(DIMapUsageError):
    """Signal that a type passed as an interface is not interface-shaped.

    Raised by ``interface_of`` and ``Container.map_to``. Interfaces are
    ``typing.Protocol`` classes and abstract base classes, optionally wrapped
    in one or two ``type[...]`` layers.
    """


class DIMapInvalidInvocationTargetError(DIMapUsageError):
    """Signal that ``Container.invoke`` or ``Container.inject`` got a bad callable.

    Raised for non-callable values and for callables with parameters that
    have no type annotation.
    """


class DIMapInvalidApplyTargetError(DIMapUsageError):
    """Signal that ``Container.apply`` got something other than an object instance.

    Pass an instance of a dataclass, attrs class, pydantic model or plain
    annotated class, not the class itself or a builtin value.
    """
