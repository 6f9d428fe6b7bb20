from __future__ import annotations

import inspect
import weakref
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any, get_type_hints

from dimap._internal.markers import is_injected_annotation
from dimap._internal.type_checks import type_name
from dimap._internal.type_keys import TypeKey
from dimap.exceptions import DIMapInvalidInvocationTargetError

_VARIADIC_KINDS = frozenset({inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD})


@dataclass(frozen=True, slots=True)
class InvocationParameter:
    """Parameter metadata used to resolve every argument of ``Container.invoke``."""

    name: str
    key: TypeKey
    positional_only: bool
    has_default: bool
    default: Any = field(default=inspect.Parameter.empty, compare=False)


@dataclass(frozen=True, slots=True)
class InjectedParameter:
    """Injected parameter metadata for callable wrapper generation."""

    name: str
    key: TypeKey


@dataclass(frozen=True, slots=True)
class CallableInspection:
    """Injection metadata derived from a callable signature and annotations."""

    signature: inspect.Signature
    injected_parameters: tuple[InjectedParameter, ...]
    public_signature: inspect.Signature


@dataclass(slots=True)
class CallableInspector:
    """Inspect callables for the parameters the container has to supply.

    Results are cached per callable object for as long as the callable is
    alive.
    """

    _invocation_cache: weakref.WeakKeyDictionary[Any, tuple[InvocationParameter, ...]] = field(
        default_factory=weakref.WeakKeyDictionary,
    )

    def invocation_parameters(
        self,
        callable_obj: Callable[..., Any],
    ) -> tuple[InvocationParameter, ...]:
        """Describe every non-variadic parameter of a callable, in declaration order.

        Args:
            callable_obj: Function, method, class or callable instance.

        Raises:
            DIMapInvalidInvocationTargetError: If ``callable_obj`` is not callable,
                has no inspectable signature, or declares a parameter without a
                resolvable type annotation.

        """
        try:
            cached = self._invocation_cache.get(callable_obj)
        except TypeError:
            cached = None
        if cached is not None:
            return cached

        signature = self.signature_of(callable_obj)
        resolved_annotations = self.resolved_annotations(callable_obj=callable_obj)
        parameters: list[InvocationParameter] = []
        for parameter in signature.parameters.values():
            if parameter.kind in _VARIADIC_KINDS:
                continue
            annotation = resolved_annotations.get(parameter.name, parameter.annotation)
            if annotation is inspect.Parameter.empty:
                msg = (
                    f"Parameter '{parameter.name}' of '{callable_name(callable_obj)}' "
                    "has no type annotation."
                )
                raise DIMapInvalidInvocationTargetError(msg)
            if isinstance(annotation, str):
                msg = (
                    f"Parameter '{parameter.name}' of '{callable_name(callable_obj)}' "
                    f"has an unresolvable annotation '{annotation}'."
                )
                raise DIMapInvalidInvocationTargetError(msg)
            parameters.append(
                InvocationParameter(
                    name=parameter.name,
                    key=TypeKey.of(annotation),
                    positional_only=parameter.kind is inspect.Parameter.POSITIONAL_ONLY,
                    has_default=parameter.default is not inspect.Parameter.empty,
                    default=parameter.default,
                ),
            )

        result = tuple(parameters)
        # Builtins and other non weak-referenceable callables are not cached.
        with suppress(TypeError):
            self._invocation_cache[callable_obj] = result
        return result

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> CallableInspection:
        """Build ``Injected[...]`` metadata and a public signature for a callable."""
        signature = self.signature_of(callable_obj)
        injected_parameters = tuple(
            injected_parameter
            for injected_parameter in self.injected_parameters(callable_obj)
            if injected_parameter.name in signature.parameters
        )
        hidden_parameter_names = {parameter.name for parameter in injected_parameters}
        public_signature = signature.replace(
            parameters=[
                parameter
                for parameter in signature.parameters.values()
                if parameter.name not in hidden_parameter_names
            ],
        )
        return CallableInspection(
            signature=signature,
            injected_parameters=injected_parameters,
            public_signature=public_signature,
        )

    def injected_parameters(
        self,
        callable_obj: Callable[..., Any],
    ) -> tuple[InjectedParameter, ...]:
        """Return the ``Injected[...]`` parameters of a callable from its annotations.

        Only annotations are read, so the result does not depend on a
        ``__signature__`` override that hides these parameters.
        """
        return tuple(
            InjectedParameter(name=name, key=TypeKey.of(annotation))
            for name, annotation in self.resolved_annotations(callable_obj=callable_obj).items()
            if name != "return" and is_injected_annotation(annotation)
        )

    def signature_of(self, callable_obj: Callable[..., Any]) -> inspect.Signature:
        """Return the call signature, rejecting values that cannot be invoked."""
        if not callable(callable_obj):
            msg = f"Expected a callable, got {type_name(type(callable_obj))}."
            raise DIMapInvalidInvocationTargetError(msg)
        try:
            return inspect.signature(callable_obj)
        except (TypeError, ValueError) as error:
            msg = f"Cannot inspect the signature of '{callable_name(callable_obj)}'."
            raise DIMapInvalidInvocationTargetError(msg) from error

    def resolved_annotations(self, *, callable_obj: Callable[..., Any]) -> dict[str, Any]:
        """Resolve callable annotations with extras, falling back to an empty mapping."""
        try:
            return get_type_hints(_annotated_target(callable_obj), include_extras=True)
        except (AttributeError, NameError, TypeError):
            return {}


def callable_name(callable_obj: Callable[..., Any]) -> str:
    return getattr(callable_obj, "__qualname__", repr(callable_obj))


def _annotated_target(callable_obj: Callable[..., Any]) -> Any:
    if inspect.isclass(callable_obj):
        return callable_obj.__init__
    if inspect.isroutine(callable_obj):
        return callable_obj
    return getattr(type(callable_obj), "__call__", callable_obj)


__all__ = [
    "CallableInspection",
    "CallableInspector",
    "InjectedParameter",
    "InvocationParameter",
    "callable_name",
]
