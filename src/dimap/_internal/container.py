from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, cast

from typing_extensions import Self

from dimap._internal.bindings import NOT_FOUND, BindingStore, Lookup
from dimap._internal.fields import StructFieldsInspector
from dimap._internal.injection import CallableInspector, callable_name
from dimap._internal.interfaces import InterfaceResolver
from dimap._internal.type_checks import type_name
from dimap._internal.type_keys import TypeKey, interface_of
from dimap.exceptions import (
    DIMapAmbiguousImplementationError,
    DIMapDependencyNotFoundError,
)

T = TypeVar("T")
InjectableF = TypeVar("InjectableF", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


class Container:
    """Map types to values and supply them to callables and objects.

    Bindings are keyed by type. ``map`` binds a value under its own runtime
    type, ``map_to`` under an interface it implements and ``set`` under any
    explicit key. Lookups try, in order, the exact key, a scan of local
    bindings for the single implementation of an interface key, and then the
    parent container.

    The container has no internal locking. Finish registration before sharing
    a container between threads, or serialize writers externally.
    """

    def __init__(self, *, parent: Container | None = None) -> None:
        """Initialize an empty container.

        Args:
            parent: Optional fallback container consulted on local misses.

        Examples:
            .. code-block:: python

                root = Container()
                root.map(Settings(debug=True))

                request_container = Container(parent=root)

        """
        self._bindings = BindingStore()
        self._parent = parent

        self._interface_resolver = InterfaceResolver()
        self._callable_inspector = CallableInspector()
        self._struct_fields_inspector = StructFieldsInspector()

    # region Registration Methods
    def map(self, value: Any) -> Self:
        """Bind a value under its own runtime type.

        Re-binding a value of the same type replaces the previous one.

        Args:
            value: Value to bind.

        Returns:
            The container, so calls can be chained.

        Examples:
            .. code-block:: python

                container.map(Settings(debug=True)).map(Clock())
                settings = container.resolve(Settings)

        """
        return self.set(TypeKey.of_value(value), value)

    def map_to(self, value: Any, interface: Any) -> Self:
        """Bind a value under an interface instead of its runtime type.

        The value is not checked against the interface; the exact binding is
        returned for the interface key as-is.

        Args:
            value: Implementation to bind.
            interface: Protocol or abstract class, optionally wrapped in one or
                two ``type[...]`` layers.

        Returns:
            The container, so calls can be chained.

        Raises:
            DIMapInvalidInterfaceError: If ``interface`` is not interface-shaped.

        Examples:
            .. code-block:: python

                container.map_to(SmtpMailer(), Mailer)
                mailer = container.resolve(Mailer)

        """
        return self.set(interface_of(interface), value)

    def set(self, key: Any, value: Any) -> Self:
        """Bind a value under an explicit key.

        Use this for keys that cannot be derived from the value, for example
        direction-restricted channel types.

        Args:
            key: ``TypeKey`` or annotation to bind.
            value: Value to bind.

        Returns:
            The container, so calls can be chained.

        Examples:
            .. code-block:: python

                events: Chan[str] = Chan()
                container.set(chan_of(ChanDir.SEND, str), events.send_only())

        """
        type_key = TypeKey.of(key)
        if type_key in self._bindings:
            logger.debug("Replacing binding for %s", type_key)
        else:
            logger.debug("Binding %s", type_key)
        self._bindings.add(type_key, value)
        return self

    def set_parent(self, parent: Container | None) -> None:
        """Attach the fallback container consulted on local misses.

        A container has at most one parent; attaching another one replaces it
        and ``None`` detaches it. Parents must form a tree: cycles are not
        detected.

        Args:
            parent: Fallback container, or ``None``.

        """
        logger.debug("Attaching parent container %r", parent)
        self._parent = parent

    @property
    def parent(self) -> Container | None:
        return self._parent

    def child(self) -> Container:
        """Return a new empty container whose parent is this one."""
        return type(self)(parent=self)

    # endregion Registration Methods

    # region Lookup
    def get_local(self, key: Any) -> Lookup:
        """Look up the value bound under exactly ``key`` in this container only.

        No interface scan and no parent lookup happen here.

        Args:
            key: ``TypeKey`` or annotation to look up.

        """
        return self._bindings.find(TypeKey.of(key))

    def get(self, key: Any) -> Lookup:
        """Look up a value through the whole resolution chain.

        Args:
            key: ``TypeKey`` or annotation to look up.

        Returns:
            ``Lookup(value, True)`` on a hit and ``Lookup(None, False)`` when no
            container in the chain has a match.

        Raises:
            DIMapAmbiguousImplementationError: If a container reported several
                implementations of an interface key and no later container
                in the chain produced a unique match.

        Examples:
            .. code-block:: python

                value, found = container.get(Settings)

        """
        type_key = TypeKey.of(key)
        ambiguity: DIMapAmbiguousImplementationError | None = None
        container: Container | None = self
        while container is not None:
            try:
                lookup = container._find_in_scope(type_key)
            except DIMapAmbiguousImplementationError as error:
                ambiguity = error
            else:
                if lookup.found:
                    return lookup
            container = container._parent

        if ambiguity is not None:
            raise ambiguity
        logger.debug("No binding found for %s", type_key)
        return NOT_FOUND

    def resolve(self, key: Any) -> Any:
        """Return the value for ``key`` through the whole resolution chain.

        Args:
            key: ``TypeKey`` or annotation to resolve.

        Raises:
            DIMapDependencyNotFoundError: If no container in the chain has a match.
            DIMapAmbiguousImplementationError: If an interface key has several
                implementations and no unique match exists further up.

        """
        value, found = self.get(key)
        if not found:
            raise DIMapDependencyNotFoundError(TypeKey.of(key))
        return value

    def _find_in_scope(self, key: TypeKey) -> Lookup:
        lookup = self._bindings.find(key)
        if lookup.found:
            return lookup
        return self._interface_resolver.find(key, self._bindings)

    def __contains__(self, key: object) -> bool:
        return TypeKey.of(key) in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    # endregion Lookup

    # region Injection
    def invoke(self, func: Callable[..., T]) -> T:
        """Call ``func`` with every parameter resolved from the container.

        Parameters are resolved by their type annotations, in declaration
        order, before the call. A parameter with no match keeps its default
        value when it has one. ``*args`` and ``**kwargs`` are left empty.

        Args:
            func: Function, method, class or callable instance.

        Returns:
            Whatever ``func`` returns, unchanged. Coroutine functions return
            their coroutine.

        Raises:
            DIMapInvalidInvocationTargetError: If ``func`` is not callable or a
                parameter is not annotated.
            DIMapDependencyNotFoundError: If a parameter without default has no
                match; ``func`` is not called.
            DIMapAmbiguousImplementationError: If a parameter's interface has
                several implementations.

        Examples:
            .. code-block:: python

                def send_welcome(mailer: Mailer, settings: Settings) -> str:
                    return mailer.send(settings.admin_email, "welcome")


                message_id = container.invoke(send_welcome)

        """
        parameters = self._callable_inspector.invocation_parameters(func)
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in parameters:
            value, found = self.get(parameter.key)
            if not found:
                if not parameter.has_default:
                    raise DIMapDependencyNotFoundError(parameter.key, parameter.name)
                if not parameter.positional_only:
                    continue
                # keeps later positional-only values in their own slots
                value = parameter.default
            if parameter.positional_only:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        logger.debug("Invoking %s with %d resolved arguments", callable_name(func), len(parameters))
        return func(*args, **kwargs)

    def inject(self, func: InjectableF) -> InjectableF:
        """Decorate a callable to resolve its ``Injected`` parameters on each call.

        The wrapper hides injected parameters from the public signature.
        Callers may still pass any injected argument explicitly to override it.
        Resolution happens at call time, so bindings added after decoration
        are visible.

        Args:
            func: Callable to wrap.

        Returns:
            Wrapped callable.

        Raises:
            DIMapInvalidInvocationTargetError: If ``func`` is not callable.

        Examples:
            .. code-block:: python

                @container.inject
                def handle(mailer: Injected[Mailer], address: str) -> str:
                    return mailer.send(address, "hello")


                handle("user@example.com")

        """
        inspection = self._callable_inspector.inspect_callable(func)
        signature = inspection.signature
        public_signature = inspection.public_signature
        injected_parameters = inspection.injected_parameters
        injected_names = {injected_parameter.name for injected_parameter in injected_parameters}

        def _bind_arguments(
            args: tuple[Any, ...],
            kwargs: dict[str, Any],
        ) -> inspect.BoundArguments:
            # Positional arguments only ever fill public parameters.
            public_kwargs = {
                name: value for name, value in kwargs.items() if name not in injected_names
            }
            arguments = dict(public_signature.bind(*args, **public_kwargs).arguments)
            for injected_parameter in injected_parameters:
                if injected_parameter.name in kwargs:
                    arguments[injected_parameter.name] = kwargs[injected_parameter.name]
                    continue
                value, found = self.get(injected_parameter.key)
                if not found:
                    raise DIMapDependencyNotFoundError(
                        injected_parameter.key,
                        injected_parameter.name,
                    )
                arguments[injected_parameter.name] = value
            return inspect.BoundArguments(signature, arguments)  # type: ignore[arg-type]

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def _async_injected(*args: Any, **kwargs: Any) -> Any:
                bound_arguments = _bind_arguments(args, kwargs)
                async_callable = cast("Callable[..., Awaitable[Any]]", func)
                return await async_callable(*bound_arguments.args, **bound_arguments.kwargs)

            wrapped_callable: Callable[..., Any] = _async_injected
        else:

            @functools.wraps(func)
            def _sync_injected(*args: Any, **kwargs: Any) -> Any:
                bound_arguments = _bind_arguments(args, kwargs)
                return func(*bound_arguments.args, **bound_arguments.kwargs)

            wrapped_callable = _sync_injected

        wrapped_callable.__signature__ = public_signature  # type: ignore[attr-defined]
        return cast("InjectableF", wrapped_callable)

    def apply(self, target: object) -> None:
        """Populate the ``Injected`` fields of ``target`` in place.

        Fields are visited in declaration order. Unmarked fields are left
        untouched; private fields (leading underscore) and fields that cannot
        be assigned (frozen models, read-only properties) are skipped. The
        first field without a match aborts the call; fields assigned before
        it keep their new values.

        Args:
            target: Instance of a dataclass, attrs class, Pydantic model or
                plain annotated class.

        Raises:
            DIMapInvalidApplyTargetError: If ``target`` is a class or a builtin
                value.
            DIMapDependencyNotFoundError: If an injectable field has no match.
            DIMapAmbiguousImplementationError: If a field's interface has
                several implementations.

        Examples:
            .. code-block:: python

                @dataclass
                class Handler:
                    mailer: Injected[Mailer] = None
                    retries: int = 3


                handler = Handler()
                container.apply(handler)

        """
        target_name = type_name(type(target))
        for descriptor in self._struct_fields_inspector.fields_of(target):
            if not descriptor.injectable:
                continue
            if not descriptor.assignable:
                logger.debug("Skipping field '%s.%s'", target_name, descriptor.name)
                continue

            value, found = self.get(descriptor.key)
            if not found:
                raise DIMapDependencyNotFoundError(
                    descriptor.key,
                    f"{target_name}.{descriptor.name}",
                )
            setattr(target, descriptor.name, value)

    # endregion Injection

    def __repr__(self) -> str:
        has_parent = self._parent is not None
        return f"{type(self).__name__}(bindings={len(self._bindings)}, has_parent={has_parent})"


__all__ = ["Container"]
