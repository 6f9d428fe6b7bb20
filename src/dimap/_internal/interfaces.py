from __future__ import annotations

import functools
import inspect
import logging
from typing import Any

from typing_extensions import get_protocol_members, is_protocol

from dimap._internal.bindings import NOT_FOUND, BindingStore, Lookup
from dimap._internal.type_checks import interface_class
from dimap._internal.type_keys import TypeKey
from dimap.exceptions import DIMapAmbiguousImplementationError

logger = logging.getLogger(__name__)

_MISSING = object()


class InterfaceResolver:
    """Find the single bound value that satisfies an interface key.

    Protocols are matched structurally: every protocol member must exist on
    the value, and members declared as methods must be callable there.
    Abstract base classes are matched with ``isinstance`` so ``register`` and
    ``__subclasshook__`` are honoured.
    """

    def find(self, key: TypeKey, store: BindingStore) -> Lookup:
        """Scan a store for the value implementing ``key``.

        Args:
            key: Interface-shaped key to satisfy.
            store: Bindings to scan; parents are not consulted here.

        Returns:
            The matching value, or a not-found lookup when nothing matches or
            ``key`` is not interface-shaped.

        Raises:
            DIMapAmbiguousImplementationError: If more than one binding
                satisfies the interface.

        """
        interface = interface_class(key.annotation)
        if interface is None:
            return NOT_FOUND

        matches = [
            (bound_key, value) for bound_key, value in store.items() if satisfies(value, interface)
        ]
        if not matches:
            return NOT_FOUND
        if len(matches) > 1:
            candidates = tuple(bound_key for bound_key, _ in matches)
            logger.debug("Ambiguous implementation for %s: %s", key, candidates)
            raise DIMapAmbiguousImplementationError(key, candidates)

        bound_key, value = matches[0]
        logger.debug("Resolved %s through implementation bound as %s", key, bound_key)
        return Lookup(value=value, found=True)


def satisfies(value: Any, interface: type[Any]) -> bool:
    """Return whether ``value`` implements ``interface``.

    Protocol members are looked up statically, so properties and
    ``__getattr__`` hooks of the scanned value are never run. Attributes
    produced only by ``__getattr__`` therefore do not count as members.

    Args:
        value: Bound value being checked.
        interface: Protocol class or abstract base class.

    """
    if not is_protocol(interface):
        return isinstance(value, interface)

    for name, is_method in _protocol_members(interface):
        member = inspect.getattr_static(value, name, _MISSING)
        if member is _MISSING:
            return False
        if is_method and not _is_callable_member(member):
            return False
    return True


def _is_callable_member(member: Any) -> bool:
    # properties and other descriptors count as present without being evaluated
    return callable(member) or hasattr(type(member), "__get__")


@functools.lru_cache(maxsize=None)
def _protocol_members(protocol: type[Any]) -> tuple[tuple[str, bool], ...]:
    members = []
    for name in sorted(get_protocol_members(protocol)):
        declared = inspect.getattr_static(protocol, name, None)
        is_method = inspect.isfunction(declared) or isinstance(
            declared,
            (classmethod, staticmethod),
        )
        members.append((name, is_method))
    return tuple(members)


__all__ = ["InterfaceResolver", "satisfies"]
