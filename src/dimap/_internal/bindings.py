from __future__ import annotations

from collections.abc import Iterator
from typing import Any, NamedTuple

from dimap._internal.type_keys import TypeKey


class Lookup(NamedTuple):
    """Result of a lookup that treats a miss as an ordinary outcome.

    Unpacks like ``value, found = container.get(key)``.
    """

    value: Any
    found: bool


NOT_FOUND = Lookup(value=None, found=False)


class BindingStore:
    """Store bound values indexed by type key.

    Keys are unique: binding a value under an existing key replaces the
    previous value. Iteration follows insertion order, which is the order the
    interface scan reports candidates in.
    """

    def __init__(self) -> None:
        self._values_by_key: dict[TypeKey, Any] = {}

    def add(self, key: TypeKey, value: Any) -> None:
        """Bind a value under a key, replacing any previous binding.

        Args:
            key: Type key to bind.
            value: Value returned for the key.

        """
        self._values_by_key[key] = value

    def find(self, key: TypeKey) -> Lookup:
        """Look up the value bound under exactly this key.

        Args:
            key: Type key to look up.

        """
        try:
            return Lookup(value=self._values_by_key[key], found=True)
        except KeyError:
            return NOT_FOUND

    def items(self) -> Iterator[tuple[TypeKey, Any]]:
        """Iterate over ``(key, value)`` bindings in insertion order."""
        return iter(self._values_by_key.items())

    def __contains__(self, key: object) -> bool:
        return key in self._values_by_key

    def __len__(self) -> int:
        return len(self._values_by_key)


__all__ = ["NOT_FOUND", "BindingStore", "Lookup"]
