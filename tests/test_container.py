from typing import Annotated

import pytest

from dimap import (
    Container,
    DIMapDependencyNotFoundError,
    DIMapInvalidInterfaceError,
    Lookup,
    TypeKey,
)
from tests.shared import Greeter, SpecialString, Stringer


def test_new_container_is_empty(container: Container) -> None:
    assert len(container) == 0
    assert container.parent is None


def test_map_binds_value_under_its_runtime_type(container: Container) -> None:
    container.map("some dependency")

    assert container.get(str) == Lookup("some dependency", True)
    assert str in container


def test_map_returns_container_for_chaining(container: Container) -> None:
    result = container.map("a dep").map(42).map_to("another dep", SpecialString)

    assert result is container
    assert container.resolve(str) == "a dep"
    assert container.resolve(int) == 42
    assert container.resolve(SpecialString) == "another dep"


def test_get_reports_missing_binding_without_raising(container: Container) -> None:
    container.map("some dependency")

    value, found = container.get(int)

    assert found is False
    assert value is None


def test_rebinding_same_type_keeps_last_value(container: Container) -> None:
    container.map("first").map("second")

    assert container.resolve(str) == "second"
    assert len(container) == 1


def test_map_to_binds_under_interface_only(container: Container) -> None:
    greeter = Greeter("Jeremy")

    container.map_to(greeter, Stringer)

    assert container.get(Stringer) == Lookup(greeter, True)
    assert container.get_local(Greeter).found is False
    assert container.get(Greeter).found is False


def test_map_to_accepts_type_wrapped_interface(container: Container) -> None:
    container.map_to("another dep", type[SpecialString])

    assert container.get_local(SpecialString) == Lookup("another dep", True)


def test_map_to_rejects_concrete_target(container: Container) -> None:
    with pytest.raises(DIMapInvalidInterfaceError):
        container.map_to(Greeter("Jeremy"), Greeter)

    assert len(container) == 0


def test_map_to_does_not_check_value_against_interface(container: Container) -> None:
    container.map_to(42, Stringer)

    assert container.resolve(Stringer) == 42


def test_set_binds_under_explicit_key(container: Container) -> None:
    replica_key = Annotated[str, "replica"]

    container.set(replica_key, "replica-dsn").set(str, "primary-dsn")

    assert container.resolve(replica_key) == "replica-dsn"
    assert container.resolve(str) == "primary-dsn"


def test_set_accepts_type_keys(container: Container) -> None:
    container.set(TypeKey.of(bytes), b"payload")

    assert container.resolve(bytes) == b"payload"


def test_get_local_ignores_interface_scan_and_parent(
    parent_container: Container,
    child_container: Container,
) -> None:
    parent_container.map("from parent")
    child_container.map(Greeter("Jeremy"))

    assert child_container.get_local(str).found is False
    assert child_container.get_local(Stringer).found is False
    assert child_container.get(str).value == "from parent"
    assert child_container.get(Stringer).found is True


def test_resolve_raises_when_binding_is_missing(container: Container) -> None:
    with pytest.raises(DIMapDependencyNotFoundError) as exc_info:
        container.resolve(float)

    assert exc_info.value.key == TypeKey.of(float)
    assert exc_info.value.target is None


def test_values_can_be_shared_between_containers() -> None:
    shared = Greeter("shared")
    first = Container().map(shared)
    second = Container().map(shared)

    assert first.resolve(Greeter) is second.resolve(Greeter)


def test_repr_reports_binding_count(container: Container) -> None:
    container.map("value")

    assert repr(container) == "Container(bindings=1, has_parent=False)"
