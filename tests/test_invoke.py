"""Tests for calling functions with parameters resolved from the container."""

import asyncio
from typing import Annotated, Any

import pytest

from dimap import (
    Chan,
    ChanDir,
    Container,
    DIMapAmbiguousImplementationError,
    DIMapDependencyNotFoundError,
    DIMapInvalidInvocationTargetError,
    Injected,
    RecvChan,
    SendChan,
    TypeKey,
    chan_of,
)
from tests.shared import Greeter, Greeter2, SpecialString, Stringer


class Service:
    def __init__(self, greeter: Greeter, label: str = "service") -> None:
        self.greeter = greeter
        self.label = label


class CallableHandler:
    def __call__(self, number: int) -> int:
        return number * 2


def test_invoke_supplies_every_parameter_by_type(container: Container) -> None:
    dep = "some dependency"
    dep2 = "another dep"
    dep3: Chan[SpecialString] = Chan()
    dep4: Chan[SpecialString] = Chan()
    container.map(dep).map_to(dep2, SpecialString)
    container.set(chan_of(ChanDir.RECV, SpecialString), dep3.recv_only())
    container.set(chan_of(ChanDir.SEND, SpecialString), dep4.send_only())
    received: dict[str, Any] = {}

    def handler(
        d1: str,
        d2: SpecialString,
        d3: RecvChan[SpecialString],
        d4: SendChan[SpecialString],
    ) -> None:
        received.update(d1=d1, d2=d2, d3=d3, d4=d4)

    result = container.invoke(handler)

    assert result is None
    assert received["d1"] == dep
    assert received["d2"] == dep2
    assert isinstance(received["d3"], RecvChan)
    assert isinstance(received["d4"], SendChan)


def test_invoke_returns_result_verbatim(container: Container) -> None:
    container.map("some dependency").map_to("another dep", SpecialString)

    def handler(d1: str, d2: SpecialString) -> str:
        assert d1 == "some dependency"
        assert d2 == "another dep"
        return "Hello world"

    assert container.invoke(handler) == "Hello world"


def test_invoke_returns_multiple_values_as_tuple(container: Container) -> None:
    container.map(3).map("x")

    def handler(count: int, letter: str) -> tuple[int, str]:
        return count, letter * count

    assert container.invoke(handler) == (3, "xxx")


def test_invoke_passes_values_in_parameter_order(container: Container) -> None:
    container.map(b"c").map(1).map("b")
    calls: list[tuple[Any, ...]] = []

    def handler(a: int, b: str, c: bytes) -> None:
        calls.append((a, b, c))

    container.invoke(handler)

    assert calls == [(1, "b", b"c")]


def test_invoke_fails_before_calling_when_parameter_is_missing(container: Container) -> None:
    container.map(1).map("b")
    calls: list[str] = []

    def handler(a: int, b: str, c: bytes) -> None:
        calls.append("called")

    with pytest.raises(DIMapDependencyNotFoundError) as exc_info:
        container.invoke(handler)

    assert calls == []
    assert exc_info.value.key == TypeKey.of(bytes)
    assert exc_info.value.target == "c"
    assert "bytes" in str(exc_info.value)


def test_invoke_keeps_default_for_missing_parameter(container: Container) -> None:
    container.map(2)

    def handler(count: int, suffix: str = "!") -> str:
        return suffix * count

    assert container.invoke(handler) == "!!"


def test_invoke_prefers_bound_value_over_default(container: Container) -> None:
    container.map(2).map("?")

    def handler(count: int, suffix: str = "!") -> str:
        return suffix * count

    assert container.invoke(handler) == "??"


def test_invoke_supports_positional_only_and_keyword_only(container: Container) -> None:
    container.map(5).map("k")

    def handler(number: int, /, *, key: str) -> str:
        return f"{key}{number}"

    assert container.invoke(handler) == "k5"


def test_invoke_keeps_positional_only_slots_after_default(container: Container) -> None:
    container.map(b"bound")

    def handler(text: str = "default", blob: bytes = b"default", /) -> tuple[str, bytes]:
        return text, blob

    assert container.invoke(handler) == ("default", b"bound")


def test_invoke_fills_every_positional_only_default(container: Container) -> None:
    container.map(3)

    def handler(count: int, text: str = "-", blob: bytes = b"+", /, *, flag: bool = True) -> str:
        return f"{text * count}{blob.decode()}{flag}"

    assert container.invoke(handler) == "---+True"


def test_invoke_leaves_variadic_parameters_empty(container: Container) -> None:
    container.map(5)

    def handler(number: int, *args: int, **kwargs: int) -> tuple[Any, ...]:
        return number, args, kwargs

    assert container.invoke(handler) == (5, (), {})


def test_invoke_resolves_interface_parameters(container: Container) -> None:
    greeter = Greeter("Jeremy")
    container.map(greeter)

    def handler(stringer: Stringer) -> str:
        return stringer.describe()

    assert container.invoke(handler) == "Hello, my name is Jeremy"


def test_invoke_raises_on_ambiguous_parameter(container: Container) -> None:
    container.map(Greeter("Jeremy")).map(Greeter2("Tom"))

    def handler(stringer: Stringer) -> str:
        return stringer.describe()

    with pytest.raises(DIMapAmbiguousImplementationError):
        container.invoke(handler)


def test_invoke_uses_parent_bindings(
    parent_container: Container,
    child_container: Container,
) -> None:
    parent_container.map("from parent")
    child_container.map(3)

    def handler(text: str, count: int) -> str:
        return text * count

    assert child_container.invoke(handler) == "from parentfrom parentfrom parent"


def test_invoke_treats_injected_annotation_as_plain_type(container: Container) -> None:
    container.map("value")

    def handler(text: Injected[str]) -> str:
        return text

    assert container.invoke(handler) == "value"


def test_invoke_keeps_annotated_metadata_in_key(container: Container) -> None:
    container.map("primary").set(Annotated[str, "replica"], "replica")

    def handler(primary: str, replica: Annotated[str, "replica"]) -> tuple[str, str]:
        return primary, replica

    assert container.invoke(handler) == ("primary", "replica")


def test_invoke_constructs_classes(container: Container) -> None:
    greeter = Greeter("Jeremy")
    container.map(greeter)

    service = container.invoke(Service)

    assert isinstance(service, Service)
    assert service.greeter is greeter
    assert service.label == "service"


def test_invoke_supports_bound_methods_and_callable_objects(container: Container) -> None:
    container.map(21).map(Greeter("Jeremy"))

    assert container.invoke(CallableHandler()) == 42
    assert container.invoke(Greeter("Tom").describe) == "Hello, my name is Tom"


def test_invoke_returns_coroutine_for_async_functions(container: Container) -> None:
    container.map(4)

    async def handler(count: int) -> int:
        return count + 1

    assert asyncio.run(container.invoke(handler)) == 5


def test_invoke_rejects_non_callables(container: Container) -> None:
    with pytest.raises(DIMapInvalidInvocationTargetError):
        container.invoke(42)  # type: ignore[arg-type]


def test_invoke_rejects_unannotated_parameters(container: Container) -> None:
    container.map(1)

    def handler(count):  # type: ignore[no-untyped-def]  # noqa: ANN001, ANN202
        return count

    with pytest.raises(DIMapInvalidInvocationTargetError) as exc_info:
        container.invoke(handler)

    assert "count" in str(exc_info.value)


def test_invoke_rejects_unresolvable_forward_references(container: Container) -> None:
    def handler(missing: "UndefinedType") -> None:  # type: ignore[name-defined]  # noqa: F821
        pass

    with pytest.raises(DIMapInvalidInvocationTargetError):
        container.invoke(handler)


def test_usage_errors_are_type_errors(container: Container) -> None:
    with pytest.raises(TypeError):
        container.invoke("not callable")  # type: ignore[arg-type]


def test_invoke_sees_bindings_added_after_first_call(container: Container) -> None:
    def handler(count: int, text: str = "-") -> str:
        return text * count

    container.map(2)
    first = container.invoke(handler)
    container.map("+")
    second = container.invoke(handler)

    assert (first, second) == ("--", "++")
