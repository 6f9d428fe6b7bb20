from __future__ import annotations

import functools
import logging
from collections.abc import Generator
from typing import Any

import pytest

from dimap._internal.container import Container
from dimap._internal.injection import CallableInspector
from dimap.exceptions import DIMapDependencyNotFoundError

logger = logging.getLogger(__name__)

CONTAINER_STASH_KEY = pytest.StashKey[Container]()
_CALLABLE_INSPECTOR = CallableInspector()


@pytest.fixture()
def dimap_container() -> Container:
    """Return the container that ``Injected[...]`` test parameters are read from.

    The default container is empty. Override this fixture to bind values, or
    return a child of a longer-lived container to share bindings between tests.

    Examples:
        .. code-block:: python

            @pytest.fixture()
            def dimap_container(app_container: Container) -> Container:
                return app_container.child().map(FakeMailer())


            def test_signup(mailer: Injected[Mailer]) -> None: ...

    """
    return Container()


@pytest.fixture(autouse=True)
def _dimap_state(request: pytest.FixtureRequest, dimap_container: Container) -> None:
    request.node.stash[CONTAINER_STASH_KEY] = dimap_container


def pytest_pycollect_makeitem(collector: Any, name: str, obj: object) -> None:
    """Hide ``Injected[...]`` parameters so pytest does not look for such fixtures."""
    if not callable(obj) or not collector.istestfunction(obj, name):
        return
    inspection = _CALLABLE_INSPECTOR.inspect_callable(obj)
    if inspection.injected_parameters:
        obj.__signature__ = inspection.public_signature  # type: ignore[attr-defined]


@pytest.hookimpl(wrapper=True, tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Generator[None, Any, Any]:
    """Bind the resolved ``Injected[...]`` arguments to the test callable for one call.

    Values are looked up with ``Container.get`` on the test's ``dimap_container``
    right before the call, so missing or ambiguous bindings fail the test
    itself rather than its setup.

    Raises:
        DIMapDependencyNotFoundError: If no binding matches an injected parameter.
        DIMapAmbiguousImplementationError: If an injected interface has several
            implementations.

    """
    container = pyfuncitem.stash.get(CONTAINER_STASH_KEY, None)
    test_callable = pyfuncitem.obj
    injected_parameters = (
        _CALLABLE_INSPECTOR.injected_parameters(test_callable) if container is not None else ()
    )
    if container is None or not injected_parameters:
        return (yield)

    arguments: dict[str, Any] = {}
    for injected_parameter in injected_parameters:
        value, found = container.get(injected_parameter.key)
        if not found:
            raise DIMapDependencyNotFoundError(
                injected_parameter.key,
                f"{pyfuncitem.name}.{injected_parameter.name}",
            )
        arguments[injected_parameter.name] = value
    logger.debug("Injecting %s into %s", sorted(arguments), pyfuncitem.nodeid)

    pyfuncitem.obj = functools.partial(test_callable, **arguments)
    try:
        return (yield)
    finally:
        pyfuncitem.obj = test_callable


__all__ = [
    "CONTAINER_STASH_KEY",
    "dimap_container",
    "pytest_pycollect_makeitem",
    "pytest_pyfunc_call",
]
