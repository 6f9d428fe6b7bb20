from dimap._internal.integrations.pytest_plugin import (
    CONTAINER_STASH_KEY,
    _dimap_state,  # noqa: F401  # autouse fixture registered with the plugin
    dimap_container,
    pytest_pycollect_makeitem,
    pytest_pyfunc_call,
)

__all__ = [
    "CONTAINER_STASH_KEY",
    "dimap_container",
    "pytest_pycollect_makeitem",
    "pytest_pyfunc_call",
]
