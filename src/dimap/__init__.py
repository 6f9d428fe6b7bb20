from dimap._internal.bindings import Lookup
from dimap._internal.channels import Chan, ChanDir, RecvChan, SendChan, chan_of
from dimap._internal.container import Container
from dimap._internal.markers import Injected
from dimap._internal.type_keys import TypeKey, interface_of
from dimap.exceptions import (
    DIMapAmbiguousImplementationError,
    DIMapDependencyNotFoundError,
    DIMapError,
    DIMapInvalidApplyTargetError,
    DIMapInvalidInterfaceError,
    DIMapInvalidInvocationTargetError,
    DIMapResolutionError,
    DIMapUsageError,
)

__all__ = [
    "Chan",
    "ChanDir",
    "Container",
    "DIMapAmbiguousImplementationError",
    "DIMapDependencyNotFoundError",
    "DIMapError",
    "DIMapInvalidApplyTargetError",
    "DIMapInvalidInterfaceError",
    "DIMapInvalidInvocationTargetError",
    "DIMapResolutionError",
    "DIMapUsageError",
    "Injected",
    "Lookup",
    "RecvChan",
    "SendChan",
    "TypeKey",
    "chan_of",
    "interface_of",
]
