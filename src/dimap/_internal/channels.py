from __future__ import annotations

import queue
from enum import Enum
from typing import Any, Generic, TypeVar

from dimap._internal.type_keys import TypeKey

T = TypeVar("T")


class ChanDir(str, Enum):
    """Direction qualifier of a channel type."""

    RECV = "recv"
    """Receive-only projection, ``RecvChan[T]``."""

    SEND = "send"
    """Send-only projection, ``SendChan[T]``."""

    BOTH = "both"
    """Bidirectional channel, ``Chan[T]``."""


class Chan(Generic[T]):
    """In-process FIFO channel usable from both ends.

    ``send_only`` and ``recv_only`` return direction-restricted views. The
    three channel types are distinct binding keys: a ``Chan[str]`` binding is
    never returned for a ``SendChan[str]`` request, and vice versa.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue[T] = queue.Queue(maxsize)

    def send(self, item: T, *, timeout: float | None = None) -> None:
        self._queue.put(item, timeout=timeout)

    def recv(self, *, timeout: float | None = None) -> T:
        return self._queue.get(timeout=timeout)

    def send_only(self) -> SendChan[T]:
        return SendChan(self)

    def recv_only(self) -> RecvChan[T]:
        return RecvChan(self)

    def __len__(self) -> int:
        return self._queue.qsize()


class SendChan(Generic[T]):
    """Send-only view of a ``Chan``."""

    __slots__ = ("_chan",)

    def __init__(self, chan: Chan[T]) -> None:
        self._chan = chan

    def send(self, item: T, *, timeout: float | None = None) -> None:
        self._chan.send(item, timeout=timeout)


class RecvChan(Generic[T]):
    """Receive-only view of a ``Chan``."""

    __slots__ = ("_chan",)

    def __init__(self, chan: Chan[T]) -> None:
        self._chan = chan

    def recv(self, *, timeout: float | None = None) -> T:
        return self._chan.recv(timeout=timeout)


_CHANNEL_TYPES: dict[ChanDir, Any] = {
    ChanDir.RECV: RecvChan,
    ChanDir.SEND: SendChan,
    ChanDir.BOTH: Chan,
}


def chan_of(direction: ChanDir, element: Any) -> TypeKey:
    """Return the binding key of a channel type with the given direction and element.

    Args:
        direction: Channel direction qualifier.
        element: Element annotation carried by the channel.

    Examples:
        .. code-block:: python

            events: Chan[str] = Chan()
            container.set(chan_of(ChanDir.SEND, str), events.send_only())

    """
    return TypeKey.of(_CHANNEL_TYPES[ChanDir(direction)][element])


__all__ = ["Chan", "ChanDir", "RecvChan", "SendChan", "chan_of"]
