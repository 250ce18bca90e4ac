"""Ordered dispatch of acknowledgment-bearing events, per connection.

The channel hands events to listeners as soon as they arrive, so a second
request can start while the first one is still awaiting I/O. Listeners that
read, modify and write the store must not interleave, so every event whose
last argument is an acknowledgment callback goes through a FIFO: a listener
only starts once the previous one has called its acknowledgment.

Events without an acknowledgment skip the queue and run immediately.

The queue must always advance. If a queued listener raises before
acknowledging, the queue acknowledges on its behalf with an error payload;
otherwise the connection would stall for good.
"""

import asyncio
import functools
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from services.events import DISCONNECT, Connection, Listener, spawn
from utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class QueueEntry:
    """A pending listener call; the last of ``args`` is the wrapped acknowledgment."""

    event: str
    listener: Listener
    args: list[Any] = field(default_factory=list)
    acked: bool = False


class OrderedDispatchQueue:
    """FIFO of listener calls; the head is the only one running."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.closed = False
        self._entries: deque[QueueEntry] = deque()

    @property
    def pending(self) -> int:
        """Entries not yet acknowledged, including the running one."""
        return len(self._entries)

    def submit(
        self, event: str, listener: Listener, args: tuple | list, ack: Callable[..., Any]
    ) -> QueueEntry:
        """Queue a listener call; starts it right away if nothing is running."""
        entry = QueueEntry(event, listener)
        entry.args = [*args, self._wrap_ack(entry, ack)]
        if self.closed:
            logger.debug("{}: dropping '{}' on closed queue", self.name, event)
            return entry
        self._entries.append(entry)
        if len(self._entries) == 1:
            self._start(entry)
        else:
            logger.debug("{}: '{}' waiting behind {} entries", self.name, event, len(self._entries) - 1)
        return entry

    def close(self) -> None:
        """Drop waiting entries; the running one may still acknowledge."""
        self.closed = True
        self._entries.clear()

    def _wrap_ack(self, entry: QueueEntry, ack: Callable[..., Any]) -> Callable[..., None]:
        def ack_wrapper(*ack_args: Any) -> None:
            if entry.acked:
                logger.warning("{}: '{}' acknowledged twice, ignoring", self.name, entry.event)
                return
            entry.acked = True
            try:
                ack(*ack_args)
            finally:
                self._advance(entry)

        return ack_wrapper

    def _advance(self, entry: QueueEntry) -> None:
        if not self._entries or self._entries[0] is not entry:
            return
        self._entries.popleft()
        if self._entries:
            self._start(self._entries[0])

    def _start(self, entry: QueueEntry) -> None:
        try:
            task = spawn(entry.listener(*entry.args))
        except Exception as e:
            logger.exception("{}: listener for '{}' failed", self.name, entry.event)
            self._fail(entry, e)
            return
        if task is not None:
            task.add_done_callback(functools.partial(self._on_done, entry))

    def _on_done(self, entry: QueueEntry, task: asyncio.Future) -> None:
        if task.cancelled():
            self._fail(entry, asyncio.CancelledError())
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("{}: listener for '{}' failed", self.name, entry.event)
            self._fail(entry, exc)

    def _fail(self, entry: QueueEntry, exc: BaseException) -> None:
        if entry.acked:
            return
        entry.args[-1]({"message": f"Unknown error in {entry.event}"})


class OrderedConnection:
    """A connection whose acknowledged events are handled one at a time.

    Created when the connection opens; its queue is discarded on disconnect.
    """

    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        self.queue = OrderedDispatchQueue(connection.sid)
        connection.on(DISCONNECT, self.queue.close)

    @property
    def sid(self) -> str:
        return self.connection.sid

    def on(self, event: str, listener: Listener) -> None:
        def listener_wrapper(*args: Any) -> Any:
            if not args or not callable(args[-1]):
                return listener(*args)
            self.queue.submit(event, listener, args[:-1], args[-1])
            return None

        self.connection.on(event, listener_wrapper)

    def emit(self, event: str, *args: Any) -> None:
        self.connection.emit(event, *args)
