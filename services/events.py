"""In-process event channel.

Mirrors the shape of a socket-style transport: a hub accepts connections,
each connection registers listeners with ``on`` and talks back to its client
with ``emit``; ``EventHub.emit`` broadcasts to every client. A network
transport plugs in by calling ``Connection.dispatch`` for inbound events and
passing a ``send`` callable for outbound ones.

Listeners may be plain functions or coroutine functions. Coroutines are
scheduled on the running loop and are not awaited by ``dispatch``.
"""

import asyncio
import functools
import inspect
import itertools
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from utils.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[..., Any]
Sender = Callable[..., None]

DISCONNECT = "disconnect"

# Strong references to scheduled listener tasks until they finish
_background_tasks: set[asyncio.Task] = set()


def spawn(result: Any) -> asyncio.Future | None:
    """Schedule a listener's return value if it is awaitable.

    Returns:
        The scheduled task, or None for plain return values
    """
    if not inspect.isawaitable(result):
        return None
    task = asyncio.ensure_future(result)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def _log_listener_failure(event: str, task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.opt(exception=exc).error("Listener for '{}' failed", event)


class Connection:
    """One client connection."""

    def __init__(self, hub: "EventHub", sid: str, send: Sender | None = None) -> None:
        self.hub = hub
        self.sid = sid
        self.closed = False
        self._send = send
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def emit(self, event: str, *args: Any) -> None:
        """Send an event to this connection's client."""
        if self.closed or self._send is None:
            return
        self._send(event, *args)

    def dispatch(self, event: str, *args: Any) -> int:
        """Deliver an inbound event to the registered listeners.

        Returns:
            Number of listeners invoked
        """
        listeners = list(self._listeners.get(event, ()))
        if not listeners:
            logger.debug("{}: no listener for '{}'", self.sid, event)
        for listener in listeners:
            try:
                task = spawn(listener(*args))
            except Exception:
                logger.exception("Listener for '{}' failed", event)
                continue
            if task is not None:
                task.add_done_callback(functools.partial(_log_listener_failure, event))
        return len(listeners)

    def close(self) -> None:
        self.hub.disconnect(self)


class EventHub:
    """Accepts connections and broadcasts to all of them."""

    def __init__(self) -> None:
        self.connections: dict[str, Connection] = {}
        self._connection_listeners: list[Callable[[Connection], None]] = []
        self._ids = itertools.count(1)

    def on_connection(self, callback: Callable[[Connection], None]) -> None:
        self._connection_listeners.append(callback)

    def connect(self, send: Sender | None = None) -> Connection:
        connection = Connection(self, f"conn-{next(self._ids)}", send)
        self.connections[connection.sid] = connection
        for callback in self._connection_listeners:
            callback(connection)
        logger.debug("{} connected", connection.sid)
        return connection

    def disconnect(self, connection: Connection) -> None:
        if self.connections.pop(connection.sid, None) is None:
            return
        connection.dispatch(DISCONNECT)
        connection.closed = True
        logger.debug("{} disconnected", connection.sid)

    def emit(self, event: str, *args: Any) -> None:
        """Broadcast an event to every open connection."""
        for connection in list(self.connections.values()):
            connection.emit(event, *args)
