"""In-process client for the tracker service.

The CLI talks to the service the same way a remote client would: it opens a
connection on an EventHub and sends requests with acknowledgments, so every
command goes through the ordered dispatch queue.
"""

import asyncio
from typing import Any

from services.aggregator import Aggregator
from services.events import EventHub
from services.repository import TitleRepository
from services.tracker_service import (
    SOURCE_LIST_DATA,
    SOURCE_LIST_REQUEST,
    TITLE_LIST_DATA,
    TITLE_LIST_REQUEST,
    TrackerService,
)
from utils.exceptions import RequestError


class LocalClient:
    """Connection to a TrackerService running in the same process."""

    def __init__(
        self, store: TitleRepository | None = None, aggregator: Aggregator | None = None
    ) -> None:
        self.store = store or TitleRepository()
        self.hub = EventHub()
        self.service = TrackerService(self.hub, self.store, aggregator)
        self.service.listen()
        self.received: list[tuple[str, tuple]] = []
        self.connection = self.hub.connect(send=self._receive)

    def _receive(self, event: str, *args: Any) -> None:
        self.received.append((event, args))

    def last(self, event: str) -> Any:
        """Payload of the most recent event of this name, or None."""
        for name, args in reversed(self.received):
            if name == event:
                return args[0] if args else None
        return None

    async def request(self, event: str, *args: Any) -> tuple:
        """Send a request and wait for its acknowledgment.

        Returns:
            The acknowledgment arguments after the error slot

        Raises:
            RequestError: If the service acknowledged with an error
        """
        future = asyncio.get_running_loop().create_future()

        def ack(*ack_args: Any) -> None:
            if not future.done():
                future.set_result(ack_args)

        self.connection.dispatch(event, *args, ack)
        result = await future
        error = result[0] if result else None
        if error:
            raise RequestError(error.get("message", "Unknown error"))
        return tuple(result[1:])

    def titles(self) -> list[dict]:
        self.connection.dispatch(TITLE_LIST_REQUEST)
        return self.last(TITLE_LIST_DATA) or []

    def sources(self) -> list[str]:
        self.connection.dispatch(SOURCE_LIST_REQUEST)
        return self.last(SOURCE_LIST_DATA) or []

    def close(self) -> None:
        self.connection.close()
