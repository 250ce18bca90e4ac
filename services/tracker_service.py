"""Request handlers for tracked titles, sources and episodes.

Every mutating request carries an acknowledgment callback as its last
argument and is handled through the connection's ordered queue, so one
connection's read-modify-write sequences never interleave. Handlers always
acknowledge: ``ack(None, ...)`` on success, ``ack({"message": ...})`` when
the request is invalid or something unexpected fails.

After every successful mutation the full title list is broadcast to all
connections as ``title list data``.
"""

import functools
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from models.models import EpisodeRecord, TitleRecord
from services.aggregator import Aggregator, aggregator as default_aggregator
from services.dispatch_queue import OrderedConnection
from services.events import Connection, EventHub
from services.repository import TitleRepository
from utils.exceptions import RequestError
from utils.ids import new_id
from utils.logging import get_logger

logger = get_logger(__name__)

TITLE_LIST_REQUEST = "title list request"
TITLE_LIST_DATA = "title list data"
SOURCE_LIST_REQUEST = "source list request"
SOURCE_LIST_DATA = "source list data"
TITLE_SAVE_REQUEST = "title create/update request"
TITLE_DELETE_REQUEST = "title delete request"
SOURCE_CREATE_REQUEST = "source create request"
SOURCE_DELETE_REQUEST = "source delete request"
EPISODE_WATCH_REQUEST = "episode watch/unwatch request"
LINK_RESCAN_REQUEST = "link rescan request"


def _noop(*args: Any) -> None:
    pass


def acknowledged(func):
    """Always acknowledge, turning failures into error payloads."""

    @functools.wraps(func)
    async def wrapper(self, *args: Any) -> None:
        if args and callable(args[-1]):
            *args, ack = args
        else:
            ack = _noop
        try:
            await func(self, *args, ack=ack)
        except RequestError as e:
            logger.info("{} rejected: {}", func.__name__, e)
            ack(e.to_payload())
        except Exception:
            logger.exception("{} failed", func.__name__)
            ack({"message": f"Unknown error in {func.__name__.replace('_', ' ')}"})

    return wrapper


def _ack_if_requested(args: tuple) -> None:
    # a read request sent with an ack would otherwise hold the queue forever
    if args and callable(args[-1]):
        args[-1](None)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _flag(payload: dict, key: str) -> bool:
    """Optional boolean field; missing means False."""
    value = payload.get(key, False)
    if not isinstance(value, bool):
        raise RequestError(f"{key} must be true or false, got: {value!r}")
    return value


def _validated_title(data: dict) -> TitleRecord:
    """Build a title record, reporting invalid fields to the client."""
    try:
        return TitleRecord.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in e.errors())
        raise RequestError(f"Invalid title data: {fields}") from e


class TrackerService:
    """Handles client requests against the title store."""

    def __init__(
        self,
        hub: EventHub,
        store: TitleRepository,
        aggregator: Aggregator | None = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.hub = hub
        self.store = store
        self.aggregator = aggregator or default_aggregator
        self.id_factory = id_factory

    def listen(self) -> None:
        """Serve every connection the hub accepts from now on."""
        self.hub.on_connection(self._on_connection)

    def _on_connection(self, connection: Connection) -> None:
        self.attach(OrderedConnection(connection))

    def attach(self, connection: OrderedConnection) -> None:
        connection.on(TITLE_LIST_REQUEST, functools.partial(self.send_title_list, connection))
        connection.on(SOURCE_LIST_REQUEST, functools.partial(self.send_source_list, connection))
        connection.on(TITLE_SAVE_REQUEST, self.save_title)
        connection.on(TITLE_DELETE_REQUEST, self.delete_title)
        connection.on(SOURCE_CREATE_REQUEST, self.create_source)
        connection.on(SOURCE_DELETE_REQUEST, self.delete_source)
        connection.on(EPISODE_WATCH_REQUEST, self.set_watched)
        connection.on(LINK_RESCAN_REQUEST, self.rescan_links)

    def title_list(self) -> list[dict]:
        return [record.model_dump(mode="json") for record in self.store.read_titles()]

    def broadcast_titles(self) -> None:
        self.hub.emit(TITLE_LIST_DATA, self.title_list())

    def send_title_list(self, connection: OrderedConnection, *args: Any) -> None:
        connection.emit(TITLE_LIST_DATA, self.title_list())
        _ack_if_requested(args)

    def send_source_list(self, connection: OrderedConnection, *args: Any) -> None:
        connection.emit(SOURCE_LIST_DATA, self.store.read_source_names())
        _ack_if_requested(args)

    def _require_title(self, title: Any) -> TitleRecord:
        if not isinstance(title, str) or not title:
            raise RequestError("Must specify a title")
        record = self.store.find_title(title=title)
        if record is None:
            raise RequestError(f"No title exists with title: {title}")
        return record

    @acknowledged
    async def save_title(self, payload: Any, *, ack) -> None:
        """Create a title, or update it when the payload carries an id.

        Payload: {"title": str, "source_map": {source: identifier}, "active": bool, "id"?: str}
        """
        if not isinstance(payload, dict) or not payload.get("title"):
            raise RequestError("Title must have a title")
        title = payload["title"]
        requested_map = payload.get("source_map") or {}
        if not isinstance(requested_map, dict):
            raise RequestError("source_map must be an object")

        # one entry per known source, None where not configured
        source_map = {
            name: requested_map.get(name) or None for name in self.store.read_source_names()
        }
        active = _flag(payload, "active")

        title_id = payload.get("id")
        if title_id:
            existing = self.store.find_title(title_id=title_id)
            if existing is None:
                raise RequestError("No title exists with supplied id. Cannot update")
            clash = self.store.find_title(title=title)
            if clash is not None and clash.id != existing.id:
                raise RequestError("Title with supplied name already exists. Cannot duplicate")
            record = _validated_title(
                {
                    **existing.model_dump(),
                    "title": title,
                    "source_map": source_map,
                    "active": active,
                }
            )

            resolved = {episode.number: episode for episode in await self.aggregator.resolve_all(record)}
            for episode in record.episodes:
                match = resolved.get(episode.number)
                if match is not None:
                    episode.urls = list(match.urls)
        else:
            if self.store.find_title(title=title) is not None:
                raise RequestError("Title with supplied name already exists. Cannot duplicate")
            record = _validated_title(
                {"id": self.id_factory(), "title": title, "active": active, "source_map": source_map}
            )
            record.episodes = [
                EpisodeRecord.from_resolved(episode)
                for episode in await self.aggregator.resolve_all(record)
            ]

        self.store.write_title(record)
        logger.info("Saved '{}' with {} episodes", record.title, len(record.episodes))
        self.broadcast_titles()
        ack(None)

    @acknowledged
    async def delete_title(self, title: Any, *, ack) -> None:
        if not isinstance(title, str) or not title:
            raise RequestError("Must specify a title to delete")
        record = self._require_title(title)
        self.store.delete_title(record.id)
        logger.info("Deleted '{}'", title)
        self.broadcast_titles()
        ack(None)

    @acknowledged
    async def create_source(self, name: Any, *, ack) -> None:
        if not isinstance(name, str) or not name:
            raise RequestError("Must supply a name for the source")
        names = self.store.read_source_names()
        if name in names:
            raise RequestError("A source with supplied name already exists. Cannot have duplicates")
        if not self.aggregator.knows_source(name):
            logger.warning("Source '{}' has no handler; its links will not be resolved", name)

        self.store.write_source_names([*names, name])
        # only the source maps change, episodes are left alone
        for record in self.store.read_titles():
            record.source_map.setdefault(name, None)
            self.store.write_title(record)

        self.broadcast_titles()
        ack(None)

    @acknowledged
    async def delete_source(self, name: Any, *, ack) -> None:
        if not isinstance(name, str):
            raise RequestError("Must supply a name for the source")
        names = self.store.read_source_names()
        if name not in names:
            raise RequestError("No source exists with such name")

        self.store.write_source_names([existing for existing in names if existing != name])
        for record in self.store.read_titles():
            for episode in record.episodes:
                episode.urls = [link for link in episode.urls if link.source != name]
            record.source_map.pop(name, None)
            self.store.write_title(record)

        self.broadcast_titles()
        ack(None)

    @acknowledged
    async def set_watched(self, payload: Any, *, ack) -> None:
        """Payload: {"title": str, "number": number, "watched"?: bool}"""
        if not isinstance(payload, dict):
            raise RequestError("Must specify a title and an episode number")
        record = self._require_title(payload.get("title"))
        number = payload.get("number")
        episode = record.find_episode(number) if _is_number(number) else None
        if episode is None:
            raise RequestError(f"The supplied title does not have episode number {number}")

        episode.watched = _flag(payload, "watched")
        self.store.write_title(record)
        self.broadcast_titles()
        ack(None)

    @acknowledged
    async def rescan_links(self, payload: Any, *, ack) -> None:
        """Look the title's links up again.

        Payload: {"title": str, "episode_number"?: number, "source"?: str}

        With an episode number only that episode is rescanned and its links
        are passed back in the acknowledgment. Otherwise every episode is
        rescanned (optionally on one source only) and newly found episodes
        are added.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("title"), str):
            raise RequestError("Must specify a title to rescan")
        record = self.store.find_title(title=payload["title"])
        if record is None:
            raise RequestError(f"Supplied title does not exist: {payload['title']}")

        number = payload.get("episode_number")
        if _is_number(number):
            episode = record.find_episode(number)
            if episode is None:
                raise RequestError(
                    f"Requested episode {number} does not exist as record from title {record.title}"
                )
            urls = await self.aggregator.resolve_one(record, number)
            episode.urls = urls
            self.store.write_title(record)
            self.broadcast_titles()
            ack(None, [link.model_dump() for link in urls])
            return

        source = payload.get("source")
        for fetched in await self.aggregator.resolve_all(record, source):
            episode = record.find_episode(fetched.number)
            if episode is None:
                record.episodes.append(EpisodeRecord.from_resolved(fetched))
            elif source is not None:
                episode.urls = [link for link in episode.urls if link.source != source] + fetched.urls
            else:
                episode.urls = list(fetched.urls)
        record.episodes.sort(key=lambda episode: episode.number)

        self.store.write_title(record)
        logger.info("Rescanned '{}': {} episodes", record.title, len(record.episodes))
        self.broadcast_titles()
        ack(None)
