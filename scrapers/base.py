"""Source handler interface.

A source handler knows one external site: how to discover the range of
episodes it carries for a title and how to build each episode's URL. The
public operations never raise. Any fetch, HTTP or parse failure is logged and
turned into the operation's absent value (None, or an empty list).
"""

import asyncio
import functools
import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from models.models import EpisodeNumber, EpisodeUrl, TitleIdentifier
from scrapers.plugins.utils import fetch_page
from utils.logging import get_logger

logger = get_logger(__name__)

Fetcher = Callable[[str], Awaitable[str]]


def absent_on_failure(default=None):
    """Turn a handler coroutine method into one that returns an absent value.

    Args:
        default: Absent value, or a factory for it (e.g. ``list``)

    A missing identifier short-circuits without touching the network.
    """

    def absent():
        return default() if callable(default) else default

    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                bound = signature.bind(self, *args, **kwargs)
            except TypeError as e:
                logger.warning("{}.{} called with bad arguments: {}", self.name, func.__name__, e)
                return absent()
            identifier = bound.arguments.get("identifier")
            if not identifier:
                logger.debug("{}: no identifier configured", self.name)
                return absent()
            try:
                return await func(*bound.args, **bound.kwargs)
            except Exception as e:
                logger.warning(
                    "{}.{}({!r}) failed: {}: {}",
                    self.name,
                    func.__name__,
                    identifier,
                    type(e).__name__,
                    e,
                )
                return absent()

        return wrapper

    return decorator


class SourceHandler(ABC):
    """Abstract base class for source handlers.

    Subclasses implement the protected coroutines; the public ones wrap them
    with the absent-on-failure policy.
    """

    name: str = ""  # Source identifier (e.g., "gogoanime")

    def __init__(self, base_url: str, fetch: Fetcher | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.fetch = fetch or fetch_page

    @absent_on_failure(None)
    async def first_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        return await self._first_episode_number(identifier)

    @absent_on_failure(None)
    async def last_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        return await self._last_episode_number(identifier)

    @absent_on_failure(None)
    async def episode_url(self, identifier: TitleIdentifier, number: EpisodeNumber) -> str | None:
        return await self._episode_url(identifier, number)

    @absent_on_failure(list)
    async def all_episode_urls(self, identifier: TitleIdentifier) -> list[EpisodeUrl]:
        """Every episode URL this source has for the title, ascending by number."""
        episodes = await self._all_episode_urls(identifier)
        return sorted(episodes, key=lambda episode: episode.number)

    @abstractmethod
    async def _first_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        raise NotImplementedError

    @abstractmethod
    async def _last_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        raise NotImplementedError

    @abstractmethod
    async def _episode_url(self, identifier: TitleIdentifier, number: EpisodeNumber) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def _all_episode_urls(self, identifier: TitleIdentifier) -> list[EpisodeUrl]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base_url!r})"


class RangeSourceHandler(SourceHandler):
    """Handler for sources whose episode URLs follow from the episode range.

    The full listing is built by resolving the first and last episode numbers
    and synthesizing every URL in between.
    """

    async def _all_episode_urls(self, identifier: TitleIdentifier) -> list[EpisodeUrl]:
        first, last = await asyncio.gather(
            self.first_episode_number(identifier),
            self.last_episode_number(identifier),
        )
        if first is None or last is None or first > last:
            logger.debug("{}: no usable range for {!r} ({}..{})", self.name, identifier, first, last)
            return []

        numbers = list(range(int(first), int(last) + 1))
        urls = await asyncio.gather(*(self.episode_url(identifier, n) for n in numbers))
        # filtering breaks the pairing between numbers and urls, so zip first
        return [
            EpisodeUrl(number=number, url=url)
            for number, url in zip(numbers, urls, strict=True)
            if isinstance(url, str)
        ]
