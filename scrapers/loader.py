"""Handler registry: the closed table of supported sources.

Sources are not discovered at runtime. Adding one means writing a handler
under scrapers/plugins/ and listing it in HANDLERS.
"""

from collections.abc import Callable, Mapping

from scrapers.base import SourceHandler
from scrapers.plugins.gogoanime import GogoanimeHandler
from scrapers.plugins.mangakakalot import MangaKakalotHandler
from scrapers.plugins.otakustream import OtakuStreamHandler
from utils.exceptions import UnknownSourceError

HandlerFactory = Callable[[], SourceHandler]

HANDLERS: dict[str, HandlerFactory] = {
    GogoanimeHandler.name: GogoanimeHandler,
    OtakuStreamHandler.name: OtakuStreamHandler,
    MangaKakalotHandler.name: MangaKakalotHandler,
}


class HandlerRegistry:
    """Maps source names to handler instances."""

    def __init__(self, handlers: Mapping[str, HandlerFactory] | None = None) -> None:
        self._handlers = dict(HANDLERS if handlers is None else handlers)

    def get(self, name: str) -> SourceHandler:
        """Build the handler for a source.

        Raises:
            UnknownSourceError: If no handler exists for name
        """
        factory = self._handlers.get(name)
        if factory is None:
            raise UnknownSourceError(name)
        return factory()

    def knows(self, name: str) -> bool:
        return name in self._handlers

    def names(self) -> list[str]:
        return sorted(self._handlers)


registry = HandlerRegistry()


def get_handler(name: str) -> SourceHandler:
    """Shortcut for registry.get(name)."""
    return registry.get(name)
