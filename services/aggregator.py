"""Fan a title's link resolution out to every configured source and merge.

Both public operations are total: whatever goes wrong they return an empty
(or partial, already-filtered) list instead of raising.

Fan-out is a plain scatter/gather over a fixed set of handler calls. Nothing
is cancelled once started and there is no timeout here; a hung fetch holds up
the gather until the HTTP client's own timeout fires.
"""

import asyncio

from models.models import EpisodeNumber, ResolvedEpisode, SourceUrl, TitleRecord
from scrapers.base import SourceHandler
from scrapers.loader import HandlerRegistry, registry as default_registry
from utils.logging import get_logger

logger = get_logger(__name__)


class Aggregator:
    """Resolves episode links for a title across all of its sources."""

    def __init__(self, registry: HandlerRegistry | None = None) -> None:
        self.registry = registry or default_registry

    def knows_source(self, source: str) -> bool:
        return self.registry.knows(source)

    def _select(
        self, title: TitleRecord, source_name: str | None = None
    ) -> list[tuple[str, str, SourceHandler]]:
        """(source, identifier, handler) for every usable source of the title.

        Skips sources with no identifier and sources without a handler.
        """
        selected = []
        for source in title.configured_sources():
            if not self.knows_source(source):
                logger.debug("Skipping unknown source '{}' for '{}'", source, title.title)
                continue
            if source_name is not None and source != source_name:
                continue
            selected.append((source, title.source_map[source], self.registry.get(source)))
        return selected

    @staticmethod
    def _merge(sources, url_sets) -> dict[EpisodeNumber, ResolvedEpisode]:
        """Union per-source results by episode number, first reporter first."""
        merged: dict[EpisodeNumber, ResolvedEpisode] = {}
        for source, url_set in zip(sources, url_sets, strict=True):
            for episode in url_set:
                link = SourceUrl(source=source, url=episode.url)
                slot = merged.get(episode.number)
                if slot is None:
                    merged[episode.number] = ResolvedEpisode(number=episode.number, urls=[link])
                else:
                    slot.urls.append(link)
        return merged

    async def resolve_all(
        self, title: TitleRecord, source_name: str | None = None
    ) -> list[ResolvedEpisode]:
        """Collect every episode URL of a title, merged by episode number.

        Args:
            title: Title as stored
            source_name: Only query this source; None queries all

        Returns:
            One entry per episode number, ascending, each listing every
            {source, url} that reported it. Empty if nothing could be resolved.
        """
        try:
            selected = self._select(title, source_name)
            url_sets = await asyncio.gather(
                *(handler.all_episode_urls(identifier) for _, identifier, handler in selected)
            )
            merged = self._merge([source for source, _, _ in selected], url_sets)
        except Exception:
            logger.exception("Resolving episodes failed for {!r}", getattr(title, "title", title))
            return []

        logger.debug(
            "Resolved {} episodes for '{}' from {} source(s)",
            len(merged),
            title.title,
            len(selected),
        )
        return sorted(merged.values(), key=lambda resolved: resolved.number)

    async def resolve_one(self, title: TitleRecord, number: EpisodeNumber) -> list[SourceUrl]:
        """Look up one episode on every source of the title.

        Returns:
            {source, url} for each source that has the episode; sources that
            don't (or failed) are left out.
        """
        try:
            selected = self._select(title)
            urls = await asyncio.gather(
                *(handler.episode_url(identifier, number) for _, identifier, handler in selected)
            )
        except Exception:
            logger.exception(
                "Resolving episode {} failed for {!r}", number, getattr(title, "title", title)
            )
            return []

        return [
            SourceUrl(source=source, url=url)
            for (source, _, _), url in zip(selected, urls, strict=True)
            if isinstance(url, str) and url
        ]


aggregator = Aggregator()
