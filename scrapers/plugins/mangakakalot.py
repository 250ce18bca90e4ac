import re

from models.config import settings
from models.models import EpisodeNumber, EpisodeUrl, TitleIdentifier
from scrapers.base import Fetcher, SourceHandler
from scrapers.plugins.utils import format_number, parse_html, parse_number
from utils.logging import get_logger

logger = get_logger(__name__)

CHAPTER_SUFFIX = re.compile(r"chapter_([0-9]+(?:\.[0-9]+)?)/?$")


class MangaKakalotHandler(SourceHandler):
    """Chaptered source whose manga page lists every chapter, newest first.

    There is no separate range discovery: the bounds are the extremes of the
    listing and chapter numbers come from the ``chapter_<n>`` link suffix.
    """

    name = "mangakakalot"

    def __init__(self, base_url: str | None = None, fetch: Fetcher | None = None) -> None:
        super().__init__(base_url or settings.sources.mangakakalot_url, fetch)

    def listing_url(self, identifier: TitleIdentifier) -> str:
        return f"{self.base_url}/manga/{identifier}"

    def chapter_url(self, identifier: TitleIdentifier, number: EpisodeNumber) -> str:
        return f"{self.base_url}/chapter/{identifier}/chapter_{format_number(number)}/"

    async def _chapter_links(self, identifier: TitleIdentifier) -> list[str]:
        tree = parse_html(await self.fetch(self.listing_url(identifier)))
        hrefs = []
        for node in tree.css("div.chapter-list > div.row > span > a"):
            href = node.attributes.get("href")
            if href:
                hrefs.append(href)
        return hrefs

    @staticmethod
    def _chapter_number(href: str) -> EpisodeNumber:
        match = CHAPTER_SUFFIX.search(href)
        if match is None:
            raise ValueError(f"no chapter number in {href!r}")
        return parse_number(match.group(1))

    async def _first_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        hrefs = await self._chapter_links(identifier)
        return self._chapter_number(hrefs[-1])

    async def _last_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        hrefs = await self._chapter_links(identifier)
        return self._chapter_number(hrefs[0])

    async def _episode_url(self, identifier: TitleIdentifier, number: EpisodeNumber) -> str | None:
        for href in await self._chapter_links(identifier):
            match = CHAPTER_SUFFIX.search(href)
            if match and parse_number(match.group(1)) == number:
                return self.chapter_url(identifier, number)
        return None

    async def _all_episode_urls(self, identifier: TitleIdentifier) -> list[EpisodeUrl]:
        episodes: dict[EpisodeNumber, EpisodeUrl] = {}
        for href in await self._chapter_links(identifier):
            try:
                number = self._chapter_number(href)
            except ValueError:
                logger.debug("{}: skipping unparseable chapter link {!r}", self.name, href)
                continue
            episodes.setdefault(number, EpisodeUrl(number=number, url=href))
        return list(episodes.values())
