import re

from models.config import settings
from models.models import EpisodeNumber, TitleIdentifier
from scrapers.base import Fetcher, RangeSourceHandler
from scrapers.plugins.utils import format_number, parse_html

EP_START = re.compile(r"ep_start\s*=\s*(\"|')([0-9]+)(\"|')")


class GogoanimeHandler(RangeSourceHandler):
    """Episodic source whose category page embeds the episode range.

    The last episode comes from the ``ep_end`` attribute of the last page
    link, the first from the ``ep_start`` marker in the page script.
    """

    name = "gogoanime"

    def __init__(self, base_url: str | None = None, fetch: Fetcher | None = None) -> None:
        super().__init__(base_url or settings.sources.gogoanime_url, fetch)

    def listing_url(self, identifier: TitleIdentifier) -> str:
        return f"{self.base_url}/category/{identifier}"

    async def _last_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        tree = parse_html(await self.fetch(self.listing_url(identifier)))
        links = tree.css("ul#episode_page > li > a")
        if not links:
            raise ValueError("no episode page links")
        return int(links[-1].attributes.get("ep_end"))

    async def _first_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        body = await self.fetch(self.listing_url(identifier))
        match = EP_START.search(body)
        if match is None:
            raise ValueError("ep_start marker not found")
        # listing counts from 0, episode pages from 1
        return 1 + int(match.group(2))

    async def _episode_url(self, identifier: TitleIdentifier, number: EpisodeNumber) -> str | None:
        return f"{self.base_url}/{identifier}-episode-{format_number(number)}"
