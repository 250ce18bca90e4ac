import re

from models.config import settings
from models.models import EpisodeNumber, TitleIdentifier
from scrapers.base import Fetcher, RangeSourceHandler
from scrapers.plugins.utils import format_number, parse_html

EPISODE_LABEL = re.compile(r"Episode\s+([0-9]+)")


class OtakuStreamHandler(RangeSourceHandler):
    """Episodic source with a newest-first episode list.

    The first list item is the latest episode and the last item the earliest;
    numbers are read from the "Episode N" label text.
    """

    name = "otakustream"

    def __init__(self, base_url: str | None = None, fetch: Fetcher | None = None) -> None:
        super().__init__(base_url or settings.sources.otakustream_url, fetch)

    def listing_url(self, identifier: TitleIdentifier) -> str:
        return f"{self.base_url}/anime/{identifier}"

    async def _episode_labels(self, identifier: TitleIdentifier) -> list[str]:
        tree = parse_html(await self.fetch(self.listing_url(identifier)))
        labels = [node.text() for node in tree.css("div.ep-list > ul > li > a")]
        if not labels:
            raise ValueError("empty episode list")
        return labels

    @staticmethod
    def _label_number(label: str) -> int:
        match = EPISODE_LABEL.search(label)
        if match is None:
            raise ValueError(f"no episode number in {label!r}")
        return int(match.group(1))

    async def _last_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        labels = await self._episode_labels(identifier)
        return self._label_number(labels[0])

    async def _first_episode_number(self, identifier: TitleIdentifier) -> EpisodeNumber | None:
        labels = await self._episode_labels(identifier)
        return self._label_number(labels[-1])

    async def _episode_url(self, identifier: TitleIdentifier, number: EpisodeNumber) -> str | None:
        return f"{self.base_url}/anime/{identifier}/episode-{format_number(number)}/"
