"""
Shared test fixtures and configuration for ani-track test suite.

This module provides:
- Sample HTML listing pages for every source
- Fake fetchers (no network access in tests)
- Stub source handlers and registries for aggregator tests
- Temporary JSON stores
"""

import os
import tempfile
from pathlib import Path

# Keep test logs out of the user's data directory
os.environ.setdefault(
    "ANI_TRACK__LOGGING__LOG_FILE", str(Path(tempfile.gettempdir()) / "ani-track-tests.log")
)

import pytest

from models.config import settings
from models.models import EpisodeUrl, TitleRecord
from scrapers.base import SourceHandler
from scrapers.loader import HandlerRegistry
from services.aggregator import Aggregator
from services.repository import TitleRepository
from utils.exceptions import FetchError


# ========== HTML Fixtures ==========

GOGOANIME_BASE = "https://gogo.test"
OTAKUSTREAM_BASE = "https://otaku.test"
MANGAKAKALOT_BASE = "https://manga.test"

GOGOANIME_CATEGORY = """
<html><body>
<div class="anime_video_body">
  <ul id="episode_page">
    <li><a href="#" class="active" ep_start='0' ep_end='3'>0-3</a></li>
  </ul>
</div>
</body></html>
"""

GOGOANIME_CATEGORY_PAGED = """
<html><body>
<ul id="episode_page">
  <li><a href="#" ep_start = "0" ep_end="100">0-100</a></li>
  <li><a href="#" ep_start="100" ep_end="112">101-112</a></li>
</ul>
</body></html>
"""

OTAKUSTREAM_ANIME = """
<html><body>
<div class="ep-list">
  <ul>
    <li><a href="/anime/made-in-abyss/episode-12/">Episode 12</a></li>
    <li><a href="/anime/made-in-abyss/episode-11/">Episode 11</a></li>
    <li><a href="/anime/made-in-abyss/episode-10/">Episode 10</a></li>
  </ul>
</div>
</body></html>
"""

MANGAKAKALOT_MANGA = """
<html><body>
<div class="chapter-list">
  <div class="row"><span><a href="https://manga.test/chapter/onepunch/chapter_3">Chapter 3</a></span></div>
  <div class="row"><span><a href="https://manga.test/chapter/onepunch/chapter_2.5">Chapter 2.5</a></span></div>
  <div class="row"><span><a href="https://manga.test/chapter/onepunch/extra">Extra</a></span></div>
  <div class="row"><span><a href="https://manga.test/chapter/onepunch/chapter_2">Chapter 2</a></span></div>
  <div class="row"><span><a href="https://manga.test/chapter/onepunch/chapter_1">Chapter 1</a></span></div>
</div>
</body></html>
"""


class FakeFetcher:
    """Async fetcher serving canned pages; unknown URLs fail like a 404."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[str] = []

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(f"{url} returned HTTP 404")
        return self.pages[url]


@pytest.fixture
def fake_fetch():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest.fixture
def failing_fetch():
    """Fetcher that fails for every URL."""
    return FakeFetcher({})


# ========== Stub Handlers ==========


class StubHandler(SourceHandler):
    """Handler answering from a {number: url} dict, or failing on demand."""

    def __init__(self, name: str, episodes: dict | None = None, fail: bool = False) -> None:
        super().__init__("https://stub.test")
        self.name = name
        self.episodes = episodes or {}
        self.fail = fail
        self.identifiers: list[str] = []

    def _check(self, identifier: str) -> None:
        self.identifiers.append(identifier)
        if self.fail:
            raise FetchError(f"{self.name} is down")

    async def _first_episode_number(self, identifier):
        self._check(identifier)
        return min(self.episodes) if self.episodes else None

    async def _last_episode_number(self, identifier):
        self._check(identifier)
        return max(self.episodes) if self.episodes else None

    async def _episode_url(self, identifier, number):
        self._check(identifier)
        return self.episodes.get(number)

    async def _all_episode_urls(self, identifier):
        self._check(identifier)
        return [
            EpisodeUrl(number=number, url=url)
            for number, url in self.episodes.items()
            if url is not None
        ]


@pytest.fixture
def stub_handler():
    """Factory for StubHandler instances."""
    return StubHandler


@pytest.fixture
def make_aggregator():
    """Build an Aggregator over a fixed set of handler instances."""

    def build(*handlers: SourceHandler) -> Aggregator:
        table = {handler.name: (lambda h=handler: h) for handler in handlers}
        return Aggregator(HandlerRegistry(table))

    return build


# ========== Sample Data Fixtures ==========


@pytest.fixture
def make_title():
    """Factory for TitleRecord with sensible defaults."""

    def build(source_map: dict | None = None, **kwargs) -> TitleRecord:
        data = {
            "id": "title-1",
            "title": "Violet Evergarden",
            "source_map": source_map if source_map is not None else {},
        }
        data.update(kwargs)
        return TitleRecord(**data)

    return build


# ========== Store Fixtures ==========


@pytest.fixture
def temp_store(tmp_path):
    """Empty JSON store in a temporary directory with the three real sources."""
    return TitleRepository(
        tmp_path / "db.json",
        default_sources=["gogoanime", "otakustream", "mangakakalot"],
    )


@pytest.fixture
def alpha_beta_store(tmp_path):
    """Empty JSON store knowing the stub sources alpha and beta."""
    return TitleRepository(tmp_path / "db.json", default_sources=["alpha", "beta"])


# ========== Monkeypatch Helpers ==========


@pytest.fixture
def monkeypatch_settings(monkeypatch):
    """Monkeypatch settings for tests, undone after the test."""

    def set_setting(path: str, value):
        """Set a setting value using dot notation (e.g., 'storage.db_file')."""
        parts = path.split(".")
        obj = settings
        for part in parts[:-1]:
            obj = getattr(obj, part)
        monkeypatch.setattr(obj, parts[-1], value)

    return set_setting


@pytest.fixture
def isolated_db(tmp_path, monkeypatch_settings):
    """Point the default store at a temporary file."""
    db_file = tmp_path / "cli-db.json"
    monkeypatch_settings("storage.db_file", db_file)
    return db_file
