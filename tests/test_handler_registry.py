"""
Tests for scrapers/loader.py

Coverage:
- The built-in table of handlers
- Lookup by name and unknown names
- Custom tables
"""

import pytest

from scrapers.loader import HANDLERS, HandlerRegistry, get_handler, registry
from scrapers.plugins.gogoanime import GogoanimeHandler
from scrapers.plugins.mangakakalot import MangaKakalotHandler
from scrapers.plugins.otakustream import OtakuStreamHandler
from utils.exceptions import SourceError, UnknownSourceError


class TestBuiltinHandlers:
    def test_all_sources_registered(self):
        assert registry.names() == ["gogoanime", "mangakakalot", "otakustream"]

    @pytest.mark.parametrize(
        "name,handler_class",
        [
            ("gogoanime", GogoanimeHandler),
            ("otakustream", OtakuStreamHandler),
            ("mangakakalot", MangaKakalotHandler),
        ],
    )
    def test_get_returns_handler(self, name, handler_class):
        handler = get_handler(name)
        assert isinstance(handler, handler_class)
        assert handler.name == name

    def test_handlers_use_configured_base_url(self):
        from models.config import settings

        assert get_handler("gogoanime").base_url == settings.sources.gogoanime_url

    def test_table_keys_match_handler_names(self):
        for name, factory in HANDLERS.items():
            assert factory.name == name


class TestUnknownSource:
    def test_get_unknown_raises(self):
        with pytest.raises(UnknownSourceError) as exc_info:
            registry.get("crunchyroll")

        assert exc_info.value.source == "crunchyroll"
        assert "unknown source crunchyroll" in str(exc_info.value)

    def test_unknown_is_a_source_error(self):
        with pytest.raises(SourceError):
            get_handler("")

    def test_knows(self):
        assert registry.knows("gogoanime")
        assert not registry.knows("crunchyroll")


class TestCustomRegistry:
    def test_custom_table(self, stub_handler):
        handler = stub_handler("alpha")
        custom = HandlerRegistry({"alpha": lambda: handler})

        assert custom.names() == ["alpha"]
        assert custom.get("alpha") is handler
        assert not custom.knows("gogoanime")

    def test_empty_table(self):
        empty = HandlerRegistry({})
        assert empty.names() == []
        with pytest.raises(UnknownSourceError):
            empty.get("gogoanime")
