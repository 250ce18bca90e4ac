"""Source handlers for external anime/manga sites.

- base: SourceHandler interface and the absent-on-failure policy
- loader: HandlerRegistry, the fixed name -> handler table
- plugins: Actual handler implementations
"""

from scrapers import loader
from scrapers.base import SourceHandler
from scrapers.loader import HandlerRegistry, get_handler, registry

__all__ = ["loader", "SourceHandler", "HandlerRegistry", "get_handler", "registry"]
