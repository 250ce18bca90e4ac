import asyncio
import functools
import re

import requests
from selectolax.lexbor import LexborHTMLParser

from models.config import settings
from models.models import EpisodeNumber, normalize_number
from utils.exceptions import FetchError

_NUMBER = re.compile(r"^\d+(?:\.\d+)?$")


def _get(url: str) -> requests.Response:
    return requests.get(
        url,
        timeout=settings.http.timeout_seconds,
        headers={"User-Agent": settings.http.user_agent},
    )


async def fetch_page(url: str) -> str:
    """Fetch a page body without blocking the event loop.

    Raises:
        FetchError: On HTTP error statuses
        requests.RequestException: On network errors and timeouts
    """
    loop = asyncio.get_running_loop()
    response = await loop.run_in_executor(None, functools.partial(_get, url))
    if not response.ok:
        raise FetchError(f"{url} returned HTTP {response.status_code}")
    return response.text


def parse_html(body: str) -> LexborHTMLParser:
    return LexborHTMLParser(body)


def parse_number(text: str) -> EpisodeNumber:
    """Parse "12" or "12.5" into a normalized episode number.

    Raises:
        ValueError: If text is not a plain non-negative number
    """
    text = text.strip()
    if not _NUMBER.match(text):
        raise ValueError(f"Not an episode number: {text!r}")
    return normalize_number(float(text))


def format_number(number: EpisodeNumber) -> str:
    """Render an episode number the way source URLs spell it (12, 12.5)."""
    return str(normalize_number(number))
