"""Command handlers for ani-track CLI.

Each module handles a specific group of commands:
- titles.py: list, add, update, remove and resolve titles
- episodes.py: rescan links, mark episodes watched
- sources.py: source management
- client.py: in-process connection to the tracker service
"""

from commands.episodes import rescan, watch
from commands.sources import manage_sources
from commands.titles import add_title, list_titles, remove_title, resolve_title, update_title

__all__ = [
    "add_title",
    "list_titles",
    "manage_sources",
    "remove_title",
    "rescan",
    "resolve_title",
    "update_title",
    "watch",
]
