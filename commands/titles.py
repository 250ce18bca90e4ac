"""Title command handlers: list, add, update, remove, resolve."""

import asyncio

from commands.client import LocalClient
from services.tracker_service import TITLE_DELETE_REQUEST, TITLE_SAVE_REQUEST
from ui.components import console, episodes_table, loading, print_success, titles_table
from utils.exceptions import RequestError


def list_titles(args) -> None:
    """Show all titles, or the episodes of one title."""
    client = LocalClient()
    titles = client.titles()
    if not args.title:
        console.print(titles_table(titles))
        return

    for title in titles:
        if title["title"] == args.title:
            console.print(episodes_table(title["title"], title["episodes"]))
            return
    raise RequestError(f"No title exists with title: {args.title}")


def add_title(args) -> None:
    client = LocalClient()
    payload = {"title": args.title, "source_map": dict(args.source), "active": args.active}
    with loading(f"Looking up episodes of {args.title}..."):
        asyncio.run(client.request(TITLE_SAVE_REQUEST, payload))

    record = client.store.find_title(title=args.title)
    print_success(f"Added {args.title} ({len(record.episodes) if record else 0} episodes)")


def update_title(args) -> None:
    """Change a title's source identifiers or active flag, keeping the rest."""
    client = LocalClient()
    record = client.store.find_title(title=args.title)
    if record is None:
        raise RequestError(f"No title exists with title: {args.title}")

    source_map = {**record.source_map, **dict(args.source)}
    payload = {
        "id": record.id,
        "title": args.rename or record.title,
        "source_map": source_map,
        "active": record.active if args.active is None else args.active,
    }
    with loading(f"Refreshing links of {args.title}..."):
        asyncio.run(client.request(TITLE_SAVE_REQUEST, payload))
    print_success(f"Updated {payload['title']}")


def remove_title(args) -> None:
    client = LocalClient()
    asyncio.run(client.request(TITLE_DELETE_REQUEST, args.title))
    print_success(f"Removed {args.title}")


def resolve_title(args) -> None:
    """Print the links every source currently has, without saving them."""
    client = LocalClient()
    record = client.store.find_title(title=args.title)
    if record is None:
        raise RequestError(f"No title exists with title: {args.title}")

    with loading(f"Resolving {args.title}..."):
        resolved = asyncio.run(client.service.aggregator.resolve_all(record, args.only))
    console.print(episodes_table(record.title, [episode.model_dump() for episode in resolved]))
