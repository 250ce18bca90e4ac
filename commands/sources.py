"""Source management command handler.

This module handles:
- Listing stored sources next to the sources that have a handler
- Adding and removing sources from the store
"""

import asyncio

from commands.client import LocalClient
from scrapers.loader import registry
from services.tracker_service import SOURCE_CREATE_REQUEST, SOURCE_DELETE_REQUEST
from ui.components import console, print_success, sources_table


def manage_sources(args) -> None:
    client = LocalClient()

    if args.action == "add":
        asyncio.run(client.request(SOURCE_CREATE_REQUEST, args.name))
        print_success(f"Added source {args.name}")
    elif args.action == "remove":
        asyncio.run(client.request(SOURCE_DELETE_REQUEST, args.name))
        print_success(f"Removed source {args.name}")

    console.print(sources_table(client.sources(), registry.names()))
