"""Episode command handlers: link rescans and watched flags."""

import asyncio

from commands.client import LocalClient
from services.tracker_service import EPISODE_WATCH_REQUEST, LINK_RESCAN_REQUEST
from ui.components import console, loading, print_success


def rescan(args) -> None:
    """Rescan one episode (-e) or the whole title, optionally on one source."""
    client = LocalClient()
    payload = {"title": args.title}
    if args.episode is not None:
        payload["episode_number"] = args.episode
    if args.only:
        payload["source"] = args.only

    with loading(f"Rescanning {args.title}..."):
        result = asyncio.run(client.request(LINK_RESCAN_REQUEST, payload))

    if args.episode is not None:
        links = result[0] if result else []
        for link in links:
            console.print(f"[info]{link['source']}[/info] {link['url']}")
        print_success(f"Episode {args.episode}: {len(links)} link(s)")
    else:
        print_success(f"Rescanned {args.title}")


def watch(args) -> None:
    client = LocalClient()
    payload = {"title": args.title, "number": args.number, "watched": not args.unwatch}
    asyncio.run(client.request(EPISODE_WATCH_REQUEST, payload))
    state = "unwatched" if args.unwatch else "watched"
    print_success(f"{args.title} episode {args.number} marked {state}")
