import argparse
import sys

from commands import (
    add_title,
    list_titles,
    manage_sources,
    remove_title,
    rescan,
    resolve_title,
    update_title,
    watch,
)
from ui.components import print_error
from utils.exceptions import AniTrackError
from utils.logging import configure_logging


def source_pair(value: str) -> tuple[str, str]:
    """Parse SOURCE=IDENTIFIER."""
    name, sep, identifier = value.partition("=")
    if not sep or not name or not identifier:
        raise argparse.ArgumentTypeError(f"expected SOURCE=IDENTIFIER, got {value!r}")
    return name, identifier


def episode_number(value: str) -> int | float:
    try:
        number = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an episode number: {value!r}") from e
    if number < 0:
        raise argparse.ArgumentTypeError("episode numbers are non-negative")
    return int(number) if number.is_integer() else number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ani-track",
        description="Track anime and manga episodes across source sites.",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List titles, or one title's episodes")
    list_parser.add_argument("title", nargs="?", help="Show episodes of this title")
    list_parser.set_defaults(func=list_titles)

    add_parser = subparsers.add_parser("add", help="Track a new title")
    add_parser.add_argument("title")
    add_parser.add_argument(
        "--source", "-s", type=source_pair, action="append", default=[],
        metavar="SOURCE=ID", help="Identifier of the title on a source (repeatable)",
    )
    add_parser.add_argument("--active", action="store_true")
    add_parser.set_defaults(func=add_title)

    update_parser = subparsers.add_parser("update", help="Change a title's sources")
    update_parser.add_argument("title")
    update_parser.add_argument(
        "--source", "-s", type=source_pair, action="append", default=[],
        metavar="SOURCE=ID",
    )
    update_parser.add_argument("--rename", help="New display title")
    active = update_parser.add_mutually_exclusive_group()
    active.add_argument("--active", dest="active", action="store_true", default=None)
    active.add_argument("--inactive", dest="active", action="store_false")
    update_parser.set_defaults(func=update_title)

    remove_parser = subparsers.add_parser("remove", help="Stop tracking a title")
    remove_parser.add_argument("title")
    remove_parser.set_defaults(func=remove_title)

    rescan_parser = subparsers.add_parser("rescan", help="Look episode links up again")
    rescan_parser.add_argument("title")
    rescan_parser.add_argument("--episode", "-e", type=episode_number)
    rescan_parser.add_argument("--only", metavar="SOURCE", help="Rescan on one source only")
    rescan_parser.set_defaults(func=rescan)

    resolve_parser = subparsers.add_parser("resolve", help="Show current links without saving")
    resolve_parser.add_argument("title")
    resolve_parser.add_argument("--only", metavar="SOURCE")
    resolve_parser.set_defaults(func=resolve_title)

    watch_parser = subparsers.add_parser("watch", help="Mark an episode watched")
    watch_parser.add_argument("title")
    watch_parser.add_argument("number", type=episode_number)
    watch_parser.add_argument("--unwatch", action="store_true")
    watch_parser.set_defaults(func=watch)

    sources_parser = subparsers.add_parser("sources", help="List or manage sources")
    sources_parser.add_argument("action", nargs="?", choices=["add", "remove"])
    sources_parser.add_argument("name", nargs="?")
    sources_parser.set_defaults(func=manage_sources)

    return parser


def cli(argv: list[str] | None = None) -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return
    if args.command == "sources" and args.action and not args.name:
        parser.error(f"sources {args.action} needs a NAME")

    try:
        configure_logging(debug=args.debug or None, force=True)
        args.func(args)
    except AniTrackError as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()
