"""Console script entry point (``ani-track`` on PATH).

All argument handling lives in main.py.
"""

import sys

from main import cli as main_cli


def cli() -> None:
    """Run the CLI; Ctrl+C exits quietly with status 130."""
    try:
        main_cli(sys.argv[1:])
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    cli()
