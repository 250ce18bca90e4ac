"""Reusable UI components for the CLI: loading(), tables and status lines.

- loading() - Rich spinner while requests are in flight
- titles_table() / episodes_table() / sources_table() - Rich tables
- print_error() / print_success() - themed one-line messages
"""

from contextlib import contextmanager

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table
from rich.theme import Theme

# Catppuccin Mocha Theme
CATPPUCCIN_MOCHA = Theme(
    {
        "menu.title": "bold #cba6f7",  # Purple header
        "menu.text": "#cdd6f4",  # Light text
        "menu.muted": "#6c7086",  # Muted gray
        "info": "#89dceb",  # Sky blue for info
        "success": "#a6e3a1",  # Green for success
        "warning": "#f9e2af",  # Yellow for warnings
        "error": "#f38ba8",  # Red for errors
    }
)

# Global console with theme
console = Console(theme=CATPPUCCIN_MOCHA)


@contextmanager
def loading(msg: str = "Loading..."):
    """Context manager for displaying loading indicators during operations.

    Args:
        msg: The message to display alongside the spinner

    Usage:
        with loading("Scanning sources..."):
            asyncio.run(client.request(...))

    """
    with Live(
        Spinner("dots", text=msg),
        console=console,
        refresh_per_second=12.5,
        transient=True,  # Spinner disappears after completion
    ):
        yield


def print_error(message: str) -> None:
    console.print(f"[error]✗ {message}[/error]")


def print_success(message: str) -> None:
    console.print(f"[success]✓ {message}[/success]")


def titles_table(titles: list[dict]) -> Table:
    """Overview of tracked titles (as sent in ``title list data``)."""
    table = Table(title="Tracked titles", title_style="menu.title")
    table.add_column("Title", style="menu.text")
    table.add_column("Active", justify="center")
    table.add_column("Episodes", justify="right")
    table.add_column("Watched", justify="right")
    table.add_column("Sources", style="menu.muted")

    for title in titles:
        episodes = title.get("episodes", [])
        configured = [name for name, ident in title.get("source_map", {}).items() if ident]
        table.add_row(
            title["title"],
            "●" if title.get("active") else "",
            str(len(episodes)),
            str(sum(1 for episode in episodes if episode.get("watched"))),
            ", ".join(configured) or "-",
        )
    return table


def episodes_table(title: str, episodes: list[dict]) -> Table:
    """Episode numbers with their links, one row per link."""
    table = Table(title=title, title_style="menu.title")
    table.add_column("#", justify="right")
    table.add_column("Watched", justify="center")
    table.add_column("Source", style="info")
    table.add_column("URL", style="menu.text", overflow="fold")

    for episode in episodes:
        watched = "✓" if episode.get("watched") else ""
        links = episode.get("urls") or [{"source": "-", "url": "-"}]
        for index, link in enumerate(links):
            table.add_row(
                str(episode["number"]) if index == 0 else "",
                watched if index == 0 else "",
                link["source"],
                link["url"],
            )
    return table


def sources_table(stored: list[str], supported: list[str]) -> Table:
    table = Table(title="Sources", title_style="menu.title")
    table.add_column("Source", style="menu.text")
    table.add_column("Enabled", justify="center")
    table.add_column("Handler", justify="center")

    for name in sorted(set(stored) | set(supported)):
        table.add_row(
            name,
            "●" if name in stored else "",
            "●" if name in supported else "[warning]none[/warning]",
        )
    return table
