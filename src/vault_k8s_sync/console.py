"""Rich console utilities for styled terminal output.

Every progress message of a sync run goes through this module so the
output stays consistent. Secret values must never be passed here, only
secret names and field keys.
"""

from collections.abc import Generator
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

# Shared console instance; diagnostics go to stderr so dry-run manifests
# on stdout stay machine readable.
console = Console(theme=_THEME, stderr=True)

# Plain stdout console for rendered manifests.
stdout = Console(highlight=False, soft_wrap=True)


def info(message: str) -> None:
    """Print an informational message.

    Args:
        message: The message to display.

    """
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message."""
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Print a sub-step message, indented under the current action."""
    console.print(f"  [muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{text}[/highlight]"


def document(text: str) -> None:
    """Write a rendered document (e.g. a YAML manifest) to stdout verbatim."""
    stdout.print(text, markup=False, emoji=False, end="")


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner while performing a blocking call.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def summary_panel(title: str, items: dict[str, str], *, failed: bool = False) -> None:
    """Print a summary panel with key-value pairs.

    Args:
        title: Title for the panel.
        items: Dictionary of label -> value pairs to display.
        failed: Render the panel border in the error color.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    for label, value in items.items():
        table.add_row(f"{label}:", value)

    border = "red" if failed else "green"
    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style=border))


def newline() -> None:
    """Print an empty line."""
    console.print()
