"""
CLI UX utilities built on rich.

All human-facing messages go to stderr so that stdout only ever carries
the rendered graph and can be piped straight into ``dot``.

Environment handling:
- Respects NO_COLOR and FORCE_COLOR environment variables
- Falls back to plain text when stderr is not a TTY
"""

from __future__ import annotations

import os

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

# Nord color palette (https://www.nordtheme.com/)
RULEGRAPH_THEME = Theme(
    {
        "info": "#88C0D0",  # Nord frost - light blue
        "success": "#A3BE8C",  # Nord aurora - green
        "warning": "#EBCB8B",  # Nord aurora - yellow
        "error": "#BF616A bold",  # Nord aurora - red
        "muted": "#D8DEE9",  # Nord snow storm - light grey
    }
)

console = Console(
    theme=RULEGRAPH_THEME,
    stderr=True,
    force_terminal=os.environ.get("FORCE_COLOR") is not None,
    no_color=os.environ.get("NO_COLOR") is not None,
)


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[error]✗ {_escape(message)}[/error]", highlight=False)


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]⚠ {_escape(message)}[/warning]", highlight=False)


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]ℹ {_escape(message)}[/info]", highlight=False)


def print_table(
    title: str,
    columns: list[str],
    rows: list[list[str]],
    show_header: bool = True,
) -> None:
    """Print a formatted table."""
    table = Table(title=title, show_header=show_header)

    for col in columns:
        table.add_column(col)

    for row in rows:
        table.add_row(*[_escape(cell) for cell in row])

    console.print(table)


def _escape(text: str) -> str:
    # PromQL label matchers use brackets that rich would read as markup
    return escape(text)
