"""Rich Console factory and theme for arborql output.

Consoles render to a StringIO buffer so formatters keep a plain
``-> str`` contract. In non-TTY environments (tests, pipes) Rich disables
color codes automatically.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ARBOR_THEME = Theme(
    {
        "arbor.ok": "bold green",
        "arbor.error": "bold red",
        "arbor.op": "bold cyan",
        "arbor.key": "bold blue",
        "arbor.name": "bold",
        "arbor.depth": "magenta",
        "arbor.path": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=ARBOR_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
