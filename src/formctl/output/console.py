"""Rich Console factory and theme for formctl output.

Consoles render into a StringIO buffer so formatting stays a pure
``ServiceResult -> str`` function. Outside a TTY (tests, pipes) Rich
drops color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FORMCTL_THEME = Theme(
    {
        "form.ok": "bold green",
        "form.error": "bold red",
        "form.warning": "bold yellow",
        "form.op": "bold cyan",
        "form.key": "dim",
        "form.id": "bold blue",
        "form.name": "bold",
        "form.type": "magenta",
        "form.group": "bold underline",
        "form.hidden": "dim strike",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=FORMCTL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
