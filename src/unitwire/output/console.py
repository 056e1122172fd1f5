"""Rich Console factory and theme for unitwire output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

UNITWIRE_THEME = Theme(
    {
        "uw.ok": "bold green",
        "uw.error": "bold red",
        "uw.warning": "bold yellow",
        "uw.op": "bold cyan",
        "uw.key": "dim",
        "uw.unit": "bold blue",
        "uw.state.activated": "green",
        "uw.state.skipped": "yellow",
        "uw.state.failed": "bold red",
        "uw.state.discovered": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=UNITWIRE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_state(state: str) -> str:
    """Return the Rich style name for a unit state."""
    return f"uw.state.{state}" if state in ("activated", "skipped", "failed", "discovered") else ""
