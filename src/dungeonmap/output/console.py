"""Rich Console factory and theme for dungeonmap output.

Consoles render into a StringIO buffer so renderers keep the
``format_result() -> str`` contract. Rich drops color codes on its own
when the output is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DM_THEME = Theme(
    {
        "dm.ok": "bold green",
        "dm.error": "bold red",
        "dm.warning": "bold yellow",
        "dm.op": "bold cyan",
        "dm.key": "dim",
        "dm.id": "bold blue",
        "dm.path": "dim",
        "dm.room.empty": "dim",
        "dm.room.battle": "red",
        "dm.room.goal": "bold green",
        "dm.monster": "magenta",
    }
)

_ROOM_STYLES: dict[str, str] = {
    "EMPTY": "dm.room.empty",
    "BATTLE": "dm.room.battle",
    "GOAL": "dm.room.goal",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console writing to an in-memory buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Fixed render width; defaults to 120 columns.
    """
    return Console(
        file=StringIO(),
        theme=DM_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Return everything rendered so far."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_room(room_type: str) -> str:
    """Rich style name for a room type name (``"BATTLE"`` etc.)."""
    return _ROOM_STYLES.get(room_type, "")
