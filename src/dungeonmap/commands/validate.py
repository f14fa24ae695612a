"""Command: validate a map file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dungeonmap.commands._base import DmCommand

if TYPE_CHECKING:
    from dungeonmap.commands._context import AppContext


@click.command(
    cls=DmCommand,
    examples="""\
  dungeonmap validate dungeon.json
  dungeonmap -v validate dungeon.json
  dungeonmap --json validate dungeon.json""",
)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def validate(app: AppContext, path: Path) -> None:
    """Check that a map file is well formed and structurally sound."""
    from dungeonmap.services.check import CheckService

    app.emit(CheckService(app.settings).validate(path))
