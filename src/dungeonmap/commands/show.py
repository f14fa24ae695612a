"""Command: show the rooms and layout of a map file."""

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
  dungeonmap show dungeon.json
  dungeonmap -v show dungeon.json
  dungeonmap -q show dungeon.json""",
)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--offline", is_flag=True, help="Use the built-in monster catalog for names.")
@click.pass_obj
def show(app: AppContext, path: Path, offline: bool) -> None:
    """List the rooms of a map with their doors, monsters and position."""
    from dungeonmap.services.query import QueryService

    app.emit(QueryService(app.settings, catalog=app.catalog).show(path, offline=offline))
