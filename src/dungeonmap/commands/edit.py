"""Command group: edit an existing map file in place."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dungeonmap.commands._base import DmGroup
from dungeonmap.services.edit import EditService

if TYPE_CHECKING:
    from dungeonmap.commands._context import AppContext

_MAP_PATH = click.Path(dir_okay=False, path_type=Path)

_EDIT_EXAMPLES = """\
  dungeonmap edit add-edge dungeon.json 3 7
  dungeonmap edit remove-edge dungeon.json 1 2
  dungeonmap edit add-goal dungeon.json 4
  dungeonmap edit set-doors dungeon.json 2 3 --seed 11
  dungeonmap edit set-monster dungeon.json 5 2"""


@click.group(cls=DmGroup, examples=_EDIT_EXAMPLES)
def edit() -> None:
    """Change rooms and passages of a map file.

    The file is only rewritten when the edited map is still valid.
    """


@edit.command(
    name="add-edge",
    examples="""\
  dungeonmap edit add-edge dungeon.json 3 7
  dungeonmap --json edit add-edge dungeon.json 2 9""",
)
@click.argument("path", type=_MAP_PATH)
@click.argument("parent_id", type=int)
@click.argument("child_id", type=int)
@click.pass_obj
def add_edge(app: AppContext, path: Path, parent_id: int, child_id: int) -> None:
    """Open a door from PARENT_ID into the existing room CHILD_ID."""
    app.emit(EditService(app.settings).add_edge(path, parent_id, child_id))


@edit.command(
    name="remove-edge",
    examples="""\
  dungeonmap edit remove-edge dungeon.json 1 2""",
)
@click.argument("path", type=_MAP_PATH)
@click.argument("parent_id", type=int)
@click.argument("child_id", type=int)
@click.pass_obj
def remove_edge(app: AppContext, path: Path, parent_id: int, child_id: int) -> None:
    """Close the door from PARENT_ID to CHILD_ID.

    Rooms left unreachable are dropped and ids are renumbered.
    """
    app.emit(EditService(app.settings).remove_edge(path, parent_id, child_id))


@edit.command(
    name="add-goal",
    examples="""\
  dungeonmap edit add-goal dungeon.json 4""",
)
@click.argument("path", type=_MAP_PATH)
@click.argument("parent_id", type=int)
@click.pass_obj
def add_goal(app: AppContext, path: Path, parent_id: int) -> None:
    """Attach a new GOAL room below PARENT_ID."""
    app.emit(EditService(app.settings).add_goal(path, parent_id))


@edit.command(
    name="set-doors",
    examples="""\
  dungeonmap edit set-doors dungeon.json 2 3
  dungeonmap edit set-doors dungeon.json 1 5 --seed 11 --offline""",
)
@click.argument("path", type=_MAP_PATH)
@click.argument("room_id", type=int)
@click.argument("count", type=int)
@click.option("--seed", type=int, default=None, help="Random seed for new subtrees.")
@click.option("--offline", is_flag=True, help="Use the built-in monster catalog.")
@click.pass_obj
def set_doors(
    app: AppContext,
    path: Path,
    room_id: int,
    count: int,
    seed: int | None,
    offline: bool,
) -> None:
    """Grow or shrink ROOM_ID to COUNT doors."""
    svc = EditService(app.settings, catalog=app.catalog)
    app.emit(svc.set_doors(path, room_id, count, seed=seed, offline=offline))


@edit.command(
    name="set-monster",
    examples="""\
  dungeonmap edit set-monster dungeon.json 5 2
  dungeonmap edit set-monster dungeon.json 5 3 --offline""",
)
@click.argument("path", type=_MAP_PATH)
@click.argument("room_id", type=int)
@click.argument("monster_index", type=int)
@click.option("--offline", is_flag=True, help="Use the built-in monster catalog.")
@click.pass_obj
def set_monster(
    app: AppContext, path: Path, room_id: int, monster_index: int, offline: bool
) -> None:
    """Put monster MONSTER_INDEX in BATTLE room ROOM_ID."""
    svc = EditService(app.settings, catalog=app.catalog)
    app.emit(svc.set_monster(path, room_id, monster_index, offline=offline))
