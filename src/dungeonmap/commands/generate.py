"""Command: generate a new dungeon map."""

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
  dungeonmap generate
  dungeonmap generate --depth 5 --seed 42 --output dungeon.json
  dungeonmap generate --offline --output maps/level1.json
  dungeonmap -q generate --seed 7 > dungeon.json
  dungeonmap --json generate --depth 2""",
)
@click.option("--depth", type=click.IntRange(min=1), default=None, help="Depth of the GOAL rooms.")
@click.option("--seed", type=int, default=None, help="Random seed for a repeatable map.")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the map to this file.",
)
@click.option("--offline", is_flag=True, help="Use the built-in monster catalog.")
@click.pass_obj
def generate(
    app: AppContext,
    depth: int | None,
    seed: int | None,
    output: Path | None,
    offline: bool,
) -> None:
    """Generate a new dungeon map."""
    from dungeonmap.services.generate import GenerateService

    svc = GenerateService(app.settings, catalog=app.catalog)
    app.emit(svc.generate(depth, seed=seed, output=output, offline=offline))
