"""Command group: the monster catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dungeonmap.commands._base import DmGroup

if TYPE_CHECKING:
    from dungeonmap.commands._context import AppContext


@click.group(
    cls=DmGroup,
    examples="""\
  dungeonmap catalog list
  dungeonmap catalog list --offline""",
)
def catalog() -> None:
    """Inspect the monsters available to BATTLE rooms."""


@catalog.command(
    name="list",
    examples="""\
  dungeonmap catalog list
  dungeonmap --json catalog list
  dungeonmap -q catalog list --offline""",
)
@click.option("--offline", is_flag=True, help="Show the built-in catalog without fetching.")
@click.pass_obj
def list_monsters(app: AppContext, offline: bool) -> None:
    """List monsters from the catalog service."""
    from dungeonmap.services.catalog import CatalogService

    app.emit(CatalogService(app.settings, catalog=app.catalog).monsters(offline=offline))
