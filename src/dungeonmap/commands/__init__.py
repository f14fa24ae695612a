"""Subcommand modules for dungeonmap.

register_commands() imports each module only when the root group is built,
keeping the import graph of ``dungeonmap --help`` small.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every command and command group to the root CLI group."""
    # --- Groups ---
    from dungeonmap.commands.catalog import catalog
    from dungeonmap.commands.edit import edit

    cli.add_command(edit)
    cli.add_command(catalog)

    # --- Standalone commands ---
    from dungeonmap.commands.generate import generate
    from dungeonmap.commands.show import show
    from dungeonmap.commands.validate import validate

    cli.add_command(generate)
    cli.add_command(validate)
    cli.add_command(show)
