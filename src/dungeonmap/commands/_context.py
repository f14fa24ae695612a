"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns logging setup, the lazily built monster catalog,
and result emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dungeonmap.config.logging import configure_logging
from dungeonmap.output.formatters import OutputSettings, format_result
from dungeonmap.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from dungeonmap.config.settings import DungeonMapSettings
    from dungeonmap.infrastructure.catalog import MonsterCatalog
    from dungeonmap.services.result import ServiceResult


class AppContext:
    """Context object flowing through the command hierarchy.

    The catalog is built on first use so ``--help`` and offline commands
    never create an HTTP client.
    """

    def __init__(self, settings: DungeonMapSettings) -> None:
        self.settings = settings
        self._catalog: MonsterCatalog | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def catalog(self) -> MonsterCatalog:
        """Monster catalog shared by every service in this invocation."""
        if self._catalog is None:
            from dungeonmap.infrastructure.catalog import MonsterCatalog

            cfg = self.settings.catalog
            self._catalog = MonsterCatalog(
                cfg.url,
                ttl_seconds=cfg.ttl_seconds,
                timeout_seconds=cfg.timeout_seconds,
            )
        return self._catalog

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and exit non-zero on failure.

        * Success: output to stdout; warnings to stderr unless in JSON mode,
          where they are part of the payload.
        * Failure: output to stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
