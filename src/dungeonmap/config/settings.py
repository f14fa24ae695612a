"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DUNGEONMAP_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``dungeonmap.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from dungeonmap.config.discovery import find_config
from dungeonmap.config.models import CatalogConfig, GeneratorConfig, GraphConfig, LayoutConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``dungeonmap.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Pydantic builds sources from a classmethod, so the TOML path rides along here.
_tls = threading.local()


class DungeonMapSettings(BaseSettings):
    """Unified, frozen settings stored on the CLI context.

    Attributes:
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DUNGEONMAP_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    graph: GraphConfig = Field(default_factory=GraphConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)

    @model_validator(mode="after")
    def _branching_fits_capacity(self) -> DungeonMapSettings:
        if self.generator.max_branching > self.graph.capacity:
            msg = (
                f"generator.max_branching ({self.generator.max_branching}) "
                f"exceeds graph.capacity ({self.graph.capacity})"
            )
            raise ValueError(msg)
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> DungeonMapSettings:
        """Construct settings for one CLI invocation.

        An explicit *config_path* wins over discovery; a path that does not
        exist is ignored. CLI flags are the highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            explicit = Path(config_path)
            if explicit.is_file():
                toml_path = explicit
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

