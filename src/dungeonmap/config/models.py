"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, dungeonmap.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dungeonmap.domain.layout import LayoutMetrics
from dungeonmap.domain.types import DEFAULT_CAPACITY, MONSTER_INDEX_MAX

DEFAULT_CATALOG_URL = "http://localhost:42069/graphql"


class GraphConfig(BaseModel):
    """[graph] section."""

    model_config = {"frozen": True}

    capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)
    monster_index_max: int = Field(default=MONSTER_INDEX_MAX, ge=0)


class GeneratorConfig(BaseModel):
    """[generator] section."""

    model_config = {"frozen": True}

    max_depth: int = Field(default=3, ge=1)
    max_branching: int = Field(default=4, ge=1)


class LayoutConfig(BaseModel):
    """[layout] section."""

    model_config = {"frozen": True}

    node_width: float = 140.0
    level_height: float = 150.0
    min_spacing: float = 40.0
    center_x: float = 600.0
    base_y: float = 50.0
    left_margin: float = 100.0
    max_shift: float = 1000.0

    def metrics(self) -> LayoutMetrics:
        """Convert to the domain layout constants."""
        return LayoutMetrics(**self.model_dump())


class CatalogConfig(BaseModel):
    """[catalog] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    url: str = DEFAULT_CATALOG_URL
    ttl_seconds: float = Field(default=300.0, ge=0)
    timeout_seconds: float = Field(default=10.0, gt=0)

