"""Shared pytest fixtures and test helpers for dungeonmap tests."""

from __future__ import annotations

import json
import random
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from dungeonmap.config.settings import DungeonMapSettings
from dungeonmap.infrastructure.catalog import MonsterCatalog
from dungeonmap.services.telemetry import disable_telemetry

CATALOG_URL = "http://catalog.test/graphql"


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep host config and telemetry state out of every test."""
    monkeypatch.delenv("DUNGEONMAP_CONFIG", raising=False)
    monkeypatch.delenv("DUNGEONMAP_CATALOG__ENABLED", raising=False)
    monkeypatch.delenv("DUNGEONMAP_CATALOG__URL", raising=False)
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for repeatable generation."""
    return random.Random(1234)


@pytest.fixture
def settings(tmp_path: Path) -> DungeonMapSettings:
    """Default settings with the remote catalog switched off."""
    return DungeonMapSettings.from_cli(start=tmp_path, catalog={"enabled": False})


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """A diamond: root -> two BATTLE rooms -> one shared GOAL room."""
    return [
        {"id": 1, "roomType": 0, "monsterIndex": None, "edges": [2, 3, 0, 0, 0, 0]},
        {"id": 2, "roomType": 1, "monsterIndex": 0, "edges": [4, 0, 0, 0, 0, 0]},
        {"id": 3, "roomType": 1, "monsterIndex": 1, "edges": [4, 0, 0, 0, 0, 0]},
        {"id": 4, "roomType": 2, "monsterIndex": None, "edges": [0, 0, 0, 0, 0, 0]},
    ]


@pytest.fixture
def map_file(tmp_path: Path, sample_records: list[dict[str, Any]]) -> Path:
    """The sample map written to ``dungeon.json`` in a temp directory."""
    path = tmp_path / "dungeon.json"
    path.write_text(json.dumps(sample_records, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def _isolated_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI commands from a temp directory without network access.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DUNGEONMAP_CATALOG__ENABLED", "false")


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def monsters_payload(*entries: tuple[int, str, int]) -> dict[str, Any]:
    """A GraphQL ``GetMonsters`` response body; numbers arrive as strings."""
    return {
        "data": {
            "monsters": {
                "items": [
                    {
                        "id": f"0x{index:02x}",
                        "characterAddress": f"0xchar{index}",
                        "index": str(index),
                        "health": str(health),
                        "character": {"name": name},
                    }
                    for index, name, health in entries
                ]
            }
        }
    }


def mock_catalog(
    handler: Callable[[httpx.Request], httpx.Response],
    **kwargs: Any,
) -> MonsterCatalog:
    """A MonsterCatalog whose HTTP calls go to *handler*."""
    return MonsterCatalog(CATALOG_URL, transport=httpx.MockTransport(handler), **kwargs)


def read_records(path: Path) -> list[dict[str, Any]]:
    """Load a map file written by the services."""
    return json.loads(path.read_text(encoding="utf-8"))
