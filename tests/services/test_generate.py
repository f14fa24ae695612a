"""Tests for GenerateService."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from dungeonmap.config.settings import DungeonMapSettings
from dungeonmap.domain.validation import MapValidator
from dungeonmap.infrastructure.catalog import Monster
from dungeonmap.services.check import CheckService
from dungeonmap.services.generate import GenerateService
from dungeonmap.services.result import ErrorCode
from dungeonmap.services.telemetry import enable_telemetry
from tests.conftest import mock_catalog, monsters_payload, read_records


def _goal_ids(document: list[dict]) -> list[int]:
    return [record["id"] for record in document if record["roomType"] == 2]


class TestGenerate:
    def test_default_depth(self, settings: DungeonMapSettings) -> None:
        result = GenerateService(settings).generate(seed=1)
        assert result.ok
        assert result.op == "generate"
        assert result.data["max_depth"] == settings.generator.max_depth
        assert result.data["path"] is None

    def test_document_is_valid(self, settings: DungeonMapSettings) -> None:
        result = GenerateService(settings).generate(4, seed=42)
        document = result.data["document"]
        assert MapValidator().validate(document)
        assert result.data["stats"]["rooms"] == len(document)
        assert len(result.data["rooms"]) == len(document)

    def test_single_shared_goal(self, settings: DungeonMapSettings) -> None:
        result = GenerateService(settings).generate(3, seed=5)
        assert len(_goal_ids(result.data["document"])) == 1
        assert result.data["stats"]["longest_path"] == 3

    def test_depth_one_goals_below_root(self, settings: DungeonMapSettings) -> None:
        result = GenerateService(settings).generate(1, seed=3)
        document = result.data["document"]
        root = document[0]
        assert root["roomType"] == 0
        assert root["monsterIndex"] is None
        children = [target for target in root["edges"] if target]
        assert 1 <= len(children) <= 4
        assert sorted(_goal_ids(document)) == sorted(children)

    def test_seed_is_repeatable(self, settings: DungeonMapSettings) -> None:
        svc = GenerateService(settings)
        first = svc.generate(4, seed=99).data["document"]
        second = svc.generate(4, seed=99).data["document"]
        assert first == second

    def test_builtin_monsters_only(self, settings: DungeonMapSettings) -> None:
        document = GenerateService(settings).generate(4, seed=8).data["document"]
        battle = [record for record in document if record["roomType"] == 1]
        assert battle
        assert {record["monsterIndex"] for record in battle} <= {0, 1, 2, 3}

    def test_rooms_carry_monster_names(self, settings: DungeonMapSettings) -> None:
        rooms = GenerateService(settings).generate(3, seed=2).data["rooms"]
        battle = [room for room in rooms if room["room_type"] == "BATTLE"]
        assert all(room["monster"] for room in battle)

    @pytest.mark.parametrize("depth", [0, -2])
    def test_depth_below_one_rejected(self, settings: DungeonMapSettings, depth: int) -> None:
        result = GenerateService(settings).generate(depth)
        assert not result.ok
        assert result.error.code == ErrorCode.INVALID_ARGUMENT
        assert str(depth) in result.error.message


class TestGenerateOutput:
    def test_writes_output_file(self, settings: DungeonMapSettings, tmp_path: Path) -> None:
        out = tmp_path / "maps" / "level.json"
        result = GenerateService(settings).generate(3, seed=11, output=out)
        assert result.ok
        assert result.data["path"] == str(out)
        assert read_records(out) == result.data["document"]
        assert CheckService(settings).validate(out).ok

    def test_no_output_writes_nothing(self, settings: DungeonMapSettings, tmp_path: Path) -> None:
        GenerateService(settings).generate(2, seed=1)
        assert list(tmp_path.iterdir()) == []

    def test_unwritable_output(self, settings: DungeonMapSettings, tmp_path: Path) -> None:
        blocker = tmp_path / "file.txt"
        blocker.write_text("x", encoding="utf-8")
        result = GenerateService(settings).generate(2, seed=1, output=blocker / "map.json")
        assert not result.ok
        assert result.error.code == ErrorCode.IO_ERROR


class TestGenerateCatalog:
    def test_remote_monsters_used(self, tmp_path: Path) -> None:
        settings = DungeonMapSettings.from_cli(start=tmp_path)
        catalog = mock_catalog(
            lambda request: httpx.Response(
                200, json=monsters_payload((7, "Wyrm", 500), (8, "Lich", 400))
            )
        )
        result = GenerateService(settings, catalog=catalog).generate(4, seed=3)
        assert result.ok
        assert result.warnings == []
        battle = [r for r in result.data["document"] if r["roomType"] == 1]
        assert {r["monsterIndex"] for r in battle} <= {7, 8}
        names = {room.get("monster") for room in result.data["rooms"] if "monster" in room}
        assert names <= {"Wyrm", "Lich"}

    def test_unreachable_catalog_falls_back(self, tmp_path: Path) -> None:
        settings = DungeonMapSettings.from_cli(start=tmp_path)
        catalog = mock_catalog(lambda request: httpx.Response(500))
        result = GenerateService(settings, catalog=catalog).generate(3, seed=3)
        assert result.ok
        assert any("built-in catalog" in w for w in result.warnings)

    def test_offline_skips_catalog(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=monsters_payload((9, "Hydra", 300)))

        settings = DungeonMapSettings.from_cli(start=tmp_path)
        result = GenerateService(settings, catalog=mock_catalog(handler)).generate(
            3, seed=3, offline=True
        )
        assert result.ok
        assert calls == []

    def test_empty_catalog_uses_builtin(
        self, settings: DungeonMapSettings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def no_monsters(
            self: GenerateService, warnings: list[str], **kwargs: object
        ) -> list[Monster]:
            return []

        monkeypatch.setattr(GenerateService, "_monsters", no_monsters)
        result = GenerateService(settings).generate(3, seed=4)
        assert result.ok
        assert any("empty" in w for w in result.warnings)
        battle = [r for r in result.data["document"] if r["roomType"] == 1]
        assert {r["monsterIndex"] for r in battle} <= {0, 1, 2, 3}


class TestGenerateTelemetry:
    def test_spans_recorded(self, settings: DungeonMapSettings, tmp_path: Path) -> None:
        enable_telemetry()
        result = GenerateService(settings).generate(2, seed=1, output=tmp_path / "m.json")
        telemetry = result.meta["telemetry"]
        assert telemetry["name"] == "GenerateService.generate"
        names = [child["name"] for child in telemetry["children"]]
        assert names == ["catalog", "generate", "validate", "write"]

    def test_no_meta_when_disabled(self, settings: DungeonMapSettings) -> None:
        assert GenerateService(settings).generate(2, seed=1).meta is None
