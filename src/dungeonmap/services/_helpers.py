"""Shared service-layer helpers: loading, saving and describing map files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from dungeonmap.domain.errors import MalformedInputError, ReconstructionError
from dungeonmap.domain.graph import graph_stats
from dungeonmap.domain.layout import LayoutMetrics, layout_map
from dungeonmap.domain.nodes import Node, reachable_from
from dungeonmap.domain.serialization import (
    MapRecord,
    dumps_records,
    flatten,
    parse_document,
    reconstruct,
)
from dungeonmap.domain.types import RoomType
from dungeonmap.domain.validation import MapValidator
from dungeonmap.infrastructure.mapfile import read_map_text, write_map_text
from dungeonmap.services.result import ErrorCode, ServiceResult, failure


class MapFileError(Exception):
    """A map file could not be loaded or saved; carries the service error."""

    def __init__(self, code: ErrorCode, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail

    def to_result(self, op: str, warnings: list[str] | None = None) -> ServiceResult:
        return failure(op, self.code, self.message, warnings=warnings, **self.detail)


def load_map(path: Path, validator: MapValidator) -> Node:
    """Read, validate and rebuild the map stored at *path*.

    Raises:
        MapFileError: With the code matching the first stage that failed.
    """
    try:
        text = read_map_text(path)
    except FileNotFoundError as exc:
        raise MapFileError(ErrorCode.NOT_FOUND, f"Map file not found: {path}") from exc
    except OSError as exc:
        raise MapFileError(ErrorCode.IO_ERROR, f"Cannot read {path}: {exc}") from exc

    try:
        records = parse_document(text)
    except MalformedInputError as exc:
        raise MapFileError(ErrorCode.MALFORMED_INPUT, str(exc), path=str(path)) from exc

    if not validator.validate(records):
        errors = validator.get_errors()
        raise MapFileError(
            ErrorCode.VALIDATION_FAILED,
            f"{path} is not a valid map ({len(errors)} errors)",
            path=str(path),
            errors=errors,
        )

    try:
        return reconstruct(records)
    except ReconstructionError as exc:
        raise MapFileError(ErrorCode.RECONSTRUCTION_FAILED, str(exc), path=str(path)) from exc


def check_records(root: Node, validator: MapValidator) -> list[MapRecord]:
    """Flatten *root* and insist that the result is a valid map.

    Raises:
        MapFileError: ``VALIDATION_FAILED`` listing every problem.
    """
    records = flatten(root)
    if not validator.validate(records):
        errors = validator.get_errors()
        raise MapFileError(
            ErrorCode.VALIDATION_FAILED,
            f"Change would produce an invalid map ({len(errors)} errors)",
            errors=errors,
        )
    return records


def save_records(path: Path, records: list[MapRecord]) -> None:
    """Write *records* to *path* as the canonical JSON document."""
    try:
        write_map_text(path, dumps_records(records))
    except OSError as exc:
        raise MapFileError(ErrorCode.IO_ERROR, f"Cannot write {path}: {exc}") from exc


def describe_map(
    root: Node,
    metrics: LayoutMetrics,
    monster_names: dict[int, str] | None = None,
) -> dict[str, Any]:
    """Lay out *root* and summarise it as ``{"stats": ..., "rooms": [...]}``."""
    layout_map(root, metrics)
    names = monster_names or {}
    rooms = []
    for node in sorted(reachable_from(root).values(), key=lambda n: n.id):
        row: dict[str, Any] = {
            "id": node.id,
            "room_type": node.room_type.name,
            "depth": node.depth,
            "monster_index": node.monster_index,
            "doors": node.successor_ids(),
            "x": round(node.x, 1),
            "y": round(node.y, 1),
        }
        if node.room_type == RoomType.BATTLE and node.monster_index in names:
            row["monster"] = names[node.monster_index]
        rooms.append(row)

    stats = graph_stats(root)
    stats["width"] = root.subtree_width
    return {"stats": stats, "rooms": rooms}