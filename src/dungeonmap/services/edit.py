"""EditService — targeted edits to an existing map file.

Every edit runs the same pipeline: load and validate the file, apply one
mutation to the live graph, re-run the layout, flatten, validate the
flattened records, and only then write the file back. A rejected mutation
or an invalid result leaves the file on disk untouched.

Flattening renumbers ids to ``1..N`` and drops rooms no longer reachable
from the root, so ids reported after a removal may differ from the ids
that were passed in.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeAlias

import structlog

from dungeonmap.domain import mutations
from dungeonmap.domain.generation import MapGenerator, find_shared_goal
from dungeonmap.domain.graph import creates_cycle
from dungeonmap.domain.layout import layout_map
from dungeonmap.domain.nodes import (
    IdCounter,
    Node,
    find_node,
    max_depth,
    max_id,
    out_degree,
    reachable_from,
)
from dungeonmap.domain.types import RoomType
from dungeonmap.services._helpers import MapFileError, check_records, load_map, save_records
from dungeonmap.services.base import BaseService
from dungeonmap.services.result import ErrorCode, ServiceResult, failure
from dungeonmap.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)

# A mutation returns its result fields, or a failed ServiceResult.
Mutation: TypeAlias = Callable[[Node], dict[str, Any] | ServiceResult]


class EditService(BaseService):
    """Applies single mutations to a map file."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def add_edge(self, path: Path, parent_id: int, child_id: int) -> ServiceResult:
        """Open a door from room *parent_id* into existing room *child_id*."""
        op = "add_edge"

        def mutate(root: Node) -> dict[str, Any] | ServiceResult:
            parent = find_node(root, parent_id)
            child = find_node(root, child_id)
            if parent is None:
                return _missing(op, parent_id)
            if child is None:
                return _missing(op, child_id)
            if parent.room_type == RoomType.GOAL:
                return _rejected(op, f"Room {parent_id} is a GOAL room and cannot have doors")
            if child_id in parent.edges:
                return _rejected(op, f"Room {parent_id} already has a door to room {child_id}")
            if out_degree(parent) >= parent.capacity:
                return _rejected(
                    op, f"Room {parent_id} has no free door slot (capacity {parent.capacity})"
                )
            if creates_cycle(root, parent_id, child_id):
                return _rejected(
                    op, f"A door from room {parent_id} to room {child_id} would create a cycle"
                )
            mutations.add_edge(parent, child)
            return {"parent_id": parent_id, "child_id": child_id}

        return self._apply(op, path, mutate)

    @traced
    def remove_edge(self, path: Path, parent_id: int, child_id: int) -> ServiceResult:
        """Close the door from *parent_id* to *child_id*.

        Rooms only reachable through that door are dropped from the file.
        """
        op = "remove_edge"

        def mutate(root: Node) -> dict[str, Any] | ServiceResult:
            parent = find_node(root, parent_id)
            if parent is None:
                return _missing(op, parent_id)
            before = len(reachable_from(root))
            if not mutations.remove_edge(parent, child_id):
                return _rejected(op, f"Room {parent_id} has no door to room {child_id}")
            return {
                "parent_id": parent_id,
                "child_id": child_id,
                "dropped_rooms": before - len(reachable_from(root)),
            }

        return self._apply(op, path, mutate)

    @traced
    def add_goal(self, path: Path, parent_id: int) -> ServiceResult:
        """Attach a new GOAL room below *parent_id*."""
        op = "add_goal"

        def mutate(root: Node) -> dict[str, Any] | ServiceResult:
            parent = find_node(root, parent_id)
            if parent is None:
                return _missing(op, parent_id)
            if parent.room_type == RoomType.GOAL:
                return _rejected(op, f"Room {parent_id} is a GOAL room and cannot have doors")
            goal = mutations.add_goal_child(parent, IdCounter(max_id(root) + 1))
            if goal is None:
                return _rejected(
                    op, f"Room {parent_id} has no free door slot (capacity {parent.capacity})"
                )
            return {"parent_id": parent_id, "goal_id": goal.id}

        return self._apply(op, path, mutate)

    @traced
    def set_doors(
        self,
        path: Path,
        room_id: int,
        count: int,
        *,
        seed: int | None = None,
        offline: bool = False,
    ) -> ServiceResult:
        """Grow or shrink room *room_id* to exactly *count* doors.

        New doors lead into freshly generated subtrees that end at the
        map's current deepest level.
        """
        op = "set_doors"
        capacity = self._settings.graph.capacity
        if not 1 <= count <= capacity:
            return failure(
                op,
                ErrorCode.INVALID_ARGUMENT,
                f"Door count must be between 1 and {capacity}, got {count}",
            )
        warnings: list[str] = []

        def mutate(root: Node) -> dict[str, Any] | ServiceResult:
            room = find_node(root, room_id)
            if room is None:
                return _missing(op, room_id)
            if room.room_type == RoomType.GOAL:
                return failure(op, ErrorCode.INVALID_ARGUMENT, f"Room {room_id} is a GOAL room")

            depth = max(max_depth(root), room.depth + 1)
            with trace_span("catalog"):
                monsters = self._monsters(warnings, offline=offline)
            generator = MapGenerator(
                depth,
                [monster.index for monster in monsters],
                rng=random.Random(seed),
                capacity=capacity,
                max_branching=self._settings.generator.max_branching,
                counter=IdCounter(max_id(root) + 1),
                shared_goal=find_shared_goal(root, depth),
            )
            before = out_degree(room)
            generator.set_door_count(room, count)
            return {"room_id": room_id, "doors_before": before, "doors_after": out_degree(room)}

        return self._apply(op, path, mutate, warnings)

    @traced
    def set_monster(
        self, path: Path, room_id: int, monster_index: int, *, offline: bool = False
    ) -> ServiceResult:
        """Put monster *monster_index* in BATTLE room *room_id*."""
        op = "set_monster"
        warnings: list[str] = []

        def mutate(root: Node) -> dict[str, Any] | ServiceResult:
            room = find_node(root, room_id)
            if room is None:
                return _missing(op, room_id)
            if room.room_type != RoomType.BATTLE:
                return failure(
                    op,
                    ErrorCode.INVALID_ARGUMENT,
                    f"Room {room_id} is a {room.room_type.name} room; "
                    "only BATTLE rooms hold monsters",
                )
            if not mutations.set_monster(room, monster_index):
                return failure(
                    op,
                    ErrorCode.INVALID_ARGUMENT,
                    f"Monster index must be non-negative, got {monster_index}",
                )

            names = {m.index: m.name for m in self._monsters(warnings, offline=offline)}
            if monster_index not in names:
                warnings.append(f"Monster index {monster_index} is not in the catalog")
            return {
                "room_id": room_id,
                "monster_index": monster_index,
                "monster": names.get(monster_index),
            }

        return self._apply(op, path, mutate, warnings)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _apply(
        self,
        op: str,
        path: Path,
        mutate: Mutation,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        warnings = warnings if warnings is not None else []
        validator = self._validator()
        try:
            with trace_span("load"):
                root = load_map(path, validator)

            with trace_span("mutate"):
                outcome = mutate(root)
            if isinstance(outcome, ServiceResult):
                log.info("map.edit_rejected", op=op, path=str(path), code=outcome.error.code)
                return outcome.model_copy(update={"warnings": [*outcome.warnings, *warnings]})

            with trace_span("layout"):
                layout_map(root, self._settings.layout.metrics())
            with trace_span("validate"):
                records = check_records(root, validator)
            with trace_span("write"):
                save_records(path, records)
        except MapFileError as exc:
            return exc.to_result(op, warnings)

        log.info("map.edited", op=op, path=str(path), rooms=len(records))
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(path), **outcome, "rooms": len(records)},
            warnings=warnings,
        )


def _missing(op: str, room_id: int) -> ServiceResult:
    return failure(op, ErrorCode.NOT_FOUND, f"No room with id {room_id}", room_id=room_id)


def _rejected(op: str, message: str) -> ServiceResult:
    return failure(op, ErrorCode.EDGE_REJECTED, message)
