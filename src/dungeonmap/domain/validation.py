"""Schema and structural validation for flat map records.

Follows the linter pattern: every check runs and every violation is
collected, so a caller can show the full list at once. Record-level checks
cover field types and room-type rules; cross-record checks cover id
uniqueness and contiguity, dangling references, the single root and
acyclicity.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from dungeonmap.domain.graph import digraph_from_records, find_cycle
from dungeonmap.domain.types import DEFAULT_CAPACITY, MONSTER_INDEX_MAX, RoomType

_ROOM_TYPE_VALUES = frozenset(int(t) for t in RoomType)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class MapValidator:
    """Validates a list of map records before it is accepted as a graph.

    Usage::

        validator = MapValidator()
        if not validator.validate(records):
            for message in validator.get_errors():
                print(message)
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        monster_index_max: int = MONSTER_INDEX_MAX,
    ) -> None:
        self.capacity = capacity
        self.monster_index_max = monster_index_max
        self._errors: list[str] = []

    def validate(self, records: Any) -> bool:
        """Run every check on *records*; return True when none failed."""
        self._errors = []

        if not isinstance(records, list):
            self._errors.append("Map must be an array of room records")
            return False
        if not records:
            self._errors.append("Map must contain at least one room")

        well_formed: list[dict[str, Any]] = []
        for position, record in enumerate(records):
            if self._check_record(position, record):
                well_formed.append(record)

        self._check_ids(records)
        self._check_references(well_formed)
        self._check_root(well_formed, total=len(records))
        self._check_acyclic(well_formed)

        return not self._errors

    def get_errors(self) -> list[str]:
        """Messages from the last :meth:`validate` call."""
        return list(self._errors)

    # ------------------------------------------------------------------
    # Record-level checks
    # ------------------------------------------------------------------

    def _check_record(self, position: int, record: Any) -> bool:
        """Check one record. Returns whether its id and edges are usable."""
        label = f"Room[{position}]"
        if not isinstance(record, dict):
            self._errors.append(f"{label}: must be an object")
            return False

        node_id = record.get("id")
        if _is_int(node_id) and node_id >= 1:
            label = f"Room {node_id}"
        else:
            self._errors.append(f"{label}: id must be a positive integer")

        room_type = record.get("roomType")
        if not _is_int(room_type) or room_type not in _ROOM_TYPE_VALUES:
            allowed = ", ".join(f"{int(t)} ({t.name})" for t in RoomType)
            self._errors.append(f"{label}: roomType must be one of {allowed}")
            room_type = None

        edges = record.get("edges")
        edges_ok = self._check_edges(label, edges)
        self._check_monster(label, room_type, record.get("monsterIndex"))
        if edges_ok and room_type is not None:
            self._check_edge_count(label, RoomType(room_type), edges)
        if edges_ok and _is_int(node_id) and node_id in edges:
            self._errors.append(f"{label}: must not reference itself")

        return edges_ok and _is_int(node_id) and node_id >= 1

    def _check_edges(self, label: str, edges: Any) -> bool:
        if not isinstance(edges, list) or len(edges) != self.capacity:
            self._errors.append(
                f"{label}: edges must be an array of exactly {self.capacity} elements"
            )
            return False
        if not all(_is_int(target) and target >= 0 for target in edges):
            self._errors.append(f"{label}: edges must contain non-negative integers")
            return False

        targets = [target for target in edges if target > 0]
        duplicates = sorted(t for t, n in Counter(targets).items() if n > 1)
        if duplicates:
            self._errors.append(f"{label}: edges repeat room ids {duplicates}")
        return True

    def _check_monster(self, label: str, room_type: int | None, monster: Any) -> None:
        if room_type == RoomType.BATTLE:
            if not _is_int(monster):
                self._errors.append(f"{label}: BATTLE rooms must have monsterIndex as a number")
            elif not 0 <= monster <= self.monster_index_max:
                self._errors.append(
                    f"{label}: monsterIndex must be between 0 and {self.monster_index_max}"
                )
        elif room_type == RoomType.GOAL and monster is not None:
            self._errors.append(f"{label}: GOAL rooms must have monsterIndex = null")
        elif room_type == RoomType.EMPTY and monster is not None:
            self._errors.append(f"{label}: EMPTY rooms must have monsterIndex = null")

    def _check_edge_count(self, label: str, room_type: RoomType, edges: list[int]) -> None:
        count = sum(1 for target in edges if target > 0)
        if room_type == RoomType.GOAL and count:
            self._errors.append(f"{label}: GOAL rooms must have no children")
        elif room_type == RoomType.BATTLE and count == 0:
            self._errors.append(f"{label}: BATTLE rooms should have children")

    # ------------------------------------------------------------------
    # Cross-record checks
    # ------------------------------------------------------------------

    def _check_ids(self, records: list[Any]) -> None:
        ids = [
            record["id"]
            for record in records
            if isinstance(record, dict) and _is_int(record.get("id")) and record["id"] >= 1
        ]
        for node_id, n in sorted(Counter(ids).items()):
            if n > 1:
                self._errors.append(f"Duplicate node ID found: {node_id}")

        present = set(ids)
        for expected in range(1, len(records) + 1):
            if expected not in present:
                self._errors.append(
                    f"Missing ID: {expected} (ids must run from 1 to {len(records)})"
                )
        for node_id in sorted(present):
            if node_id > len(records):
                self._errors.append(f"ID {node_id} is outside the range 1..{len(records)}")

    def _check_references(self, records: list[dict[str, Any]]) -> None:
        present = {record["id"] for record in records}
        for record in records:
            for target in record["edges"]:
                if target > 0 and target not in present:
                    self._errors.append(
                        f"Room {record['id']} references non-existent child {target}"
                    )

    def _check_root(self, records: list[dict[str, Any]], *, total: int) -> None:
        if len(records) != total:
            # Root counting needs the id and edges of every record.
            return
        referenced = {target for record in records for target in record["edges"] if target > 0}
        roots = [record["id"] for record in records if record["id"] not in referenced]
        if len(roots) != 1:
            self._errors.append(f"Map must have exactly one root node (found {len(roots)})")

    def _check_acyclic(self, records: list[dict[str, Any]]) -> None:
        cycle = find_cycle(digraph_from_records(records))
        if cycle:
            path = " -> ".join(str(node_id) for node_id in [*cycle, cycle[0]])
            self._errors.append(f"Passages form a cycle: {path}")
