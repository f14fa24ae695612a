"""Flat JSON record format for room graphs.

A map is persisted as a JSON array of records::

    {"id": 1, "roomType": 0, "monsterIndex": null, "edges": [2, 3, 0, 0, 0, 0]}

``flatten`` renumbers ids to a gap-free ``1..N`` sequence in original-id
order, so the output is canonical regardless of earlier edits.
``reconstruct`` rebuilds live nodes from records that already passed
:class:`~dungeonmap.domain.validation.MapValidator`.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypedDict

import networkx as nx

from dungeonmap.domain.errors import MalformedInputError, ReconstructionError
from dungeonmap.domain.graph import digraph_from_nodes
from dungeonmap.domain.nodes import Node, reachable_from
from dungeonmap.domain.types import DEFAULT_CAPACITY, RoomType
from dungeonmap.domain.validation import MapValidator


class MapRecord(TypedDict):
    """One persisted room."""

    id: int
    roomType: int
    monsterIndex: int | None
    edges: list[int]


@dataclass
class LoadResult:
    """Outcome of :func:`deserialize_map`: a root, or the reasons there is none."""

    root: Node | None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.root is not None and not self.errors


# ---------------------------------------------------------------------------
# Flatten
# ---------------------------------------------------------------------------


def flatten(root: Node) -> list[MapRecord]:
    """Emit one record per reachable room with ids renumbered ``1..N``."""
    nodes = sorted(reachable_from(root).values(), key=lambda node: node.id)
    renumber = {node.id: new_id for new_id, node in enumerate(nodes, start=1)}

    records: list[MapRecord] = []
    for node in nodes:
        records.append(
            {
                "id": renumber[node.id],
                "roomType": int(node.room_type),
                "monsterIndex": (
                    node.monster_index if node.room_type == RoomType.BATTLE else None
                ),
                "edges": [renumber.get(target, 0) if target > 0 else 0 for target in node.edges],
            }
        )
    return records


def dumps_records(records: Sequence[Mapping[str, Any]]) -> str:
    """Render records as the canonical JSON document."""
    return json.dumps(list(records), indent=2)


def serialize_map(root: Node) -> str:
    """Flatten *root* and render it as JSON."""
    return dumps_records(flatten(root))


# ---------------------------------------------------------------------------
# Reconstruct
# ---------------------------------------------------------------------------


def find_roots(records: Sequence[Mapping[str, Any]]) -> list[int]:
    """Ids of records that no other record references."""
    referenced = {
        target for record in records for target in record.get("edges") or [] if target > 0
    }
    return [record["id"] for record in records if record["id"] not in referenced]


def reconstruct(records: Sequence[Mapping[str, Any]]) -> Node:
    """Rebuild the node graph described by validated *records*.

    Each id becomes exactly one ``Node``; convergent rooms are shared.
    ``parent`` is the first predecessor met depth-first. ``depth`` is the
    longest distance from the root, so every edge points to a deeper room.

    Raises:
        ReconstructionError: No unique root, or an edge names a missing id.
    """
    roots = find_roots(records)
    if len(roots) != 1:
        msg = f"Could not reconstruct map: expected exactly one root room, found {len(roots)}"
        raise ReconstructionError(msg)

    by_id = {record["id"]: record for record in records}
    root = _node_from_record(by_id[roots[0]], None)
    built: dict[int, Node] = {root.id: root}

    # Depth-first with an explicit stack; maps can be deeper than the
    # interpreter's recursion limit.
    stack: list[tuple[Node, Iterator[int]]] = [(root, iter(root.successor_ids()))]
    while stack:
        node, targets = stack[-1]
        target = next(targets, None)
        if target is None:
            stack.pop()
            continue

        child = built.get(target)
        if child is None:
            child_record = by_id.get(target)
            if child_record is None:
                msg = (
                    f"Could not reconstruct map: room {node.id} "
                    f"references missing room {target}"
                )
                raise ReconstructionError(msg)
            child = _node_from_record(child_record, node)
            built[target] = child
            stack.append((child, iter(child.successor_ids())))
        node.children.append(child)

    _assign_depths(root)
    return root


def _node_from_record(record: Mapping[str, Any], parent: Node | None) -> Node:
    return Node(
        id=record["id"],
        depth=0 if parent is None else parent.depth + 1,
        room_type=RoomType(record["roomType"]),
        monster_index=record.get("monsterIndex"),
        edges=list(record.get("edges") or [0] * DEFAULT_CAPACITY),
        parent=parent,
    )


def _assign_depths(root: Node) -> None:
    """Set each depth to the longest path length from *root*."""
    g = digraph_from_nodes(root)
    if not nx.is_directed_acyclic_graph(g):
        raise ReconstructionError("Could not reconstruct map: passages form a cycle")

    nodes = reachable_from(root)
    depths = dict.fromkeys(nodes, 0)
    for node_id in nx.topological_sort(g):
        for target in g.successors(node_id):
            depths[target] = max(depths[target], depths[node_id] + 1)
    for node_id, depth in depths.items():
        nodes[node_id].depth = depth


# ---------------------------------------------------------------------------
# Document round-trip
# ---------------------------------------------------------------------------


def parse_document(text: str) -> list[Any]:
    """Decode a map document, insisting on a top-level JSON array.

    Raises:
        MalformedInputError: Invalid JSON or a non-array document.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Error parsing JSON: {exc}"
        raise MalformedInputError(msg) from exc
    if not isinstance(data, list):
        raise MalformedInputError("Invalid map file: expected a JSON array of room records")
    return data


def deserialize_map(
    text: str,
    *,
    capacity: int = DEFAULT_CAPACITY,
    validator: MapValidator | None = None,
) -> LoadResult:
    """Parse, validate and rebuild a map document. Never raises.

    Failures come back as a list of human-readable messages.
    """
    try:
        data = parse_document(text)
    except MalformedInputError as exc:
        return LoadResult(root=None, errors=[str(exc)])

    validator = validator or MapValidator(capacity=capacity)
    if not validator.validate(data):
        return LoadResult(root=None, errors=validator.get_errors())

    try:
        root = reconstruct(data)
    except ReconstructionError as exc:
        return LoadResult(root=None, errors=[str(exc)])
    return LoadResult(root=root)
