"""NetworkX views of the room graph.

Built on demand from either live nodes or flat records; nothing is cached.
Used for cycle detection, topological ordering and read-only statistics.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeAlias

import networkx as nx

from dungeonmap.domain.nodes import Node, reachable_from
from dungeonmap.domain.types import RoomType

RoomGraph: TypeAlias = nx.DiGraph


def digraph_from_nodes(root: Node) -> RoomGraph:
    """Build a DiGraph of every room reachable from *root*."""
    g: RoomGraph = nx.DiGraph()
    nodes = reachable_from(root)
    for node in nodes.values():
        g.add_node(node.id, room_type=int(node.room_type), depth=node.depth)
    for node in nodes.values():
        for target in node.successor_ids():
            if target in nodes:
                g.add_edge(node.id, target)
    return g


def digraph_from_records(records: Iterable[Mapping[str, Any]]) -> RoomGraph:
    """Build a DiGraph from flat records, skipping edges to unknown ids."""
    records = list(records)
    g: RoomGraph = nx.DiGraph()
    for record in records:
        g.add_node(record["id"], room_type=record.get("roomType"))
    for record in records:
        for target in record.get("edges") or []:
            if isinstance(target, int) and target > 0 and target in g:
                g.add_edge(record["id"], target)
    return g


def find_cycle(g: RoomGraph) -> list[int]:
    """Return the node ids of one directed cycle, or an empty list."""
    try:
        cycle = nx.find_cycle(g, orientation="original")
    except nx.NetworkXNoCycle:
        return []
    return [source for source, _target, _direction in cycle]


def graph_stats(root: Node) -> dict[str, Any]:
    """Summarise the map reachable from *root*."""
    g = digraph_from_nodes(root)
    room_types = nx.get_node_attributes(g, "room_type")
    convergent = sorted(node_id for node_id, degree in g.in_degree() if degree > 1)
    return {
        "rooms": g.number_of_nodes(),
        "passages": g.number_of_edges(),
        "battle_rooms": sum(1 for t in room_types.values() if t == RoomType.BATTLE),
        "goal_rooms": sum(1 for t in room_types.values() if t == RoomType.GOAL),
        "convergent_rooms": convergent,
        "longest_path": nx.dag_longest_path_length(g) if nx.is_directed_acyclic_graph(g) else None,
    }


def creates_cycle(root: Node, parent_id: int, child_id: int) -> bool:
    """Whether a new passage ``parent_id -> child_id`` would close a loop."""
    if parent_id == child_id:
        return True
    g = digraph_from_nodes(root)
    if child_id not in g or parent_id not in g:
        return False
    return nx.has_path(g, child_id, parent_id)
