"""Layered barycenter layout for the room graph.

Rooms are bucketed by ``depth``. Each row is placed left-to-right in the
order of its ideal x (the mean x of already-placed predecessors), pushed
apart to a hard minimum spacing, then shifted back toward the barycenter
of the row. Writes ``x``/``y`` on every reachable node and
``subtree_width`` on the root.

INVARIANT: two rooms sharing a depth are at least
``node_width + min_spacing`` apart horizontally.
"""

from __future__ import annotations

from dataclasses import dataclass

from dungeonmap.domain.nodes import Node, reachable_from


@dataclass(frozen=True)
class LayoutMetrics:
    """Geometry constants for the layout pass."""

    node_width: float = 140.0
    level_height: float = 150.0
    min_spacing: float = 40.0
    center_x: float = 600.0
    base_y: float = 50.0
    left_margin: float = 100.0
    max_shift: float = 1000.0


def layout_map(root: Node, metrics: LayoutMetrics | None = None) -> None:
    """Assign display coordinates to every room reachable from *root*."""
    m = metrics or LayoutMetrics()
    nodes = reachable_from(root)

    by_depth: dict[int, list[Node]] = {}
    predecessors: dict[int, list[Node]] = {}
    for node in nodes.values():
        by_depth.setdefault(node.depth, []).append(node)
        for target in node.successor_ids():
            predecessors.setdefault(target, []).append(node)

    root.x = m.center_x
    root.y = m.base_y
    placed: set[int] = {root.id}

    for depth in sorted(by_depth):
        row = [node for node in by_depth[depth] if node is not root]
        if not row:
            continue

        ideals: dict[int, float] = {}
        for node in row:
            parents = [p for p in predecessors.get(node.id, []) if p.id in placed]
            if parents:
                ideals[node.id] = sum(p.x for p in parents) / len(parents)
            else:
                ideals[node.id] = m.center_x

        row.sort(key=lambda node: (ideals[node.id], node.id))
        _place_row(row, ideals, m)

        for node in row:
            node.y = m.base_y + depth * m.level_height
            placed.add(node.id)

    xs = [node.x for node in nodes.values()]
    root.subtree_width = max(xs) - min(xs) + m.node_width


def _place_row(row: list[Node], ideals: dict[int, float], m: LayoutMetrics) -> None:
    """Spread a sorted row to the minimum spacing and recentre it."""
    step = m.node_width + m.min_spacing
    positions: list[float] = []
    for node in row:
        ideal = ideals[node.id]
        if positions:
            positions.append(max(ideal, positions[-1] + step))
        else:
            positions.append(ideal)

    leftmost = positions[0]
    rightmost = positions[-1]
    group_center = (leftmost + rightmost) / 2
    ideal_center = sum(ideals.values()) / len(ideals)
    offset = max(m.left_margin - leftmost, min(ideal_center - group_center, m.max_shift))

    for node, x in zip(row, positions, strict=True):
        node.x = x + offset
