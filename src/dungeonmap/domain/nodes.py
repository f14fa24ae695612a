"""Room graph model — the ``Node`` vertex type and structural helpers.

INVARIANT: ``edges`` is the authoritative adjacency. ``children`` mirrors its
non-zero entries for traversal convenience and every public mutation keeps
the two in lockstep. ``parent`` records one predecessor at creation time and
is informational only.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from dungeonmap.domain.types import DEFAULT_CAPACITY, RoomType


@dataclass(eq=False)
class Node:
    """A room in the dungeon graph.

    Attributes:
        id: Positive identifier, unique within one graph.
        depth: Distance from the root at creation time. Provenance, not a
            recomputed shortest path.
        room_type: EMPTY (root marker), BATTLE or GOAL.
        monster_index: Catalog index for BATTLE rooms, otherwise ``None``.
        edges: Fixed-length slot list; ``0`` marks an empty slot.
        children: Successor nodes mirroring the non-zero ``edges``.
        parent: One predecessor, set when the node was created.
        x, y: Display coordinates written by the layout engine.
        subtree_width: Horizontal span cached on the root by the layout engine.
    """

    id: int
    depth: int
    room_type: RoomType = RoomType.BATTLE
    monster_index: int | None = None
    edges: list[int] = field(default_factory=lambda: [0] * DEFAULT_CAPACITY)
    children: list[Node] = field(default_factory=list)
    parent: Node | None = None
    x: float = 0.0
    y: float = 0.0
    subtree_width: float | None = None

    @property
    def capacity(self) -> int:
        return len(self.edges)

    @property
    def is_goal(self) -> bool:
        return self.room_type == RoomType.GOAL

    def successor_ids(self) -> list[int]:
        """Non-zero edge targets in slot order."""
        return [target for target in self.edges if target > 0]

    def make_goal(self) -> None:
        """Turn this room into a terminal GOAL room."""
        self.room_type = RoomType.GOAL
        self.monster_index = None
        self.edges = [0] * self.capacity
        self.children = []

    def __repr__(self) -> str:
        return (
            f"Node(id={self.id}, depth={self.depth}, room_type={self.room_type.name}, "
            f"monster_index={self.monster_index}, edges={self.edges})"
        )


@dataclass
class IdCounter:
    """Monotonic id source shared by reference across a generation pass."""

    value: int = 1

    def claim(self) -> int:
        """Return the next free id and advance the counter."""
        current = self.value
        self.value += 1
        return current


def out_degree(node: Node) -> int:
    """Count the non-zero edge slots of *node*."""
    return sum(1 for target in node.edges if target > 0)


def create_goal_node(parent_depth: int, node_id: int, capacity: int = DEFAULT_CAPACITY) -> Node:
    """Create a GOAL room one level below *parent_depth*."""
    return Node(
        id=node_id,
        depth=parent_depth + 1,
        room_type=RoomType.GOAL,
        monster_index=None,
        edges=[0] * capacity,
    )


def create_battle_node(
    parent_depth: int,
    node_id: int,
    monster_index: int = 0,
    capacity: int = DEFAULT_CAPACITY,
) -> Node:
    """Create a BATTLE room (no successors yet) one level below *parent_depth*."""
    return Node(
        id=node_id,
        depth=parent_depth + 1,
        room_type=RoomType.BATTLE,
        monster_index=monster_index,
        edges=[0] * capacity,
    )


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def reachable_from(root: Node) -> dict[int, Node]:
    """Breadth-first collect every node reachable from *root* along ``edges``.

    Edge ids are resolved through the owning node's ``children`` first and
    then through nodes discovered so far. Each id is visited at most once,
    so convergent rooms appear once.
    """
    found: dict[int, Node] = {}
    known: dict[int, Node] = {root.id: root}
    queue: deque[Node] = deque([root])

    while queue:
        node = queue.popleft()
        if node.id in found:
            continue
        found[node.id] = node

        by_id = {child.id: child for child in node.children}
        known.update(by_id)
        for target in node.edges:
            if target <= 0 or target in found:
                continue
            child = by_id.get(target) or known.get(target)
            if child is not None:
                queue.append(child)

    return found


def max_depth(root: Node) -> int:
    """Largest ``depth`` among nodes reachable from *root*."""
    return max(node.depth for node in reachable_from(root).values())


def max_id(root: Node) -> int:
    """Largest ``id`` among nodes reachable from *root*."""
    return max(reachable_from(root))


def find_node(root: Node, node_id: int) -> Node | None:
    """Look up a reachable node by id."""
    return reachable_from(root).get(node_id)
