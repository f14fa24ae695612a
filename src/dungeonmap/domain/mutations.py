"""Edge-level edits on an existing room graph.

Every function either applies its whole change or returns a failure value
with nothing modified. None of them touch depths, recompute room types or
re-run the layout; callers re-run :func:`dungeonmap.domain.layout.layout_map`
after any topology change.
"""

from __future__ import annotations

from dungeonmap.domain.nodes import IdCounter, Node, create_goal_node, out_degree
from dungeonmap.domain.types import RoomType


def can_add_edge(parent: Node, child_id: int) -> bool:
    """Whether :func:`add_edge` would accept *child_id* on *parent*."""
    if child_id <= 0 or child_id in parent.edges:
        return False
    return out_degree(parent) < parent.capacity


def add_edge(parent: Node, child: Node) -> bool:
    """Link *parent* to *child* through the first empty edge slot.

    Fails when the edge already exists or every slot is taken.
    """
    if not can_add_edge(parent, child.id):
        return False

    slot = parent.edges.index(0)
    parent.edges[slot] = child.id
    if not any(existing is child for existing in parent.children):
        parent.children.append(child)
    return True


def remove_edge(parent: Node, child_id: int) -> bool:
    """Clear the slot holding *child_id*. The child node itself is left alone."""
    if child_id <= 0 or child_id not in parent.edges:
        return False

    parent.edges[parent.edges.index(child_id)] = 0
    parent.children = [child for child in parent.children if child.id != child_id]
    return True


def add_goal_child(parent: Node, counter: IdCounter) -> Node | None:
    """Attach a fresh GOAL room below *parent*.

    Returns ``None`` without claiming an id when the edge would be rejected.
    """
    if not can_add_edge(parent, counter.value):
        return None

    goal = create_goal_node(parent.depth, counter.claim(), parent.capacity)
    goal.parent = parent
    add_edge(parent, goal)
    return goal


def set_monster(node: Node, monster_index: int) -> bool:
    """Assign a monster to a BATTLE room. Other room types are refused."""
    if node.room_type != RoomType.BATTLE or monster_index < 0:
        return False
    node.monster_index = monster_index
    return True
