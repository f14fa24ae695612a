"""Procedural dungeon generation.

Builds a fresh room graph from a maximum depth and the monster indices the
catalog currently offers:

- The root is an EMPTY room at depth 0 and never holds a monster.
- Every BATTLE room below ``max_depth - 1`` opens 1..``max_branching`` doors
  into fresh BATTLE rooms and the expansion recurses.
- Rooms at ``max_depth - 1`` (below the root) get a single door into one
  shared GOAL room, created once per generation pass.
- Rooms reaching ``max_depth`` become GOAL rooms.

Monster difficulty scales with depth through four weight tables.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass

from dungeonmap.domain.errors import EmptyCatalogError
from dungeonmap.domain.mutations import add_edge, remove_edge
from dungeonmap.domain.nodes import (
    IdCounter,
    Node,
    create_battle_node,
    create_goal_node,
    out_degree,
    reachable_from,
)
from dungeonmap.domain.types import DEFAULT_CAPACITY, RoomType

DEFAULT_MAX_BRANCHING = 4

# (upper depth-ratio bound, weights), easy monsters first.
DEPTH_WEIGHTS: tuple[tuple[float, tuple[int, ...]], ...] = (
    (0.25, (70, 20, 8, 2)),
    (0.5, (40, 35, 20, 5)),
    (0.75, (15, 30, 35, 20)),
    (float("inf"), (5, 15, 35, 45)),
)


@dataclass
class GeneratedMap:
    """Result of a generation pass: the root room and the next free id."""

    root: Node
    counter: IdCounter


def weights_for_depth(depth: int, max_depth: int) -> tuple[int, ...]:
    """Return the weight table for the depth band *depth* falls in."""
    ratio = depth / max(max_depth, 1)
    for bound, weights in DEPTH_WEIGHTS:
        if ratio <= bound:
            return weights
    return DEPTH_WEIGHTS[-1][1]


def pick_monster(
    depth: int,
    max_depth: int,
    monster_indices: Sequence[int],
    rng: random.Random,
) -> int:
    """Choose a catalog index, favouring tougher monsters deeper down.

    The weight table is truncated or zero-padded to the catalog length.
    A zero total weight falls back to the first index.
    """
    if not monster_indices:
        raise EmptyCatalogError("No monster indices available for generation")

    weights = list(weights_for_depth(depth, max_depth))[: len(monster_indices)]
    weights.extend([0] * (len(monster_indices) - len(weights)))

    total = sum(weights)
    if total <= 0:
        return monster_indices[0]

    remainder = rng.random() * total
    for index, weight in zip(monster_indices, weights, strict=True):
        remainder -= weight
        if remainder <= 0:
            return index
    return monster_indices[0]


class MapGenerator:
    """Expands BATTLE rooms into subtrees for one generation or edit session.

    The id counter and the shared goal room live on the instance so that
    every expansion in the session draws from the same state.
    """

    def __init__(
        self,
        max_depth: int,
        monster_indices: Sequence[int],
        *,
        rng: random.Random | None = None,
        capacity: int = DEFAULT_CAPACITY,
        max_branching: int = DEFAULT_MAX_BRANCHING,
        counter: IdCounter | None = None,
        shared_goal: Node | None = None,
    ) -> None:
        if max_depth < 1:
            msg = f"max_depth must be at least 1, got {max_depth}"
            raise ValueError(msg)
        if not monster_indices:
            raise EmptyCatalogError("No monster indices available for generation")
        if not 1 <= max_branching <= capacity:
            msg = f"max_branching must be between 1 and {capacity}, got {max_branching}"
            raise ValueError(msg)

        self.max_depth = max_depth
        self.monster_indices = list(monster_indices)
        self.rng = rng or random.Random()
        self.capacity = capacity
        self.max_branching = max_branching
        self.counter = counter or IdCounter()
        self.shared_goal = shared_goal

    # ------------------------------------------------------------------
    # Full generation
    # ------------------------------------------------------------------

    def generate(self) -> GeneratedMap:
        """Build a complete map below a fresh EMPTY root."""
        root = Node(
            id=self.counter.claim(),
            depth=0,
            room_type=RoomType.EMPTY,
            monster_index=None,
            edges=[0] * self.capacity,
        )
        self._branch(root, self.rng.randint(1, self.max_branching))
        return GeneratedMap(root=root, counter=self.counter)

    def expand(self, node: Node) -> None:
        """Expand one BATTLE room according to its depth."""
        doors = self._settle(node)
        if doors:
            self._branch(node, doors)

    # ------------------------------------------------------------------
    # Editing support
    # ------------------------------------------------------------------

    def set_door_count(self, node: Node, count: int) -> bool:
        """Grow or shrink *node*'s doors to *count*.

        Shrinking detaches the last filled slots in slot order. Growing attaches
        freshly generated subtrees. GOAL rooms are refused.
        """
        if node.room_type == RoomType.GOAL:
            return False

        count = max(1, min(count, self.capacity))
        while out_degree(node) > count:
            last = [target for target in node.edges if target > 0][-1]
            remove_edge(node, last)

        if out_degree(node) < count:
            self._branch(node, count - out_degree(node))
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _settle(self, node: Node) -> int:
        """Close off GOAL and penultimate rooms; otherwise draw a door count.

        Returns the number of fresh children *node* still needs.
        """
        if node.depth >= self.max_depth:
            node.make_goal()
            return 0

        if node.depth > 0 and node.depth == self.max_depth - 1:
            goal = self._shared_goal()
            if goal.parent is None:
                goal.parent = node
            add_edge(node, goal)
            return 0

        return self.rng.randint(1, self.max_branching)

    def _branch(self, node: Node, doors: int) -> None:
        """Create *doors* fresh BATTLE children under *node* and expand them.

        Each child is expanded completely before its next sibling is
        created. The walk keeps its own stack, so depth is not bounded by
        the interpreter's recursion limit.
        """
        pending: list[tuple[Node, int]] = [(node, doors)]
        while pending:
            parent, remaining = pending.pop()
            if remaining <= 0:
                continue
            pending.append((parent, remaining - 1))

            monster = pick_monster(parent.depth + 1, self.max_depth, self.monster_indices, self.rng)
            child = create_battle_node(parent.depth, self.counter.claim(), monster, self.capacity)
            child.parent = parent
            add_edge(parent, child)
            pending.append((child, self._settle(child)))

    def _shared_goal(self) -> Node:
        if self.shared_goal is None:
            self.shared_goal = create_goal_node(
                self.max_depth - 1, self.counter.claim(), self.capacity
            )
        return self.shared_goal


def find_shared_goal(root: Node, max_depth: int) -> Node | None:
    """Return the lowest-id GOAL room sitting at *max_depth*, if any."""
    goals = [
        node
        for node in reachable_from(root).values()
        if node.room_type == RoomType.GOAL and node.depth == max_depth
    ]
    return min(goals, key=lambda node: node.id, default=None)


def generate_map(
    max_depth: int,
    monster_indices: Sequence[int],
    *,
    rng: random.Random | None = None,
    capacity: int = DEFAULT_CAPACITY,
    max_branching: int = DEFAULT_MAX_BRANCHING,
) -> GeneratedMap:
    """Generate a new dungeon map.

    Args:
        max_depth: Depth of the GOAL rooms (at least 1).
        monster_indices: Catalog indices available for BATTLE rooms.
        rng: Random source; pass a seeded ``random.Random`` for repeatable maps.
        capacity: Edge slots per room.
        max_branching: Upper bound of the uniform door count per room.

    Raises:
        EmptyCatalogError: If *monster_indices* is empty.
        ValueError: If *max_depth* is below 1.
    """
    generator = MapGenerator(
        max_depth,
        monster_indices,
        rng=rng,
        capacity=capacity,
        max_branching=max_branching,
    )
    return generator.generate()
