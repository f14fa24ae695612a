"""Tests for procedural map generation."""

from __future__ import annotations

import random

import pytest

from dungeonmap.domain.errors import EmptyCatalogError
from dungeonmap.domain.generation import (
    DEPTH_WEIGHTS,
    MapGenerator,
    find_shared_goal,
    generate_map,
    pick_monster,
    weights_for_depth,
)
from dungeonmap.domain.nodes import IdCounter, Node, out_degree, reachable_from
from dungeonmap.domain.serialization import flatten
from dungeonmap.domain.types import RoomType
from dungeonmap.domain.validation import MapValidator

MONSTERS = [0, 1, 2, 3]


def _rooms(root: Node, room_type: RoomType) -> list[Node]:
    return [n for n in reachable_from(root).values() if n.room_type == room_type]


class TestWeights:
    @pytest.mark.parametrize(
        ("depth", "band"),
        [(0, 0), (1, 0), (2, 1), (3, 2), (4, 3)],
    )
    def test_bands_for_depth_four(self, depth: int, band: int) -> None:
        assert weights_for_depth(depth, 4) == DEPTH_WEIGHTS[band][1]

    def test_deeper_than_max_uses_last_band(self) -> None:
        assert weights_for_depth(9, 4) == DEPTH_WEIGHTS[-1][1]

    def test_each_table_sums_to_hundred(self) -> None:
        assert all(sum(weights) == 100 for _bound, weights in DEPTH_WEIGHTS)


class TestPickMonster:
    def test_empty_catalog(self, rng: random.Random) -> None:
        with pytest.raises(EmptyCatalogError):
            pick_monster(1, 3, [], rng)

    def test_single_monster(self, rng: random.Random) -> None:
        assert {pick_monster(d, 4, [7], rng) for d in range(5)} == {7}

    def test_extra_catalog_entries_get_zero_weight(self, rng: random.Random) -> None:
        picks = {pick_monster(4, 4, [0, 1, 2, 3, 4, 5], rng) for _ in range(300)}
        assert picks <= {0, 1, 2, 3}

    def test_shallow_rooms_favour_first_monster(self) -> None:
        rng = random.Random(7)
        picks = [pick_monster(1, 4, MONSTERS, rng) for _ in range(500)]
        assert picks.count(0) > picks.count(3)

    def test_deep_rooms_favour_last_monster(self) -> None:
        rng = random.Random(7)
        picks = [pick_monster(4, 4, MONSTERS, rng) for _ in range(500)]
        assert picks.count(3) > picks.count(0)


class TestGenerateMap:
    def test_depth_one_gives_root_and_goals(self, rng: random.Random) -> None:
        generated = generate_map(1, MONSTERS, rng=rng)
        root = generated.root
        assert root.room_type == RoomType.EMPTY
        assert root.monster_index is None
        assert 1 <= out_degree(root) <= 4
        assert all(child.room_type == RoomType.GOAL for child in root.children)
        assert len(reachable_from(root)) == 1 + out_degree(root)

    @pytest.mark.parametrize("depth", [2, 3, 4])
    def test_one_shared_goal(self, depth: int) -> None:
        for seed in range(10):
            root = generate_map(depth, MONSTERS, rng=random.Random(seed)).root
            goals = _rooms(root, RoomType.GOAL)
            assert len(goals) == 1
            assert goals[0].depth == depth

    @pytest.mark.parametrize("depth", [1, 2, 3, 4])
    def test_output_passes_validation(self, depth: int) -> None:
        validator = MapValidator()
        for seed in range(10):
            root = generate_map(depth, MONSTERS, rng=random.Random(seed)).root
            assert validator.validate(flatten(root)), validator.get_errors()

    def test_ids_are_contiguous(self, rng: random.Random) -> None:
        generated = generate_map(3, MONSTERS, rng=rng)
        ids = sorted(reachable_from(generated.root))
        assert ids == list(range(1, len(ids) + 1))
        assert generated.counter.value == len(ids) + 1

    def test_battle_rooms_have_doors_and_monsters(self, rng: random.Random) -> None:
        root = generate_map(4, MONSTERS, rng=rng).root
        battles = _rooms(root, RoomType.BATTLE)
        assert battles
        for room in battles:
            assert out_degree(room) >= 1
            assert room.monster_index in MONSTERS

    def test_branching_bound(self, rng: random.Random) -> None:
        root = generate_map(3, MONSTERS, rng=rng, max_branching=2).root
        assert all(out_degree(node) <= 2 for node in reachable_from(root).values())

    def test_same_seed_same_map(self) -> None:
        first = generate_map(4, MONSTERS, rng=random.Random(99)).root
        second = generate_map(4, MONSTERS, rng=random.Random(99)).root
        assert flatten(first) == flatten(second)

    def test_children_record_parent(self, rng: random.Random) -> None:
        root = generate_map(3, MONSTERS, rng=rng).root
        for child in root.children:
            assert child.parent is root

    def test_empty_catalog(self, rng: random.Random) -> None:
        with pytest.raises(EmptyCatalogError):
            generate_map(3, [], rng=rng)

    def test_depth_below_one(self, rng: random.Random) -> None:
        with pytest.raises(ValueError, match="max_depth"):
            generate_map(0, MONSTERS, rng=rng)

    def test_branching_above_capacity(self, rng: random.Random) -> None:
        with pytest.raises(ValueError, match="max_branching"):
            MapGenerator(3, MONSTERS, rng=rng, max_branching=7)


class TestSetDoorCount:
    def _generator(self, root: Node, seed: int = 5) -> MapGenerator:
        return MapGenerator(
            3,
            MONSTERS,
            rng=random.Random(seed),
            counter=IdCounter(max(reachable_from(root)) + 1),
            shared_goal=find_shared_goal(root, 3),
        )

    def test_grow_adds_subtrees(self) -> None:
        root = generate_map(3, MONSTERS, rng=random.Random(3)).root
        gen = self._generator(root)
        assert gen.set_door_count(root, 6)
        assert out_degree(root) == 6
        assert len(_rooms(root, RoomType.GOAL)) == 1
        assert MapValidator().validate(flatten(root))

    def test_shrink_drops_last_slots(self) -> None:
        root = generate_map(3, MONSTERS, rng=random.Random(3)).root
        self._generator(root).set_door_count(root, 6)
        first = root.edges[0]
        assert self._generator(root).set_door_count(root, 1)
        assert root.successor_ids() == [first]

    def test_count_is_clamped(self) -> None:
        root = generate_map(2, MONSTERS, rng=random.Random(3)).root
        gen = self._generator(root)
        gen.set_door_count(root, 0)
        assert out_degree(root) == 1
        gen.set_door_count(root, 42)
        assert out_degree(root) == root.capacity

    def test_goal_room_refused(self) -> None:
        root = generate_map(2, MONSTERS, rng=random.Random(3)).root
        goal = find_shared_goal(root, 2)
        assert goal is not None
        assert not self._generator(root).set_door_count(goal, 3)
        assert out_degree(goal) == 0


class TestFindSharedGoal:
    def test_finds_goal_at_depth(self, rng: random.Random) -> None:
        root = generate_map(3, MONSTERS, rng=rng).root
        goal = find_shared_goal(root, 3)
        assert goal is not None
        assert goal.room_type == RoomType.GOAL

    def test_none_at_other_depth(self, rng: random.Random) -> None:
        root = generate_map(3, MONSTERS, rng=rng).root
        assert find_shared_goal(root, 5) is None


class TestDeepGeneration:
    def test_single_branch_chain(self, rng: random.Random) -> None:
        root = generate_map(1500, MONSTERS, rng=rng, max_branching=1).root
        nodes = reachable_from(root)
        assert len(nodes) == 1501
        assert len(_rooms(root, RoomType.GOAL)) == 1
        assert MapValidator().validate(flatten(root))

    def test_grow_deep_room(self) -> None:
        generator = MapGenerator(1500, MONSTERS, rng=random.Random(3), max_branching=1)
        root = generator.generate().root
        assert generator.set_door_count(root, 2)
        assert out_degree(root) == 2
        assert len(_rooms(root, RoomType.GOAL)) == 1
