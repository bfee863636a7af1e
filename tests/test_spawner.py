"""
Test Suite: Spawning and initial seeding
"""

import random

import pytest

from intersection_sim.lane import DIRECTIONS, make_lanes
from intersection_sim.spawner import Spawner


class TestSpawnTick:

    def test_every_trial_succeeds_once_per_lane(self, lanes, factory, adapter, surface, always_spawn):
        spawner = Spawner(lanes, factory, adapter, probability=0.4, rng=always_spawn)
        spawned = spawner.try_spawn()
        assert len(spawned) == 4
        assert [len(lanes[d]) for d in DIRECTIONS] == [1, 1, 1, 1]
        assert surface.counts_text() == "1,1,1,1"

    def test_probability_zero_never_spawns(self, lanes, factory, rng):
        spawner = Spawner(lanes, factory, probability=0.0, rng=rng)
        for _ in range(50):
            assert spawner.try_spawn() == []
        assert sum(len(lane) for lane in lanes.values()) == 0

    def test_full_lanes_drop_arrivals(self, lanes, factory, always_spawn):
        spawner = Spawner(lanes, factory, probability=1.0, rng=always_spawn)
        for _ in range(8):
            spawner.try_spawn()
        assert all(len(lane) == 5 for lane in lanes.values())
        assert all(lane.rejected == 3 for lane in lanes.values())
        assert spawner.spawned == {d: 5 for d in DIRECTIONS}

    def test_spawn_rate_roughly_matches_probability(self, factory):
        lanes = make_lanes(capacity=10 ** 6)
        spawner = Spawner(lanes, factory, probability=0.4, rng=random.Random(5))
        for _ in range(2500):
            spawner.try_spawn()
        rate = sum(len(lane) for lane in lanes.values()) / (2500 * 4)
        assert rate == pytest.approx(0.4, abs=0.03)

    def test_enqueued_vehicles_get_handles(self, lanes, factory, adapter, surface, always_spawn):
        spawner = Spawner(lanes, factory, adapter, rng=always_spawn)
        spawner.try_spawn()
        spawner.try_spawn()
        for d in DIRECTIONS:
            assert all(v.handle is not None for v in lanes[d])
            assert [h.slot for h in surface.handles(d)] == [0, 1]

    def test_invalid_probability(self, lanes, factory):
        with pytest.raises(ValueError):
            Spawner(lanes, factory, probability=1.5)


class TestInitialSeeding:

    def test_tops_up_to_target(self, lanes, factory, rng):
        spawner = Spawner(lanes, factory, rng=rng)
        lanes['north'].try_enqueue(factory.create())
        lanes['west'].try_enqueue(factory.create())
        added = spawner.seed_initial(5)
        assert added == 3
        assert spawner.total() == 5

    def test_never_removes_when_above_target(self, lanes, factory, always_spawn):
        spawner = Spawner(lanes, factory, rng=always_spawn)
        spawner.try_spawn()
        spawner.try_spawn()
        assert spawner.seed_initial(5) == 0
        assert spawner.total() == 8

    def test_only_picks_lanes_with_room(self, lanes, factory, rng):
        for _ in range(5):
            lanes['north'].try_enqueue(factory.create())
        spawner = Spawner(lanes, factory, rng=rng)
        spawner.seed_initial(12)
        assert len(lanes['north']) == 5
        assert lanes['north'].rejected == 0
        assert spawner.total() == 12

    def test_stops_early_when_everything_is_full(self, factory, rng):
        lanes = make_lanes(capacity=2)
        spawner = Spawner(lanes, factory, rng=rng)
        added = spawner.seed_initial(100)
        assert added == 8
        assert spawner.total() == min(100, 2 * len(DIRECTIONS))

    @pytest.mark.parametrize("seed", range(10))
    def test_guarantee_holds_for_any_seed(self, factory, seed):
        lanes = make_lanes()
        spawner = Spawner(lanes, factory, rng=random.Random(seed))
        spawner.try_spawn()
        spawner.seed_initial(5)
        assert spawner.total() >= 5
        assert all(lane.check_invariants() for lane in lanes.values())
