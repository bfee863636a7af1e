"""
Test Suite: Engine runs

Whole-system properties over long virtual runs: capacity, ranks, FIFO
departures and the seeding guarantee.
"""

import random

import pytest

from intersection_sim.config import SimulationConfig
from intersection_sim.controller import LightState
from intersection_sim.engine import SimulationEngine
from intersection_sim.lane import DIRECTIONS
from intersection_sim.presentation import MemorySurface, SurfaceInitError


@pytest.fixture
def engine(config, surface):
    return SimulationEngine(config, surface)


def record_releases(engine):
    releases = []
    original = engine.departures.schedule

    def schedule(vehicles):
        releases.append([(v.direction, v.vid) for v in vehicles])
        original(vehicles)

    engine.departures.schedule = schedule
    return releases


class TestStartup:

    def test_seeding_before_first_cycle(self, engine, surface):
        engine.start()
        assert engine.intersection.total_queued() >= 5
        assert engine.controller.cycles == 0
        assert surface.indicators['north']
        assert surface.counts_text() == ",".join(str(len(engine.lanes[d])) for d in DIRECTIONS)

    def test_first_cycle_after_startup_delay(self, engine):
        engine.start()
        engine.step(299)
        assert engine.controller.cycles == 0
        engine.step(1)
        assert engine.controller.cycles == 1
        assert len(engine.lanes['north']) == 0
        assert engine.controller.state is LightState.EAST_GREEN

    def test_missing_container_aborts(self, config):
        surface = MemorySurface(directions=('north', 'east', 'south'))
        engine = SimulationEngine(config, surface)
        with pytest.raises(SurfaceInitError) as exc:
            engine.start()
        assert exc.value.missing == ['west']
        assert not engine.started
        assert engine.intersection.total_queued() == 0
        assert engine.clock.pending() == 0

    def test_start_twice(self, engine):
        engine.start()
        with pytest.raises(RuntimeError):
            engine.start()

    def test_same_seed_same_run(self, config):
        a = SimulationEngine(config, MemorySurface())
        b = SimulationEngine(config, MemorySurface())
        a.run_headless(60000)
        b.run_headless(60000)
        assert a.stats() == b.stats()


@pytest.mark.slow
class TestLongRun:

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_invariants_hold_every_step(self, seed):
        config = SimulationConfig(random_seed=seed, log_file="")
        engine = SimulationEngine(config, MemorySurface())
        engine.start()
        for _ in range(3000):
            engine.step(100)
            for lane in engine.lanes.values():
                assert len(lane) <= lane.capacity
                assert lane.check_invariants()

    def test_departures_follow_enqueue_order(self, config):
        engine = SimulationEngine(config, MemorySurface())
        releases = record_releases(engine)
        engine.run_headless(10 * 60 * 1000)
        assert releases
        for batch in releases:
            vids = [vid for _, vid in batch]
            assert vids == sorted(vids)
            assert len({d for d, _ in batch}) <= 1

    def test_round_robin_over_many_ticks(self, config):
        engine = SimulationEngine(config, MemorySurface())
        releases = []
        original = engine.controller.release

        def release(lane):
            releases.append(lane.direction)
            return original(lane)

        engine.controller.release = release
        engine.run_headless(300 + 5000 * 399)
        assert len(releases) == 400
        assert releases == list(DIRECTIONS) * 100
        assert engine.controller.state is LightState.NORTH_GREEN

    def test_handles_are_released(self, config):
        surface = MemorySurface()
        engine = SimulationEngine(config, surface)
        engine.run_headless(120000)
        on_screen = sum(len(c) for c in surface.containers.values())
        # queued vehicles plus the ones still animating out
        assert on_screen == engine.intersection.total_queued() + engine.departures.in_flight
        assert sum(engine.departed.values()) == len(surface.removed)


class TestEngineStats:

    def test_stats_add_up(self, engine):
        engine.run_headless(90000)
        s = engine.stats()
        assert s["time_seconds"] == 90
        spawned = sum(s["spawned"].values())
        departed = sum(s["departed"].values())
        assert spawned == s["queued"] + departed + engine.departures.in_flight
        assert s["vehicles_created"] == spawned + sum(s["rejected"].values())

    def test_write_stats_csv(self, engine, tmp_path):
        engine.run_headless(20000)
        path = tmp_path / "stats.csv"
        assert engine.write_stats_csv(str(path))
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "metric,value"
        assert "time_seconds,20" in lines
        assert any(line.startswith("departed_north,") for line in lines)

    def test_write_stats_csv_failure_is_logged(self, engine, tmp_path, caplog):
        assert not engine.write_stats_csv(str(tmp_path / "missing" / "stats.csv"))
        assert "Failed writing" in caplog.text

    def test_force_actions(self, config, surface):
        config.spawn_probability = 1.0
        engine = SimulationEngine(config, surface, rng=random.Random(0))
        engine.start()
        assert len(engine.lanes['north']) == 3
        engine.force_cycle()
        assert len(engine.lanes['north']) == 0
        engine.force_spawn()
        assert len(engine.lanes['north']) == 1
