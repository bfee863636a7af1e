import logging
import random
from typing import Dict, Optional

from .clock import PRIORITY_SPAWN, VirtualClock
from .config import SimulationConfig
from .controller import Intersection, SignalController
from .departure import DepartureScheduler
from .lane import DIRECTIONS
from .presentation import PresentationAdapter, RenderSurface
from .spawner import Spawner
from .vehicle import Vehicle, VehicleFactory

# -----------------------------------------------------------------------------
#  Simulation engine
#
#  Owns every piece of mutable state, so several engines can live side by side
#  (one per test, for instance). Nothing runs until start().
# -----------------------------------------------------------------------------


class SimulationEngine:
    def __init__(self, config: SimulationConfig, surface: RenderSurface, rng: Optional[random.Random] = None):
        self.config = config
        self.surface = surface
        self.rng = rng or random.Random(config.random_seed)

        self.clock = VirtualClock()
        self.factory = VehicleFactory(config.palette_size)
        self.intersection = Intersection(capacity=config.lane_capacity)
        self.lanes = self.intersection.lanes

        self.adapter = PresentationAdapter(surface, self.lanes, self.clock)
        self.departures = DepartureScheduler(
            self.clock,
            self.adapter,
            stagger_ms=config.stagger_ms,
            animation_ms=config.pass_animation_ms,
            buffer_ms=config.removal_buffer_ms,
            on_removed=self._record_departed,
        )
        self.controller = SignalController(
            self.intersection, self.clock, self.departures, self.adapter,
            release_delay_ms=config.release_delay_ms,
        )
        self.spawner = Spawner(self.lanes, self.factory, self.adapter,
                               probability=config.spawn_probability, rng=self.rng)

        self.departed: Dict[str, int] = {d: 0 for d in DIRECTIONS}
        self.started = False

    def _record_departed(self, vehicle: Vehicle):
        self.departed[vehicle.direction] += 1

    def start(self):
        if self.started:
            raise RuntimeError("simulation already started")
        self.adapter.check_surface()

        for _ in range(self.config.initial_spawn_rounds):
            self.spawner.try_spawn()
        self.spawner.seed_initial(self.config.initial_target)
        self.controller.show_lights()

        self.clock.call_every(self.config.spawn_interval_ms, self.spawner.try_spawn, priority=PRIORITY_SPAWN)
        self.controller.start(self.config.cycle_time_ms, self.config.startup_delay_ms)
        self.started = True
        logging.info("Simulation started.")

    def step(self, dt_ms: float) -> int:
        return self.clock.advance(dt_ms)

    def run_headless(self, duration_ms: float):
        if not self.started:
            self.start()
        self.clock.run_until(self.clock.now + duration_ms)

    # debug actions
    def force_spawn(self):
        self.spawner.try_spawn()

    def force_cycle(self):
        self.controller.cycle()

    # -------------------------------------------------------------------------
    #  Stats
    # -------------------------------------------------------------------------

    def stats(self) -> dict:
        return {
            "time_seconds": int(self.clock.now // 1000),
            "cycles": self.controller.cycles,
            "vehicles_created": self.factory.created,
            "queued": self.intersection.total_queued(),
            "spawned": dict(self.spawner.spawned),
            "rejected": {d: self.lanes[d].rejected for d in DIRECTIONS},
            "departed": dict(self.departed),
        }

    def write_stats_csv(self, path: str) -> bool:
        s = self.stats()
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write("metric,value\n")
                f.write(f"time_seconds,{s['time_seconds']}\n")
                f.write(f"cycles,{s['cycles']}\n")
                f.write(f"vehicles_created,{s['vehicles_created']}\n")
                f.write(f"queued,{s['queued']}\n")
                for key in ("spawned", "rejected", "departed"):
                    for d in DIRECTIONS:
                        f.write(f"{key}_{d},{s[key][d]}\n")
            logging.info("Wrote %s", path)
            return True
        except OSError as e:
            logging.error("Failed writing %s: %s", path, str(e))
            return False

    def log_summary(self):
        s = self.stats()
        logging.info("Direction-wise departures:")
        logging.info("North: %d | East: %d | South: %d | West: %d",
                     *(s["departed"][d] for d in DIRECTIONS))
        logging.info("Total departed: %d | Rejected arrivals: %d",
                     sum(s["departed"].values()), sum(s["rejected"].values()))
        logging.info("Total time: %d", s["time_seconds"])
