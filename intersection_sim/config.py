import os
import sys
import json
import logging
from dataclasses import dataclass, fields, asdict
from typing import Optional

# -----------------------------------------------------------------------------
#  Logging
# -----------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = "simulation.log"):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

# -----------------------------------------------------------------------------
#  Config
#
#  Timings are milliseconds. Everything here is fixed once the simulation
#  starts; config.json only overrides the defaults at startup.
# -----------------------------------------------------------------------------


@dataclass
class SimulationConfig:
    # lanes and arrivals
    lane_capacity: int = 5
    spawn_interval_ms: float = 1200
    spawn_probability: float = 0.4
    initial_spawn_rounds: int = 3
    initial_target: int = 5
    palette_size: int = 5

    # signal cycle
    cycle_time_ms: float = 5000
    startup_delay_ms: float = 300
    release_delay_ms: float = 0

    # departures (pass_animation_ms matches the drawn transition)
    stagger_ms: float = 160
    pass_animation_ms: float = 2200
    removal_buffer_ms: float = 100

    # window
    screen_w: int = 900
    screen_h: int = 900
    fps: int = 60
    show_overlay: bool = True

    # run control
    sim_seconds: int = 0
    random_seed: Optional[int] = None

    # files
    stats_csv: str = "stats.csv"
    log_file: str = "simulation.log"

    def __post_init__(self):
        if self.lane_capacity <= 0:
            raise ValueError(f"lane_capacity must be > 0, got {self.lane_capacity}")
        if not 0.0 <= self.spawn_probability <= 1.0:
            raise ValueError(f"spawn_probability must be within [0, 1], got {self.spawn_probability}")
        for name in ("spawn_interval_ms", "cycle_time_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")
        for name in ("startup_delay_ms", "release_delay_ms", "stagger_ms", "pass_animation_ms",
                     "removal_buffer_ms", "initial_spawn_rounds", "initial_target", "sim_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.palette_size <= 0:
            raise ValueError(f"palette_size must be > 0, got {self.palette_size}")

    def to_dict(self) -> dict:
        return asdict(self)


def load_config_from_file(path: str, base: SimulationConfig) -> SimulationConfig:
    if not os.path.exists(path):
        return base
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top level must be a JSON object")
        known = {f.name for f in fields(SimulationConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            logging.warning("Ignoring unknown config key(s) in %s: %s", path, ", ".join(unknown))
        merged = {**base.to_dict(), **{k: v for k, v in data.items() if k in known}}
        cfg = SimulationConfig(**merged)
        logging.info("Loaded config from %s", path)
        return cfg
    except (OSError, ValueError, TypeError) as e:
        logging.error("Failed to load config %s: %s", path, str(e))
        return base
