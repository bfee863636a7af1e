"""
Four-way intersection simulation

Vehicles queue in four bounded FIFO lanes, a round-robin light releases one
lane per cycle, and a render surface draws the result.
"""

from .clock import VirtualClock, PRIORITY_CYCLE, PRIORITY_SPAWN, PRIORITY_DEPARTURE
from .config import SimulationConfig, load_config_from_file, setup_logging
from .controller import Intersection, LightState, SignalController
from .departure import DepartureScheduler
from .engine import SimulationEngine
from .lane import DIRECTIONS, Lane, make_lanes
from .presentation import MemorySurface, PresentationAdapter, RenderSurface, SurfaceInitError
from .spawner import Spawner
from .vehicle import Vehicle, VehicleFactory

__version__ = "0.1.0"

__all__ = [
    'VirtualClock',
    'PRIORITY_CYCLE',
    'PRIORITY_SPAWN',
    'PRIORITY_DEPARTURE',
    'SimulationConfig',
    'load_config_from_file',
    'setup_logging',
    'Intersection',
    'LightState',
    'SignalController',
    'DepartureScheduler',
    'SimulationEngine',
    'DIRECTIONS',
    'Lane',
    'make_lanes',
    'MemorySurface',
    'PresentationAdapter',
    'RenderSurface',
    'SurfaceInitError',
    'Spawner',
    'Vehicle',
    'VehicleFactory',
]
