import logging
from enum import Enum
from typing import Dict, List, Optional

from .clock import PRIORITY_CYCLE, VirtualClock
from .departure import DepartureScheduler
from .lane import DIRECTIONS, Lane, make_lanes
from .presentation import PresentationAdapter
from .vehicle import Vehicle

# -----------------------------------------------------------------------------
#  Signal states
# -----------------------------------------------------------------------------


class LightState(Enum):
    NORTH_GREEN = 0
    EAST_GREEN = 1
    SOUTH_GREEN = 2
    WEST_GREEN = 3

    @property
    def direction(self) -> str:
        return DIRECTIONS[self.value]

    def next(self) -> "LightState":
        return LightState((self.value + 1) % len(DIRECTIONS))


class Intersection:
    def __init__(self, lanes: Optional[Dict[str, Lane]] = None, capacity: int = 5):
        self.lanes = lanes if lanes is not None else make_lanes(capacity)
        missing = [d for d in DIRECTIONS if d not in self.lanes]
        if missing:
            raise ValueError(f"Intersection needs a lane for every direction, missing {missing}")
        self.active_index = 0

    @property
    def state(self) -> LightState:
        return LightState(self.active_index)

    @property
    def active_lane(self) -> Lane:
        return self.lanes[DIRECTIONS[self.active_index]]

    def advance(self) -> LightState:
        self.active_index = (self.active_index + 1) % len(DIRECTIONS)
        return self.state

    def total_queued(self) -> int:
        return sum(len(lane) for lane in self.lanes.values())


# -----------------------------------------------------------------------------
#  Round-robin controller
# -----------------------------------------------------------------------------

class SignalController:
    """Fixed round-robin over north, east, south, west.

    Each cycle gives the green to the active lane, releases everything queued
    on it, then moves the active index on by one. There is no yellow phase.

    Between ticks ``state`` is the lane the next tick will release, while
    ``green`` is the lane currently lit (the one released last, or north
    before the first tick).
    """

    def __init__(self, intersection: Intersection, clock: VirtualClock, departures: DepartureScheduler,
                 adapter: Optional[PresentationAdapter] = None, release_delay_ms: float = 0):
        if release_delay_ms < 0:
            raise ValueError(f"release_delay_ms must be >= 0, got {release_delay_ms}")
        self.intersection = intersection
        self.clock = clock
        self.departures = departures
        self.adapter = adapter
        self.release_delay_ms = release_delay_ms
        self.cycles = 0
        self.green: str = DIRECTIONS[intersection.active_index]
        self._timer = None

    @property
    def state(self) -> LightState:
        return self.intersection.state

    def show_lights(self):
        if self.adapter is not None:
            self.adapter.lights_changed(self.green)

    def start(self, cycle_time_ms: float = 5000, startup_delay_ms: float = 300):
        if self._timer is not None:
            raise RuntimeError("controller already started")
        self._timer = self.clock.call_every(cycle_time_ms, self.cycle, first_delay=startup_delay_ms,
                                            priority=PRIORITY_CYCLE)

    def release(self, lane: Lane) -> List[Vehicle]:
        released = lane.release_all()
        if self.adapter is not None:
            self.adapter.lane_released(lane, released)
        if released:
            logging.debug("Released %d vehicle(s) from %s", len(released), lane.direction)
        self.departures.schedule(released)
        return released

    def cycle(self) -> LightState:
        lane = self.intersection.active_lane
        self.green = lane.direction
        self.show_lights()
        if self.release_delay_ms > 0:
            self.clock.call_later(self.release_delay_ms, lambda: self.release(lane), PRIORITY_CYCLE)
        else:
            self.release(lane)
        self.cycles += 1
        return self.intersection.advance()
