import logging
from typing import Callable, List, Optional, Set

from .clock import PRIORITY_DEPARTURE, VirtualClock
from .presentation import PresentationAdapter
from .vehicle import Vehicle

# -----------------------------------------------------------------------------
#  Departure scheduling
# -----------------------------------------------------------------------------


class DepartureScheduler:
    def __init__(self, clock: VirtualClock, adapter: Optional[PresentationAdapter] = None,
                 stagger_ms: float = 160, animation_ms: float = 2200, buffer_ms: float = 100,
                 on_removed: Optional[Callable[[Vehicle], None]] = None):
        if stagger_ms < 0 or animation_ms < 0 or buffer_ms < 0:
            raise ValueError("departure timings must be >= 0")
        self.clock = clock
        self.adapter = adapter
        self.stagger_ms = stagger_ms
        self.animation_ms = animation_ms
        self.buffer_ms = buffer_ms
        self.on_removed = on_removed
        self._pending: Set[Vehicle] = set()

    @property
    def in_flight(self) -> int:
        """Released vehicles whose handle has not been dropped yet."""
        return len(self._pending)

    def start_offset(self, index: int) -> float:
        return index * self.stagger_ms

    def removal_offset(self, index: int) -> float:
        return self.start_offset(index) + self.animation_ms + self.buffer_ms

    def schedule(self, vehicles: List[Vehicle]):
        for i, v in enumerate(vehicles):
            self._pending.add(v)
            self.clock.call_later(self.start_offset(i), self._starter(v), PRIORITY_DEPARTURE)

    def _starter(self, vehicle: Vehicle):
        def start():
            if vehicle not in self._pending:
                return
            started = True
            if self.adapter is not None:
                started = self.adapter.departure_started(vehicle)
            if not started:
                # handle already gone, nothing left to animate
                vehicle.departed = True
                self._pending.discard(vehicle)
                return
            logging.debug("Vehicle %d departing %s", vehicle.vid, vehicle.direction)
            self.clock.call_later(self.animation_ms + self.buffer_ms, lambda: self.remove(vehicle), PRIORITY_DEPARTURE)
        return start

    def remove(self, vehicle: Vehicle) -> bool:
        """Release a departed vehicle. Safe to call more than once."""
        if vehicle.departed:
            self._pending.discard(vehicle)
            return False
        if self.adapter is not None:
            self.adapter.vehicle_removed(vehicle)
        vehicle.departed = True
        self._pending.discard(vehicle)
        if self.on_removed is not None:
            self.on_removed(vehicle)
        return True
