import logging
from typing import Dict, List

from .vehicle import Vehicle

# -----------------------------------------------------------------------------
#  Lanes
# -----------------------------------------------------------------------------

DIRECTIONS = ('north', 'east', 'south', 'west')
DEFAULT_CAPACITY = 5


def check_direction(direction: str) -> str:
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown direction {direction!r}, expected one of {DIRECTIONS}")
    return direction


class Lane:
    """Bounded FIFO queue for one approach.

    ``try_enqueue`` and ``release_all`` are the only mutators. Between calls the
    vehicle at position ``i`` always carries ``rank == i``; the render surface
    positions handles from that rank, never from its own layout order.
    """

    def __init__(self, direction: str, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        self.direction = check_direction(direction)
        self.capacity = capacity
        self._vehicles: List[Vehicle] = []
        self.enqueued = 0
        self.rejected = 0
        self.released = 0

    def __len__(self) -> int:
        return len(self._vehicles)

    def __iter__(self):
        return iter(list(self._vehicles))

    def __repr__(self) -> str:
        return f"Lane({self.direction!r}, {len(self._vehicles)}/{self.capacity})"

    @property
    def length(self) -> int:
        return len(self._vehicles)

    def is_full(self) -> bool:
        return len(self._vehicles) >= self.capacity

    def vehicles(self) -> List[Vehicle]:
        return list(self._vehicles)

    def ranks(self) -> List[int]:
        return [v.rank for v in self._vehicles]

    def try_enqueue(self, vehicle: Vehicle) -> bool:
        if self.is_full():
            self.rejected += 1
            logging.debug("Lane %s full, dropped vehicle %d", self.direction, vehicle.vid)
            return False
        vehicle.rank = len(self._vehicles)
        vehicle.direction = self.direction
        self._vehicles.append(vehicle)
        self.enqueued += 1
        return True

    def _pop_front(self) -> Vehicle:
        front = self._vehicles.pop(0)
        for v in self._vehicles:
            v.rank -= 1
        return front

    def release_all(self) -> List[Vehicle]:
        out: List[Vehicle] = []
        while self._vehicles:
            front = self._pop_front()
            front.rank = None
            out.append(front)
        self.released += len(out)
        return out

    def check_invariants(self) -> bool:
        if len(self._vehicles) > self.capacity:
            return False
        return all(v.rank == i for i, v in enumerate(self._vehicles))


def make_lanes(capacity: int = DEFAULT_CAPACITY) -> Dict[str, Lane]:
    return {d: Lane(d, capacity) for d in DIRECTIONS}
