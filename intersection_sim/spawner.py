import logging
import random
from typing import Dict, List, Optional

from .lane import DIRECTIONS, Lane
from .presentation import PresentationAdapter
from .vehicle import Vehicle, VehicleFactory

# -----------------------------------------------------------------------------
#  Spawner: Bernoulli arrivals per lane + initial seeding
# -----------------------------------------------------------------------------


class Spawner:
    def __init__(self, lanes: Dict[str, Lane], factory: VehicleFactory,
                 adapter: Optional[PresentationAdapter] = None,
                 probability: float = 0.4, rng: Optional[random.Random] = None):
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {probability}")
        self.lanes = lanes
        self.factory = factory
        self.adapter = adapter
        self.probability = probability
        self.rng = rng or random.Random()
        self.spawned = {d: 0 for d in DIRECTIONS}

    def _admit(self, lane: Lane) -> Optional[Vehicle]:
        vehicle = self.factory.create()
        if not lane.try_enqueue(vehicle):
            return None
        self.spawned[lane.direction] += 1
        if self.adapter is not None:
            self.adapter.vehicle_enqueued(lane, vehicle)
        logging.debug("Spawned vehicle %d on %s (rank %d)", vehicle.vid, lane.direction, vehicle.rank)
        return vehicle

    def try_spawn(self) -> List[Vehicle]:
        """One spawn tick: an independent trial for every lane."""
        out = []
        for d in DIRECTIONS:
            if self.rng.random() < self.probability:
                v = self._admit(self.lanes[d])
                if v is not None:
                    out.append(v)
        return out

    def total(self) -> int:
        return sum(len(lane) for lane in self.lanes.values())

    def seed_initial(self, target: int = 5) -> int:
        added = 0
        while self.total() < target:
            candidates = [self.lanes[d] for d in DIRECTIONS if not self.lanes[d].is_full()]
            if not candidates:
                break
            if self._admit(self.rng.choice(candidates)) is not None:
                added += 1
        logging.info("Initial seeding added %d vehicle(s), %d queued", added, self.total())
        return added
