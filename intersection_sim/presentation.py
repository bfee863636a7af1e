import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .lane import DIRECTIONS, Lane, check_direction
from .vehicle import Vehicle

# -----------------------------------------------------------------------------
#  Render surface contract
# -----------------------------------------------------------------------------


class SurfaceInitError(RuntimeError):
    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__("Missing lane container(s): " + ", ".join(self.missing))


class RenderSurface(ABC):
    """What the simulation needs from whatever draws it.

    Handles are opaque to the simulation. The surface must accept them in any
    order and position them by the rank it is given.
    """

    @abstractmethod
    def has_container(self, direction: str) -> bool:
        pass

    @abstractmethod
    def add_handle(self, direction: str, vehicle: Vehicle) -> Any:
        pass

    @abstractmethod
    def place_handle(self, handle: Any, rank: int) -> None:
        pass

    @abstractmethod
    def begin_departure(self, handle: Any, now_ms: float) -> None:
        pass

    @abstractmethod
    def remove_handle(self, handle: Any) -> bool:
        """Drop a handle. Returns False if it was already gone."""
        pass

    @abstractmethod
    def set_count(self, direction: str, count: int) -> None:
        pass

    @abstractmethod
    def set_indicator(self, direction: str, active: bool) -> None:
        pass

    def set_info(self, text: str) -> None:
        pass


# -----------------------------------------------------------------------------
#  Headless surface
# -----------------------------------------------------------------------------

@dataclass
class MemoryHandle:
    hid: int
    direction: str
    vid: int
    tag: int
    slot: int = 0
    departing_since: Optional[float] = None


class MemorySurface(RenderSurface):
    def __init__(self, directions=DIRECTIONS):
        self.containers: Dict[str, Dict[int, MemoryHandle]] = {d: {} for d in directions}
        self.counts: Dict[str, int] = {d: 0 for d in directions}
        self.indicators: Dict[str, bool] = {d: False for d in directions}
        self.info = ""
        self.departures: List[MemoryHandle] = []
        self.removed: List[int] = []
        self._next_hid = 0

    def has_container(self, direction: str) -> bool:
        return direction in self.containers

    def add_handle(self, direction: str, vehicle: Vehicle) -> MemoryHandle:
        self._next_hid += 1
        handle = MemoryHandle(self._next_hid, direction, vehicle.vid, vehicle.tag)
        self.containers[direction][handle.hid] = handle
        return handle

    def place_handle(self, handle: MemoryHandle, rank: int) -> None:
        handle.slot = rank

    def begin_departure(self, handle: MemoryHandle, now_ms: float) -> None:
        handle.departing_since = now_ms
        self.departures.append(handle)

    def remove_handle(self, handle: MemoryHandle) -> bool:
        container = self.containers.get(handle.direction, {})
        if container.pop(handle.hid, None) is None:
            return False
        self.removed.append(handle.vid)
        return True

    def set_count(self, direction: str, count: int) -> None:
        self.counts[direction] = count

    def set_indicator(self, direction: str, active: bool) -> None:
        self.indicators[direction] = active

    def set_info(self, text: str) -> None:
        self.info = text

    def handles(self, direction: str) -> List[MemoryHandle]:
        """Queued handles for a lane, nearest the stop line first."""
        waiting = [h for h in self.containers[direction].values() if h.departing_since is None]
        return sorted(waiting, key=lambda h: h.slot)

    def counts_text(self) -> str:
        return ",".join(str(self.counts[d]) for d in DIRECTIONS)


# -----------------------------------------------------------------------------
#  Adapter: one-way projection of lane state onto a surface
# -----------------------------------------------------------------------------

class PresentationAdapter:
    def __init__(self, surface: RenderSurface, lanes: Dict[str, Lane], clock=None):
        self.surface = surface
        self.lanes = lanes
        self.clock = clock
        self.green: Optional[str] = None

    def check_surface(self):
        missing = [d for d in DIRECTIONS if not self.surface.has_container(d)]
        if missing:
            err = SurfaceInitError(missing)
            logging.error("%s", err)
            raise err

    def total_queued(self) -> int:
        return sum(len(lane) for lane in self.lanes.values())

    def refresh(self):
        for d, lane in self.lanes.items():
            self.surface.set_count(d, len(lane))
        now_s = round(self.clock.now / 1000.0) if self.clock is not None else 0
        green = self.green.capitalize() if self.green else "-"
        self.surface.set_info(f"Time: {now_s}s | Green: {green} | Queued: {self.total_queued()}")

    def vehicle_enqueued(self, lane: Lane, vehicle: Vehicle):
        vehicle.handle = self.surface.add_handle(lane.direction, vehicle)
        self.surface.place_handle(vehicle.handle, vehicle.rank)
        self.refresh()

    def lane_released(self, lane: Lane, released: List[Vehicle]):
        self.refresh()

    def departure_started(self, vehicle: Vehicle) -> bool:
        if vehicle.handle is None:
            return False
        now = self.clock.now if self.clock is not None else 0.0
        self.surface.begin_departure(vehicle.handle, now)
        return True

    def vehicle_removed(self, vehicle: Vehicle) -> bool:
        handle = vehicle.handle
        if handle is None:
            return False
        vehicle.handle = None
        vehicle.departed = True
        removed = self.surface.remove_handle(handle)
        self.refresh()
        return removed

    def lights_changed(self, green_direction: str):
        self.green = check_direction(green_direction)
        for d in DIRECTIONS:
            self.surface.set_indicator(d, d == green_direction)
        self.refresh()
