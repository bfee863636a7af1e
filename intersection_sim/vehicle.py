from dataclasses import dataclass
from typing import Any, Optional

# -----------------------------------------------------------------------------
#  Vehicle + factory
# -----------------------------------------------------------------------------

DEFAULT_PALETTE_SIZE = 5


@dataclass(eq=False)
class Vehicle:
    vid: int
    tag: int
    rank: Optional[int] = None
    direction: Optional[str] = None
    handle: Any = None          # owned by the presentation adapter
    departed: bool = False

    def __repr__(self) -> str:
        return f"Vehicle(vid={self.vid}, tag={self.tag}, rank={self.rank}, direction={self.direction!r})"


class VehicleFactory:
    def __init__(self, palette_size: int = DEFAULT_PALETTE_SIZE):
        if palette_size <= 0:
            raise ValueError(f"palette_size must be > 0, got {palette_size}")
        self.palette_size = palette_size
        self._last_vid = 0

    @property
    def created(self) -> int:
        return self._last_vid

    def create(self) -> Vehicle:
        self._last_vid += 1
        return Vehicle(vid=self._last_vid, tag=self._last_vid % self.palette_size)
