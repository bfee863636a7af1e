from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pygame

from .config import SimulationConfig
from .lane import DIRECTIONS
from .presentation import RenderSurface
from .vehicle import Vehicle

# -----------------------------------------------------------------------------
#  Colours
# -----------------------------------------------------------------------------

GRASS = (58, 110, 64)
ROAD = (52, 52, 58)
BOX = (70, 70, 78)
STOP_LINE = (235, 235, 235)
TEXT = (0, 0, 0)
TEXT_BG = (255, 255, 255)
RED_ON, RED_OFF = (230, 40, 40), (80, 20, 20)
GREEN_ON, GREEN_OFF = (40, 220, 90), (20, 70, 30)

CAR_PALETTE = [
    (231, 76, 60),
    (52, 152, 219),
    (241, 196, 15),
    (155, 89, 182),
    (236, 240, 241),
]

CAR_LONG = 40
CAR_SHORT = 24
CAR_GAP = 12


def clamp(v, lo, hi):
    return lo if v < lo else hi if v > hi else v

# -----------------------------------------------------------------------------
#  Lane layout
#
#  anchor is where the rank-0 car sits (just behind the stop line), step is
#  the offset per rank and travel the unit vector a departing car follows.
#  North and west grow towards the top/left of the window, i.e. their visual
#  order runs opposite to south and east.
# -----------------------------------------------------------------------------


@dataclass
class LaneLayout:
    anchor: Tuple[float, float]
    step: Tuple[float, float]
    travel: Tuple[float, float]
    car_size: Tuple[int, int]
    light_pos: Tuple[int, int]
    count_pos: Tuple[int, int]


def default_layouts(w: int, h: int) -> Dict[str, LaneLayout]:
    cx, cy = w // 2, h // 2
    half = 90
    off = 45
    pitch = CAR_LONG + CAR_GAP
    first = half + CAR_GAP + CAR_LONG / 2
    vertical = (CAR_SHORT, CAR_LONG)
    horizontal = (CAR_LONG, CAR_SHORT)
    return {
        'north': LaneLayout((cx - off, cy - first), (0, -pitch), (0, 1), vertical,
                            (cx - half - 30, cy - half - 60), (cx - half - 80, cy - half - 60)),
        'east': LaneLayout((cx + first, cy - off), (pitch, 0), (-1, 0), horizontal,
                           (cx + half + 30, cy - half - 60), (cx + half + 60, cy - half - 60)),
        'south': LaneLayout((cx + off, cy + first), (0, pitch), (0, -1), vertical,
                            (cx + half + 30, cy + half + 30), (cx + half + 60, cy + half + 30)),
        'west': LaneLayout((cx - first, cy + off), (-pitch, 0), (1, 0), horizontal,
                           (cx - half - 30, cy + half + 30), (cx - half - 80, cy + half + 30)),
    }

# -----------------------------------------------------------------------------
#  Car handles
# -----------------------------------------------------------------------------


@dataclass(eq=False)
class CarHandle:
    vid: int
    direction: str
    tag: int
    slot: int = 0
    departing_since: Optional[float] = None

    def position(self, layout: LaneLayout, now_ms: float, animation_ms: float, distance: float) -> Tuple[float, float]:
        x = layout.anchor[0] + layout.step[0] * self.slot
        y = layout.anchor[1] + layout.step[1] * self.slot
        if self.departing_since is None:
            return x, y
        t = 1.0 if animation_ms <= 0 else clamp((now_ms - self.departing_since) / animation_ms, 0.0, 1.0)
        # ease-in
        t = t * t
        return x + layout.travel[0] * distance * t, y + layout.travel[1] * distance * t

# -----------------------------------------------------------------------------
#  Pygame surface
# -----------------------------------------------------------------------------


class PygameSurface(RenderSurface):
    def __init__(self, target: pygame.Surface, config: SimulationConfig,
                 layouts: Optional[Dict[str, LaneLayout]] = None):
        if not pygame.font.get_init():
            pygame.font.init()
        self.target = target
        self.config = config
        w, h = target.get_size()
        self.layouts = layouts if layouts is not None else default_layouts(w, h)
        self.handles: Dict[str, List[CarHandle]] = {d: [] for d in self.layouts}
        self.counts: Dict[str, int] = {d: 0 for d in DIRECTIONS}
        self.indicators: Dict[str, bool] = {d: False for d in DIRECTIONS}
        self.info = ""
        self.show_overlay = config.show_overlay
        self.font = pygame.font.Font(None, 30)
        self.small_font = pygame.font.Font(None, 22)
        self.travel_distance = float(max(w, h))

    # RenderSurface ----------------------------------------------------------

    def has_container(self, direction: str) -> bool:
        return direction in self.layouts

    def add_handle(self, direction: str, vehicle: Vehicle) -> CarHandle:
        handle = CarHandle(vehicle.vid, direction, vehicle.tag)
        self.handles[direction].append(handle)
        return handle

    def place_handle(self, handle: CarHandle, rank: int) -> None:
        handle.slot = rank

    def begin_departure(self, handle: CarHandle, now_ms: float) -> None:
        handle.departing_since = now_ms

    def remove_handle(self, handle: CarHandle) -> bool:
        lane = self.handles.get(handle.direction, [])
        if handle not in lane:
            return False
        lane.remove(handle)
        return True

    def set_count(self, direction: str, count: int) -> None:
        self.counts[direction] = count

    def set_indicator(self, direction: str, active: bool) -> None:
        self.indicators[direction] = active

    def set_info(self, text: str) -> None:
        self.info = text

    # Drawing ----------------------------------------------------------------

    def toggle_overlay(self):
        self.show_overlay = not self.show_overlay

    def _draw_roads(self):
        w, h = self.target.get_size()
        cx, cy = w // 2, h // 2
        self.target.fill(GRASS)
        pygame.draw.rect(self.target, ROAD, pygame.Rect(cx - 90, 0, 180, h))
        pygame.draw.rect(self.target, ROAD, pygame.Rect(0, cy - 90, w, 180))
        pygame.draw.rect(self.target, BOX, pygame.Rect(cx - 90, cy - 90, 180, 180))
        pygame.draw.line(self.target, STOP_LINE, (cx - 90, cy - 92), (cx, cy - 92), 3)
        pygame.draw.line(self.target, STOP_LINE, (cx + 92, cy - 90), (cx + 92, cy), 3)
        pygame.draw.line(self.target, STOP_LINE, (cx, cy + 92), (cx + 90, cy + 92), 3)
        pygame.draw.line(self.target, STOP_LINE, (cx - 92, cy), (cx - 92, cy + 90), 3)

    def _draw_light(self, direction: str):
        x, y = self.layouts[direction].light_pos
        green = self.indicators.get(direction, False)
        pygame.draw.rect(self.target, (20, 20, 20), pygame.Rect(x - 12, y - 4, 24, 48), border_radius=6)
        pygame.draw.circle(self.target, RED_OFF if green else RED_ON, (x, y + 8), 8)
        pygame.draw.circle(self.target, GREEN_ON if green else GREEN_OFF, (x, y + 30), 8)

    def _draw_count(self, direction: str):
        surf = self.font.render(str(self.counts.get(direction, 0)), True, TEXT, TEXT_BG)
        self.target.blit(surf, self.layouts[direction].count_pos)

    def _draw_cars(self, direction: str, now_ms: float):
        layout = self.layouts[direction]
        cw, ch = layout.car_size
        for handle in self.handles[direction]:
            x, y = handle.position(layout, now_ms, self.config.pass_animation_ms, self.travel_distance)
            r = pygame.Rect(0, 0, cw, ch)
            r.center = (int(x), int(y))
            colour = CAR_PALETTE[handle.tag % len(CAR_PALETTE)]
            pygame.draw.rect(self.target, colour, r, border_radius=4)
            pygame.draw.rect(self.target, (15, 15, 15), r, 1, border_radius=4)

    def _draw_overlay(self, fps: Optional[float]):
        lines = [self.info]
        if fps is not None:
            lines.insert(0, f"FPS: {fps:.1f}")
        lines.append("Keys: S spawn | C cycle | O overlay | ESC quit")
        y = 10
        for line in lines:
            s = self.small_font.render(line, True, TEXT, TEXT_BG)
            self.target.blit(s, (10, y))
            y += 20

    def draw(self, now_ms: float, fps: Optional[float] = None):
        self._draw_roads()
        for d in DIRECTIONS:
            if d not in self.layouts:
                continue
            self._draw_cars(d, now_ms)
            self._draw_light(d)
            self._draw_count(d)
        if self.show_overlay:
            self._draw_overlay(fps)
        else:
            s = self.small_font.render(self.info, True, TEXT, TEXT_BG)
            self.target.blit(s, (10, 10))
