import sys
import logging
import argparse
from typing import List, Optional

import pygame

from .config import SimulationConfig, load_config_from_file, setup_logging
from .engine import SimulationEngine
from .presentation import MemorySurface, SurfaceInitError
from .render import PygameSurface

# -----------------------------------------------------------------------------
#  Window loop
# -----------------------------------------------------------------------------


def _handle_events(engine: SimulationEngine, surface: PygameSurface) -> bool:
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_s:
                engine.force_spawn()
            if event.key == pygame.K_c:
                engine.force_cycle()
            if event.key == pygame.K_o:
                surface.toggle_overlay()
    return True


def run_window(config: SimulationConfig) -> SimulationEngine:
    pygame.init()
    clock = pygame.time.Clock()
    screen = pygame.display.set_mode((config.screen_w, config.screen_h))
    pygame.display.set_caption("INTERSECTION")

    surface = PygameSurface(screen, config)
    engine = SimulationEngine(config, surface)
    try:
        engine.start()
    except SurfaceInitError:
        pygame.quit()
        raise

    running = True
    try:
        while running:
            running = _handle_events(engine, surface)

            dt_ms = clock.tick(config.fps)
            engine.step(dt_ms)

            if config.sim_seconds and engine.clock.now >= config.sim_seconds * 1000:
                logging.info("Simulation time reached: %s seconds", config.sim_seconds)
                running = False

            surface.draw(engine.clock.now, clock.get_fps())
            pygame.display.update()
    finally:
        engine.write_stats_csv(config.stats_csv)
        pygame.quit()
        engine.log_summary()
    return engine


def run_headless(config: SimulationConfig, duration_ms: float) -> SimulationEngine:
    surface = MemorySurface()
    engine = SimulationEngine(config, surface)
    engine.run_headless(duration_ms)
    logging.info("%s", surface.info)
    engine.write_stats_csv(config.stats_csv)
    engine.log_summary()
    return engine

# -----------------------------------------------------------------------------
#  CLI
# -----------------------------------------------------------------------------


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Four-way intersection with queued lanes and a round-robin light.")
    p.add_argument("--config", type=str, default="config.json", help="JSON file overriding the defaults")
    p.add_argument("--headless", action="store_true", help="run without a window")
    p.add_argument("--duration-s", type=int, default=None,
                   help="simulated seconds to run (headless default 60, window default forever)")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", type=str, default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def headless_duration_ms(args: argparse.Namespace, config: SimulationConfig) -> float:
    """An explicit --duration-s wins, even 0. Otherwise fall back to the config, then 60 s."""
    if args.duration_s is not None:
        return args.duration_s * 1000
    return (config.sim_seconds or 60) * 1000


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv if argv is not None else sys.argv[1:])

    level = getattr(logging, args.log_level)
    # stdout only until config.json has named the log file
    setup_logging(level, None)
    config = load_config_from_file(args.config, SimulationConfig())
    setup_logging(level, config.log_file)
    if args.seed is not None:
        config.random_seed = args.seed
    if args.duration_s is not None:
        config.sim_seconds = args.duration_s

    try:
        if args.headless:
            run_headless(config, headless_duration_ms(args, config))
        else:
            run_window(config)
    except SurfaceInitError as e:
        logging.error("Simulation not started: %s", e)
        return 1
    return 0
