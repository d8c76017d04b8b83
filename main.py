"""Entry point: fly a viewer through the universe and report discoveries."""
from __future__ import annotations

import argparse
import cProfile
import io
import pstats
from pathlib import Path

from pygame.math import Vector2

from cosmos.discovery.discovery import DiscoveryLog, DiscoveryService
from cosmos.engine.logger import init_logger
from cosmos.engine.settings import UniverseSettings
from cosmos.naming.naming import NamingService
from cosmos.world.chunks import ChunkManager

SETTINGS_PATH = Path("settings.json")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=None, help="override universeSeed from settings.json")
    parser.add_argument("--steps", type=int, default=200, help="number of simulation steps")
    parser.add_argument("--speed", type=float, default=250.0, help="distance travelled per step")
    parser.add_argument("--heading", type=float, default=30.0, help="flight heading in degrees")
    parser.add_argument("--profile", action="store_true", help="print the top cumulative profiler entries")
    return parser.parse_args()


def run(args: argparse.Namespace) -> None:
    settings = UniverseSettings.from_settings(SETTINGS_PATH)
    seed = settings.seed if args.seed is None else args.seed
    logger = init_logger(SETTINGS_PATH)
    manager = ChunkManager(seed, settings.generation, logger)
    discovery_log = DiscoveryLog()
    discoveries = DiscoveryService(NamingService(logger.channel("naming")), logger.channel("discovery"))

    position = Vector2(0.0, 0.0)
    velocity = Vector2(args.speed, 0.0).rotate(args.heading)
    found = 0
    for step in range(args.steps):
        for coord in manager.update_active_chunks(position.x, position.y):
            discovery_log.restore(manager.generate_chunk(*coord))
        active = manager.get_all_active_objects()
        for entry in discoveries.scan(active.all(), position.x, position.y, float(step), seed, discovery_log):
            found += 1
            marker = "*" if entry.notable else " "
            print(f"{marker} t={step:4d} {entry.name:<24} {entry.type_label:<32} {entry.rarity:<10} {entry.share_query}")
        position += velocity

    region = manager.get_region_at(position.x, position.y)
    print(f"\nSeed {seed}: {found} discoveries over {args.steps} steps, ending in {region.definition.name}.")


def main() -> None:
    args = parse_args()
    if not args.profile:
        run(args)
        return
    profiler = cProfile.Profile()
    try:
        profiler.enable()
        run(args)
    finally:
        profiler.disable()
        stats_stream = io.StringIO()
        stats = pstats.Stats(profiler, stream=stats_stream)
        stats.strip_dirs().sort_stats("cumulative").print_stats(25)
        print("\nProfiler results (top 25 cumulative):")
        print(stats_stream.getvalue())


if __name__ == "__main__":
    main()
