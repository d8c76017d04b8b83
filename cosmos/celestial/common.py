"""Shared descriptor behaviour, chunk context and bounded placement."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, ClassVar, Dict, Optional, Sequence, Tuple

from pygame.math import Vector2

from cosmos.engine.errors import PlacementExhausted
from cosmos.engine.logger import ChannelLogger
from cosmos.engine.settings import GenerationConfig
from cosmos.math.rng import SeededRandom
from cosmos.math.spatial import ChunkCoord, chunk_origin, object_seed
from cosmos.world.regions import RegionInfo

CELESTIAL_FAMILIES: Tuple[str, ...] = (
    "star",
    "planet",
    "moon",
    "comet",
    "nebula",
    "asteroid_garden",
    "wormhole",
    "black_hole",
    "rogue_planet",
    "dark_nebula",
    "crystal_garden",
    "protostar",
)

Point = Tuple[float, float]


def object_id(family_tag: str, x: float, y: float) -> str:
    return f"{family_tag}_{math.floor(x)}_{math.floor(y)}"


class CelestialObject:
    """Behaviour shared by every generated descriptor.

    Descriptors are dataclasses declaring ``id``, ``x``, ``y``, ``radius``,
    ``discovery_distance``, ``discovery_value`` and the two discovery fields,
    which are excluded from equality so regenerated content compares equal.
    """

    kind: ClassVar[str] = "object"

    def position(self) -> Vector2:
        return Vector2(self.x, self.y)

    def distance_to(self, x: float, y: float) -> float:
        return self.position().distance_to((x, y))

    def mark_discovered(self, timestamp: float) -> None:
        self.discovered = True
        self.discovery_timestamp = timestamp

    def clear_discovery(self) -> None:
        self.discovered = False
        self.discovery_timestamp = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind
        return data


@dataclass(frozen=True)
class Exclusion:
    """Circular zone no generated object may enter."""

    x: float
    y: float
    radius: float
    source_id: str

    def blocks(self, x: float, y: float, extent: float = 0.0) -> bool:
        return math.hypot(x - self.x, y - self.y) < self.radius + extent


@dataclass(frozen=True)
class ChunkContext:
    """Everything a generator may depend on for one chunk."""

    universe_seed: int
    coord: ChunkCoord
    seed: int
    region: RegionInfo
    config: GenerationConfig
    exclusions: Tuple[Exclusion, ...] = ()

    @property
    def chunk_size(self) -> float:
        return self.config.chunk_size

    @property
    def origin(self) -> Point:
        return chunk_origin(self.coord[0], self.coord[1], self.config.chunk_size)

    @property
    def attempts(self) -> int:
        return self.config.max_placement_attempts

    def rng(self, family: str, index: int = 0) -> SeededRandom:
        return SeededRandom(object_seed(self.seed, index, family))

    def spawn_chance(self, key: str, region_family: Optional[str] = None) -> float:
        modifier = self.region.modifier(region_family or key)
        return min(1.0, self.config.spawn_chance(key) * modifier)

    def random_point(self, rng: SeededRandom, margin: float) -> Point:
        left, top = self.origin
        size = self.chunk_size
        return (
            left + rng.next_float(margin, size - margin),
            top + rng.next_float(margin, size - margin),
        )

    def is_excluded(self, x: float, y: float, extent: float = 0.0) -> bool:
        return any(zone.blocks(x, y, extent) for zone in self.exclusions)


def place(
    rng: SeededRandom,
    family: str,
    attempts: int,
    sample: Callable[[SeededRandom], Point],
    is_valid: Callable[[float, float], bool],
) -> Point:
    """Draw up to ``attempts`` candidates and return the first valid one."""

    for _ in range(attempts):
        x, y = sample(rng)
        if is_valid(x, y):
            return (x, y)
    raise PlacementExhausted(family, attempts)


def clear_of(x: float, y: float, points: Sequence[Point], clearance: float) -> bool:
    return all(math.hypot(x - px, y - py) >= clearance for px, py in points)


def note_exhausted(logger: Optional[ChannelLogger], error: PlacementExhausted, coord: ChunkCoord) -> None:
    if logger is not None:
        logger.debug("Chunk %s: %s", coord, error)


__all__ = [
    "CELESTIAL_FAMILIES",
    "CelestialObject",
    "ChunkContext",
    "Exclusion",
    "Point",
    "clear_of",
    "note_exhausted",
    "object_id",
    "place",
]
