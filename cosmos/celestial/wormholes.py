"""Traversable wormholes: alpha/beta pairs linking two distant chunks."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Optional, Tuple

from pygame.math import Vector2

from cosmos.celestial.common import CelestialObject, ChunkContext, Point, note_exhausted, object_id, place
from cosmos.engine.errors import PlacementExhausted
from cosmos.engine.logger import ChannelLogger
from cosmos.math.rng import SeededRandom
from cosmos.math.spatial import ChunkCoord, chunk_seed, hash64, hash_position, object_seed, validate_seed

TWIN_SALT = 0x574F524D
TWIN_DISTANCE_RANGE = (100, 500)
DESIGNATIONS = ("alpha", "beta")


@dataclass
class Wormhole(CelestialObject):
    kind: ClassVar[str] = "wormhole"

    id: str
    x: float
    y: float
    radius: float
    pair_id: str
    designation: str
    twin_x: float
    twin_y: float
    wormhole_type: str = "stable"
    wormhole_type_name: str = "Stable Traversable Wormhole"
    color: str = "#4169E1"
    discovery_distance: float = 115.0
    discovery_value: int = 100
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)

    @property
    def twin_designation(self) -> str:
        return "beta" if self.designation == "alpha" else "alpha"

    @property
    def twin_id(self) -> str:
        return f"{object_id('wormhole', self.twin_x, self.twin_y)}_{self.twin_designation}"

    def can_traverse(self, x: float, y: float) -> bool:
        return self.distance_to(x, y) <= self.radius * 0.8

    def destination(self) -> Vector2:
        """Exit point beside the twin, offset so the ship does not fall straight back in."""

        number = int(self.pair_id.split("-")[1])
        return Vector2(self.twin_x, self.twin_y) + Vector2(WormholeGenerator.EXIT_OFFSET, 0.0).rotate(number % 360)


def twin_offset(universe_seed: int) -> ChunkCoord:
    """Chunk offset from every alpha mouth to its beta; one per universe."""

    rng = SeededRandom(hash64(validate_seed(universe_seed), TWIN_SALT))
    distance = rng.next_int(*TWIN_DISTANCE_RANGE)
    angle = rng.next_float(0.0, 2.0 * math.pi)
    offset = Vector2(distance, 0.0).rotate_rad(angle)
    return (int(round(offset.x)), int(round(offset.y)))


def pair_number(universe_seed: int, coord: ChunkCoord) -> int:
    return 1 + hash_position(universe_seed, coord[0], coord[1]) % 9999


class WormholeGenerator:
    MARGIN = 300.0
    STAR_CLEARANCE = 500.0
    RADIUS_RANGE = (35.0, 45.0)
    DISCOVERY_PADDING = 75.0
    EXIT_OFFSET = 50.0

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._logger = logger

    def rolls(self, context: ChunkContext) -> bool:
        return context.rng("wormhole").chance(context.spawn_chance("wormhole"))

    def alpha_site(self, context: ChunkContext, is_clear: Callable[[float, float], bool]) -> Optional[Point]:
        """Alpha mouth for a chunk whose roll succeeded.

        ``is_clear`` must vet both mouths; the beta lands at the same local
        position inside the twin chunk.
        """

        try:
            return place(
                context.rng("wormhole", 1),
                "wormhole",
                context.attempts,
                lambda rng: context.random_point(rng, self.MARGIN),
                is_clear,
            )
        except PlacementExhausted as error:
            note_exhausted(self._logger, error, context.coord)
            return None

    def build_pair(
        self,
        universe_seed: int,
        source: ChunkCoord,
        alpha: Point,
        offset: ChunkCoord,
        chunk_size: float,
    ) -> Tuple[Wormhole, Wormhole]:
        """Both mouths of the pair rooted at chunk ``source``.

        Either end can be rebuilt on its own and comes out identical, since
        every value depends only on the source chunk.
        """

        rng = SeededRandom(object_seed(chunk_seed(universe_seed, *source), 2, "wormhole"))
        pair_id = f"WH-{pair_number(universe_seed, source):04d}"
        beta = (alpha[0] + offset[0] * chunk_size, alpha[1] + offset[1] * chunk_size)
        ends = []
        for (x, y), (tx, ty), designation in ((alpha, beta, "alpha"), (beta, alpha, "beta")):
            radius = rng.next_float(*self.RADIUS_RANGE)
            ends.append(
                Wormhole(
                    id=f"{object_id('wormhole', x, y)}_{designation}",
                    x=x,
                    y=y,
                    radius=radius,
                    pair_id=pair_id,
                    designation=designation,
                    twin_x=tx,
                    twin_y=ty,
                    discovery_distance=radius + self.DISCOVERY_PADDING,
                )
            )
        return ends[0], ends[1]


__all__ = ["DESIGNATIONS", "Wormhole", "WormholeGenerator", "pair_number", "twin_offset"]
