"""Black holes and the isolation zones they carve out of neighbouring chunks."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, Optional, Tuple

from cosmos.celestial.common import CelestialObject, ChunkContext, Exclusion, note_exhausted, object_id, place
from cosmos.engine.errors import PlacementExhausted
from cosmos.engine.logger import ChannelLogger
from cosmos.math.spatial import ChunkCoord, chunk_center, chunk_origin, distance_to_rect, neighborhood


@dataclass(frozen=True)
class BlackHoleType:
    key: str
    name: str
    frequency: float
    event_horizon_radius: float
    accretion_disk_radius: float
    singularity_radius: float
    gravitational_influence: float
    gravitational_strength: float
    accretion_colors: Tuple[str, ...]
    corona_colors: Tuple[str, ...]


BLACK_HOLE_TYPES: Dict[str, BlackHoleType] = {
    "stellar_mass": BlackHoleType(
        "stellar_mass",
        "Stellar Mass Black Hole",
        0.95,
        250.0,
        600.0,
        3.0,
        900.0,
        120.0,
        ("#ff6600", "#ffaa00", "#ffdd44", "#ffffff"),
        ("#ffffff", "#aaeeff", "#66ccff"),
    ),
    "supermassive": BlackHoleType(
        "supermassive",
        "Supermassive Black Hole",
        0.05,
        400.0,
        1000.0,
        5.0,
        1200.0,
        200.0,
        ("#ff0044", "#ff4400", "#ffaa00", "#ffff88", "#ffffff"),
        ("#ffffff", "#ffddaa", "#ffaa66"),
    ),
}

SCALE_RANGE = (0.9, 1.1)
MAX_ISOLATION_RADIUS = max(kind.gravitational_influence for kind in BLACK_HOLE_TYPES.values()) * SCALE_RANGE[1]


@dataclass
class BlackHole(CelestialObject):
    kind: ClassVar[str] = "black_hole"

    id: str
    x: float
    y: float
    radius: float
    black_hole_type: str
    black_hole_type_name: str
    accretion_disk_radius: float
    singularity_radius: float
    gravitational_influence: float
    gravitational_strength: float
    accretion_colors: Tuple[str, ...]
    corona_colors: Tuple[str, ...]
    discovery_distance: float
    discovery_value: int = 500
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)

    @property
    def event_horizon_radius(self) -> float:
        return self.radius

    @property
    def isolation_radius(self) -> float:
        return self.gravitational_influence

    @property
    def mass(self) -> float:
        return self.radius * self.gravitational_strength

    def exclusion(self) -> Exclusion:
        return Exclusion(self.x, self.y, self.isolation_radius, self.id)

    def warning_level(self, x: float, y: float) -> int:
        """0 safe, 1 inside the gravity well, 2 inside the disk, 3 past the horizon."""

        distance = self.distance_to(x, y)
        if distance <= self.radius:
            return 3
        if distance <= self.accretion_disk_radius:
            return 2
        if distance <= self.gravitational_influence:
            return 1
        return 0

    def hits_singularity(self, x: float, y: float) -> bool:
        return self.distance_to(x, y) <= self.singularity_radius


@dataclass(frozen=True)
class BlackHoleSite:
    """Where a black hole sits and how large it is; enough to rebuild it."""

    x: float
    y: float
    type_key: str
    scale: float

    @property
    def isolation_radius(self) -> float:
        return BLACK_HOLE_TYPES[self.type_key].gravitational_influence * self.scale


class BlackHoleGenerator:
    """Ultra-rare singularities kept clear of every chunk that rolled its own."""

    JITTER = 300.0

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._logger = logger

    def search_radius(self, chunk_size: float) -> int:
        return max(1, math.ceil((self.JITTER + MAX_ISOLATION_RADIUS) / chunk_size))

    def rolls(self, context: ChunkContext) -> bool:
        return context.rng("black_hole").chance(context.spawn_chance("black_hole"))

    def site(
        self,
        context: ChunkContext,
        neighbour_rolls: Callable[[ChunkCoord], bool],
    ) -> Optional[BlackHoleSite]:
        """Site for a chunk whose roll succeeded, or ``None`` if none is isolated enough.

        A candidate is rejected when its isolation circle reaches into a
        neighbouring chunk whose own roll succeeded; neighbours never look at
        each other's chosen sites, so the outcome is the same whichever chunk
        is generated first.
        """

        rng = context.rng("black_hole", 1)
        type_key = rng.weighted_choice([(key, kind.frequency) for key, kind in BLACK_HOLE_TYPES.items()])
        scale = rng.next_float(*SCALE_RANGE)
        isolation = BLACK_HOLE_TYPES[type_key].gravitational_influence * scale
        cx, cy = context.coord
        size = context.chunk_size
        rivals = [
            coord
            for coord in neighborhood(cx, cy, self.search_radius(size))
            if coord != (cx, cy) and neighbour_rolls(coord)
        ]
        centre_x, centre_y = chunk_center(cx, cy, size)

        def isolated(x: float, y: float) -> bool:
            for rx, ry in rivals:
                left, top = chunk_origin(rx, ry, size)
                if distance_to_rect(x, y, left, top, size) < isolation:
                    return False
            return True

        try:
            x, y = place(
                rng,
                "black_hole",
                context.attempts,
                lambda r: (
                    centre_x + r.next_float(-self.JITTER, self.JITTER),
                    centre_y + r.next_float(-self.JITTER, self.JITTER),
                ),
                isolated,
            )
        except PlacementExhausted as error:
            note_exhausted(self._logger, error, context.coord)
            return None
        return BlackHoleSite(x, y, type_key, scale)

    def build(self, site: BlackHoleSite) -> BlackHole:
        kind = BLACK_HOLE_TYPES[site.type_key]
        return BlackHole(
            id=object_id("black_hole", site.x, site.y),
            x=site.x,
            y=site.y,
            radius=kind.event_horizon_radius * site.scale,
            black_hole_type=kind.key,
            black_hole_type_name=kind.name,
            accretion_disk_radius=kind.accretion_disk_radius * site.scale,
            singularity_radius=kind.singularity_radius,
            gravitational_influence=site.isolation_radius,
            gravitational_strength=kind.gravitational_strength,
            accretion_colors=kind.accretion_colors,
            corona_colors=kind.corona_colors,
            discovery_distance=site.isolation_radius,
        )


__all__ = [
    "BLACK_HOLE_TYPES",
    "BlackHole",
    "BlackHoleGenerator",
    "BlackHoleSite",
    "BlackHoleType",
    "MAX_ISOLATION_RADIUS",
]
