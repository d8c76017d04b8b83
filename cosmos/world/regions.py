"""Macro-scale cosmic regions that bias spawn rates by location."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pygame.math import Vector2

from cosmos.engine.logger import ChannelLogger
from cosmos.math.rng import SeededRandom
from cosmos.math.spatial import hash64, validate_seed

SPAWN_FAMILIES: Tuple[str, ...] = (
    "star_system",
    "nebula",
    "asteroid_garden",
    "wormhole",
    "black_hole",
    "comet",
    "rogue_planet",
    "dark_nebula",
    "crystal_garden",
    "protostar",
)


@dataclass(frozen=True)
class RegionDefinition:
    id: str
    name: str
    description: str
    spawn_modifiers: Dict[str, float]
    star_density: float

    def raw_modifier(self, family: str) -> float:
        return self.spawn_modifiers.get(family, 1.0)


def _modifiers(*values: float) -> Dict[str, float]:
    return dict(zip(SPAWN_FAMILIES, values))


# Columns follow SPAWN_FAMILIES.
REGION_TYPES: Dict[str, RegionDefinition] = {
    "VOID": RegionDefinition(
        id="void",
        name="The Void",
        description="Vast empty space with sparse star systems but more exotic phenomena.",
        spawn_modifiers=_modifiers(0.3, 0.4, 0.1, 3.0, 2.0, 0.5, 3.0, 0.5, 0.2, 0.1),
        star_density=0.4,
    ),
    "STAR_FORGE": RegionDefinition(
        id="star_forge",
        name="Star-Forge Cluster",
        description="Dense stellar formation region with abundant nebulae and young hot stars.",
        spawn_modifiers=_modifiers(1.8, 4.0, 0.7, 0.5, 0.1, 1.5, 0.3, 1.5, 0.5, 4.0),
        star_density=2.0,
    ),
    "GALACTIC_CORE": RegionDefinition(
        id="galactic_core",
        name="Galactic Core",
        description="Crowded central region where stellar remnants and black holes gather.",
        spawn_modifiers=_modifiers(2.2, 1.5, 0.8, 1.5, 8.0, 0.8, 0.8, 1.0, 0.6, 1.5),
        star_density=3.0,
    ),
    "ASTEROID_GRAVEYARD": RegionDefinition(
        id="asteroid_graveyard",
        name="Asteroid Graveyard",
        description="Debris of shattered worlds drifting in dense mineral-rich fields.",
        spawn_modifiers=_modifiers(0.4, 0.3, 6.0, 0.7, 0.5, 0.2, 1.2, 0.4, 5.0, 0.2),
        star_density=0.6,
    ),
    "ANCIENT_EXPANSE": RegionDefinition(
        id="ancient_expanse",
        name="Ancient Expanse",
        description="Old, quiet space shaped by long-dead stars and forgotten anomalies.",
        spawn_modifiers=_modifiers(1.0, 0.8, 1.2, 1.8, 1.5, 0.6, 1.5, 1.2, 1.5, 0.8),
        star_density=1.1,
    ),
    "STELLAR_NURSERY": RegionDefinition(
        id="stellar_nursery",
        name="Stellar Nursery",
        description="Glowing gas clouds where new stars are still collapsing out of the dust.",
        spawn_modifiers=_modifiers(1.4, 5.0, 1.8, 0.3, 0.2, 2.0, 0.5, 3.0, 0.8, 5.0),
        star_density=1.8,
    ),
}

DEFAULT_REGION = "ANCIENT_EXPANSE"


@dataclass(frozen=True)
class RegionCenter:
    x: float
    y: float
    region_type: str


@dataclass(frozen=True)
class RegionInfo:
    """Classification of one world position."""

    region_type: str
    definition: RegionDefinition
    distance_from_center: float
    influence: float
    neighbor_type: Optional[str] = None

    def modifier(self, family: str) -> float:
        """Spawn multiplier for ``family``, faded toward 1.0 near region borders."""

        raw = self.definition.raw_modifier(family)
        return 1.0 + (raw - 1.0) * self.influence

    def star_density(self) -> float:
        return 1.0 + (self.definition.star_density - 1.0) * self.influence

    def to_dict(self) -> Dict[str, object]:
        return {
            "region_type": self.region_type,
            "name": self.definition.name,
            "distance_from_center": self.distance_from_center,
            "influence": self.influence,
            "neighbor_type": self.neighbor_type,
        }


class RegionGenerator:
    """Voronoi-style region lookup with cosine-blended borders."""

    MACRO_AREA_SIZE = 300_000.0
    REGIONS_PER_MACRO_AREA = 8
    MIN_REGION_DISTANCE = 80_000.0
    BLEND_WIDTH = 20_000.0
    SEARCH_RADIUS = 2
    REGION_SALT = 0xC05A1C

    def __init__(self, universe_seed: int, logger: Optional[ChannelLogger] = None) -> None:
        self._seed = validate_seed(universe_seed)
        self._logger = logger
        self._centers: Dict[Tuple[int, int], Tuple[RegionCenter, ...]] = {}

    @property
    def seed(self) -> int:
        return self._seed

    def clear_cache(self) -> None:
        self._centers.clear()

    def centers_in_macro_area(self, macro_x: int, macro_y: int) -> Tuple[RegionCenter, ...]:
        key = (macro_x, macro_y)
        cached = self._centers.get(key)
        if cached is None:
            cached = self._generate_centers(macro_x, macro_y)
            self._centers[key] = cached
        return cached

    def region_centers_near(self, x: float, y: float, radius: float) -> List[RegionCenter]:
        origin = Vector2(x, y)
        size = self.MACRO_AREA_SIZE
        reach = radius + size
        found: List[RegionCenter] = []
        for macro_y in range(math.floor((y - reach) / size), math.floor((y + reach) / size) + 1):
            for macro_x in range(math.floor((x - reach) / size), math.floor((x + reach) / size) + 1):
                for center in self.centers_in_macro_area(macro_x, macro_y):
                    if origin.distance_to((center.x, center.y)) <= radius:
                        found.append(center)
        return found

    def classify_region(self, x: float, y: float) -> RegionInfo:
        origin = Vector2(x, y)
        macro_x = math.floor(x / self.MACRO_AREA_SIZE)
        macro_y = math.floor(y / self.MACRO_AREA_SIZE)
        ranked: List[Tuple[float, float, float, RegionCenter]] = []
        for dy in range(-self.SEARCH_RADIUS, self.SEARCH_RADIUS + 1):
            for dx in range(-self.SEARCH_RADIUS, self.SEARCH_RADIUS + 1):
                for center in self.centers_in_macro_area(macro_x + dx, macro_y + dy):
                    distance = origin.distance_to((center.x, center.y))
                    ranked.append((distance, center.x, center.y, center))
        if not ranked:
            return RegionInfo(
                region_type=DEFAULT_REGION,
                definition=REGION_TYPES[DEFAULT_REGION],
                distance_from_center=math.inf,
                influence=1.0,
            )
        ranked.sort(key=lambda entry: entry[:3])
        nearest_distance, _, _, nearest = ranked[0]
        if len(ranked) == 1:
            return RegionInfo(
                region_type=nearest.region_type,
                definition=REGION_TYPES[nearest.region_type],
                distance_from_center=nearest_distance,
                influence=1.0,
            )
        second_distance, _, _, second = ranked[1]
        # Half the gap approximates the distance to the bisector between the two centres.
        edge = (second_distance - nearest_distance) / 2.0
        t = min(1.0, edge / self.BLEND_WIDTH)
        influence = 0.5 - 0.5 * math.cos(math.pi * t)
        return RegionInfo(
            region_type=nearest.region_type,
            definition=REGION_TYPES[nearest.region_type],
            distance_from_center=nearest_distance,
            influence=influence,
            neighbor_type=second.region_type,
        )

    def _generate_centers(self, macro_x: int, macro_y: int) -> Tuple[RegionCenter, ...]:
        rng = SeededRandom(hash64(self._seed, macro_x, macro_y, self.REGION_SALT))
        left = macro_x * self.MACRO_AREA_SIZE
        top = macro_y * self.MACRO_AREA_SIZE
        centers: List[RegionCenter] = []
        for _ in range(self.REGIONS_PER_MACRO_AREA * 2):
            if len(centers) >= self.REGIONS_PER_MACRO_AREA:
                break
            candidate = Vector2(
                left + rng.next_float(0.0, self.MACRO_AREA_SIZE),
                top + rng.next_float(0.0, self.MACRO_AREA_SIZE),
            )
            if any(candidate.distance_to((c.x, c.y)) < self.MIN_REGION_DISTANCE for c in centers):
                continue
            region_type = self._select_region_type(rng, centers)
            centers.append(RegionCenter(candidate.x, candidate.y, region_type))
        if self._logger is not None:
            self._logger.debug(
                "Placed %d region centres in macro area (%d, %d)",
                len(centers),
                macro_x,
                macro_y,
            )
        return tuple(centers)

    @staticmethod
    def _select_region_type(rng: SeededRandom, existing: List[RegionCenter]) -> str:
        counts: Dict[str, int] = {}
        for center in existing:
            counts[center.region_type] = counts.get(center.region_type, 0) + 1
        weights = [
            (name, max(0.1, 1.0 - counts.get(name, 0) * 0.3))
            for name in REGION_TYPES
        ]
        return rng.weighted_choice(weights)


__all__ = [
    "DEFAULT_REGION",
    "REGION_TYPES",
    "RegionCenter",
    "RegionDefinition",
    "RegionGenerator",
    "RegionInfo",
    "SPAWN_FAMILIES",
]
