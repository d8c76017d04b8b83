"""Planet types, orbital placement and star-dependent type selection."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Tuple

from pygame.math import Vector2

from cosmos.celestial.common import CelestialObject
from cosmos.celestial.stars import Star
from cosmos.math.rng import SeededRandom


@dataclass(frozen=True)
class PlanetType:
    key: str
    name: str
    colors: Tuple[str, ...]
    size_multiplier: float
    rarity: float
    ring_chance: float


PLANET_TYPES: Dict[str, PlanetType] = {
    "ROCKY": PlanetType("ROCKY", "Rocky Planet", ("#8B4513", "#708090", "#A0522D"), 0.8, 0.35, 0.0),
    "OCEAN": PlanetType("OCEAN", "Ocean World", ("#4169E1", "#1E90FF", "#0047AB"), 1.0, 0.20, 0.0),
    "GAS_GIANT": PlanetType("GAS_GIANT", "Gas Giant", ("#DAA520", "#CD853F", "#F4A460"), 1.8, 0.15, 0.4),
    "DESERT": PlanetType("DESERT", "Desert World", ("#FFE4B5", "#FF6347", "#DEB887"), 0.9, 0.15, 0.0),
    "FROZEN": PlanetType("FROZEN", "Frozen World", ("#87CEEB", "#ADD8E6", "#E0FFFF"), 0.85, 0.08, 0.3),
    "VOLCANIC": PlanetType("VOLCANIC", "Volcanic World", ("#DC143C", "#FF4500", "#8B0000"), 0.9, 0.05, 0.0),
    "EXOTIC": PlanetType("EXOTIC", "Exotic World", ("#DA70D6", "#9370DB", "#8A2BE2"), 1.1, 0.02, 0.5),
}

ZONE_PROBABILITIES: Dict[str, Dict[str, float]] = {
    "inner": {"ROCKY": 0.5, "VOLCANIC": 0.25, "DESERT": 0.2, "OCEAN": 0.03, "FROZEN": 0.01, "GAS_GIANT": 0.01, "EXOTIC": 0.001},
    "habitable": {"ROCKY": 0.35, "OCEAN": 0.25, "DESERT": 0.2, "VOLCANIC": 0.1, "GAS_GIANT": 0.05, "FROZEN": 0.03, "EXOTIC": 0.02},
    "outer": {"GAS_GIANT": 0.3, "ROCKY": 0.25, "OCEAN": 0.15, "FROZEN": 0.15, "DESERT": 0.1, "VOLCANIC": 0.03, "EXOTIC": 0.02},
    "far": {"FROZEN": 0.4, "GAS_GIANT": 0.25, "ROCKY": 0.2, "OCEAN": 0.1, "DESERT": 0.02, "VOLCANIC": 0.01, "EXOTIC": 0.02},
}

STAR_TYPE_MODIFIERS: Dict[str, Dict[str, float]] = {
    "BLUE_GIANT": {"VOLCANIC": 2.0, "DESERT": 1.5, "OCEAN": 0.3, "FROZEN": 0.1, "EXOTIC": 1.8},
    "RED_GIANT": {"ROCKY": 0.8, "VOLCANIC": 1.3, "DESERT": 1.4, "OCEAN": 0.6, "EXOTIC": 1.5},
    "M_TYPE": {"OCEAN": 1.4, "FROZEN": 1.3, "VOLCANIC": 0.7, "DESERT": 0.8},
    "WHITE_DWARF": {"ROCKY": 1.5, "EXOTIC": 3.0, "OCEAN": 0.2, "GAS_GIANT": 0.1, "VOLCANIC": 0.5},
    "NEUTRON_STAR": {
        "EXOTIC": 5.0,
        "ROCKY": 2.0,
        "OCEAN": 0.05,
        "GAS_GIANT": 0.02,
        "FROZEN": 0.1,
        "VOLCANIC": 0.3,
        "DESERT": 0.3,
    },
    "K_TYPE": {"OCEAN": 1.2, "FROZEN": 1.1, "VOLCANIC": 0.9},
}

# (upper bound of the roll, (min, max) planet count)
PLANET_COUNT_TABLE: Tuple[Tuple[float, Tuple[int, int]], ...] = (
    (0.10, (0, 0)),
    (0.25, (1, 1)),
    (0.85, (2, 5)),
    (0.97, (6, 8)),
    (1.00, (9, 12)),
)


@dataclass(frozen=True)
class PlanetKey:
    """Everything a satellite needs to know about its planet."""

    id: str
    star_x: float
    star_y: float
    orbit_index: int
    planet_type: str
    orbit_distance: float
    orbit_angle: float
    orbital_speed: float
    radius: float

    def position_at(self, elapsed: float) -> Vector2:
        angle = self.orbit_angle + self.orbital_speed * elapsed
        return Vector2(self.star_x, self.star_y) + Vector2(self.orbit_distance, 0.0).rotate_rad(angle)


@dataclass
class Planet(CelestialObject):
    kind: ClassVar[str] = "planet"

    id: str
    x: float
    y: float
    radius: float
    planet_type: str
    planet_type_name: str
    color: str
    star_id: str
    star_x: float
    star_y: float
    star_type: str
    orbit_index: int
    orbit_distance: float
    orbit_angle: float
    orbital_speed: float
    has_rings: bool
    discovery_distance: float = 200.0
    discovery_value: int = 15
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)

    @property
    def key(self) -> PlanetKey:
        return PlanetKey(
            id=self.id,
            star_x=self.star_x,
            star_y=self.star_y,
            orbit_index=self.orbit_index,
            planet_type=self.planet_type,
            orbit_distance=self.orbit_distance,
            orbit_angle=self.orbit_angle,
            orbital_speed=self.orbital_speed,
            radius=self.radius,
        )

    def position_at(self, elapsed: float) -> Vector2:
        return self.key.position_at(elapsed)


def planet_zone(relative_distance: float) -> str:
    if relative_distance < 0.2:
        return "inner"
    if relative_distance < 0.4:
        return "habitable"
    if relative_distance < 0.7:
        return "outer"
    return "far"


class PlanetGenerator:
    """Orbits and types for the planets of one star."""

    MIN_DISTANCE_FROM_STAR = 60.0
    ZONE_SPAN = 800.0
    FIRST_ORBITS = ((10.0, 40.0), (60.0, 120.0), (150.0, 250.0))
    OUTER_SPACING = (50.0, 100.0)
    BASE_RADIUS_RANGE = (8.0, 20.0)
    BASE_ORBITAL_SPEED = 0.08
    KEPLER_REFERENCE = 120.0
    KEPLER_EXPONENT = 2.0
    SPEED_FACTOR_RANGE = (0.7, 1.3)

    def planet_count(self, rng: SeededRandom) -> int:
        roll = rng.next()
        for upper, (low, high) in PLANET_COUNT_TABLE:
            if roll < upper:
                return rng.next_int(low, high)
        return 0

    def orbit_distances(self, rng: SeededRandom, star: Star, count: int) -> List[float]:
        """Strictly increasing orbital radii, spaced so orbits never overlap."""

        min_distance = star.radius + self.MIN_DISTANCE_FROM_STAR
        distances: List[float] = []
        for index in range(count):
            if index < len(self.FIRST_ORBITS):
                distance = min_distance + rng.next_float(*self.FIRST_ORBITS[index])
            else:
                distance = distances[-1] + rng.next_float(*self.OUTER_SPACING)
            distances.append(distance)
        return distances

    def type_weights(self, star: Star, orbit_distance: float) -> List[Tuple[str, float]]:
        relative = (orbit_distance - (star.radius + self.MIN_DISTANCE_FROM_STAR)) / self.ZONE_SPAN
        probabilities = dict(ZONE_PROBABILITIES[planet_zone(relative)])
        for key, factor in STAR_TYPE_MODIFIERS.get(star.star_type, {}).items():
            probabilities[key] *= factor
        if star.star_type == "M_TYPE" and relative > 0.3:
            probabilities["FROZEN"] *= 1.8
        return [(key, probabilities.get(key, 0.01) * planet_type.rarity) for key, planet_type in PLANET_TYPES.items()]

    def build(self, rng: SeededRandom, star: Star, index: int, orbit_distance: float) -> Planet:
        planet_type = PLANET_TYPES[rng.weighted_choice(self.type_weights(star, orbit_distance))]
        angle = rng.next_float(0.0, 2.0 * math.pi)
        speed = (
            self.BASE_ORBITAL_SPEED
            * (self.KEPLER_REFERENCE / orbit_distance) ** self.KEPLER_EXPONENT
            * rng.next_float(*self.SPEED_FACTOR_RANGE)
        )
        radius = rng.next_float(*self.BASE_RADIUS_RANGE) * planet_type.size_multiplier
        color = rng.choice(planet_type.colors)
        has_rings = rng.chance(planet_type.ring_chance)
        offset = Vector2(orbit_distance, 0.0).rotate_rad(angle)
        x = star.x + offset.x
        y = star.y + offset.y
        return Planet(
            id=f"planet_{math.floor(star.x)}_{math.floor(star.y)}_planet_{index}",
            x=x,
            y=y,
            radius=radius,
            planet_type=planet_type.key,
            planet_type_name=planet_type.name,
            color=color,
            star_id=star.id,
            star_x=star.x,
            star_y=star.y,
            star_type=star.star_type,
            orbit_index=index,
            orbit_distance=orbit_distance,
            orbit_angle=angle,
            orbital_speed=speed,
            has_rings=has_rings,
        )


__all__ = [
    "PLANET_COUNT_TABLE",
    "PLANET_TYPES",
    "Planet",
    "PlanetGenerator",
    "PlanetKey",
    "PlanetType",
    "STAR_TYPE_MODIFIERS",
    "ZONE_PROBABILITIES",
    "planet_zone",
]
