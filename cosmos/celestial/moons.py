"""Moons of large planets."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple

from pygame.math import Vector2

from cosmos.celestial.common import CelestialObject
from cosmos.celestial.planets import Planet, PlanetKey
from cosmos.math.rng import SeededRandom

MOON_COLORS = ("#C0C0C0", "#A9A9A9", "#D3D3D3", "#BEBEBE")

# Upper bounds of the distance buckets for ordinals I, II and III; IV beyond.
ORDINAL_BUCKETS: Tuple[float, ...] = (10.0, 20.0, 30.0)


def moon_ordinal(orbit_distance: float) -> int:
    """Zero-based ordinal from the floored orbital distance.

    Moons are bucketed by distance rather than ranked, so two moons inside the
    same bucket share an ordinal (15 and 18 both map to 1).
    """

    distance = math.floor(orbit_distance)
    for ordinal, upper in enumerate(ORDINAL_BUCKETS):
        if distance <= upper:
            return ordinal
    return len(ORDINAL_BUCKETS)


@dataclass
class Moon(CelestialObject):
    kind: ClassVar[str] = "moon"

    id: str
    x: float
    y: float
    radius: float
    color: str
    parent: PlanetKey
    index: int
    orbit_distance: float
    orbit_angle: float
    orbital_speed: float
    discovery_distance: float = 100.0
    discovery_value: int = 8
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)

    @property
    def ordinal(self) -> int:
        return moon_ordinal(self.orbit_distance)

    def position_at(self, elapsed: float) -> Vector2:
        angle = self.orbit_angle + self.orbital_speed * elapsed
        return self.parent.position_at(elapsed) + Vector2(self.orbit_distance, 0.0).rotate_rad(angle)


class MoonGenerator:
    MAX_MOONS = 4
    GAS_GIANT_CHANCE = 0.6
    LARGE_PLANET_CHANCE = 0.25
    OTHER_PLANET_CHANCE = 0.10
    LARGE_PLANET_RADIUS = 15.0
    ORBIT_GAP_RANGE = (15.0, 50.0)
    SIZE_RATIO_RANGE = (0.1, 0.2)
    PARENT_COLOR_CHANCE = 0.3
    BASE_ORBITAL_SPEED = 0.2
    SPEED_FACTOR_RANGE = (0.7, 1.3)

    def eligibility(self, planet: Planet) -> Tuple[float, int]:
        """Moon chance and maximum count for ``planet``."""

        if planet.planet_type == "GAS_GIANT":
            return self.GAS_GIANT_CHANCE, self.MAX_MOONS
        if planet.planet_type in ("ROCKY", "OCEAN") and planet.radius > self.LARGE_PLANET_RADIUS:
            return self.LARGE_PLANET_CHANCE, 2
        return self.OTHER_PLANET_CHANCE, 1

    def generate(self, rng: SeededRandom, planet: Planet) -> List[Moon]:
        chance, max_moons = self.eligibility(planet)
        if not rng.chance(chance):
            return []
        count = min(rng.next_int(1, max_moons), self.MAX_MOONS)
        parent = planet.key
        moons: List[Moon] = []
        for index in range(count):
            distance = planet.radius + rng.next_float(*self.ORBIT_GAP_RANGE)
            angle = rng.next_float(0.0, 2.0 * math.pi)
            speed = self.BASE_ORBITAL_SPEED * rng.next_float(*self.SPEED_FACTOR_RANGE)
            radius = planet.radius * rng.next_float(*self.SIZE_RATIO_RANGE)
            color = planet.color if rng.chance(self.PARENT_COLOR_CHANCE) else rng.choice(MOON_COLORS)
            offset = Vector2(distance, 0.0).rotate_rad(angle)
            moons.append(
                Moon(
                    id=f"moon_{math.floor(planet.x)}_{math.floor(planet.y)}_moon_{index}",
                    x=planet.x + offset.x,
                    y=planet.y + offset.y,
                    radius=radius,
                    color=color,
                    parent=parent,
                    index=index,
                    orbit_distance=distance,
                    orbit_angle=angle,
                    orbital_speed=speed,
                )
            )
        return moons


__all__ = ["MOON_COLORS", "Moon", "MoonGenerator", "ORDINAL_BUCKETS", "moon_ordinal"]
