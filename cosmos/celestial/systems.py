"""Star systems: a star, its optional companion, planets, moons and comets."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pygame.math import Vector2

from cosmos.celestial.comets import Comet, CometGenerator
from cosmos.celestial.common import ChunkContext, Point, place
from cosmos.celestial.moons import Moon, MoonGenerator
from cosmos.celestial.planets import Planet, PlanetGenerator
from cosmos.celestial.stars import Star, StarGenerator
from cosmos.math.rng import SeededRandom
from cosmos.math.spatial import object_seed


@dataclass
class StarSystem:
    star: Star
    companion: Optional[Star] = None
    planets: List[Planet] = field(default_factory=list)
    moons: List[Moon] = field(default_factory=list)
    comets: List[Comet] = field(default_factory=list)

    @property
    def stars(self) -> List[Star]:
        return [self.star] if self.companion is None else [self.star, self.companion]

    def extent(self) -> float:
        """Farthest distance from the primary any member can ever reach."""

        reach = self.star.radius
        origin = Vector2(self.star.x, self.star.y)
        if self.companion is not None:
            reach = max(reach, origin.distance_to((self.companion.x, self.companion.y)) + self.companion.radius)
        moon_reach: Dict[str, float] = {}
        for moon in self.moons:
            outer = moon.orbit_distance + moon.radius
            moon_reach[moon.parent.id] = max(moon_reach.get(moon.parent.id, 0.0), outer)
        for planet in self.planets:
            reach = max(reach, planet.orbit_distance + max(planet.radius, moon_reach.get(planet.id, 0.0)))
        for comet in self.comets:
            reach = max(reach, comet.orbit.aphelion_distance + comet.radius)
        return reach


class StarSystemGenerator:
    """Builds at most one star system per chunk."""

    MARGIN = 250.0

    def __init__(self) -> None:
        self.stars = StarGenerator()
        self.planets = PlanetGenerator()
        self.moons = MoonGenerator()
        self.comets = CometGenerator()

    def rolls(self, context: ChunkContext) -> bool:
        return context.rng("star_roll").chance(context.spawn_chance("star_system"))

    def generate(self, context: ChunkContext) -> Optional[StarSystem]:
        """Star system for this chunk, or ``None`` if the roll fails.

        The system is laid out once at the origin to measure its extent, then
        rebuilt at the chosen site from the same seeds; positions are the only
        difference between the two passes. Raises ``PlacementExhausted`` when
        no site keeps the whole system clear of exclusion zones.
        """

        if not self.rolls(context):
            return None
        extent = self._build(context, 0.0, 0.0).extent()
        x, y = place(
            context.rng("star_site"),
            "star_system",
            context.attempts,
            lambda rng: context.random_point(rng, self.MARGIN),
            lambda px, py: not context.is_excluded(px, py, extent),
        )
        return self._build(context, x, y)

    def _build(self, context: ChunkContext, x: float, y: float) -> StarSystem:
        system_seed = object_seed(context.seed, 0, "star_system")
        rng = SeededRandom(system_seed)
        primary_type = self.stars.select_star_type(rng)
        star = self.stars.build(rng, primary_type, x, y)
        system = StarSystem(star=star)

        if rng.chance(context.config.spawn_chance("binary_star")):
            companion_type = self.stars.select_companion_type(rng, primary_type)
            distance = rng.next_float(*StarGenerator.COMPANION_DISTANCE_RANGE)
            offset = Vector2(distance, 0.0).rotate_rad(rng.next_float(0.0, 2.0 * math.pi))
            system.companion = self.stars.build(
                rng,
                companion_type,
                x + offset.x,
                y + offset.y,
                companion_of=star.id,
            )

        count = self.planets.planet_count(rng)
        for index, distance in enumerate(self.planets.orbit_distances(rng, star, count)):
            planet = self.planets.build(SeededRandom(object_seed(system_seed, index, "planet")), star, index, distance)
            system.planets.append(planet)
            system.moons.extend(self.moons.generate(SeededRandom(object_seed(system_seed, index, "moon")), planet))

        system.comets = self.comets.generate(
            SeededRandom(object_seed(system_seed, 0, "comet")),
            star,
            context.spawn_chance("comet"),
        )
        return system


def star_positions(system: Optional[StarSystem]) -> List[Point]:
    if system is None:
        return []
    return [(star.x, star.y) for star in system.stars]


__all__ = ["StarSystem", "StarSystemGenerator", "star_positions"]
