"""Comets on eccentric Keplerian orbits around their parent star."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Tuple

from pygame.math import Vector2

from cosmos.celestial.common import CelestialObject
from cosmos.celestial.stars import Star
from cosmos.math.rng import SeededRandom

KEPLER_ITERATIONS = 30


@dataclass(frozen=True)
class CometType:
    key: str
    name: str
    rarity: float
    discovery_value: int
    tail_colors: Tuple[str, ...]


COMET_TYPES: Dict[str, CometType] = {
    "ICE": CometType("ICE", "Ice Comet", 0.4, 20, ("#87CEEB", "#B0E0E6", "#E0FFFF")),
    "DUST": CometType("DUST", "Dust Comet", 0.3, 22, ("#DAA520", "#DEB887", "#F4A460")),
    "ROCKY": CometType("ROCKY", "Rocky Comet", 0.2, 25, ("#A9A9A9", "#C0C0C0", "#DCDCDC")),
    "ORGANIC": CometType("ORGANIC", "Organic Comet", 0.1, 30, ("#9ACD32", "#ADFF2F", "#FFFF00")),
}


def solve_kepler(mean_anomaly: float, eccentricity: float) -> float:
    """Eccentric anomaly for ``mean_anomaly`` via a fixed number of Newton steps."""

    mean = math.fmod(mean_anomaly, 2.0 * math.pi)
    eccentric = mean if eccentricity < 0.8 else math.pi
    for _ in range(KEPLER_ITERATIONS):
        delta = (eccentric - eccentricity * math.sin(eccentric) - mean) / (
            1.0 - eccentricity * math.cos(eccentric)
        )
        eccentric -= delta
        if abs(delta) < 1e-12:
            break
    return eccentric


@dataclass(frozen=True)
class CometOrbit:
    semi_major_axis: float
    eccentricity: float
    perihelion_distance: float
    aphelion_distance: float
    orbital_period: float
    argument_of_perihelion: float
    mean_anomaly_at_epoch: float
    epoch: float = 0.0

    def mean_anomaly_at(self, elapsed: float) -> float:
        return self.mean_anomaly_at_epoch + 2.0 * math.pi * (elapsed - self.epoch) / self.orbital_period

    def offset_at(self, elapsed: float) -> Vector2:
        """Position relative to the star after ``elapsed`` universal time."""

        e = self.eccentricity
        eccentric = solve_kepler(self.mean_anomaly_at(elapsed), e)
        true_anomaly = 2.0 * math.atan2(
            math.sqrt(1.0 + e) * math.sin(eccentric / 2.0),
            math.sqrt(1.0 - e) * math.cos(eccentric / 2.0),
        )
        distance = self.semi_major_axis * (1.0 - e * math.cos(eccentric))
        return Vector2(distance, 0.0).rotate_rad(true_anomaly + self.argument_of_perihelion)


@dataclass
class Comet(CelestialObject):
    kind: ClassVar[str] = "comet"

    id: str
    x: float
    y: float
    radius: float
    comet_type: str
    comet_type_name: str
    color: str
    star_id: str
    star_x: float
    star_y: float
    index: int
    orbit: CometOrbit
    discovery_distance: float = 150.0
    discovery_value: int = 20
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)

    def position_at(self, elapsed: float) -> Vector2:
        return Vector2(self.star_x, self.star_y) + self.orbit.offset_at(elapsed)

    def distance_from_star_at(self, elapsed: float) -> float:
        return self.orbit.offset_at(elapsed).length()


class CometGenerator:
    SEMI_MAJOR_AXIS_RANGE = (250.0, 600.0)
    ECCENTRICITY_RANGE = (0.6, 0.95)
    PERIOD_RANGE = (60.0, 300.0)
    NUCLEUS_RADIUS_RANGE = (4.0, 8.0)
    SINGLE_COMET_CHANCE = 0.75

    def comet_count(self, rng: SeededRandom) -> int:
        if rng.chance(self.SINGLE_COMET_CHANCE):
            return 1
        return rng.next_int(2, 3)

    def build_orbit(self, rng: SeededRandom) -> CometOrbit:
        semi_major_axis = rng.next_float(*self.SEMI_MAJOR_AXIS_RANGE)
        eccentricity = rng.next_float(*self.ECCENTRICITY_RANGE)
        return CometOrbit(
            semi_major_axis=semi_major_axis,
            eccentricity=eccentricity,
            perihelion_distance=semi_major_axis * (1.0 - eccentricity),
            aphelion_distance=semi_major_axis * (1.0 + eccentricity),
            orbital_period=rng.next_float(*self.PERIOD_RANGE),
            argument_of_perihelion=rng.next_float(0.0, 2.0 * math.pi),
            mean_anomaly_at_epoch=rng.next_float(0.0, 2.0 * math.pi),
        )

    def generate(self, rng: SeededRandom, star: Star, spawn_chance: float) -> List[Comet]:
        if not rng.chance(spawn_chance):
            return []
        comets: List[Comet] = []
        for index in range(self.comet_count(rng)):
            orbit = self.build_orbit(rng)
            comet_type = COMET_TYPES[
                rng.weighted_choice([(key, kind.rarity) for key, kind in COMET_TYPES.items()])
            ]
            # Catalogued at perihelion.
            start = Vector2(orbit.perihelion_distance, 0.0).rotate_rad(orbit.argument_of_perihelion)
            comets.append(
                Comet(
                    id=f"comet_{math.floor(star.x)}_{math.floor(star.y)}_{index}",
                    x=star.x + start.x,
                    y=star.y + start.y,
                    radius=rng.next_float(*self.NUCLEUS_RADIUS_RANGE),
                    comet_type=comet_type.key,
                    comet_type_name=comet_type.name,
                    color=comet_type.tail_colors[0],
                    star_id=star.id,
                    star_x=star.x,
                    star_y=star.y,
                    index=index,
                    orbit=orbit,
                    discovery_value=comet_type.discovery_value,
                )
            )
        return comets


__all__ = ["COMET_TYPES", "Comet", "CometGenerator", "CometOrbit", "CometType", "solve_kepler"]
