"""Objects whose frequency is driven almost entirely by the cosmic region.

Rogue planets, dark nebulae, crystal gardens and protostars each roll once
per chunk against ``base chance x region modifier``; barren regions all but
suppress them while their home regions multiply the odds several times over.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple

from pygame.math import Vector2

from cosmos.celestial.common import (
    CelestialObject,
    ChunkContext,
    Point,
    clear_of,
    note_exhausted,
    object_id,
    place,
)
from cosmos.engine.errors import PlacementExhausted
from cosmos.engine.logger import ChannelLogger
from cosmos.math.rng import SeededRandom


@dataclass(frozen=True)
class RoguePlanetVariant:
    key: str
    radius: float
    color: str
    temperature_range: Tuple[float, float]
    discovery_distance: float
    discovery_value: int
    weight: float


ROGUE_PLANET_VARIANTS: Dict[str, RoguePlanetVariant] = {
    "ice": RoguePlanetVariant("ice", 12.0, "#B0E0E6", (-240.0, -180.0), 65.0, 40, 0.50),
    "rock": RoguePlanetVariant("rock", 14.0, "#696969", (-200.0, -120.0), 60.0, 35, 0.35),
    "volcanic": RoguePlanetVariant("volcanic", 13.0, "#8B0000", (400.0, 900.0), 70.0, 60, 0.15),
}


@dataclass(frozen=True)
class DarkNebulaVariant:
    key: str
    radius: float
    color: str
    occlusion_strength: float
    shape: str
    weight: float


DARK_NEBULA_VARIANTS: Dict[str, DarkNebulaVariant] = {
    "dense-core": DarkNebulaVariant("dense-core", 180.0, "#2F1B14", 1.0, "irregular", 0.30),
    "wispy": DarkNebulaVariant("wispy", 220.0, "#3D2B1F", 0.6, "irregular", 0.45),
    "globular": DarkNebulaVariant("globular", 160.0, "#4A3420", 0.8, "circular", 0.25),
}


@dataclass(frozen=True)
class CrystalGardenVariant:
    key: str
    size_range: Tuple[float, float]
    color: str
    mineral_type: str
    discovery_value: int
    weight: float


CRYSTAL_GARDEN_VARIANTS: Dict[str, CrystalGardenVariant] = {
    "pure": CrystalGardenVariant("pure", (60.0, 90.0), "#E0FFFF", "quartz", 45, 0.45),
    "mixed": CrystalGardenVariant("mixed", (80.0, 120.0), "#B19CD9", "amethyst", 40, 0.40),
    "rare-earth": CrystalGardenVariant("rare-earth", (50.0, 80.0), "#50C878", "emerald", 120, 0.15),
}


@dataclass(frozen=True)
class ProtostarVariant:
    key: str
    classification: str
    radius: float
    color: str
    core_temperature_range: Tuple[float, float]
    jet_intensity_range: Tuple[float, float]
    disk_scale_range: Tuple[float, float]
    instability_range: Tuple[float, float]
    discovery_value: int
    weight: float


# Core temperatures in millions of kelvin; disk size as a multiple of radius.
PROTOSTAR_VARIANTS: Dict[str, ProtostarVariant] = {
    "class-0": ProtostarVariant("class-0", "Class 0 Protostar", 45.0, "#FF4500", (0.5, 1.0), (0.8, 1.0), (3.0, 4.0), (0.6, 0.9), 60, 0.30),
    "class-1": ProtostarVariant("class-1", "Class I Protostar", 38.0, "#FF8C00", (1.0, 3.0), (0.5, 0.8), (2.0, 3.0), (0.3, 0.6), 50, 0.45),
    "class-2": ProtostarVariant("class-2", "Class II Protostar", 32.0, "#FFD700", (3.0, 8.0), (0.1, 0.4), (1.2, 2.0), (0.1, 0.3), 80, 0.25),
}


@dataclass
class RoguePlanet(CelestialObject):
    kind: ClassVar[str] = "rogue_planet"

    id: str
    x: float
    y: float
    radius: float
    variant: str
    color: str
    surface_temperature: float
    discovery_distance: float
    discovery_value: int
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)


@dataclass
class DarkNebula(CelestialObject):
    kind: ClassVar[str] = "dark_nebula"

    id: str
    x: float
    y: float
    radius: float
    variant: str
    color: str
    occlusion_strength: float
    shape: str
    dust_density: float
    outline: Tuple[Point, ...] = ()
    discovery_distance: float = 80.0
    discovery_value: int = 35
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)

    def occlusion_at(self, x: float, y: float) -> float:
        """How strongly a background star at ``(x, y)`` is dimmed, 0 to 1."""

        distance = self.distance_to(x, y)
        if distance >= self.radius:
            return 0.0
        return self.occlusion_strength * (1.0 - distance / self.radius)


@dataclass
class CrystalGarden(CelestialObject):
    kind: ClassVar[str] = "crystal_garden"

    id: str
    x: float
    y: float
    radius: float
    variant: str
    color: str
    mineral_type: str
    refraction_intensity: float
    crystal_count: int
    discovery_distance: float = 90.0
    discovery_value: int = 45
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)


@dataclass
class Protostar(CelestialObject):
    kind: ClassVar[str] = "protostar"

    id: str
    x: float
    y: float
    radius: float
    variant: str
    stellar_classification: str
    color: str
    core_temperature: float
    jet_intensity: float
    accretion_disk_size: float
    instability_factor: float
    discovery_distance: float = 120.0
    discovery_value: int = 50
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)


class RegionObjectGenerator:
    """At most one object per chunk, placed clear of stars and black holes.

    Subclasses pick a variant and radius first so placement can account for
    the object's size, then build the descriptor at the chosen site.
    """

    family: ClassVar[str] = "region_object"
    MARGIN = 200.0
    STAR_CLEARANCE = 300.0

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._logger = logger

    def generate(self, context: ChunkContext, stars: Sequence[Point] = ()) -> List[CelestialObject]:
        rng = context.rng(self.family)
        if not rng.chance(context.spawn_chance(self.family)):
            return []
        item_rng = context.rng(self.family, 1)
        variant, radius = self.choose(item_rng)
        try:
            x, y = place(
                item_rng,
                self.family,
                context.attempts,
                lambda r: context.random_point(r, self.MARGIN),
                lambda px, py: clear_of(px, py, stars, self.STAR_CLEARANCE + radius)
                and not context.is_excluded(px, py, radius),
            )
        except PlacementExhausted as error:
            note_exhausted(self._logger, error, context.coord)
            return []
        return [self.build(item_rng, variant, radius, x, y)]

    def choose(self, rng: SeededRandom) -> Tuple[object, float]:
        raise NotImplementedError

    def build(self, rng: SeededRandom, variant: object, radius: float, x: float, y: float) -> CelestialObject:
        raise NotImplementedError


def _pick(rng: SeededRandom, table: Dict[str, object]) -> object:
    return table[rng.weighted_choice([(key, variant.weight) for key, variant in table.items()])]


class RoguePlanetGenerator(RegionObjectGenerator):
    family = "rogue_planet"

    def choose(self, rng: SeededRandom) -> Tuple[RoguePlanetVariant, float]:
        variant = _pick(rng, ROGUE_PLANET_VARIANTS)
        return variant, variant.radius

    def build(self, rng: SeededRandom, variant: RoguePlanetVariant, radius: float, x: float, y: float) -> RoguePlanet:
        return RoguePlanet(
            id=object_id("rogue_planet", x, y),
            x=x,
            y=y,
            radius=radius,
            variant=variant.key,
            color=variant.color,
            surface_temperature=rng.next_float(*variant.temperature_range),
            discovery_distance=variant.discovery_distance,
            discovery_value=variant.discovery_value,
        )


class DarkNebulaGenerator(RegionObjectGenerator):
    family = "dark_nebula"
    VERTEX_RANGE = (16, 24)

    def choose(self, rng: SeededRandom) -> Tuple[DarkNebulaVariant, float]:
        variant = _pick(rng, DARK_NEBULA_VARIANTS)
        return variant, variant.radius

    def outline(self, rng: SeededRandom, x: float, y: float, radius: float) -> Tuple[Point, ...]:
        count = rng.next_int(*self.VERTEX_RANGE)
        points = []
        for index in range(count):
            angle = 2.0 * math.pi * index / count
            vertex = Vector2(radius * rng.next_float(0.6, 1.4), 0.0).rotate_rad(angle)
            points.append((x + vertex.x, y + vertex.y))
        return tuple(points)

    def build(self, rng: SeededRandom, variant: DarkNebulaVariant, radius: float, x: float, y: float) -> DarkNebula:
        outline = self.outline(rng, x, y, radius) if variant.shape == "irregular" else ()
        return DarkNebula(
            id=object_id("dark_nebula", x, y),
            x=x,
            y=y,
            radius=radius,
            variant=variant.key,
            color=variant.color,
            occlusion_strength=variant.occlusion_strength,
            shape=variant.shape,
            dust_density=rng.next_float(0.5, 1.0),
            outline=outline,
        )


class CrystalGardenGenerator(RegionObjectGenerator):
    family = "crystal_garden"

    def choose(self, rng: SeededRandom) -> Tuple[CrystalGardenVariant, float]:
        variant = _pick(rng, CRYSTAL_GARDEN_VARIANTS)
        return variant, rng.next_float(*variant.size_range)

    def build(self, rng: SeededRandom, variant: CrystalGardenVariant, radius: float, x: float, y: float) -> CrystalGarden:
        return CrystalGarden(
            id=object_id("crystal_garden", x, y),
            x=x,
            y=y,
            radius=radius,
            variant=variant.key,
            color=variant.color,
            mineral_type=variant.mineral_type,
            refraction_intensity=rng.next_float(0.3, 1.0),
            crystal_count=rng.next_int(4, 7),
            discovery_value=variant.discovery_value,
        )


class ProtostarGenerator(RegionObjectGenerator):
    family = "protostar"

    def choose(self, rng: SeededRandom) -> Tuple[ProtostarVariant, float]:
        variant = _pick(rng, PROTOSTAR_VARIANTS)
        return variant, variant.radius

    def build(self, rng: SeededRandom, variant: ProtostarVariant, radius: float, x: float, y: float) -> Protostar:
        return Protostar(
            id=object_id("protostar", x, y),
            x=x,
            y=y,
            radius=radius,
            variant=variant.key,
            stellar_classification=variant.classification,
            color=variant.color,
            core_temperature=rng.next_float(*variant.core_temperature_range),
            jet_intensity=rng.next_float(*variant.jet_intensity_range),
            accretion_disk_size=radius * rng.next_float(*variant.disk_scale_range),
            instability_factor=rng.next_float(*variant.instability_range),
            discovery_value=variant.discovery_value,
        )


__all__ = [
    "CRYSTAL_GARDEN_VARIANTS",
    "CrystalGarden",
    "CrystalGardenGenerator",
    "DARK_NEBULA_VARIANTS",
    "DarkNebula",
    "DarkNebulaGenerator",
    "PROTOSTAR_VARIANTS",
    "Protostar",
    "ProtostarGenerator",
    "ROGUE_PLANET_VARIANTS",
    "RegionObjectGenerator",
    "RoguePlanet",
    "RoguePlanetGenerator",
]
