"""Asteroid gardens: drifting rock fields away from star systems."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple

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


@dataclass(frozen=True)
class GardenType:
    key: str
    name: str
    colors: Tuple[str, ...]
    size_range: Tuple[float, float]
    rock_density: float
    rarity: float
    discovery_value: int


GARDEN_TYPES: Dict[str, GardenType] = {
    "metallic": GardenType("metallic", "Metallic Asteroid Garden", ("#8C8C8C", "#B0B0B0", "#707070"), (150.0, 300.0), 0.12, 0.35, 20),
    "crystalline": GardenType("crystalline", "Crystalline Asteroid Garden", ("#E0FFFF", "#AFEEEE", "#B0E0E6"), (120.0, 250.0), 0.10, 0.20, 45),
    "carbonaceous": GardenType("carbonaceous", "Carbonaceous Asteroid Garden", ("#3B3B3B", "#4A4A4A", "#2F2F2F"), (200.0, 400.0), 0.08, 0.25, 25),
    "icy": GardenType("icy", "Icy Asteroid Garden", ("#DDEEFF", "#C6E2FF", "#F0F8FF"), (180.0, 350.0), 0.09, 0.15, 35),
    "rare_minerals": GardenType("rare_minerals", "Rare Mineral Garden", ("#FFD700", "#DA70D6", "#50C878"), (100.0, 200.0), 0.15, 0.05, 80),
}


@dataclass
class AsteroidGarden(CelestialObject):
    kind: ClassVar[str] = "asteroid_garden"

    id: str
    x: float
    y: float
    radius: float
    garden_type: str
    garden_type_name: str
    color: str
    rock_count: int
    discovery_distance: float
    discovery_value: int
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)


class AsteroidGardenGenerator:
    MARGIN = 250.0
    STAR_CLEARANCE = 400.0
    MIN_DISTANCE = 600.0

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._logger = logger

    def generate(self, context: ChunkContext, stars: Sequence[Point] = ()) -> List[AsteroidGarden]:
        rng = context.rng("asteroid_garden")
        if not rng.chance(context.spawn_chance("asteroid_garden")):
            return []
        multiple = rng.chance(context.spawn_chance("asteroid_garden_multiple", "asteroid_garden"))
        gardens: List[AsteroidGarden] = []
        for index in range(2 if multiple else 1):
            item_rng = context.rng("asteroid_garden", index + 1)
            garden_type = GARDEN_TYPES[
                item_rng.weighted_choice([(key, kind.rarity) for key, kind in GARDEN_TYPES.items()])
            ]
            radius = item_rng.next_float(*garden_type.size_range)
            placed = [(garden.x, garden.y) for garden in gardens]
            try:
                x, y = place(
                    item_rng,
                    "asteroid_garden",
                    context.attempts,
                    lambda r: context.random_point(r, self.MARGIN),
                    lambda px, py: clear_of(px, py, stars, self.STAR_CLEARANCE + radius)
                    and clear_of(px, py, placed, self.MIN_DISTANCE)
                    and not context.is_excluded(px, py, radius),
                )
            except PlacementExhausted as error:
                note_exhausted(self._logger, error, context.coord)
                continue
            gardens.append(
                AsteroidGarden(
                    id=object_id("asteroid_garden", x, y),
                    x=x,
                    y=y,
                    radius=radius,
                    garden_type=garden_type.key,
                    garden_type_name=garden_type.name,
                    color=item_rng.choice(garden_type.colors),
                    rock_count=max(8, int(radius * garden_type.rock_density * item_rng.next_float(0.8, 1.2))),
                    discovery_distance=max(radius * 1.2, 150.0),
                    discovery_value=garden_type.discovery_value,
                )
            )
        return gardens


__all__ = ["AsteroidGarden", "AsteroidGardenGenerator", "GARDEN_TYPES", "GardenType"]
