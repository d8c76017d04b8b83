"""Emission, reflection, planetary and dark nebulae."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Tuple

from cosmos.celestial.common import CelestialObject, ChunkContext, clear_of, note_exhausted, object_id, place
from cosmos.engine.errors import PlacementExhausted
from cosmos.engine.logger import ChannelLogger


@dataclass(frozen=True)
class NebulaType:
    key: str
    name: str
    colors: Tuple[str, ...]
    size_range: Tuple[float, float]
    particle_range: Tuple[int, int]
    rarity: float
    discovery_value: int


NEBULA_TYPES: Dict[str, NebulaType] = {
    "emission": NebulaType("emission", "Emission Nebula", ("#ff6b9d", "#ff8e53", "#ff4757"), (200.0, 400.0), (80, 150), 0.4, 25),
    "reflection": NebulaType("reflection", "Reflection Nebula", ("#74b9ff", "#a29bfe", "#81ecec"), (150.0, 350.0), (60, 120), 0.3, 35),
    "planetary": NebulaType("planetary", "Planetary Nebula", ("#55efc4", "#00cec9", "#fd79a8"), (120.0, 250.0), (50, 100), 0.2, 60),
    "dark": NebulaType("dark", "Dark Nebula", ("#2d3436", "#636e72", "#4b4b4b"), (250.0, 500.0), (40, 90), 0.1, 80),
}


@dataclass
class Nebula(CelestialObject):
    kind: ClassVar[str] = "nebula"

    id: str
    x: float
    y: float
    radius: float
    nebula_type: str
    nebula_type_name: str
    color: str
    particle_count: int
    discovery_distance: float
    discovery_value: int
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)


class NebulaGenerator:
    MARGIN = 300.0
    MIN_DISTANCE = 800.0
    MIN_DISCOVERY_DISTANCE = 75.0

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._logger = logger

    def generate(self, context: ChunkContext) -> List[Nebula]:
        rng = context.rng("nebula")
        if not rng.chance(context.spawn_chance("nebula")):
            return []
        count = 2 if rng.chance(context.spawn_chance("nebula_multiple", "nebula")) else 1
        nebulae: List[Nebula] = []
        for index in range(count):
            item_rng = context.rng("nebula", index + 1)
            nebula_type = NEBULA_TYPES[
                item_rng.weighted_choice([(key, kind.rarity) for key, kind in NEBULA_TYPES.items()])
            ]
            radius = item_rng.next_float(*nebula_type.size_range)
            placed = [(nebula.x, nebula.y) for nebula in nebulae]
            try:
                x, y = place(
                    item_rng,
                    "nebula",
                    context.attempts,
                    lambda r: context.random_point(r, self.MARGIN),
                    lambda px, py: clear_of(px, py, placed, self.MIN_DISTANCE)
                    and not context.is_excluded(px, py, radius),
                )
            except PlacementExhausted as error:
                note_exhausted(self._logger, error, context.coord)
                continue
            nebulae.append(
                Nebula(
                    id=object_id("nebula", x, y),
                    x=x,
                    y=y,
                    radius=radius,
                    nebula_type=nebula_type.key,
                    nebula_type_name=nebula_type.name,
                    color=item_rng.choice(nebula_type.colors),
                    particle_count=item_rng.next_int(*nebula_type.particle_range),
                    discovery_distance=max(radius * 1.5, self.MIN_DISCOVERY_DISTANCE),
                    discovery_value=nebula_type.discovery_value,
                )
            )
        return nebulae


__all__ = ["NEBULA_TYPES", "Nebula", "NebulaGenerator", "NebulaType"]
