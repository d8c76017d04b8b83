"""Star catalogue, binary companions and background decoration stars."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Tuple

from cosmos.celestial.common import CelestialObject, ChunkContext, object_id
from cosmos.math.rng import SeededRandom


@dataclass(frozen=True)
class StarType:
    key: str
    name: str
    class_code: str
    frequency: float
    size_multiplier: float
    colors: Tuple[str, ...]
    temperature: str


# Ordered by frequency; weights sum to 1.0.
STAR_TYPES: Dict[str, StarType] = {
    "G_TYPE": StarType("G_TYPE", "G-Type Star", "G", 0.30, 1.0, ("#ffdd88", "#ffaa44", "#ffcc66"), "medium"),
    "K_TYPE": StarType("K_TYPE", "K-Type Star", "K", 0.25, 0.9, ("#ffaa44", "#ff8844", "#ff9955"), "medium-cool"),
    "M_TYPE": StarType("M_TYPE", "M-Type Star", "M", 0.25, 0.7, ("#ff6644", "#ff4422", "#cc3311"), "cool"),
    "RED_GIANT": StarType("RED_GIANT", "Red Giant", "RG", 0.10, 1.6, ("#ff4422", "#ff6644", "#ff5533"), "cool-surface-hot-core"),
    "BLUE_GIANT": StarType("BLUE_GIANT", "Blue Giant", "BG", 0.05, 1.8, ("#88ddff", "#66ccff", "#aaeeff"), "very-hot"),
    "WHITE_DWARF": StarType("WHITE_DWARF", "White Dwarf", "WD", 0.04, 0.4, ("#ffffff", "#eeeeff", "#ddddff"), "very-hot-surface"),
    "NEUTRON_STAR": StarType("NEUTRON_STAR", "Neutron Star", "NS", 0.01, 0.2, ("#ddddff", "#bbbbff", "#9999ff"), "extreme"),
}

# Companions skew small and cool; weights depend on the primary.
COMPANION_WEIGHTS: Dict[str, Tuple[Tuple[str, float], ...]] = {
    "giant": (("M_TYPE", 0.4), ("K_TYPE", 0.3), ("G_TYPE", 0.2), ("WHITE_DWARF", 0.1)),
    "sunlike": (("M_TYPE", 0.5), ("K_TYPE", 0.3), ("G_TYPE", 0.2)),
    "red_dwarf": (("M_TYPE", 0.7), ("WHITE_DWARF", 0.3)),
    "remnant": (("M_TYPE", 0.4), ("K_TYPE", 0.3), ("WHITE_DWARF", 0.3)),
}

BACKGROUND_COLORS = ("#ffffff", "#ffddaa", "#aaddff", "#ffaa88", "#88aaff")


@dataclass
class Star(CelestialObject):
    kind: ClassVar[str] = "star"

    id: str
    x: float
    y: float
    radius: float
    star_type: str
    star_type_name: str
    color: str
    temperature: str
    companion_of: Optional[str] = None
    discovery_distance: float = 500.0
    discovery_value: int = 10
    discovered: bool = field(default=False, compare=False)
    discovery_timestamp: Optional[float] = field(default=None, compare=False)

    @property
    def is_companion(self) -> bool:
        return self.companion_of is not None


@dataclass(frozen=True)
class BackgroundStar:
    x: float
    y: float
    brightness: float
    size: int
    color: str


class StarGenerator:
    """Type selection and physical properties for individual stars."""

    RADIUS_RANGE = (80.0, 140.0)
    COMPANION_DISTANCE_RANGE = (150.0, 300.0)

    def select_star_type(self, rng: SeededRandom) -> StarType:
        return rng.weighted_choice([(star_type, star_type.frequency) for star_type in STAR_TYPES.values()])

    def select_companion_type(self, rng: SeededRandom, primary: StarType) -> StarType:
        if primary.key in ("RED_GIANT", "BLUE_GIANT"):
            table = COMPANION_WEIGHTS["giant"]
        elif primary.key in ("G_TYPE", "K_TYPE"):
            table = COMPANION_WEIGHTS["sunlike"]
        elif primary.key == "M_TYPE":
            table = COMPANION_WEIGHTS["red_dwarf"]
        else:
            table = COMPANION_WEIGHTS["remnant"]
        return STAR_TYPES[rng.weighted_choice(table)]

    def build(
        self,
        rng: SeededRandom,
        star_type: StarType,
        x: float,
        y: float,
        companion_of: Optional[str] = None,
    ) -> Star:
        radius = rng.next_float(*self.RADIUS_RANGE) * star_type.size_multiplier
        return Star(
            id=object_id("star", x, y),
            x=x,
            y=y,
            radius=radius,
            star_type=star_type.key,
            star_type_name=star_type.name,
            color=rng.choice(star_type.colors),
            temperature=star_type.temperature,
            companion_of=companion_of,
            discovery_distance=radius + 400.0,
        )


def generate_background_stars(context: ChunkContext) -> List[BackgroundStar]:
    """Decorative far-field stars; no discovery state, no naming."""

    rng = context.rng("background")
    left, top = context.origin
    size = context.chunk_size
    count = int(round(rng.next_int(40, 80) * context.region.star_density()))
    stars: List[BackgroundStar] = []
    for _ in range(count):
        stars.append(
            BackgroundStar(
                x=left + rng.next_float(0.0, size),
                y=top + rng.next_float(0.0, size),
                brightness=rng.next_float(0.2, 1.0),
                size=2 if rng.next() > 0.9 else 1,
                color=rng.choice(BACKGROUND_COLORS),
            )
        )
    return stars


__all__ = [
    "BackgroundStar",
    "COMPANION_WEIGHTS",
    "STAR_TYPES",
    "Star",
    "StarGenerator",
    "StarType",
    "generate_background_stars",
]
