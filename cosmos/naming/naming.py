"""IAU-inspired catalog designations derived purely from position."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Union

from cosmos.celestial.asteroids import AsteroidGarden
from cosmos.celestial.blackholes import BlackHole
from cosmos.celestial.comets import Comet
from cosmos.celestial.common import CELESTIAL_FAMILIES, CelestialObject
from cosmos.celestial.moons import Moon, moon_ordinal
from cosmos.celestial.nebulae import Nebula
from cosmos.celestial.planets import Planet, PlanetKey
from cosmos.celestial.region_objects import CrystalGarden, DarkNebula, Protostar, RoguePlanet
from cosmos.celestial.stars import STAR_TYPES, Star
from cosmos.celestial.wormholes import Wormhole
from cosmos.engine.logger import ChannelLogger
from cosmos.math.spatial import MASK32, fmix32

CATALOG_PREFIX = "ASV"
PLANET_LETTERS = "bcdefghijklmnopqrstuvwxyz"
COMET_LETTERS = "ABCDEFGHJKLMNOPQRSTUVWXYZ"
ROMAN_NUMERALS = ("", "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X")

RARE_PLANET_CODES: Dict[str, str] = {"EXOTIC": "EX", "VOLCANIC": "VL", "FROZEN": "FR"}
RARE_STAR_TYPES = ("NEUTRON_STAR", "WHITE_DWARF", "BLUE_GIANT", "RED_GIANT")

NEBULA_CLASSIFICATIONS: Dict[str, str] = {
    "emission": "H II Region",
    "reflection": "Reflection Cloud",
    "planetary": "Planetary Nebula",
    "dark": "Dark Cloud",
}

FAMOUS_NEBULAE: Tuple[str, ...] = (
    "Eagle", "Orion", "Horsehead", "Crab", "Ring", "Cat's Eye", "Helix", "Rosette",
    "Veil", "Lagoon", "Trifid", "Swan", "Pelican", "North America", "Heart", "Soul",
    "Flame", "Cone", "Fox Fur", "Witch Head", "California", "Flaming Star",
    "Bubble", "Cocoon", "Elephant Trunk", "Pacman", "Wizard", "Tulip",
    "Lion", "Bear", "Dragon", "Serpent", "Phoenix", "Dolphin", "Seahorse", "Spider",
    "Butterfly", "Jellyfish", "Starfish", "Octopus", "Mantis", "Scorpion",
    "Medusa", "Perseus", "Andromeda", "Cassiopeia", "Aurora", "Celestial",
    "Ethereal", "Mystic", "Cosmic", "Stellar", "Galactic", "Nebulous",
    "Crimson", "Azure", "Emerald", "Golden", "Silver", "Violet", "Amber",
    "Crystal", "Opal", "Ruby", "Sapphire", "Pearl", "Diamond", "Prism",
)

# Sub-catalog prefixes for families named from the shared star catalog hash.
FAMILY_PREFIXES: Dict[str, str] = {
    "black_hole": f"{CATALOG_PREFIX} X-",
    "asteroid_garden": f"{CATALOG_PREFIX}-AG ",
    "rogue_planet": f"{CATALOG_PREFIX}-RP ",
    "dark_nebula": "LDN ",
    "crystal_garden": f"{CATALOG_PREFIX}-CG ",
    "protostar": "HH ",
}

PlanetLike = Union[Planet, PlanetKey]


def hash_coordinate(value: float) -> int:
    """32-bit hash of a coordinate at millesimal resolution."""

    return fmix32(abs(math.floor(value * 1000)) & MASK32)


def roman_numeral(number: int) -> str:
    if 0 < number < len(ROMAN_NUMERALS):
        return ROMAN_NUMERALS[number]
    return str(number)


@dataclass(frozen=True)
class DesignationRecord:
    type_name: str
    catalog: Optional[str] = None
    coordinate: Optional[str] = None
    designation: Optional[str] = None
    classification: Optional[str] = None
    parent: Optional[str] = None
    orbital_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class NamingService:
    """Stateless apart from a catalog-number memo that never changes results."""

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._logger = logger
        self._catalog_numbers: Dict[Tuple[float, float], int] = {}
        self._display_names: Dict[str, Callable[[Any], str]] = {
            "star": self.generate_star_display_name,
            "planet": self.generate_planet_name,
            "moon": self.generate_moon_name,
            "comet": self.generate_comet_name,
            "nebula": self.generate_nebula_name,
            "asteroid_garden": self.generate_asteroid_garden_name,
            "wormhole": self.generate_wormhole_name,
            "black_hole": self.generate_black_hole_name,
            "rogue_planet": self.generate_rogue_planet_name,
            "dark_nebula": self.generate_dark_nebula_name,
            "crystal_garden": self.generate_crystal_garden_name,
            "protostar": self.generate_protostar_name,
        }
        self._designations: Dict[str, Callable[[Any], DesignationRecord]] = {
            "star": self._star_designation,
            "planet": self._planet_designation,
            "moon": self._moon_designation,
            "comet": self._comet_designation,
            "nebula": self._nebula_designation,
            "asteroid_garden": lambda obj: self._catalog_designation(obj, obj.garden_type_name, obj.garden_type),
            "wormhole": lambda obj: self._catalog_designation(obj, obj.wormhole_type_name, obj.designation),
            "black_hole": lambda obj: self._catalog_designation(obj, obj.black_hole_type_name, obj.black_hole_type),
            "rogue_planet": lambda obj: self._catalog_designation(obj, "Rogue Planet", obj.variant),
            "dark_nebula": lambda obj: self._catalog_designation(obj, "Dark Nebula", obj.variant),
            "crystal_garden": lambda obj: self._catalog_designation(obj, "Crystal Garden", obj.mineral_type),
            "protostar": lambda obj: self._catalog_designation(obj, obj.stellar_classification, obj.variant),
        }
        self._notable: Dict[str, Callable[[Any], bool]] = {
            "star": lambda obj: obj.star_type in RARE_STAR_TYPES,
            "planet": lambda obj: obj.planet_type in RARE_PLANET_CODES,
            "moon": lambda obj: False,
            "comet": lambda obj: obj.comet_type == "ORGANIC",
            "nebula": lambda obj: True,
            "asteroid_garden": lambda obj: obj.garden_type in ("rare_minerals", "crystalline"),
            "wormhole": lambda obj: True,
            "black_hole": lambda obj: True,
            "rogue_planet": lambda obj: obj.variant == "volcanic",
            "dark_nebula": lambda obj: True,
            "crystal_garden": lambda obj: True,
            "protostar": lambda obj: True,
        }
        for table in (self._display_names, self._designations, self._notable):
            missing = set(CELESTIAL_FAMILIES) - set(table)
            if missing:
                raise KeyError(f"naming tables missing families: {sorted(missing)}")

    def clear_cache(self) -> None:
        self._catalog_numbers.clear()
        if self._logger is not None:
            self._logger.debug("Catalog number cache cleared")

    # Stars -----------------------------------------------------------------

    def generate_star_catalog_number(self, x: float, y: float) -> int:
        key = (x, y)
        number = self._catalog_numbers.get(key)
        if number is None:
            number = 1000 + ((hash_coordinate(x) ^ hash_coordinate(y)) % 9000)
            self._catalog_numbers[key] = number
        return number

    def _catalog_base(self, x: float, y: float) -> str:
        return f"{CATALOG_PREFIX}-{self.generate_star_catalog_number(x, y)}"

    def generate_star_name(self, star: Star) -> str:
        star_type = STAR_TYPES.get(star.star_type)
        base = self._catalog_base(star.x, star.y)
        return f"{base} {star_type.class_code}" if star_type is not None else base

    def generate_star_display_name(self, star: Star) -> str:
        return self._catalog_base(star.x, star.y)

    def generate_coordinate_designation(self, x: float, y: float) -> str:
        x_sign = "+" if x >= 0 else "-"
        y_sign = "+" if y >= 0 else "-"
        return f"{CATALOG_PREFIX} J{abs(math.floor(x)):04d}{x_sign}{abs(math.floor(y)):04d}{y_sign}"

    # Satellites ------------------------------------------------------------

    def generate_planet_name(self, planet: PlanetLike) -> str:
        """``ASV-NNNN b`` by orbital rank; rare worlds take their type code instead."""

        base = self._catalog_base(planet.star_x, planet.star_y)
        code = RARE_PLANET_CODES.get(planet.planet_type)
        if code is not None:
            return f"{base} {code}"
        if planet.orbit_index < len(PLANET_LETTERS):
            return f"{base} {PLANET_LETTERS[planet.orbit_index]}"
        return f"{base} {planet.orbit_index + 2}"

    def generate_moon_name(self, moon: Moon) -> str:
        return f"{self.generate_planet_name(moon.parent)} {roman_numeral(moon_ordinal(moon.orbit_distance) + 1)}"

    def generate_comet_name(self, comet: Comet) -> str:
        number = self.generate_star_catalog_number(comet.star_x, comet.star_y)
        letter = COMET_LETTERS[comet.index] if comet.index < len(COMET_LETTERS) else str(comet.index + 1)
        return f"C/{number} {letter}"

    # Deep-space objects ----------------------------------------------------

    def generate_nebula_name(self, nebula: Nebula) -> str:
        """Famous name for roughly 30% of nebulae, NGC/IC catalog entries otherwise."""

        x, y = nebula.x, nebula.y
        if hash_coordinate(x + y) % 100 < 30:
            index = (hash_coordinate(x) ^ hash_coordinate(y)) % len(FAMOUS_NEBULAE)
            return f"{FAMOUS_NEBULAE[index]} Nebula"
        number = 1 + (hash_coordinate(x * 1.1) ^ hash_coordinate(y * 1.3)) % 9999
        catalog = "IC" if number > 7000 else "NGC"
        return f"{catalog} {number}"

    def generate_wormhole_name(self, wormhole: Wormhole) -> str:
        glyph = "α" if wormhole.designation == "alpha" else "β"
        return f"{wormhole.pair_id} {glyph}"

    def _prefixed(self, family: str, obj: CelestialObject) -> str:
        return f"{FAMILY_PREFIXES[family]}{self.generate_star_catalog_number(obj.x, obj.y)}"

    def generate_black_hole_name(self, black_hole: BlackHole) -> str:
        return self._prefixed("black_hole", black_hole)

    def generate_asteroid_garden_name(self, garden: AsteroidGarden) -> str:
        return self._prefixed("asteroid_garden", garden)

    def generate_rogue_planet_name(self, planet: RoguePlanet) -> str:
        return self._prefixed("rogue_planet", planet)

    def generate_dark_nebula_name(self, nebula: DarkNebula) -> str:
        return self._prefixed("dark_nebula", nebula)

    def generate_crystal_garden_name(self, garden: CrystalGarden) -> str:
        return self._prefixed("crystal_garden", garden)

    def generate_protostar_name(self, protostar: Protostar) -> str:
        return self._prefixed("protostar", protostar)

    # Dispatch --------------------------------------------------------------

    def generate_display_name(self, obj: CelestialObject) -> str:
        return self._display_names[obj.kind](obj)

    def generate_full_designation(self, obj: CelestialObject) -> Optional[DesignationRecord]:
        builder = self._designations.get(obj.kind)
        return builder(obj) if builder is not None else None

    def is_notable_discovery(self, obj: CelestialObject) -> bool:
        return self._notable[obj.kind](obj)

    def _star_designation(self, star: Star) -> DesignationRecord:
        star_type = STAR_TYPES.get(star.star_type)
        return DesignationRecord(
            type_name=star.star_type_name,
            catalog=self.generate_star_name(star),
            coordinate=self.generate_coordinate_designation(star.x, star.y),
            classification=star_type.class_code if star_type is not None else None,
        )

    def _planet_designation(self, planet: Planet) -> DesignationRecord:
        return DesignationRecord(
            type_name=planet.planet_type_name,
            designation=self.generate_planet_name(planet),
            parent=self._catalog_base(planet.star_x, planet.star_y),
            orbital_index=planet.orbit_index + 1,
        )

    def _moon_designation(self, moon: Moon) -> DesignationRecord:
        return DesignationRecord(
            type_name="Moon",
            designation=self.generate_moon_name(moon),
            parent=self.generate_planet_name(moon.parent),
            orbital_index=moon_ordinal(moon.orbit_distance) + 1,
        )

    def _comet_designation(self, comet: Comet) -> DesignationRecord:
        return DesignationRecord(
            type_name=comet.comet_type_name,
            designation=self.generate_comet_name(comet),
            parent=self._catalog_base(comet.star_x, comet.star_y),
            orbital_index=comet.index + 1,
        )

    def _nebula_designation(self, nebula: Nebula) -> DesignationRecord:
        return DesignationRecord(
            type_name=nebula.nebula_type_name,
            catalog=self.generate_nebula_name(nebula),
            coordinate=self.generate_coordinate_designation(nebula.x, nebula.y),
            classification=NEBULA_CLASSIFICATIONS.get(nebula.nebula_type),
        )

    def _catalog_designation(self, obj: CelestialObject, type_name: str, classification: str) -> DesignationRecord:
        return DesignationRecord(
            type_name=type_name,
            catalog=self.generate_display_name(obj),
            coordinate=self.generate_coordinate_designation(obj.x, obj.y),
            classification=classification,
        )


__all__ = [
    "CATALOG_PREFIX",
    "DesignationRecord",
    "FAMOUS_NEBULAE",
    "NamingService",
    "hash_coordinate",
    "roman_numeral",
]
