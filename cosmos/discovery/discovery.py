"""Discovery checks, rarity tiers and the discovery log."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional
from urllib.parse import urlencode

from cosmos.celestial.common import CELESTIAL_FAMILIES, CelestialObject
from cosmos.engine.logger import ChannelLogger
from cosmos.naming.naming import NamingService
from cosmos.world.chunks import Chunk

RARITY_TIERS = ("common", "uncommon", "rare", "ultra-rare")

ROGUE_PLANET_LABELS = {"ice": "Frozen Rogue Planet", "rock": "Rocky Rogue Planet", "volcanic": "Volcanic Rogue Planet"}
DARK_NEBULA_LABELS = {
    "dense-core": "Dense-Core Dark Nebula",
    "wispy": "Wispy Dark Nebula",
    "globular": "Globular Dark Nebula",
}
CRYSTAL_GARDEN_LABELS = {
    "pure": "Pure Crystal Garden",
    "mixed": "Mixed Crystal Garden",
    "rare-earth": "Rare-Earth Crystal Garden",
}


def _star_rarity(obj: Any) -> str:
    if obj.star_type == "NEUTRON_STAR":
        return "ultra-rare"
    if obj.star_type in ("WHITE_DWARF", "BLUE_GIANT", "RED_GIANT"):
        return "rare"
    return "common"


def _planet_rarity(obj: Any) -> str:
    if obj.planet_type == "EXOTIC":
        return "ultra-rare"
    if obj.planet_type in ("VOLCANIC", "FROZEN"):
        return "rare"
    return "common"


RARITY_RULES: Dict[str, Callable[[Any], str]] = {
    "star": _star_rarity,
    "planet": _planet_rarity,
    "moon": lambda obj: "uncommon",
    "comet": lambda obj: "rare",
    "nebula": lambda obj: "rare",
    "asteroid_garden": lambda obj: "rare" if obj.garden_type in ("rare_minerals", "crystalline", "icy") else "uncommon",
    "wormhole": lambda obj: "ultra-rare",
    "black_hole": lambda obj: "ultra-rare",
    "rogue_planet": lambda obj: "ultra-rare" if obj.variant == "volcanic" else "rare",
    "dark_nebula": lambda obj: "rare" if obj.variant == "dense-core" else "uncommon",
    "crystal_garden": lambda obj: "ultra-rare" if obj.variant == "rare-earth" else "uncommon",
    "protostar": lambda obj: "ultra-rare" if obj.variant == "class-2" else "rare",
}

TYPE_LABELS: Dict[str, Callable[[Any], str]] = {
    "star": lambda obj: obj.star_type_name,
    "planet": lambda obj: obj.planet_type_name,
    "moon": lambda obj: "Moon",
    "comet": lambda obj: obj.comet_type_name,
    "nebula": lambda obj: obj.nebula_type_name,
    "asteroid_garden": lambda obj: obj.garden_type_name,
    "wormhole": lambda obj: obj.wormhole_type_name,
    "black_hole": lambda obj: obj.black_hole_type_name,
    "rogue_planet": lambda obj: ROGUE_PLANET_LABELS.get(obj.variant, "Rogue Planet"),
    "dark_nebula": lambda obj: DARK_NEBULA_LABELS.get(obj.variant, "Dark Nebula"),
    "crystal_garden": lambda obj: CRYSTAL_GARDEN_LABELS.get(obj.variant, "Crystal Garden"),
    "protostar": lambda obj: obj.stellar_classification,
}


@dataclass(frozen=True)
class DiscoveryEntry:
    object_id: str
    kind: str
    name: str
    type_label: str
    rarity: str
    notable: bool
    x: float
    y: float
    timestamp: float
    discovery_value: int
    share_query: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objectId": self.object_id,
            "kind": self.kind,
            "name": self.name,
            "type": self.type_label,
            "rarity": self.rarity,
            "notable": self.notable,
            "coordinates": {"x": self.x, "y": self.y},
            "timestamp": self.timestamp,
            "discoveryValue": self.discovery_value,
            "share": self.share_query,
        }


class DiscoveryService:
    """Decides what the viewer can discover and describes each discovery."""

    def __init__(self, naming: Optional[NamingService] = None, logger: Optional[ChannelLogger] = None) -> None:
        self.naming = naming or NamingService()
        self._logger = logger
        for table in (RARITY_RULES, TYPE_LABELS):
            missing = set(CELESTIAL_FAMILIES) - set(table)
            if missing:
                raise KeyError(f"discovery tables missing families: {sorted(missing)}")

    def discovery_distance(self, obj: CelestialObject) -> float:
        return obj.discovery_distance

    def can_discover(self, obj: CelestialObject, viewer_x: float, viewer_y: float) -> bool:
        return obj.distance_to(viewer_x, viewer_y) <= self.discovery_distance(obj)

    def objects_in_range(
        self,
        objects: Iterable[CelestialObject],
        viewer_x: float,
        viewer_y: float,
    ) -> List[CelestialObject]:
        return [obj for obj in objects if self.can_discover(obj, viewer_x, viewer_y)]

    def rarity(self, obj: CelestialObject) -> str:
        return RARITY_RULES[obj.kind](obj)

    def object_type_label(self, obj: CelestialObject) -> str:
        return TYPE_LABELS[obj.kind](obj)

    def share_query(self, universe_seed: int, obj: CelestialObject) -> str:
        return urlencode({"seed": universe_seed, "x": int(obj.x), "y": int(obj.y)})

    def process_discovery(self, obj: CelestialObject, timestamp: float, universe_seed: int) -> DiscoveryEntry:
        entry = DiscoveryEntry(
            object_id=obj.id,
            kind=obj.kind,
            name=self.naming.generate_display_name(obj),
            type_label=self.object_type_label(obj),
            rarity=self.rarity(obj),
            notable=self.naming.is_notable_discovery(obj),
            x=obj.x,
            y=obj.y,
            timestamp=timestamp,
            discovery_value=obj.discovery_value,
            share_query=self.share_query(universe_seed, obj),
        )
        if self._logger is not None:
            self._logger.info("Discovered %s (%s, %s)", entry.name, entry.type_label, entry.rarity)
        return entry

    def scan(
        self,
        objects: Iterable[CelestialObject],
        viewer_x: float,
        viewer_y: float,
        timestamp: float,
        universe_seed: int,
        log: "DiscoveryLog",
    ) -> List[DiscoveryEntry]:
        """Discover every undiscovered object in range and record it in ``log``."""

        entries = []
        for obj in self.objects_in_range(objects, viewer_x, viewer_y):
            if log.is_discovered(obj.id):
                continue
            log.mark(obj, timestamp)
            entries.append(self.process_discovery(obj, timestamp, universe_seed))
        return entries


class DiscoveryLog:
    """Which object ids have been discovered, independent of generated content.

    The log outlives chunk eviction and universe resets; freshly generated
    descriptors get their flags back through :meth:`restore`.
    """

    def __init__(self) -> None:
        self._records: Dict[str, Optional[float]] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, object_id: str) -> bool:
        return object_id in self._records

    def mark(self, obj: CelestialObject, timestamp: float) -> bool:
        """Record ``obj`` as discovered; returns ``False`` if it already was."""

        if obj.id in self._records:
            obj.mark_discovered(self._records[obj.id])
            return False
        self._records[obj.id] = timestamp
        obj.mark_discovered(timestamp)
        return True

    def is_discovered(self, object_id: str) -> bool:
        return object_id in self._records

    def timestamp(self, object_id: str) -> Optional[float]:
        return self._records.get(object_id)

    def restore(self, chunk: Chunk) -> int:
        """Re-apply discovery flags to a freshly generated chunk; returns how many matched."""

        restored = 0
        for obj in chunk.objects():
            if obj.id in self._records:
                obj.mark_discovered(self._records[obj.id])
                restored += 1
        return restored

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            object_id: {"discovered": True, "timestamp": timestamp}
            for object_id, timestamp in sorted(self._records.items())
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> "DiscoveryLog":
        log = cls()
        for object_id, record in data.items():
            if record.get("discovered", True):
                log._records[object_id] = record.get("timestamp")
        return log


__all__ = ["DiscoveryEntry", "DiscoveryLog", "DiscoveryService", "RARITY_TIERS"]
