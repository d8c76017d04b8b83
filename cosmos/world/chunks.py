"""Chunk streaming: lazy generation, caching and eviction around a viewer."""
from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from cosmos.celestial.asteroids import AsteroidGarden, AsteroidGardenGenerator
from cosmos.celestial.blackholes import BlackHole
from cosmos.celestial.comets import Comet
from cosmos.celestial.common import CelestialObject, ChunkContext, object_id
from cosmos.celestial.moons import Moon
from cosmos.celestial.nebulae import Nebula, NebulaGenerator
from cosmos.celestial.planets import Planet
from cosmos.celestial.region_objects import (
    CrystalGarden,
    CrystalGardenGenerator,
    DarkNebula,
    DarkNebulaGenerator,
    Protostar,
    ProtostarGenerator,
    RoguePlanet,
    RoguePlanetGenerator,
)
from cosmos.celestial.stars import BackgroundStar, Star, generate_background_stars
from cosmos.celestial.wormholes import Wormhole
from cosmos.engine.errors import GenerationFailure
from cosmos.engine.logger import ChannelLogger, CosmosLogger, quiet_channel
from cosmos.engine.settings import GenerationConfig
from cosmos.math.spatial import ChunkCoord, chunk_distance, neighborhood, to_chunk_coord, validate_seed
from cosmos.world.regions import RegionGenerator, RegionInfo
from cosmos.world.sites import SiteIndex

# Per-family lists carried by both Chunk and ActiveObjects, in generation order.
OBJECT_LISTS: Tuple[str, ...] = (
    "black_holes",
    "celestial_stars",
    "planets",
    "moons",
    "comets",
    "nebulae",
    "asteroid_gardens",
    "wormholes",
    "rogue_planets",
    "dark_nebulae",
    "crystal_gardens",
    "protostars",
)

Produced = Dict[str, List[Any]]


class ChunkState(enum.Enum):
    UNREQUESTED = "unrequested"
    GENERATING = "generating"
    ACTIVE = "active"
    EVICTED = "evicted"


@dataclass
class Chunk:
    coord: ChunkCoord
    seed: int
    region: RegionInfo
    background_stars: List[BackgroundStar] = field(default_factory=list)
    black_holes: List[BlackHole] = field(default_factory=list)
    celestial_stars: List[Star] = field(default_factory=list)
    planets: List[Planet] = field(default_factory=list)
    moons: List[Moon] = field(default_factory=list)
    comets: List[Comet] = field(default_factory=list)
    nebulae: List[Nebula] = field(default_factory=list)
    asteroid_gardens: List[AsteroidGarden] = field(default_factory=list)
    wormholes: List[Wormhole] = field(default_factory=list)
    rogue_planets: List[RoguePlanet] = field(default_factory=list)
    dark_nebulae: List[DarkNebula] = field(default_factory=list)
    crystal_gardens: List[CrystalGarden] = field(default_factory=list)
    protostars: List[Protostar] = field(default_factory=list)
    failures: Tuple[str, ...] = ()

    def objects(self) -> Iterator[CelestialObject]:
        """Every discoverable object; background stars are decoration only."""

        for name in OBJECT_LISTS:
            yield from getattr(self, name)

    def find(self, target_id: str) -> Optional[CelestialObject]:
        for obj in self.objects():
            if obj.id == target_id:
                return obj
        return None

    def counts(self) -> Dict[str, int]:
        counts = {name: len(getattr(self, name)) for name in OBJECT_LISTS}
        counts["background_stars"] = len(self.background_stars)
        return counts

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "coord": list(self.coord),
            "seed": self.seed,
            "region": self.region.to_dict(),
            "failures": list(self.failures),
            "background_stars": [asdict(star) for star in self.background_stars],
        }
        for name in OBJECT_LISTS:
            data[name] = [obj.to_dict() for obj in getattr(self, name)]
        return data


@dataclass
class ActiveObjects:
    black_holes: List[BlackHole] = field(default_factory=list)
    celestial_stars: List[Star] = field(default_factory=list)
    planets: List[Planet] = field(default_factory=list)
    moons: List[Moon] = field(default_factory=list)
    comets: List[Comet] = field(default_factory=list)
    nebulae: List[Nebula] = field(default_factory=list)
    asteroid_gardens: List[AsteroidGarden] = field(default_factory=list)
    wormholes: List[Wormhole] = field(default_factory=list)
    rogue_planets: List[RoguePlanet] = field(default_factory=list)
    dark_nebulae: List[DarkNebula] = field(default_factory=list)
    crystal_gardens: List[CrystalGarden] = field(default_factory=list)
    protostars: List[Protostar] = field(default_factory=list)
    background_stars: List[BackgroundStar] = field(default_factory=list)

    def add(self, chunk: Chunk) -> None:
        for name in OBJECT_LISTS:
            getattr(self, name).extend(getattr(chunk, name))
        self.background_stars.extend(chunk.background_stars)

    def all(self) -> List[CelestialObject]:
        return [obj for name in OBJECT_LISTS for obj in getattr(self, name)]


class ChunkManager:
    """Owns the universe seed and the active chunk map."""

    def __init__(
        self,
        universe_seed: int,
        config: Optional[GenerationConfig] = None,
        logger: Optional[CosmosLogger] = None,
    ) -> None:
        self.config = config or GenerationConfig()
        self._logger = logger
        self._chunk_log = self._channel("chunks")
        self._generation_log = self._channel("generation")
        self.nebulae = NebulaGenerator(self._generation_log)
        self.asteroid_gardens = AsteroidGardenGenerator(self._generation_log)
        self.rogue_planets = RoguePlanetGenerator(self._generation_log)
        self.dark_nebulae = DarkNebulaGenerator(self._generation_log)
        self.crystal_gardens = CrystalGardenGenerator(self._generation_log)
        self.protostars = ProtostarGenerator(self._generation_log)
        self._chunks: Dict[ChunkCoord, Chunk] = {}
        self._states: Dict[ChunkCoord, ChunkState] = {}
        self._install_seed(universe_seed)

    def _channel(self, name: str) -> ChannelLogger:
        return self._logger.channel(name) if self._logger is not None else quiet_channel(name)

    def _install_seed(self, universe_seed: int) -> None:
        self._seed = validate_seed(universe_seed)
        self.regions = RegionGenerator(self._seed, self._channel("regions"))
        self.sites = SiteIndex(self._seed, self.config, self.regions, self._generation_log)

    @property
    def universe_seed(self) -> int:
        return self._seed

    # Generation ------------------------------------------------------------

    def generate_chunk(self, cx: int, cy: int) -> Chunk:
        """Cached chunk at ``(cx, cy)``, generating it on first request."""

        key = (cx, cy)
        cached = self._chunks.get(key)
        if cached is not None:
            return cached
        previous = self._states.get(key)
        self._states[key] = ChunkState.GENERATING
        try:
            chunk, context = self._build_chunk(key)
        finally:
            if self._states.get(key) is ChunkState.GENERATING:
                if previous is None:
                    del self._states[key]
                else:
                    self._states[key] = previous
        self._chunks[key] = chunk
        self._states[key] = ChunkState.ACTIVE
        self._chunk_log.debug(
            "Generated chunk %s in %s with %d objects",
            key,
            context.region.region_type,
            sum(1 for _ in chunk.objects()),
        )
        return chunk

    def _build_chunk(self, key: ChunkCoord) -> Tuple[Chunk, ChunkContext]:
        context = self.sites.context(*key)
        chunk = Chunk(coord=key, seed=context.seed, region=context.region)
        # Neighbouring black holes are resolved while building the context.
        failures: List[str] = ["black_hole"] if self.sites.black_hole_failed_near(*key) else []
        for family, step in self._steps():
            try:
                produced = step(context, chunk)
            except Exception as error:
                failure = GenerationFailure(family, key, error)
                self._generation_log.error("%s", failure)
                if family not in failures:
                    failures.append(family)
                continue
            for name, items in produced.items():
                getattr(chunk, name).extend(items)
        chunk.failures = tuple(failures)
        return chunk, context

    def _steps(self) -> List[Tuple[str, Callable[[ChunkContext, Chunk], Produced]]]:
        return [
            ("black_hole", self._generate_black_holes),
            ("star_system", self._generate_star_system),
            ("nebula", lambda context, chunk: {"nebulae": self.nebulae.generate(context)}),
            (
                "asteroid_garden",
                lambda context, chunk: {
                    "asteroid_gardens": self.asteroid_gardens.generate(context, self._star_sites(chunk))
                },
            ),
            ("wormhole", lambda context, chunk: {"wormholes": self.sites.wormholes_in(*context.coord)}),
            (
                "rogue_planet",
                lambda context, chunk: {"rogue_planets": self.rogue_planets.generate(context, self._star_sites(chunk))},
            ),
            (
                "dark_nebula",
                lambda context, chunk: {"dark_nebulae": self.dark_nebulae.generate(context, self._star_sites(chunk))},
            ),
            (
                "crystal_garden",
                lambda context, chunk: {
                    "crystal_gardens": self.crystal_gardens.generate(context, self._star_sites(chunk))
                },
            ),
            (
                "protostar",
                lambda context, chunk: {"protostars": self.protostars.generate(context, self._star_sites(chunk))},
            ),
            ("background_star", lambda context, chunk: {"background_stars": generate_background_stars(context)}),
        ]

    def _generate_black_holes(self, context: ChunkContext, chunk: Chunk) -> Produced:
        site = self.sites.black_hole_site(*context.coord)
        if site is None:
            return {}
        return {"black_holes": [self.sites.black_holes.build(site)]}

    def _generate_star_system(self, context: ChunkContext, chunk: Chunk) -> Produced:
        system = self.sites.star_system(*context.coord)
        if system is None:
            return {}
        return {
            "celestial_stars": system.stars,
            "planets": system.planets,
            "moons": system.moons,
            "comets": system.comets,
        }

    @staticmethod
    def _star_sites(chunk: Chunk) -> List[Tuple[float, float]]:
        return [(star.x, star.y) for star in chunk.celestial_stars]

    # Streaming -------------------------------------------------------------

    def update_active_chunks(self, viewer_x: float, viewer_y: float) -> List[ChunkCoord]:
        """Load chunks around the viewer and evict distant ones.

        Returns the coordinates generated by this call so callers can
        re-apply discovery state to them.
        """

        centre = to_chunk_coord(viewer_x, viewer_y, self.config.chunk_size)
        loaded: List[ChunkCoord] = []
        for coord in neighborhood(centre[0], centre[1], self.config.load_radius):
            if coord not in self._chunks:
                self.generate_chunk(*coord)
                loaded.append(coord)
        stale = [coord for coord in self._chunks if chunk_distance(coord, centre) > self.config.unload_radius]
        for coord in stale:
            del self._chunks[coord]
            self._states[coord] = ChunkState.EVICTED
        self.sites.prune(centre, self.site_keep_radius())
        if loaded or stale:
            self._chunk_log.info(
                "Viewer chunk %s: loaded %d, evicted %d, active %d",
                centre,
                len(loaded),
                len(stale),
                len(self._chunks),
            )
        return loaded

    def site_keep_radius(self) -> int:
        """Chunk rings of cross-chunk lookups kept around the viewer."""

        return (
            self.config.unload_radius
            + SiteIndex.EXCLUSION_RADIUS
            + self.sites.black_holes.search_radius(self.config.chunk_size)
        )

    def get_all_active_objects(self) -> ActiveObjects:
        active = ActiveObjects()
        for coord in sorted(self._chunks):
            active.add(self._chunks[coord])
        return active

    def active_chunks(self) -> List[Chunk]:
        return [self._chunks[coord] for coord in sorted(self._chunks)]

    def chunk_state(self, cx: int, cy: int) -> ChunkState:
        return self._states.get((cx, cy), ChunkState.UNREQUESTED)

    def is_cached(self, cx: int, cy: int) -> bool:
        return (cx, cy) in self._chunks

    def cached_coords(self) -> List[ChunkCoord]:
        return sorted(self._chunks)

    def clear_all_chunks(self) -> None:
        for coord in self._chunks:
            self._states[coord] = ChunkState.EVICTED
        self._chunks.clear()
        self.sites.clear()

    # Lookups ---------------------------------------------------------------

    def get_chunk_region(self, cx: int, cy: int) -> RegionInfo:
        return self.sites.region_for_chunk(cx, cy)

    def get_region_at(self, x: float, y: float) -> RegionInfo:
        return self.regions.classify_region(x, y)

    def get_object_id(self, x: float, y: float, family_tag: str) -> str:
        return object_id(family_tag, x, y)

    def reset_universe(self, universe_seed: int) -> None:
        """Switch to a new universe; discovery records live elsewhere and survive."""

        self._install_seed(universe_seed)
        self._chunks.clear()
        self._states.clear()
        self._chunk_log.info("Universe reset to seed %d", self._seed)


__all__ = ["ActiveObjects", "Chunk", "ChunkManager", "ChunkState", "OBJECT_LISTS"]
