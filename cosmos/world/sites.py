"""Cross-chunk queries that must not depend on generation order.

Black-hole isolation, star sites and wormhole mouths are all questions one
chunk asks about its neighbours. Each answer here is a pure function of the
universe seed and a chunk coordinate, memoised so repeated lookups stay cheap.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Set, Tuple

from cosmos.celestial.blackholes import BlackHoleGenerator, BlackHoleSite
from cosmos.celestial.common import ChunkContext, Exclusion, Point, clear_of, note_exhausted, object_id
from cosmos.celestial.systems import StarSystem, StarSystemGenerator, star_positions
from cosmos.celestial.wormholes import Wormhole, WormholeGenerator, twin_offset
from cosmos.engine.errors import GenerationFailure, PlacementExhausted
from cosmos.engine.logger import ChannelLogger
from cosmos.engine.settings import GenerationConfig
from cosmos.math.spatial import ChunkCoord, chunk_center, chunk_distance, chunk_seed, neighborhood, validate_seed
from cosmos.world.regions import RegionGenerator, RegionInfo


class SiteIndex:
    # Rings of chunks whose black holes can reach into a star system's extent.
    EXCLUSION_RADIUS = 2

    def __init__(
        self,
        universe_seed: int,
        config: GenerationConfig,
        regions: RegionGenerator,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self._seed = validate_seed(universe_seed)
        self._config = config
        self._regions = regions
        self._logger = logger
        self.black_holes = BlackHoleGenerator(logger)
        self.systems = StarSystemGenerator()
        self.wormholes = WormholeGenerator(logger)
        self._twin_offset = twin_offset(self._seed)
        self._region_cache: Dict[ChunkCoord, RegionInfo] = {}
        self._black_hole_cache: Dict[ChunkCoord, Optional[BlackHoleSite]] = {}
        self._star_cache: Dict[ChunkCoord, Tuple[Point, ...]] = {}
        self._alpha_cache: Dict[ChunkCoord, Optional[Point]] = {}
        self._black_hole_failures: Set[ChunkCoord] = set()

    @property
    def universe_seed(self) -> int:
        return self._seed

    @property
    def twin_offset(self) -> ChunkCoord:
        return self._twin_offset

    def _caches(self) -> Tuple[Dict, ...]:
        return (self._region_cache, self._black_hole_cache, self._star_cache, self._alpha_cache)

    def clear(self) -> None:
        for cache in self._caches():
            cache.clear()
        self._black_hole_failures.clear()

    def prune(self, centre: ChunkCoord, keep_radius: int) -> int:
        """Forget memoised answers farther than ``keep_radius`` chunks from ``centre``."""

        dropped = 0
        for cache in self._caches():
            stale = [coord for coord in cache if chunk_distance(coord, centre) > keep_radius]
            for coord in stale:
                del cache[coord]
            dropped += len(stale)
        self._black_hole_failures = {
            coord for coord in self._black_hole_failures if chunk_distance(coord, centre) <= keep_radius
        }
        return dropped

    def cached_coords(self) -> Set[ChunkCoord]:
        coords: Set[ChunkCoord] = set()
        for cache in self._caches():
            coords.update(cache)
        return coords

    def region_for_chunk(self, cx: int, cy: int) -> RegionInfo:
        key = (cx, cy)
        if key not in self._region_cache:
            self._region_cache[key] = self._regions.classify_region(*chunk_center(cx, cy, self._config.chunk_size))
        return self._region_cache[key]

    def context(self, cx: int, cy: int, with_exclusions: bool = True) -> ChunkContext:
        return ChunkContext(
            universe_seed=self._seed,
            coord=(cx, cy),
            seed=chunk_seed(self._seed, cx, cy),
            region=self.region_for_chunk(cx, cy),
            config=self._config,
            exclusions=self.exclusions_near(cx, cy) if with_exclusions else (),
        )

    # Black holes -----------------------------------------------------------

    def black_hole_rolls(self, cx: int, cy: int) -> bool:
        return self.black_holes.rolls(self.context(cx, cy, with_exclusions=False))

    def black_hole_site(self, cx: int, cy: int) -> Optional[BlackHoleSite]:
        """Isolated black hole rooted at ``(cx, cy)``; a failed lookup counts as no site."""

        key = (cx, cy)
        if key not in self._black_hole_cache:
            site = None
            try:
                if self.black_hole_rolls(cx, cy):
                    site = self.black_holes.site(
                        self.context(cx, cy, with_exclusions=False),
                        lambda coord: self.black_hole_rolls(*coord),
                    )
            except Exception as error:
                failure = GenerationFailure("black_hole", key, error)
                if self._logger is not None:
                    self._logger.error("%s", failure)
                self._black_hole_failures.add(key)
                site = None
            self._black_hole_cache[key] = site
        return self._black_hole_cache[key]

    def black_hole_failed_near(self, cx: int, cy: int) -> bool:
        return any(coord in self._black_hole_failures for coord in neighborhood(cx, cy, self.EXCLUSION_RADIUS))

    def exclusions_near(self, cx: int, cy: int) -> Tuple[Exclusion, ...]:
        zones = []
        for coord in neighborhood(cx, cy, self.EXCLUSION_RADIUS):
            site = self.black_hole_site(*coord)
            if site is not None:
                zones.append(Exclusion(site.x, site.y, site.isolation_radius, object_id("black_hole", site.x, site.y)))
        return tuple(zones)

    # Star systems ----------------------------------------------------------

    def star_system(self, cx: int, cy: int) -> Optional[StarSystem]:
        context = self.context(cx, cy)
        try:
            return self.systems.generate(context)
        except PlacementExhausted as error:
            note_exhausted(self._logger, error, context.coord)
            return None

    def star_sites(self, cx: int, cy: int) -> Tuple[Point, ...]:
        key = (cx, cy)
        if key not in self._star_cache:
            self._star_cache[key] = tuple(star_positions(self.star_system(cx, cy)))
        return self._star_cache[key]

    # Wormholes -------------------------------------------------------------

    def wormhole_rolls(self, cx: int, cy: int) -> bool:
        return self.wormholes.rolls(self.context(cx, cy, with_exclusions=False))

    def wormhole_alpha_site(self, cx: int, cy: int) -> Optional[Point]:
        key = (cx, cy)
        if key not in self._alpha_cache:
            site = None
            if self.wormhole_rolls(cx, cy):
                ox, oy = self._twin_offset
                size = self._config.chunk_size
                twin = (cx + ox, cy + oy)

                def both_ends_clear(x: float, y: float) -> bool:
                    return self._clear_for_wormhole(key, x, y) and self._clear_for_wormhole(
                        twin, x + ox * size, y + oy * size
                    )

                site = self.wormholes.alpha_site(self.context(cx, cy), both_ends_clear)
            self._alpha_cache[key] = site
        return self._alpha_cache[key]

    def wormholes_in(self, cx: int, cy: int) -> List[Wormhole]:
        """Alpha mouth rooted in this chunk plus any beta arriving from its source chunk."""

        found: List[Wormhole] = []
        ox, oy = self._twin_offset
        size = self._config.chunk_size
        alpha = self.wormhole_alpha_site(cx, cy)
        if alpha is not None:
            found.append(self.wormholes.build_pair(self._seed, (cx, cy), alpha, self._twin_offset, size)[0])
        source = (cx - ox, cy - oy)
        incoming = self.wormhole_alpha_site(*source)
        if incoming is not None:
            found.append(self.wormholes.build_pair(self._seed, source, incoming, self._twin_offset, size)[1])
        return found

    def _clear_for_wormhole(self, coord: ChunkCoord, x: float, y: float) -> bool:
        reach = WormholeGenerator.RADIUS_RANGE[1]
        if any(zone.blocks(x, y, reach) for zone in self.exclusions_near(*coord)):
            return False
        return all(
            clear_of(x, y, self.star_sites(*near), WormholeGenerator.STAR_CLEARANCE)
            for near in neighborhood(coord[0], coord[1], 1)
        )


__all__ = ["SiteIndex"]
