"""Per-family generators driven directly through a chunk context."""
from __future__ import annotations

import math
from typing import List, Sequence

import pytest

from cosmos.celestial.asteroids import GARDEN_TYPES, AsteroidGardenGenerator
from cosmos.celestial.comets import CometGenerator, solve_kepler
from cosmos.celestial.common import ChunkContext, Exclusion, clear_of, object_id
from cosmos.celestial.moons import moon_ordinal
from cosmos.celestial.nebulae import NEBULA_TYPES, NebulaGenerator
from cosmos.celestial.region_objects import (
    CRYSTAL_GARDEN_VARIANTS,
    DARK_NEBULA_VARIANTS,
    PROTOSTAR_VARIANTS,
    ROGUE_PLANET_VARIANTS,
    CrystalGardenGenerator,
    DarkNebulaGenerator,
    ProtostarGenerator,
    RoguePlanetGenerator,
)
from cosmos.celestial.stars import STAR_TYPES, StarGenerator, generate_background_stars
from cosmos.celestial.systems import StarSystem, StarSystemGenerator
from cosmos.engine.errors import PlacementExhausted
from cosmos.engine.settings import GenerationConfig
from cosmos.math.rng import SeededRandom
from cosmos.math.spatial import chunk_seed
from cosmos.world.regions import REGION_TYPES, RegionInfo


def _context(
    cx: int = 0,
    cy: int = 0,
    seed: int = 12345,
    config: GenerationConfig = None,
    exclusions: Sequence[Exclusion] = (),
    region_type: str = "ANCIENT_EXPANSE",
    influence: float = 0.0,
) -> ChunkContext:
    region = RegionInfo(region_type, REGION_TYPES[region_type], 0.0, influence)
    return ChunkContext(
        universe_seed=seed,
        coord=(cx, cy),
        seed=chunk_seed(seed, cx, cy),
        region=region,
        config=config or GenerationConfig(),
        exclusions=tuple(exclusions),
    )


def _forced_systems(count: int = 30) -> List[StarSystem]:
    config = GenerationConfig().with_spawn_chances(star_system=1.0, comet=1.0)
    generator = StarSystemGenerator()
    systems = []
    for i in range(count):
        system = generator.generate(_context(i, -i, config=config))
        assert system is not None
        systems.append(system)
    return systems


def _inside_chunk(x: float, y: float, context: ChunkContext, margin: float = 0.0) -> bool:
    left, top = context.origin
    size = context.chunk_size
    return left + margin <= x <= left + size - margin and top + margin <= y <= top + size - margin


def test_star_type_frequencies_sum_to_one() -> None:
    assert sum(star_type.frequency for star_type in STAR_TYPES.values()) == pytest.approx(1.0)


def test_star_system_roll_respects_spawn_chance() -> None:
    never = GenerationConfig().with_spawn_chances(star_system=0.0)
    assert StarSystemGenerator().generate(_context(config=never)) is None


def test_star_system_is_deterministic() -> None:
    config = GenerationConfig().with_spawn_chances(star_system=1.0, comet=1.0)
    first = StarSystemGenerator().generate(_context(3, 4, config=config))
    second = StarSystemGenerator().generate(_context(3, 4, config=config))
    assert first == second


def test_star_placed_inside_chunk_margin() -> None:
    config = GenerationConfig().with_spawn_chances(star_system=1.0)
    for i in range(20):
        context = _context(i, 2 * i, config=config)
        system = StarSystemGenerator().generate(context)
        assert _inside_chunk(system.star.x, system.star.y, context, StarSystemGenerator.MARGIN)
        assert system.star.id == object_id("star", system.star.x, system.star.y)
        assert system.star.discovery_distance == pytest.approx(system.star.radius + 400.0)


def test_planets_reference_their_star_and_never_share_orbits() -> None:
    for system in _forced_systems():
        star = system.star
        distances = [planet.orbit_distance for planet in system.planets]
        assert distances == sorted(distances)
        assert len(set(distances)) == len(distances)
        for index, planet in enumerate(system.planets):
            assert planet.orbit_index == index
            assert planet.star_id == star.id
            assert (planet.star_x, planet.star_y) == (star.x, star.y)
            assert planet.orbit_distance >= star.radius + 60.0
            assert math.hypot(planet.x - star.x, planet.y - star.y) == pytest.approx(planet.orbit_distance)
            assert planet.position_at(0.0).distance_to((planet.x, planet.y)) == pytest.approx(0.0, abs=1e-6)


def test_moons_follow_their_planet() -> None:
    moons_seen = 0
    for system in _forced_systems(60):
        planets = {planet.id: planet for planet in system.planets}
        per_planet = {}
        for moon in system.moons:
            moons_seen += 1
            planet = planets[moon.parent.id]
            per_planet[planet.id] = per_planet.get(planet.id, 0) + 1
            assert moon.parent == planet.key
            assert moon.orbit_distance >= planet.radius + 15.0
            assert moon.radius <= planet.radius * 0.2 + 1e-9
            assert math.hypot(moon.x - planet.x, moon.y - planet.y) == pytest.approx(moon.orbit_distance)
        assert all(count <= 4 for count in per_planet.values())
    assert moons_seen > 0


def test_comet_orbits_stay_within_bounds() -> None:
    comets = [comet for system in _forced_systems() for comet in system.comets]
    assert comets
    for comet in comets:
        orbit = comet.orbit
        assert 0.6 <= orbit.eccentricity < 1.0
        assert orbit.perihelion_distance == pytest.approx(orbit.semi_major_axis * (1.0 - orbit.eccentricity))
        assert orbit.aphelion_distance == pytest.approx(orbit.semi_major_axis * (1.0 + orbit.eccentricity))
        assert math.hypot(comet.x - comet.star_x, comet.y - comet.star_y) == pytest.approx(orbit.perihelion_distance)
        for t in (0.0, 13.7, orbit.orbital_period / 2.0, 1234.5):
            distance = comet.distance_from_star_at(t)
            assert orbit.perihelion_distance - 1e-6 <= distance <= orbit.aphelion_distance + 1e-6
        start = comet.position_at(5.0)
        assert comet.position_at(5.0 + orbit.orbital_period).distance_to(start) == pytest.approx(0.0, abs=1e-6)


def test_comet_ids_use_star_position_and_index() -> None:
    for system in _forced_systems(10):
        for comet in system.comets:
            assert comet.id == f"comet_{math.floor(system.star.x)}_{math.floor(system.star.y)}_{comet.index}"
            assert 1 <= len(system.comets) <= 3


def test_comet_roll_can_fail() -> None:
    star = StarGenerator().build(SeededRandom(3), STAR_TYPES["G_TYPE"], 0.0, 0.0)
    assert CometGenerator().generate(SeededRandom(3), star, 0.0) == []


def test_kepler_solution_satisfies_equation() -> None:
    for eccentricity in (0.6, 0.8, 0.95):
        for mean in (0.1, 1.0, 2.5, 3.1, 5.9):
            eccentric = solve_kepler(mean, eccentricity)
            assert eccentric - eccentricity * math.sin(eccentric) == pytest.approx(mean, abs=1e-9)


def test_system_extent_covers_every_member() -> None:
    for system in _forced_systems():
        reach = system.extent()
        star = system.star
        for planet in system.planets:
            assert planet.orbit_distance + planet.radius <= reach + 1e-9
        for comet in system.comets:
            assert comet.orbit.aphelion_distance <= reach
        if system.companion is not None:
            assert system.companion.companion_of == star.id
            assert star.position().distance_to(system.companion.position()) <= reach


def test_star_system_raises_when_no_site_is_clear() -> None:
    config = GenerationConfig().with_spawn_chances(star_system=1.0)
    blocked = _context(config=config, exclusions=[Exclusion(1000.0, 1000.0, 5000.0, "black_hole_1000_1000")])
    with pytest.raises(PlacementExhausted):
        StarSystemGenerator().generate(blocked)


def test_star_system_avoids_exclusion_zones() -> None:
    config = GenerationConfig().with_spawn_chances(star_system=1.0)
    zone = Exclusion(0.0, 0.0, 900.0, "black_hole_0_0")
    for i in range(15):
        context = _context(i, 0, config=config, exclusions=[zone])
        try:
            system = StarSystemGenerator().generate(context)
        except PlacementExhausted:
            continue
        assert not zone.blocks(system.star.x, system.star.y, system.extent())


def test_moon_ordinals_are_bucketed_by_distance() -> None:
    assert moon_ordinal(15.0) == 1
    assert moon_ordinal(18.0) == 1
    assert moon_ordinal(10.9) == 0
    assert moon_ordinal(20.5) == 1
    assert moon_ordinal(29.0) == 2
    assert moon_ordinal(45.0) == 3


def test_nebulae_respect_spacing_and_margin() -> None:
    config = GenerationConfig().with_spawn_chances(nebula=1.0, nebula_multiple=1.0)
    generator = NebulaGenerator()
    produced = 0
    for i in range(20):
        context = _context(i, 7, config=config)
        nebulae = generator.generate(context)
        assert 1 <= len(nebulae) <= 2
        produced += len(nebulae)
        for nebula in nebulae:
            kind = NEBULA_TYPES[nebula.nebula_type]
            assert kind.size_range[0] <= nebula.radius <= kind.size_range[1]
            assert nebula.color in kind.colors
            assert nebula.discovery_distance == pytest.approx(max(nebula.radius * 1.5, 75.0))
            assert _inside_chunk(nebula.x, nebula.y, context, NebulaGenerator.MARGIN)
        if len(nebulae) == 2:
            a, b = nebulae
            assert math.hypot(a.x - b.x, a.y - b.y) >= NebulaGenerator.MIN_DISTANCE
    assert produced > 20


def test_nebula_roll_can_fail() -> None:
    config = GenerationConfig().with_spawn_chances(nebula=0.0)
    assert NebulaGenerator().generate(_context(config=config)) == []


def test_asteroid_gardens_keep_clear_of_stars() -> None:
    config = GenerationConfig().with_spawn_chances(asteroid_garden=1.0)
    generator = AsteroidGardenGenerator()
    for i in range(20):
        context = _context(-i, i, config=config)
        star = (context.origin[0] + 1000.0, context.origin[1] + 1000.0)
        for garden in generator.generate(context, [star]):
            kind = GARDEN_TYPES[garden.garden_type]
            assert kind.size_range[0] <= garden.radius <= kind.size_range[1]
            assert clear_of(garden.x, garden.y, [star], AsteroidGardenGenerator.STAR_CLEARANCE + garden.radius)
            assert garden.rock_count >= 8
            assert garden.discovery_distance >= 150.0


def test_region_objects_spawn_when_forced() -> None:
    config = GenerationConfig().with_spawn_chances(
        rogue_planet=1.0,
        dark_nebula=1.0,
        crystal_garden=1.0,
        protostar=1.0,
    )
    context = _context(5, 5, config=config)
    rogue = RoguePlanetGenerator().generate(context)
    dark = DarkNebulaGenerator().generate(context)
    crystal = CrystalGardenGenerator().generate(context)
    proto = ProtostarGenerator().generate(context)
    assert [obj.kind for obj in rogue + dark + crystal + proto] == [
        "rogue_planet",
        "dark_nebula",
        "crystal_garden",
        "protostar",
    ]
    assert rogue[0].variant in ROGUE_PLANET_VARIANTS
    assert rogue[0].radius == ROGUE_PLANET_VARIANTS[rogue[0].variant].radius
    assert dark[0].variant in DARK_NEBULA_VARIANTS
    garden = crystal[0]
    low, high = CRYSTAL_GARDEN_VARIANTS[garden.variant].size_range
    assert low <= garden.radius <= high
    assert 0.3 <= garden.refraction_intensity <= 1.0
    assert 4 <= garden.crystal_count <= 7
    star = proto[0]
    variant = PROTOSTAR_VARIANTS[star.variant]
    assert star.stellar_classification == variant.classification
    assert variant.instability_range[0] <= star.instability_factor <= variant.instability_range[1]
    assert star.accretion_disk_size > star.radius


def test_region_objects_are_rare_by_default() -> None:
    spawned = sum(len(ProtostarGenerator().generate(_context(i, 0))) for i in range(200))
    assert spawned < 20


def test_dark_nebula_outline_and_occlusion() -> None:
    config = GenerationConfig().with_spawn_chances(dark_nebula=1.0)
    for i in range(15):
        found = DarkNebulaGenerator().generate(_context(i, 3, config=config))
        nebula = found[0]
        if nebula.shape == "irregular":
            assert 16 <= len(nebula.outline) <= 24
        else:
            assert nebula.outline == ()
        assert nebula.occlusion_at(nebula.x, nebula.y) == pytest.approx(nebula.occlusion_strength)
        assert nebula.occlusion_at(nebula.x + nebula.radius * 2.0, nebula.y) == 0.0


def test_background_star_count_scales_with_density() -> None:
    sparse = _context(region_type="VOID", influence=1.0)
    dense = _context(region_type="GALACTIC_CORE", influence=1.0)
    sparse_stars = generate_background_stars(sparse)
    dense_stars = generate_background_stars(dense)
    assert round(40 * 0.4) <= len(sparse_stars) <= round(80 * 0.4)
    assert round(40 * 3.0) <= len(dense_stars) <= round(80 * 3.0)
    for star in dense_stars:
        assert _inside_chunk(star.x, star.y, dense)
        assert 0.2 <= star.brightness <= 1.0


def test_descriptor_to_dict_carries_kind() -> None:
    system = _forced_systems(1)[0]
    data = system.star.to_dict()
    assert data["kind"] == "star"
    assert data["id"] == system.star.id
    assert data["discovered"] is False
