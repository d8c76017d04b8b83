"""Black holes and wormholes: isolation, twin links and order independence."""
from __future__ import annotations

import math

import pytest

from cosmos.celestial.blackholes import BLACK_HOLE_TYPES, MAX_ISOLATION_RADIUS, SCALE_RANGE, BlackHoleGenerator
from cosmos.celestial.wormholes import TWIN_DISTANCE_RANGE, pair_number, twin_offset
from cosmos.engine.settings import GenerationConfig
from cosmos.math.spatial import chunk_origin, distance_to_rect, neighborhood
from cosmos.world.chunks import ChunkManager

CROWDED = GenerationConfig().with_spawn_chances(
    star_system=1.0,
    comet=1.0,
    nebula=1.0,
    asteroid_garden=1.0,
    rogue_planet=1.0,
    dark_nebula=1.0,
    crystal_garden=1.0,
    protostar=1.0,
)


def _only_at(*coords):
    chosen = set(coords)
    return lambda cx, cy: (cx, cy) in chosen


def _black_hole_manager(monkeypatch, seed: int = 12345) -> ChunkManager:
    manager = ChunkManager(seed, CROWDED)
    monkeypatch.setattr(manager.sites, "black_hole_rolls", _only_at((0, 0)))
    return manager


def test_black_holes_are_vanishingly_rare_by_default() -> None:
    manager = ChunkManager(12345)
    assert not any(manager.sites.black_hole_rolls(cx, 0) for cx in range(200))


def test_forced_black_hole_appears_exactly_once(monkeypatch) -> None:
    manager = _black_hole_manager(monkeypatch)
    chunks = [manager.generate_chunk(*coord) for coord in neighborhood(0, 0, 2)]
    holes = [hole for chunk in chunks for hole in chunk.black_holes]
    assert len(holes) == 1
    hole = holes[0]
    assert abs(hole.x - 1000.0) <= BlackHoleGenerator.JITTER
    assert abs(hole.y - 1000.0) <= BlackHoleGenerator.JITTER
    assert hole.black_hole_type in BLACK_HOLE_TYPES
    assert hole.isolation_radius <= MAX_ISOLATION_RADIUS


def test_nothing_enters_black_hole_isolation_zone(monkeypatch) -> None:
    manager = _black_hole_manager(monkeypatch)
    chunks = [manager.generate_chunk(*coord) for coord in neighborhood(0, 0, 1)]
    hole = manager.generate_chunk(0, 0).black_holes[0]
    others = [obj for chunk in chunks for obj in chunk.objects() if obj is not hole]
    assert others
    for obj in others:
        assert obj.distance_to(hole.x, hole.y) >= hole.isolation_radius


def test_black_hole_is_order_independent(monkeypatch) -> None:
    first = _black_hole_manager(monkeypatch)
    second = _black_hole_manager(monkeypatch)
    coords = list(neighborhood(0, 0, 1))
    ahead = [first.generate_chunk(*coord) for coord in coords]
    behind = {coord: second.generate_chunk(*coord) for coord in reversed(coords)}
    for chunk in ahead:
        assert chunk == behind[chunk.coord]


def test_rolled_neighbours_keep_out_of_each_other(monkeypatch) -> None:
    manager = ChunkManager(12345)
    size = manager.config.chunk_size
    monkeypatch.setattr(manager.sites, "black_hole_rolls", _only_at((0, 0), (1, 0)))
    for coord, rival in (((0, 0), (1, 0)), ((1, 0), (0, 0))):
        site = manager.sites.black_hole_site(*coord)
        if site is None:
            continue
        left, top = chunk_origin(rival[0], rival[1], size)
        assert distance_to_rect(site.x, site.y, left, top, size) >= site.isolation_radius


def test_black_hole_scale_and_warning_levels(monkeypatch) -> None:
    manager = _black_hole_manager(monkeypatch, seed=99)
    hole = manager.generate_chunk(0, 0).black_holes[0]
    kind = BLACK_HOLE_TYPES[hole.black_hole_type]
    low, high = SCALE_RANGE
    assert kind.event_horizon_radius * low <= hole.event_horizon_radius <= kind.event_horizon_radius * high
    assert hole.discovery_value == 500
    assert hole.discovery_distance == hole.isolation_radius
    assert hole.warning_level(hole.x, hole.y) == 3
    assert hole.hits_singularity(hole.x, hole.y)
    assert hole.warning_level(hole.x + hole.radius + 1.0, hole.y) == 2
    assert hole.warning_level(hole.x + hole.accretion_disk_radius + 1.0, hole.y) == 1
    assert hole.warning_level(hole.x + hole.isolation_radius + 1.0, hole.y) == 0
    assert hole.exclusion().radius == hole.isolation_radius


def test_twin_offset_is_stable_and_distant() -> None:
    ox, oy = twin_offset(12345)
    assert twin_offset(12345) == (ox, oy)
    low, high = TWIN_DISTANCE_RANGE
    assert low - 1 <= math.hypot(ox, oy) <= high + 1
    assert twin_offset(12345) != twin_offset(54321)


def _wormhole_manager(monkeypatch, seed: int = 12345) -> ChunkManager:
    manager = ChunkManager(seed, GenerationConfig().with_spawn_chances(star_system=0.0))
    monkeypatch.setattr(manager.sites, "wormhole_rolls", _only_at((0, 0)))
    return manager


def test_wormhole_pair_is_linked(monkeypatch) -> None:
    manager = _wormhole_manager(monkeypatch)
    ox, oy = manager.sites.twin_offset
    (alpha,) = manager.generate_chunk(0, 0).wormholes
    (beta,) = manager.generate_chunk(ox, oy).wormholes
    assert alpha.designation == "alpha"
    assert beta.designation == "beta"
    assert alpha.pair_id == beta.pair_id == f"WH-{pair_number(12345, (0, 0)):04d}"
    assert (alpha.twin_x, alpha.twin_y) == (beta.x, beta.y)
    assert (beta.twin_x, beta.twin_y) == (alpha.x, alpha.y)
    assert alpha.twin_id == beta.id
    assert beta.twin_id == alpha.id
    assert beta.x == pytest.approx(alpha.x + ox * manager.config.chunk_size)
    assert beta.y == pytest.approx(alpha.y + oy * manager.config.chunk_size)


def test_wormhole_pair_ignores_generation_order(monkeypatch) -> None:
    forward = _wormhole_manager(monkeypatch)
    backward = _wormhole_manager(monkeypatch)
    ox, oy = forward.sites.twin_offset
    alpha = forward.generate_chunk(0, 0).wormholes
    beta = forward.generate_chunk(ox, oy).wormholes
    assert backward.generate_chunk(ox, oy).wormholes == beta
    assert backward.generate_chunk(0, 0).wormholes == alpha


def test_wormhole_destination_sits_beside_the_twin(monkeypatch) -> None:
    manager = _wormhole_manager(monkeypatch)
    (alpha,) = manager.generate_chunk(0, 0).wormholes
    assert 35.0 <= alpha.radius <= 45.0
    assert alpha.discovery_distance == pytest.approx(alpha.radius + 75.0)
    assert alpha.can_traverse(alpha.x, alpha.y)
    assert not alpha.can_traverse(alpha.x + alpha.radius, alpha.y)
    exit_point = alpha.destination()
    assert exit_point.distance_to((alpha.twin_x, alpha.twin_y)) == pytest.approx(50.0)


def test_wormhole_mouths_keep_clear_of_stars(monkeypatch) -> None:
    manager = ChunkManager(4242, GenerationConfig().with_spawn_chances(star_system=1.0))
    monkeypatch.setattr(manager.sites, "wormhole_rolls", _only_at((0, 0)))
    ox, oy = manager.sites.twin_offset
    found = manager.generate_chunk(0, 0).wormholes + manager.generate_chunk(ox, oy).wormholes
    for hole in found:
        cx, cy = (0, 0) if hole.designation == "alpha" else (ox, oy)
        for near in neighborhood(cx, cy, 1):
            for star in manager.generate_chunk(*near).celestial_stars:
                assert hole.distance_to(star.x, star.y) >= 500.0
