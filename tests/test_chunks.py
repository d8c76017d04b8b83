"""Chunk generation, caching, streaming and failure isolation."""
from __future__ import annotations

import json

import pytest

from cosmos.engine.errors import SeedInvalid
from cosmos.engine.settings import GenerationConfig
from cosmos.math.spatial import chunk_seed
from cosmos.world.chunks import OBJECT_LISTS, ChunkManager, ChunkState
from cosmos.world.regions import REGION_TYPES, RegionGenerator, RegionInfo
from cosmos.world.sites import SiteIndex


def _forced_stars() -> GenerationConfig:
    return GenerationConfig().with_spawn_chances(star_system=1.0, comet=1.0, nebula=1.0, asteroid_garden=1.0)


def _neutral_regions(monkeypatch) -> None:
    neutral = RegionInfo("ANCIENT_EXPANSE", REGION_TYPES["ANCIENT_EXPANSE"], 0.0, 0.0)
    monkeypatch.setattr(RegionGenerator, "classify_region", lambda self, x, y: neutral)


def test_default_chunk_is_reproducible() -> None:
    first = ChunkManager(12345).generate_chunk(0, 0)
    second = ChunkManager(12345).generate_chunk(0, 0)
    assert len(first.celestial_stars) == len(second.celestial_stars)
    for a, b in zip(first.celestial_stars, second.celestial_stars):
        assert (a.x, a.y, a.star_type_name) == (b.x, b.y, b.star_type_name)
    assert first == second


def test_forced_star_chunk_is_reproducible(monkeypatch) -> None:
    _neutral_regions(monkeypatch)
    first = ChunkManager(12345, _forced_stars()).generate_chunk(0, 0)
    second = ChunkManager(12345, _forced_stars()).generate_chunk(0, 0)
    assert first.celestial_stars
    star = first.celestial_stars[0]
    other = second.celestial_stars[0]
    assert (star.x, star.y, star.star_type_name) == (other.x, other.y, other.star_type_name)
    assert first.seed == chunk_seed(12345, 0, 0)


def test_generation_order_does_not_matter() -> None:
    coords = [(cx, cy) for cy in range(-2, 3) for cx in range(-2, 3)]
    forward = ChunkManager(777, _forced_stars())
    backward = ChunkManager(777, _forced_stars())
    ahead = {coord: forward.generate_chunk(*coord) for coord in coords}
    behind = {coord: backward.generate_chunk(*coord) for coord in reversed(coords)}
    for coord in coords:
        assert ahead[coord] == behind[coord]


def test_generate_chunk_returns_cached_instance() -> None:
    manager = ChunkManager(42)
    chunk = manager.generate_chunk(3, -1)
    assert manager.generate_chunk(3, -1) is chunk
    assert manager.chunk_state(3, -1) is ChunkState.ACTIVE
    assert manager.chunk_state(9, 9) is ChunkState.UNREQUESTED


def test_update_active_chunks_loads_neighbourhood() -> None:
    manager = ChunkManager(42)
    loaded = manager.update_active_chunks(1000.0, 1000.0)
    assert sorted(loaded) == sorted((cx, cy) for cx in (-1, 0, 1) for cy in (-1, 0, 1))
    assert manager.update_active_chunks(1500.0, 500.0) == []


def test_distant_chunks_are_evicted_and_regenerate_identically() -> None:
    manager = ChunkManager(2024, _forced_stars())
    manager.update_active_chunks(1000.0, 1000.0)
    original = manager.generate_chunk(0, 0)

    manager.update_active_chunks(11000.0, 1000.0)
    assert not manager.is_cached(0, 0)
    assert manager.chunk_state(0, 0) is ChunkState.EVICTED
    assert all(abs(cx - 5) <= 2 for cx, _ in manager.cached_coords())

    loaded = manager.update_active_chunks(1000.0, 1000.0)
    assert (0, 0) in loaded
    again = manager.generate_chunk(0, 0)
    assert again is not original
    assert again == original
    assert [obj.id for obj in again.objects()] == [obj.id for obj in original.objects()]


def test_chunks_within_unload_radius_stay_cached() -> None:
    manager = ChunkManager(5)
    manager.update_active_chunks(1000.0, 1000.0)
    manager.update_active_chunks(3000.0, 1000.0)
    assert manager.is_cached(-1, 0)
    manager.update_active_chunks(5000.0, 1000.0)
    assert not manager.is_cached(-1, 0)


def test_active_objects_aggregate_every_chunk() -> None:
    manager = ChunkManager(99, _forced_stars())
    manager.update_active_chunks(0.0, 0.0)
    active = manager.get_all_active_objects()
    chunks = manager.active_chunks()
    assert len(active.celestial_stars) == sum(len(chunk.celestial_stars) for chunk in chunks)
    assert len(active.background_stars) == sum(len(chunk.background_stars) for chunk in chunks)
    assert len(active.all()) == sum(len(list(chunk.objects())) for chunk in chunks)


def test_object_ids_are_unique_per_chunk() -> None:
    manager = ChunkManager(31337, _forced_stars())
    for cx in range(4):
        chunk = manager.generate_chunk(cx, 0)
        ids = [obj.id for obj in chunk.objects()]
        assert len(ids) == len(set(ids))
        for obj in chunk.objects():
            assert chunk.find(obj.id) is obj


def test_failing_family_does_not_spoil_the_chunk(monkeypatch) -> None:
    healthy = ChunkManager(8, _forced_stars()).generate_chunk(2, 2)
    manager = ChunkManager(8, _forced_stars())

    def explode(context):
        raise RuntimeError("nebula generator broke")

    monkeypatch.setattr(manager.nebulae, "generate", explode)
    chunk = manager.generate_chunk(2, 2)
    assert chunk.failures == ("nebula",)
    assert chunk.nebulae == []
    assert chunk.celestial_stars == healthy.celestial_stars
    assert chunk.asteroid_gardens == healthy.asteroid_gardens
    assert chunk.background_stars == healthy.background_stars
    assert manager.chunk_state(2, 2) is ChunkState.ACTIVE


def test_chunk_dict_is_json_serialisable(monkeypatch) -> None:
    _neutral_regions(monkeypatch)
    chunk = ChunkManager(12345, _forced_stars()).generate_chunk(1, 1)
    data = json.loads(json.dumps(chunk.to_dict()))
    assert data["coord"] == [1, 1]
    for name in OBJECT_LISTS:
        assert len(data[name]) == len(getattr(chunk, name))
    assert data["celestial_stars"][0]["kind"] == "star"


def test_invalid_seeds_are_rejected() -> None:
    with pytest.raises(SeedInvalid):
        ChunkManager("12345")
    with pytest.raises(SeedInvalid):
        ChunkManager(True)


def test_reset_universe_validates_before_clearing() -> None:
    manager = ChunkManager(1)
    manager.generate_chunk(0, 0)
    with pytest.raises(SeedInvalid):
        manager.reset_universe(1.5)
    assert manager.universe_seed == 1
    assert manager.is_cached(0, 0)


def test_reset_universe_switches_content() -> None:
    manager = ChunkManager(1)
    before = manager.generate_chunk(0, 0)
    manager.reset_universe(2)
    assert manager.universe_seed == 2
    assert not manager.is_cached(0, 0)
    assert manager.chunk_state(0, 0) is ChunkState.UNREQUESTED
    after = manager.generate_chunk(0, 0)
    assert after.seed != before.seed
    assert after.seed == chunk_seed(2, 0, 0)


def test_clear_all_chunks_marks_evicted() -> None:
    manager = ChunkManager(3)
    manager.update_active_chunks(0.0, 0.0)
    manager.clear_all_chunks()
    assert manager.cached_coords() == []
    assert manager.chunk_state(0, 0) is ChunkState.EVICTED


def test_object_id_floors_coordinates() -> None:
    manager = ChunkManager(3)
    assert manager.get_object_id(1234.7, -0.5, "star") == "star_1234_-1"
    assert manager.get_object_id(-2000.0, 10.0, "nebula") == "nebula_-2000_10"


def test_chunk_region_is_classified_at_the_centre() -> None:
    manager = ChunkManager(3)
    chunk = manager.generate_chunk(4, -7)
    assert manager.get_chunk_region(4, -7) == chunk.region
    assert manager.get_region_at(9000.0, -13000.0).region_type == chunk.region.region_type


def test_failing_black_hole_lookup_stays_inside_its_family(monkeypatch) -> None:
    manager = ChunkManager(12345, _forced_stars())

    def explode(context, neighbour_rolls):
        raise RuntimeError("black hole generator broke")

    monkeypatch.setattr(manager.sites, "black_hole_rolls", lambda cx, cy: (cx, cy) == (0, 0))
    monkeypatch.setattr(manager.sites.black_holes, "site", explode)
    chunk = manager.generate_chunk(1, 1)
    assert chunk.failures == ("black_hole",)
    assert chunk.black_holes == []
    assert manager.chunk_state(1, 1) is ChunkState.ACTIVE
    assert manager.generate_chunk(0, 0).failures == ("black_hole",)
    assert manager.generate_chunk(5, 5).failures == ()


def test_aborted_generation_does_not_stay_generating(monkeypatch) -> None:
    manager = ChunkManager(12345)

    def explode(cx, cy, with_exclusions=True):
        raise RuntimeError("context broke")

    monkeypatch.setattr(manager.sites, "context", explode)
    with pytest.raises(RuntimeError):
        manager.generate_chunk(2, 3)
    assert manager.chunk_state(2, 3) is ChunkState.UNREQUESTED
    assert not manager.is_cached(2, 3)


def test_long_flight_keeps_site_lookups_bounded() -> None:
    manager = ChunkManager(12345)
    size = manager.config.chunk_size
    keep = manager.site_keep_radius()
    for step in range(200):
        manager.update_active_chunks(step * size + size / 2, size / 2)
        centre = (step, 0)
        coords = manager.sites.cached_coords()
        assert all(max(abs(cx - centre[0]), abs(cy - centre[1])) <= keep for cx, cy in coords)
        assert len(coords) <= (2 * keep + 1) ** 2
    assert keep == manager.config.unload_radius + SiteIndex.EXCLUSION_RADIUS + 1
