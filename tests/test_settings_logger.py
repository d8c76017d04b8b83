"""Settings loading, config validation and channel logging."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from cosmos.engine.errors import GenerationFailure, SeedInvalid
from cosmos.engine.logger import DEFAULT_CHANNELS, CosmosLogger, LoggerConfig, init_logger, quiet_channel
from cosmos.engine.settings import DEFAULT_SPAWN_CHANCES, DEFAULT_UNIVERSE_SEED, GenerationConfig, UniverseSettings
from cosmos.math.spatial import seed_from_text
from cosmos.world.chunks import ChunkManager


def _quiet_logger() -> CosmosLogger:
    channels = {name: False for name in DEFAULT_CHANNELS}
    return CosmosLogger(LoggerConfig(level=logging.CRITICAL, channels=channels))


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


def test_missing_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    settings = UniverseSettings.from_settings(tmp_path / "absent.json")
    assert settings.seed == DEFAULT_UNIVERSE_SEED
    assert settings.generation == GenerationConfig()


def test_malformed_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    settings = UniverseSettings.from_settings(_write(tmp_path, "{not json"))
    assert settings.seed == DEFAULT_UNIVERSE_SEED


def test_settings_read_camel_case_keys(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "universeSeed": 777,
            "chunkSize": 1500,
            "loadRadius": 2,
            "unloadRadius": 3,
            "spawnChances": {"starSystem": 0.5, "asteroidGarden": 0.25},
        },
    )
    settings = UniverseSettings.from_settings(path)
    assert settings.seed == 777
    assert settings.generation.chunk_size == 1500.0
    assert settings.generation.load_radius == 2
    assert settings.generation.unload_radius == 3
    assert settings.generation.spawn_chance("star_system") == 0.5
    assert settings.generation.spawn_chance("asteroid_garden") == 0.25
    assert settings.generation.spawn_chance("nebula") == DEFAULT_SPAWN_CHANCES["nebula"]


def test_text_seeds_are_folded(tmp_path: Path) -> None:
    settings = UniverseSettings.from_settings(_write(tmp_path, {"universeSeed": "andromeda"}))
    assert settings.seed == seed_from_text("andromeda")


def test_non_integer_seed_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(SeedInvalid):
        UniverseSettings.from_settings(_write(tmp_path, {"universeSeed": 1.5}))


def test_bundled_settings_file_loads() -> None:
    path = Path(__file__).resolve().parents[1] / "settings.json"
    settings = UniverseSettings.from_settings(path)
    assert settings.seed == 12345
    assert settings.generation.chunk_size == 2000.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"chunk_size": 0.0},
        {"load_radius": -1},
        {"load_radius": 3, "unload_radius": 2},
        {"max_placement_attempts": 0},
    ],
)
def test_generation_config_rejects_bad_values(overrides) -> None:
    with pytest.raises(ValueError):
        GenerationConfig(**overrides)


def test_spawn_chances_are_validated() -> None:
    with pytest.raises(ValueError):
        GenerationConfig().with_spawn_chances(star_system=1.5)
    with pytest.raises(ValueError):
        GenerationConfig().with_spawn_chances(dragon=0.1)


def test_with_spawn_chances_leaves_original_untouched() -> None:
    base = GenerationConfig()
    forced = base.with_spawn_chances(star_system=1.0)
    assert forced.spawn_chance("star_system") == 1.0
    assert base.spawn_chance("star_system") == DEFAULT_SPAWN_CHANCES["star_system"]


def test_logger_config_reads_channels(tmp_path: Path) -> None:
    path = _write(tmp_path, {"logLevel": "debug", "logChannels": {"regions": True, "chunks": False}})
    config = LoggerConfig.from_settings(path)
    assert config.level == logging.DEBUG
    assert config.channels["regions"] is True
    assert config.channels["chunks"] is False
    assert config.channels["discovery"] is True


def test_unknown_channels_start_disabled() -> None:
    logger = _quiet_logger()
    channel = logger.channel("telemetry")
    assert not channel.enabled
    assert logger.channel("telemetry") is channel
    assert not logger.channel("regions").enabled
    assert CosmosLogger().channel("chunks").enabled


def test_disabled_channels_emit_nothing(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="cosmos")
    channel = quiet_channel("generation")
    channel.error("should stay silent")
    assert "should stay silent" not in caplog.text


def test_generation_failures_are_logged(caplog, monkeypatch, tmp_path: Path) -> None:
    logger = init_logger(tmp_path / "missing.json")
    caplog.set_level(logging.DEBUG, logger="cosmos")
    manager = ChunkManager(12345, GenerationConfig().with_spawn_chances(nebula=1.0), logger)

    def explode(context):
        raise RuntimeError("boom")

    monkeypatch.setattr(manager.nebulae, "generate", explode)
    chunk = manager.generate_chunk(0, 0)
    assert chunk.failures == ("nebula",)
    assert "nebula generation failed in chunk (0, 0)" in caplog.text


def test_generation_failure_message() -> None:
    failure = GenerationFailure("comet", (1, -2), ValueError("bad orbit"))
    assert failure.family == "comet"
    assert failure.coord == (1, -2)
    assert "comet generation failed in chunk (1, -2)" in str(failure)
    assert "bad orbit" in str(failure)


def test_manager_runs_with_a_quiet_logger() -> None:
    manager = ChunkManager(12345, logger=_quiet_logger())
    assert manager.update_active_chunks(0.0, 0.0)
