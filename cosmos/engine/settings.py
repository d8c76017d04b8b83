"""Generation tunables and settings.json loading."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict

from cosmos.math.spatial import seed_from_text, validate_seed

DEFAULT_UNIVERSE_SEED = 12345

DEFAULT_SPAWN_CHANCES: Dict[str, float] = {
    "star_system": 0.08,
    "binary_star": 0.10,
    "comet": 0.20,
    "nebula": 0.05,
    "nebula_multiple": 0.02,
    "asteroid_garden": 0.15,
    "asteroid_garden_multiple": 0.05,
    "wormhole": 0.0005,
    "black_hole": 0.000001,
    "rogue_planet": 0.02,
    "dark_nebula": 0.015,
    "crystal_garden": 0.01,
    "protostar": 0.012,
}

# settings.json uses camelCase keys.
_SETTINGS_KEYS = {
    "starSystem": "star_system",
    "binaryStar": "binary_star",
    "comet": "comet",
    "nebula": "nebula",
    "nebulaMultiple": "nebula_multiple",
    "asteroidGarden": "asteroid_garden",
    "asteroidGardenMultiple": "asteroid_garden_multiple",
    "wormhole": "wormhole",
    "blackHole": "black_hole",
    "roguePlanet": "rogue_planet",
    "darkNebula": "dark_nebula",
    "crystalGarden": "crystal_garden",
    "protostar": "protostar",
}


@dataclass(frozen=True)
class GenerationConfig:
    """Tunables for chunk streaming and per-family spawn rolls."""

    chunk_size: float = 2000.0
    load_radius: int = 1
    unload_radius: int = 2
    max_placement_attempts: int = 8
    spawn_chances: Dict[str, float] = field(default_factory=lambda: DEFAULT_SPAWN_CHANCES.copy())

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.load_radius < 0:
            raise ValueError(f"load_radius must be >= 0, got {self.load_radius}")
        if self.unload_radius < self.load_radius:
            raise ValueError(
                f"unload_radius ({self.unload_radius}) must be >= load_radius ({self.load_radius})"
            )
        if self.max_placement_attempts < 1:
            raise ValueError("max_placement_attempts must be at least 1")
        for name, chance in self.spawn_chances.items():
            if name not in DEFAULT_SPAWN_CHANCES:
                raise ValueError(f"unknown spawn chance {name!r}")
            if not 0.0 <= chance <= 1.0:
                raise ValueError(f"spawn chance {name!r} must be within [0, 1], got {chance}")

    def spawn_chance(self, family: str) -> float:
        return self.spawn_chances.get(family, DEFAULT_SPAWN_CHANCES[family])

    def with_spawn_chances(self, **overrides: float) -> "GenerationConfig":
        chances = dict(self.spawn_chances)
        chances.update(overrides)
        return replace(self, spawn_chances=chances)

    def with_overrides(self, **overrides: Any) -> "GenerationConfig":
        return replace(self, **overrides)


@dataclass(frozen=True)
class UniverseSettings:
    """Universe seed plus generation tunables."""

    seed: int = DEFAULT_UNIVERSE_SEED
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UniverseSettings":
        raw_seed = data.get("universeSeed", DEFAULT_UNIVERSE_SEED)
        seed = seed_from_text(raw_seed) if isinstance(raw_seed, str) else validate_seed(raw_seed)
        chances = DEFAULT_SPAWN_CHANCES.copy()
        for key, value in data.get("spawnChances", {}).items():
            chances[_SETTINGS_KEYS.get(key, key)] = float(value)
        generation = GenerationConfig(
            chunk_size=float(data.get("chunkSize", 2000.0)),
            load_radius=int(data.get("loadRadius", 1)),
            unload_radius=int(data.get("unloadRadius", 2)),
            max_placement_attempts=int(data.get("maxPlacementAttempts", 8)),
            spawn_chances=chances,
        )
        return cls(seed=seed, generation=generation)

    @classmethod
    def from_settings(cls, settings_path: Path) -> "UniverseSettings":
        if not settings_path.exists():
            return cls()
        try:
            data = json.loads(settings_path.read_text())
        except json.JSONDecodeError:
            return cls()
        return cls.from_dict(data)


__all__ = ["DEFAULT_SPAWN_CHANCES", "DEFAULT_UNIVERSE_SEED", "GenerationConfig", "UniverseSettings"]
