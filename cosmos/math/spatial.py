"""Chunk coordinates and integer-only seed hashing."""
from __future__ import annotations

import hashlib
import math
from typing import Tuple

from cosmos.engine.errors import SeedInvalid

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF
GOLDEN_GAMMA = 0x9E3779B97F4A7C15

ChunkCoord = Tuple[int, int]


def validate_seed(value: object) -> int:
    """Return ``value`` unchanged if it is a usable seed, else raise :class:`SeedInvalid`.

    Only real integers qualify. ``bool`` is rejected even though it subclasses
    ``int``, and integral floats such as ``3.0`` are rejected as well so that a
    seed never silently changes type between runs.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise SeedInvalid(value)
    return value


def seed_from_text(text: str) -> int:
    """Fold a typed seed phrase into a 32-bit integer seed."""

    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & MASK32
    return value


def fmix32(value: int) -> int:
    value ^= value >> 16
    value = (value * 0x85EBCA6B) & MASK32
    value ^= value >> 13
    value = (value * 0xC2B2AE35) & MASK32
    value ^= value >> 16
    return value


def _splitmix64(value: int) -> int:
    value = (value + GOLDEN_GAMMA) & MASK64
    value = ((value ^ (value >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
    value = ((value ^ (value >> 27)) * 0x94D049BB133111EB) & MASK64
    return value ^ (value >> 31)


def hash64(*values: int) -> int:
    state = 0x84222325CBF29CE4
    for value in values:
        state ^= value & MASK64
        state = _splitmix64(state)
    return state


def hash_position(seed: int, x: float, y: float) -> int:
    """32-bit hash of the floored position mixed with ``seed``."""

    value = seed & MASK32
    value ^= math.floor(x) & MASK32
    value = (value * 0x9E3779B9) & MASK32
    value ^= math.floor(y) & MASK32
    value = (value * 0x85EBCA6B) & MASK32
    return fmix32(value)


def stable_hash(*parts: object) -> int:
    payload = "|".join(str(part) for part in parts)
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def chunk_seed(universe_seed: int, cx: int, cy: int) -> int:
    """Seed for one chunk; depends on nothing but the universe seed and ``(cx, cy)``."""

    return hash64(validate_seed(universe_seed), cx, cy)


def object_seed(chunk_seed_value: int, local_index: int, family_tag: str) -> int:
    """Sub-seed for the ``local_index``-th object of ``family_tag`` inside a chunk."""

    return stable_hash(chunk_seed_value, local_index, family_tag)


def _check_finite(x: float, y: float) -> None:
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"world coordinates must be finite, got ({x}, {y})")


def to_chunk_coord(x: float, y: float, chunk_size: float) -> ChunkCoord:
    _check_finite(x, y)
    return (math.floor(x / chunk_size), math.floor(y / chunk_size))


def chunk_origin(cx: int, cy: int, chunk_size: float) -> Tuple[float, float]:
    return (cx * chunk_size, cy * chunk_size)


def chunk_center(cx: int, cy: int, chunk_size: float) -> Tuple[float, float]:
    return ((cx + 0.5) * chunk_size, (cy + 0.5) * chunk_size)


def chunk_distance(a: ChunkCoord, b: ChunkCoord) -> int:
    """Chebyshev distance between two chunk coordinates."""

    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def neighborhood(cx: int, cy: int, radius: int = 1) -> Tuple[ChunkCoord, ...]:
    return tuple(
        (cx + dx, cy + dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
    )


def distance_to_rect(
    x: float,
    y: float,
    left: float,
    top: float,
    size: float,
) -> float:
    """Distance from a point to an axis-aligned square (0 inside it)."""

    dx = max(left - x, 0.0, x - (left + size))
    dy = max(top - y, 0.0, y - (top + size))
    return math.hypot(dx, dy)


__all__ = [
    "ChunkCoord",
    "MASK32",
    "MASK64",
    "chunk_center",
    "chunk_distance",
    "chunk_origin",
    "chunk_seed",
    "distance_to_rect",
    "fmix32",
    "hash64",
    "hash_position",
    "neighborhood",
    "object_seed",
    "seed_from_text",
    "stable_hash",
    "to_chunk_coord",
    "validate_seed",
]
