"""Error taxonomy shared by the generation pipeline."""
from __future__ import annotations

from typing import Optional, Tuple


class CosmosError(Exception):
    """Base class for every error raised by the universe generator."""


class GenerationFailure(CosmosError):
    """A single object family failed while a chunk was being generated."""

    def __init__(
        self,
        family: str,
        coord: Tuple[int, int],
        cause: Optional[BaseException] = None,
    ) -> None:
        self.family = family
        self.coord = coord
        self.cause = cause
        detail = f": {cause!r}" if cause is not None else ""
        super().__init__(f"{family} generation failed in chunk {coord}{detail}")


class PlacementExhausted(CosmosError):
    """A bounded placement loop ran out of attempts."""

    def __init__(self, family: str, attempts: int) -> None:
        self.family = family
        self.attempts = attempts
        super().__init__(f"no valid {family} placement after {attempts} attempts")


class SeedInvalid(CosmosError, ValueError):
    """Seeds must be finite integers; anything else breaks determinism."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"invalid universe seed {value!r} ({type(value).__name__})")


__all__ = ["CosmosError", "GenerationFailure", "PlacementExhausted", "SeedInvalid"]
