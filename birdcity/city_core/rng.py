"""
RNG - Seeded Mulberry32 Streams
===============================

Deterministic pseudo-random streams for daily puzzle generation.

Every player must see the same board for the same puzzle number, so the
generator uses pure 32-bit integer arithmetic (no platform floats except
the final division) and two decorrelated streams derived from the
puzzle number: one for terrain and one for the tile sequence.
"""

from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from birdcity.city_core.config_loader import GameConfig, get_config

MASK32 = 0xFFFFFFFF
GOLDEN_GAMMA = 0x6D2B79F5
TWO_POW_32 = 4294967296.0

T = TypeVar("T")


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply (unsigned result)."""
    return (a * b) & MASK32


class Mulberry32:
    """
    Mulberry32 generator.

    Calling the instance returns the next float in [0, 1). The internal
    state is a single unsigned 32-bit integer so the stream is identical
    on every platform.
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int):
        """
        Initialize the stream.

        Args:
            seed: Any integer; only the low 32 bits are used.
        """
        self._state = seed & MASK32

    @property
    def state(self) -> int:
        """Current 32-bit state."""
        return self._state

    def next_uint32(self) -> int:
        """Advance the stream and return the next 32-bit output."""
        s = (self._state + GOLDEN_GAMMA) & MASK32
        self._state = s
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & MASK32) ^ t
        return (t ^ (t >> 14)) & MASK32

    def random(self) -> float:
        """Next float in [0, 1)."""
        return self.next_uint32() / TWO_POW_32

    __call__ = random

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high], both inclusive."""
        if high < low:
            raise ValueError(f"Empty range [{low}, {high}]")
        return low + int(self.random() * (high - low + 1))

    def choice(self, items: Sequence[T]) -> T:
        """Pick one item uniformly."""
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[int(self.random() * len(items))]


def create_rng(seed: int) -> Mulberry32:
    """Create a stream from a raw seed."""
    return Mulberry32(seed)


def create_tile_rng(puzzle_number: int, config: Optional[GameConfig] = None) -> Mulberry32:
    """
    Create the tile-sequence stream for a puzzle.

    Args:
        puzzle_number: Puzzle number (day index plus any variant offset).
        config: Game configuration. Uses default if None.
    """
    if config is None:
        config = get_config()
    return Mulberry32(puzzle_number * config.seeds.tile_multiplier)


def create_grid_rng(puzzle_number: int, config: Optional[GameConfig] = None) -> Mulberry32:
    """
    Create the terrain stream for a puzzle.

    Args:
        puzzle_number: Puzzle number (day index plus any variant offset).
        config: Game configuration. Uses default if None.
    """
    if config is None:
        config = get_config()
    seeds = config.seeds
    return Mulberry32(puzzle_number * seeds.grid_multiplier + seeds.grid_offset)
