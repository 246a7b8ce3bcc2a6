"""
State Snapshot
==============

Undo snapshots and the persisted game records.

Persisted records keep the camelCase keys of the stored JSON layout so
saves written by earlier clients stay loadable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from birdcity.city_core.terrain import Grid
from birdcity.city_core.tile_catalog import Shape


@dataclass(frozen=True)
class UndoSnapshot:
    """Session state captured just before a placement or skip."""
    grid: Grid
    tile_index: int
    skipped_count: int
    shape: Shape


def _require(data: Dict[str, Any], key: str, kind: type) -> Any:
    """Fetch a typed field from a decoded record."""
    if key not in data:
        raise ValueError(f"Record is missing '{key}'")
    value = data[key]
    # bool is an int subclass; don't accept it where an int is expected
    if kind is int and isinstance(value, bool):
        raise ValueError(f"Field '{key}' must be int, got bool")
    if not isinstance(value, kind):
        raise ValueError(f"Field '{key}' must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class GameRecord:
    """
    Game-in-progress record.

    tile_index is the index of the next tile to draw (one past the last
    consumed tile).
    """
    puzzle_number: int
    grid: Grid
    tile_index: int
    skipped_count: int
    hard_mode: bool

    def to_dict(self, colors: Sequence[str]) -> Dict[str, Any]:
        return {
            "puzzleNumber": self.puzzle_number,
            "grid": self.grid.to_records(colors),
            "currentTileIndex": self.tile_index,
            "skippedCount": self.skipped_count,
            "hardMode": self.hard_mode,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], colors: Sequence[str]) -> "GameRecord":
        """
        Decode a stored record.

        Raises:
            ValueError: If fields are missing, mistyped or out of range.
        """
        if not isinstance(data, dict):
            raise ValueError("Game record must be an object")
        tile_index = _require(data, "currentTileIndex", int)
        skipped = _require(data, "skippedCount", int)
        if tile_index < 0 or skipped < 0:
            raise ValueError("Negative tile index or skip count")
        hard_mode = data.get("hardMode", False)
        if not isinstance(hard_mode, bool):
            raise ValueError(f"Field 'hardMode' must be bool, got {type(hard_mode).__name__}")
        return cls(
            puzzle_number=_require(data, "puzzleNumber", int),
            grid=Grid.from_records(_require(data, "grid", list), colors),
            tile_index=tile_index,
            skipped_count=skipped,
            hard_mode=hard_mode
        )


@dataclass
class CompletedRecord:
    """Finished board, kept so it can be redisplayed without replaying."""
    puzzle_number: int
    grid: Grid
    skipped_count: int

    def to_dict(self, colors: Sequence[str]) -> Dict[str, Any]:
        return {
            "puzzleNumber": self.puzzle_number,
            "grid": self.grid.to_records(colors),
            "skippedCount": self.skipped_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], colors: Sequence[str]) -> "CompletedRecord":
        if not isinstance(data, dict):
            raise ValueError("Completed record must be an object")
        return cls(
            puzzle_number=_require(data, "puzzleNumber", int),
            grid=Grid.from_records(_require(data, "grid", list), colors),
            skipped_count=_require(data, "skippedCount", int)
        )
