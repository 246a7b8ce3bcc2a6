"""
Terrain
=======

The board model and its deterministic terrain generation.

Terrain (empty, rock, tree, river) is fixed once generated. Buildings are
stored as colour indices and are only written by the placement rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from birdcity.city_core.config_loader import GameConfig, get_config
from birdcity.city_core.rng import Mulberry32

logger = logging.getLogger(__name__)

# Terrain codes
EMPTY = 0
ROCK = 1
TREE = 2
RIVER = 3

TERRAIN_NAMES: Tuple[str, ...] = ("empty", "rock", "tree", "river")

# Building value for an unbuilt cell
NO_BUILDING = -1

Cell = Tuple[int, int]


@dataclass
class Grid:
    """
    Fixed-size board of terrain and buildings.

    Attributes:
        terrain: (rows, cols) uint8 terrain codes.
        building: (rows, cols) int8 colour index, NO_BUILDING when unset.
    """
    terrain: np.ndarray
    building: np.ndarray

    @classmethod
    def empty(cls, rows: int, cols: int) -> "Grid":
        """All-empty grid with no buildings."""
        return cls(
            terrain=np.full((rows, cols), EMPTY, dtype=np.uint8),
            building=np.full((rows, cols), NO_BUILDING, dtype=np.int8)
        )

    @property
    def rows(self) -> int:
        return self.terrain.shape[0]

    @property
    def cols(self) -> int:
        return self.terrain.shape[1]

    def copy(self) -> "Grid":
        """Deep copy (used for undo snapshots)."""
        return Grid(terrain=self.terrain.copy(), building=self.building.copy())

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def neighbors(self, r: int, c: int) -> List[Cell]:
        """4-directional in-bounds neighbours."""
        n = []
        if r > 0:
            n.append((r - 1, c))
        if r < self.rows - 1:
            n.append((r + 1, c))
        if c > 0:
            n.append((r, c - 1))
        if c < self.cols - 1:
            n.append((r, c + 1))
        return n

    def is_river(self, r: int, c: int) -> bool:
        return bool(self.terrain[r, c] == RIVER)

    def has_building(self, r: int, c: int) -> bool:
        return bool(self.building[r, c] != NO_BUILDING)

    def river_cells(self) -> List[Cell]:
        """River cells in row-major order."""
        rows, cols = np.nonzero(self.terrain == RIVER)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]

    def building_count(self) -> int:
        """Number of cells carrying a building."""
        return int(np.count_nonzero(self.building != NO_BUILDING))

    def buildable_count(self) -> int:
        """Number of non-river cells."""
        return int(np.count_nonzero(self.terrain != RIVER))

    def terrain_count(self, code: int) -> int:
        return int(np.count_nonzero(self.terrain == code))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            np.array_equal(self.terrain, other.terrain)
            and np.array_equal(self.building, other.building)
        )

    def to_records(self, colors: Sequence[str]) -> List[List[Dict]]:
        """
        Convert to the persisted layout: rows of {"terrain", "building"} dicts.

        Args:
            colors: Colour names indexed by building value.
        """
        out = []
        for r in range(self.rows):
            row = []
            for c in range(self.cols):
                b = int(self.building[r, c])
                row.append({
                    "terrain": TERRAIN_NAMES[int(self.terrain[r, c])],
                    "building": colors[b] if b != NO_BUILDING else None,
                })
            out.append(row)
        return out

    @classmethod
    def from_records(cls, rows_data: List[List[Dict]], colors: Sequence[str]) -> "Grid":
        """
        Rebuild a grid from the persisted layout.

        Raises:
            ValueError: If the layout is ragged or names unknown terrain/colours.
        """
        if not rows_data or not isinstance(rows_data[0], list) or not rows_data[0]:
            raise ValueError("Grid record is empty")
        num_cols = len(rows_data[0])
        grid = cls.empty(len(rows_data), num_cols)
        for r, row in enumerate(rows_data):
            if not isinstance(row, list) or len(row) != num_cols:
                raise ValueError(f"Grid row {r} does not have {num_cols} cells")
            for c, cell in enumerate(row):
                if not isinstance(cell, dict):
                    raise ValueError(f"Grid cell ({r}, {c}) is not an object")
                terrain = cell.get("terrain")
                if terrain not in TERRAIN_NAMES:
                    raise ValueError(f"Unknown terrain at ({r}, {c}): {terrain!r}")
                grid.terrain[r, c] = TERRAIN_NAMES.index(terrain)
                building = cell.get("building")
                if building is not None:
                    if building not in colors:
                        raise ValueError(f"Unknown building at ({r}, {c}): {building!r}")
                    if terrain == "river":
                        raise ValueError(f"Building on river at ({r}, {c})")
                    grid.building[r, c] = list(colors).index(building)
        return grid


def _place_river(grid: Grid, rng: Mulberry32, config: GameConfig) -> None:
    """Lay a one-cell-wide river from the top row to the bottom row."""
    terrain = config.terrain
    col = rng.randint(terrain.river_start_min, terrain.river_start_max)
    for row in range(grid.rows):
        grid.terrain[row, col] = RIVER
        drift = rng.randint(-1, 1)
        col = max(terrain.river_min_col, min(terrain.river_max_col, col + drift))


def _place_features(
    grid: Grid,
    code: int,
    count: int,
    rng: Mulberry32,
    max_attempts: int
) -> int:
    """
    Scatter a terrain feature onto empty cells by rejection sampling.

    Returns:
        Number of cells actually placed (may fall short of count).
    """
    placed = 0
    attempts = 0
    while placed < count and attempts < max_attempts:
        r = int(rng() * grid.rows)
        c = int(rng() * grid.cols)
        if grid.terrain[r, c] == EMPTY:
            grid.terrain[r, c] = code
            placed += 1
        attempts += 1

    if placed < count:
        logger.warning(
            "Placed %d of %d %s cells after %d attempts",
            placed, count, TERRAIN_NAMES[code], attempts
        )
    return placed


def create_grid(rng: Mulberry32, config: Optional[GameConfig] = None) -> Grid:
    """
    Generate the board for a terrain stream.

    Args:
        rng: Terrain stream (see create_grid_rng).
        config: Game configuration. Uses default if None.

    Returns:
        New grid with river, rocks and trees and no buildings.
    """
    if config is None:
        config = get_config()

    terrain = config.terrain
    grid = Grid.empty(config.board.rows, config.board.cols)

    _place_river(grid, rng, config)

    num_rocks = rng.randint(terrain.rocks_min, terrain.rocks_max)
    rocks = _place_features(grid, ROCK, num_rocks, rng, terrain.max_attempts)

    num_trees = rng.randint(terrain.trees_min, terrain.trees_max)
    trees = _place_features(grid, TREE, num_trees, rng, terrain.max_attempts)

    logger.debug("Generated grid: %d rocks, %d trees", rocks, trees)
    return grid
