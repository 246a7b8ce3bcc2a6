"""
Tile Sequence
=============

Builds the ordered list of tiles for a puzzle number.

Two policies exist:

- ``coverage`` (canonical): the sequence's total footprint is budgeted to
  a random 90-100% of the board's buildable cells.
- ``fixed_pool`` (legacy): a fixed number of tiles drawn from the historical
  pool of (shape, building type) pairs. The pool order, length and shapes
  match the older generator, so each draw picks the same pool entry and
  shape it did; building types are mapped onto the current colours.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from birdcity.city_core.config_loader import GameConfig, get_config
from birdcity.city_core.rng import create_grid_rng, create_tile_rng
from birdcity.city_core.terrain import create_grid
from birdcity.city_core.tile_catalog import Tile, TileCatalog, get_catalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileSequence:
    """Ordered, replayable tiles for one puzzle."""
    puzzle_number: int
    tiles: Tuple[Tile, ...]
    target_cells: int    # Coverage budget (0 for the fixed-pool policy)

    def __len__(self) -> int:
        return len(self.tiles)

    def __getitem__(self, index: int) -> Tile:
        return self.tiles[index]

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    @property
    def total_cells(self) -> int:
        """Sum of cells covered by every tile."""
        return sum(tile.size for tile in self.tiles)

    def to_dict(self) -> Dict:
        return {
            "puzzle_number": self.puzzle_number,
            "target_cells": self.target_cells,
            "tiles": [tile.to_dict() for tile in self.tiles],
        }


def _fits(size: int, remaining: int, min_size: int) -> bool:
    """True if a tile of `size` can be used without stranding the budget."""
    left = remaining - size
    return left == 0 or left >= min_size


def generate_coverage_sequence(
    puzzle_number: int,
    config: Optional[GameConfig] = None
) -> TileSequence:
    """
    Coverage-budget policy.

    The target is a random fraction (coverage_min..coverage_max) of the
    buildable cells of this puzzle's board. Tiles are drawn until the
    footprint reaches the target or the hard cap is hit. When the drawn
    shape would overshoot, or leave a remainder no shape can fill, a
    second draw is made among the shapes that fit.
    """
    if config is None:
        config = get_config()

    catalog = get_catalog(config)
    seq = config.sequence

    grid = create_grid(create_grid_rng(puzzle_number, config), config)
    buildable = grid.buildable_count()

    rng = create_tile_rng(puzzle_number, config)
    ratio = seq.coverage_min + rng() * (seq.coverage_max - seq.coverage_min)
    target = min(buildable, round(ratio * buildable))

    min_size = catalog.min_size
    tiles: List[Tile] = []
    total = 0

    while total < target and len(tiles) < seq.max_tiles:
        remaining = target - total
        key = rng.choice(catalog.keys)
        if not _fits(catalog.size_of(key), remaining, min_size):
            fitting = [
                k for k in catalog.keys
                if _fits(catalog.size_of(k), remaining, min_size)
            ]
            if not fitting:
                break
            key = rng.choice(fitting)
        color = rng.choice(catalog.colors)
        tiles.append(catalog.make_tile(key, color))
        total += catalog.size_of(key)

    logger.debug(
        "Puzzle %d: %d tiles covering %d of %d buildable cells (target %d)",
        puzzle_number, len(tiles), total, buildable, target
    )
    return TileSequence(puzzle_number=puzzle_number, tiles=tuple(tiles), target_cells=target)


def generate_fixed_pool_sequence(
    puzzle_number: int,
    config: Optional[GameConfig] = None
) -> TileSequence:
    """Legacy policy: legacy_length draws from the fixed tile pool."""
    if config is None:
        config = get_config()

    catalog: TileCatalog = get_catalog(config)
    rng = create_tile_rng(puzzle_number, config)

    tiles = []
    for _ in range(config.sequence.legacy_length):
        shape_key, building_type = rng.choice(config.legacy_pool)
        tiles.append(catalog.make_tile(shape_key, config.legacy_colors[building_type]))
    return TileSequence(puzzle_number=puzzle_number, tiles=tuple(tiles), target_cells=0)


def generate_tile_sequence(
    puzzle_number: int,
    config: Optional[GameConfig] = None
) -> TileSequence:
    """
    Generate the tile sequence for a puzzle number.

    Pure and deterministic: the same puzzle number and config always give
    the same sequence.

    Args:
        puzzle_number: Puzzle number (day index plus any variant offset).
        config: Game configuration. Uses default if None.
    """
    if config is None:
        config = get_config()

    if config.sequence.policy == "fixed_pool":
        return generate_fixed_pool_sequence(puzzle_number, config)
    return generate_coverage_sequence(puzzle_number, config)
