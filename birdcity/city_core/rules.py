"""
Placement Rules
===============

Validates and applies tile placements.

A placement is legal when every covered cell is in bounds, unbuilt and not
river, and the tile touches the city: the first tile must border the
river, every later tile must border an existing building.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from birdcity.city_core.config_loader import GameConfig, get_config
from birdcity.city_core.terrain import Cell, Grid, RIVER
from birdcity.city_core.tile_catalog import Shape

logger = logging.getLogger(__name__)


def covered_cells(shape: Shape, anchor_row: int, anchor_col: int) -> List[Cell]:
    """Absolute cells a shape covers when anchored at (anchor_row, anchor_col)."""
    return [(anchor_row + dr, anchor_col + dc) for dr, dc in shape]


def _touches(grid: Grid, cells: List[Cell], predicate) -> bool:
    """True if any 4-neighbour of any covered cell satisfies predicate."""
    for r, c in cells:
        for nr, nc in grid.neighbors(r, c):
            if predicate(nr, nc):
                return True
    return False


def can_place(grid: Grid, shape: Shape, anchor_row: int, anchor_col: int) -> bool:
    """
    Check whether a shape may be placed at an anchor.

    Never raises; out-of-bounds and overlapping requests return False.

    Args:
        grid: Current board.
        shape: Normalized shape offsets.
        anchor_row: Row the shape's origin maps onto.
        anchor_col: Column the shape's origin maps onto.
    """
    cells = covered_cells(shape, anchor_row, anchor_col)

    for r, c in cells:
        if not grid.in_bounds(r, c):
            return False
        if grid.has_building(r, c):
            return False
        if grid.terrain[r, c] == RIVER:
            return False

    if grid.building_count() == 0:
        # Bootstrap: the city starts on the riverbank
        return _touches(grid, cells, grid.is_river)
    return _touches(grid, cells, grid.has_building)


def place_tile(
    grid: Grid,
    shape: Shape,
    anchor_row: int,
    anchor_col: int,
    color: Union[str, int],
    config: Optional[GameConfig] = None
) -> List[Cell]:
    """
    Place a tile on the grid. Mutates grid.

    Args:
        grid: Current board.
        shape: Normalized shape offsets.
        anchor_row: Row the shape's origin maps onto.
        anchor_col: Column the shape's origin maps onto.
        color: Colour name, or its index in the configured colours.
        config: Game configuration, used to resolve colour names. Uses default if None.

    Returns:
        Absolute (row, col) cells that received the building.

    Raises:
        ValueError: If the placement is not legal; the grid is untouched.
    """
    if not can_place(grid, shape, anchor_row, anchor_col):
        logger.warning(
            "Rejected placement of %s at (%d, %d)", shape, anchor_row, anchor_col
        )
        raise ValueError(f"Illegal placement at ({anchor_row}, {anchor_col})")

    if isinstance(color, str):
        if config is None:
            config = get_config()
        color_index = config.color_index(color)
    else:
        color_index = int(color)

    cells = covered_cells(shape, anchor_row, anchor_col)
    for r, c in cells:
        grid.building[r, c] = color_index
    return cells


def valid_anchors(grid: Grid, shape: Shape) -> List[Tuple[int, int]]:
    """All anchors where the shape can currently be placed."""
    return [
        (r, c)
        for r in range(grid.rows)
        for c in range(grid.cols)
        if can_place(grid, shape, r, c)
    ]
