"""
Board Viewer
============

Print a puzzle's board and tile sequence as text.

Usage:
    python -m tools.show_board [--puzzle N | --date YYYY-MM-DD] [--variant V] [--debug]
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Iterable, Optional, Tuple

from birdcity.city_core.config_loader import GameConfig, load_config
from birdcity.city_core.daily import puzzle_date, puzzle_number
from birdcity.city_core.rng import create_grid_rng
from birdcity.city_core.sequence import generate_tile_sequence
from birdcity.city_core.terrain import EMPTY, Grid, NO_BUILDING, RIVER, ROCK, TREE, create_grid
from birdcity.city_core.tile_catalog import Shape, shape_bounds

TERRAIN_GLYPHS = {EMPTY: ".", ROCK: "^", TREE: "T", RIVER: "~"}


def format_board(
    grid: Grid,
    config: GameConfig,
    ghost: Optional[Iterable[Tuple[int, int]]] = None
) -> str:
    """
    Render the board as text.

    Buildings show as the upper-case initial of their colour; ghost cells
    (a previewed placement) show as '*'.
    """
    ghost = set(ghost or ())
    lines = ["   " + " ".join(str(c) for c in range(grid.cols))]
    for r in range(grid.rows):
        glyphs = []
        for c in range(grid.cols):
            b = int(grid.building[r, c])
            if (r, c) in ghost:
                glyphs.append("*")
            elif b != NO_BUILDING:
                glyphs.append(config.colors[b][0].upper())
            else:
                glyphs.append(TERRAIN_GLYPHS[int(grid.terrain[r, c])])
        lines.append(f"{r:2d} " + " ".join(glyphs))
    return "\n".join(lines)


def format_shape(shape: Shape) -> str:
    """Render a shape in its bounding box."""
    bounds = shape_bounds(shape)
    cells = set(shape)
    return "\n".join(
        "".join("#" if (r, c) in cells else " " for c in range(bounds.cols))
        for r in range(bounds.rows)
    )


def main():
    parser = argparse.ArgumentParser(description="Show a Bird City puzzle")
    parser.add_argument("--puzzle", type=int, default=None, help="Puzzle number (default: today)")
    parser.add_argument("--date", type=date.fromisoformat, default=None,
                        help="Day to show (YYYY-MM-DD)")
    parser.add_argument("--variant", type=int, default=1, help="Board variant (default: 1)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--debug", action="store_true", help="Verbose engine logging")

    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    config = load_config(args.config)
    if args.puzzle is not None:
        puzzle = args.puzzle
    else:
        puzzle = puzzle_number(args.date, args.variant, config)

    grid = create_grid(create_grid_rng(puzzle, config), config)
    sequence = generate_tile_sequence(puzzle, config)

    print(f"Puzzle #{puzzle} ({puzzle_date(args.date)})")
    print(format_board(grid, config))
    print()
    print(f"Buildable cells: {grid.buildable_count()}")
    print(f"Tiles: {len(sequence)}  covering {sequence.total_cells} cells "
          f"(target {sequence.target_cells})")
    for i, tile in enumerate(sequence):
        print(f"  {i + 1:2d}. {tile.shape_key:5s} {tile.color}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
