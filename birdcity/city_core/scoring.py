"""
Scoring System
==============

Scores a board snapshot.

Each colour scores the size of its single largest connected group
(4-directional adjacency). Uncovered trees add a bonus; uncovered rocks,
skipped tiles and (optionally) uncovered open fields subtract a penalty.
Pure: safe to call after every move for a running score.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from birdcity.city_core.config_loader import GameConfig, get_config
from birdcity.city_core.terrain import EMPTY, Grid, NO_BUILDING, ROCK, TREE


@dataclass(frozen=True)
class ScoreResult:
    """Read-only score snapshot with its breakdown."""
    total: int
    groups: Dict[str, int] = field(default_factory=dict)  # Largest group per colour
    trees_uncovered: int = 0
    rocks_uncovered: int = 0
    open_uncovered: int = 0
    skipped_tiles: int = 0
    tree_bonus: int = 0
    rock_penalty: int = 0
    open_penalty: int = 0
    skip_penalty: int = 0

    @property
    def group_score(self) -> int:
        """Sum of each colour's largest group."""
        return sum(self.groups.values())

    @property
    def penalties(self) -> int:
        return self.rock_penalty + self.open_penalty + self.skip_penalty

    def to_dict(self) -> Dict:
        return {
            "total": self.total,
            "groups": dict(self.groups),
            "trees_uncovered": self.trees_uncovered,
            "rocks_uncovered": self.rocks_uncovered,
            "open_uncovered": self.open_uncovered,
            "skipped_tiles": self.skipped_tiles,
        }

    def __repr__(self) -> str:
        return f"ScoreResult(total={self.total}, groups={self.groups})"


def largest_group(grid: Grid, color_index: int) -> int:
    """
    Size of the largest 4-connected group of one colour.

    Each cell of the colour is visited once.
    """
    mask = grid.building == color_index
    visited = np.zeros_like(mask)
    best = 0

    for r, c in zip(*np.nonzero(mask)):
        if visited[r, c]:
            continue
        visited[r, c] = True
        queue = deque([(int(r), int(c))])
        size = 0
        while queue:
            cr, cc = queue.popleft()
            size += 1
            for nr, nc in grid.neighbors(cr, cc):
                if mask[nr, nc] and not visited[nr, nc]:
                    visited[nr, nc] = True
                    queue.append((nr, nc))
        best = max(best, size)

    return best


def calculate_score(
    grid: Grid,
    skipped_count: int = 0,
    config: Optional[GameConfig] = None
) -> ScoreResult:
    """
    Calculate the score breakdown for a board.

    Args:
        grid: Board snapshot (not modified).
        skipped_count: Tiles actively skipped this game.
        config: Game configuration. Uses default if None.

    Returns:
        ScoreResult with total and breakdown.
    """
    if config is None:
        config = get_config()

    weights = config.scoring
    uncovered = grid.building == NO_BUILDING
    trees = int(np.count_nonzero(uncovered & (grid.terrain == TREE)))
    rocks = int(np.count_nonzero(uncovered & (grid.terrain == ROCK)))
    open_cells = int(np.count_nonzero(uncovered & (grid.terrain == EMPTY)))

    groups = {
        color: largest_group(grid, index)
        for index, color in enumerate(config.colors)
    }

    tree_bonus = trees * weights.tree_weight
    rock_penalty = rocks * weights.rock_weight
    open_penalty = open_cells * weights.open_weight
    skip_penalty = skipped_count * weights.skip_weight

    total = sum(groups.values()) + tree_bonus - rock_penalty - open_penalty - skip_penalty

    return ScoreResult(
        total=total,
        groups=groups,
        trees_uncovered=trees,
        rocks_uncovered=rocks,
        open_uncovered=open_cells,
        skipped_tiles=skipped_count,
        tree_bonus=tree_bonus,
        rock_penalty=rock_penalty,
        open_penalty=open_penalty,
        skip_penalty=skip_penalty
    )


def get_stars(total: int, config: Optional[GameConfig] = None) -> int:
    """Map a total score to a 0-5 star rating."""
    if config is None:
        config = get_config()

    for stars, threshold in zip((5, 4, 3, 2), config.stars.thresholds):
        if total >= threshold:
            return stars
    if total > 0:
        return 1
    return 0
