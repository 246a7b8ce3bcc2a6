"""
Tests for terrain generation and the grid model.
"""

import dataclasses

import numpy as np
import pytest

from birdcity.city_core.config_loader import load_config
from birdcity.city_core.rng import create_grid_rng
from birdcity.city_core.terrain import (
    EMPTY,
    Grid,
    NO_BUILDING,
    RIVER,
    ROCK,
    TREE,
    create_grid,
)


@pytest.fixture
def config():
    return load_config()


PUZZLES = list(range(0, 400, 7)) + [100000, 100365, 200001]


class TestCreateGrid:
    """Test deterministic board generation."""

    def test_dimensions(self, config):
        grid = create_grid(create_grid_rng(1, config), config)

        assert grid.rows == config.board.rows == 10
        assert grid.cols == config.board.cols == 7

    @pytest.mark.parametrize("puzzle", PUZZLES)
    def test_deterministic(self, config, puzzle):
        """Same puzzle number should produce identical grids."""
        g1 = create_grid(create_grid_rng(puzzle, config), config)
        g2 = create_grid(create_grid_rng(puzzle, config), config)

        assert g1 == g2

    def test_different_puzzles_differ(self, config):
        grids = [create_grid(create_grid_rng(p, config), config) for p in range(10)]
        distinct = {g.terrain.tobytes() for g in grids}

        assert len(distinct) > 1

    @pytest.mark.parametrize("puzzle", PUZZLES)
    def test_river_contiguous(self, config, puzzle):
        """Exactly one river cell per row; consecutive rows drift by at most 1."""
        grid = create_grid(create_grid_rng(puzzle, config), config)

        cols = []
        for r in range(grid.rows):
            river = np.nonzero(grid.terrain[r] == RIVER)[0]
            assert len(river) == 1
            cols.append(int(river[0]))

        for a, b in zip(cols, cols[1:]):
            assert abs(a - b) <= 1

    @pytest.mark.parametrize("puzzle", PUZZLES)
    def test_river_stays_inside_band(self, config, puzzle):
        """River never touches the outer columns."""
        grid = create_grid(create_grid_rng(puzzle, config), config)
        terrain = config.terrain

        first_col = grid.river_cells()[0][1]
        assert terrain.river_start_min <= first_col <= terrain.river_start_max
        for _, c in grid.river_cells():
            assert terrain.river_min_col <= c <= terrain.river_max_col

    @pytest.mark.parametrize("puzzle", PUZZLES)
    def test_feature_counts(self, config, puzzle):
        """Rocks and trees never exceed their target range."""
        grid = create_grid(create_grid_rng(puzzle, config), config)

        assert grid.terrain_count(ROCK) <= config.terrain.rocks_max
        assert grid.terrain_count(TREE) <= config.terrain.trees_max
        assert grid.terrain_count(RIVER) == grid.rows

    def test_no_buildings(self, config):
        grid = create_grid(create_grid_rng(3, config), config)

        assert grid.building_count() == 0
        assert np.all(grid.building == NO_BUILDING)

    def test_attempt_budget_shortfall_is_silent(self, config):
        """An exhausted attempt budget yields fewer features, not an error."""
        terrain = dataclasses.replace(
            config.terrain,
            rocks_min=60, rocks_max=60,
            trees_min=60, trees_max=60,
            max_attempts=5
        )
        tight = dataclasses.replace(config, terrain=terrain)

        grid = create_grid(create_grid_rng(9, tight), tight)

        assert grid.terrain_count(ROCK) <= 5
        assert grid.terrain_count(TREE) <= 5
        assert grid.terrain_count(RIVER) == grid.rows


class TestGrid:
    """Test grid helpers."""

    def test_neighbors_in_bounds(self):
        grid = Grid.empty(10, 7)

        assert sorted(grid.neighbors(0, 0)) == [(0, 1), (1, 0)]
        assert sorted(grid.neighbors(9, 6)) == [(8, 6), (9, 5)]
        assert len(grid.neighbors(4, 3)) == 4

    def test_copy_is_independent(self):
        grid = Grid.empty(10, 7)
        clone = grid.copy()
        clone.building[0, 0] = 1

        assert grid.building[0, 0] == NO_BUILDING
        assert grid != clone

    def test_buildable_count_excludes_river(self):
        grid = Grid.empty(10, 7)
        grid.terrain[:, 3] = RIVER

        assert grid.buildable_count() == 60

    def test_records_keep_persisted_layout(self, config):
        """Persisted grid is rows of {terrain, building} dicts."""
        grid = create_grid(create_grid_rng(5, config), config)
        r, c = next(
            (r, c) for r in range(grid.rows) for c in range(grid.cols)
            if grid.terrain[r, c] == EMPTY
        )
        grid.building[r, c] = 2

        records = grid.to_records(config.colors)

        assert len(records) == 10 and len(records[0]) == 7
        assert records[r][c] == {"terrain": "empty", "building": "sage"}
        assert Grid.from_records(records, config.colors) == grid

    @pytest.mark.parametrize("bad", [
        [],
        [[]],
        [[{"terrain": "lava", "building": None}]],
        [[{"terrain": "empty", "building": "purple"}]],
        [[{"terrain": "river", "building": "rust"}]],
        [[{"terrain": "empty", "building": None}], []],
        [["empty"]],
    ])
    def test_from_records_rejects_malformed(self, config, bad):
        with pytest.raises(ValueError):
            Grid.from_records(bad, config.colors)
