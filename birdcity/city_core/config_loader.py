"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


Offsets = Tuple[Tuple[int, int], ...]


@dataclass(frozen=True)
class BoardConfig:
    """Grid dimensions."""
    rows: int
    cols: int

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols


@dataclass(frozen=True)
class TerrainConfig:
    """River and feature scattering parameters."""
    river_start_min: int   # Leftmost starting column (inclusive)
    river_start_max: int   # Rightmost starting column (inclusive)
    river_min_col: int     # Drift clamp, inclusive
    river_max_col: int     # Drift clamp, inclusive
    rocks_min: int
    rocks_max: int
    trees_min: int
    trees_max: int
    max_attempts: int      # Rejection-sampling budget per feature pass


@dataclass(frozen=True)
class SeedConfig:
    """Affine transforms deriving the PRNG seeds from a puzzle number."""
    tile_multiplier: int
    grid_multiplier: int
    grid_offset: int
    epoch: date
    variant_offset: int


@dataclass(frozen=True)
class SequenceConfig:
    """Tile sequence generation parameters."""
    policy: str            # "coverage" or "fixed_pool"
    coverage_min: float
    coverage_max: float
    max_tiles: int         # Hard cap for the coverage policy
    legacy_length: int     # Sequence length for the fixed-pool policy


@dataclass(frozen=True)
class ScoringConfig:
    """Score weights."""
    tree_weight: int
    rock_weight: int
    skip_weight: int
    open_weight: int


@dataclass(frozen=True)
class StarsConfig:
    """Descending score thresholds for 5, 4, 3 and 2 stars."""
    thresholds: Tuple[int, ...]


@dataclass(frozen=True)
class StatsConfig:
    """Persisted statistics parameters."""
    history_size: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    terrain: TerrainConfig
    seeds: SeedConfig
    sequence: SequenceConfig
    scoring: ScoringConfig
    stars: StarsConfig
    stats: StatsConfig
    colors: Tuple[str, ...]
    shapes: Dict[str, Offsets]
    legacy_shapes: Dict[str, Offsets]
    legacy_colors: Dict[str, str]
    legacy_pool: Tuple[Tuple[str, str], ...]

    @property
    def num_colors(self) -> int:
        """Number of building colours."""
        return len(self.colors)

    @property
    def shape_keys(self) -> Tuple[str, ...]:
        """Shape keys in declaration order."""
        return tuple(self.shapes.keys())

    def color_index(self, color: str) -> int:
        """Get the index of a colour name."""
        try:
            return self.colors.index(color)
        except ValueError:
            raise ValueError(f"Unknown color: {color}") from None


def _parse_offsets(key: str, cells_data: List) -> Offsets:
    """Parse a shape's [row, col] offsets from YAML."""
    if not cells_data:
        raise ValueError(f"Shape '{key}' has no cells")
    cells = []
    for cell in cells_data:
        if len(cell) != 2:
            raise ValueError(f"Shape cell must have 2 values [row, col], got {cell}")
        cells.append((int(cell[0]), int(cell[1])))
    return tuple(cells)


def _parse_epoch(value) -> date:
    """Parse the puzzle epoch (YAML may already hand us a date)."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    board = config.board
    terrain = config.terrain

    if board.rows <= 0 or board.cols <= 0:
        raise ValueError(f"Board must be non-empty, got {board.rows}x{board.cols}")

    # River band must sit inside the grid
    if not 0 <= terrain.river_min_col <= terrain.river_max_col < board.cols:
        raise ValueError(
            f"River clamp [{terrain.river_min_col}, {terrain.river_max_col}] "
            f"outside board of {board.cols} columns"
        )
    if not (terrain.river_min_col <= terrain.river_start_min
            <= terrain.river_start_max <= terrain.river_max_col):
        raise ValueError(
            f"River start band [{terrain.river_start_min}, {terrain.river_start_max}] "
            f"must lie within the drift clamp"
        )

    for name, low, high in (
        ("rocks", terrain.rocks_min, terrain.rocks_max),
        ("trees", terrain.trees_min, terrain.trees_max),
    ):
        if not 0 <= low <= high:
            raise ValueError(f"Invalid {name} range [{low}, {high}]")

    if terrain.max_attempts <= 0:
        raise ValueError(f"max_attempts must be positive, got {terrain.max_attempts}")

    if not config.colors:
        raise ValueError("At least one building color is required")
    if len(set(config.colors)) != len(config.colors):
        raise ValueError(f"Duplicate colors: {config.colors}")

    if not config.shapes:
        raise ValueError("At least one shape is required")

    overlap = set(config.shapes) & set(config.legacy_shapes)
    if overlap:
        raise ValueError(f"Legacy shapes shadow drawable shapes: {sorted(overlap)}")

    for building_type, color in config.legacy_colors.items():
        if color not in config.colors:
            raise ValueError(f"Legacy type '{building_type}' maps to unknown color '{color}'")

    for shape_key, building_type in config.legacy_pool:
        if shape_key not in config.shapes and shape_key not in config.legacy_shapes:
            raise ValueError(f"Legacy pool references unknown shape '{shape_key}'")
        if building_type not in config.legacy_colors:
            raise ValueError(f"Legacy pool references unmapped type '{building_type}'")

    seq = config.sequence
    if seq.policy not in ("coverage", "fixed_pool"):
        raise ValueError(f"policy must be 'coverage' or 'fixed_pool', got '{seq.policy}'")
    if not 0.0 < seq.coverage_min <= seq.coverage_max <= 1.0:
        raise ValueError(
            f"Coverage range [{seq.coverage_min}, {seq.coverage_max}] must lie in (0, 1]"
        )
    if seq.max_tiles <= 0 or seq.legacy_length <= 0:
        raise ValueError("Sequence lengths must be positive")
    if seq.policy == "fixed_pool" and not config.legacy_pool:
        raise ValueError("fixed_pool policy requires a non-empty legacy_pool")

    thresholds = config.stars.thresholds
    if len(thresholds) != 4:
        raise ValueError(f"Expected 4 star thresholds, got {len(thresholds)}")
    if list(thresholds) != sorted(thresholds, reverse=True):
        raise ValueError(f"Star thresholds must be descending, got {thresholds}")

    if config.stats.history_size <= 0:
        raise ValueError("history_size must be positive")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        rows=int(board_data["rows"]),
        cols=int(board_data["cols"])
    )

    terrain_data = raw["terrain"]
    terrain = TerrainConfig(
        river_start_min=int(terrain_data["river_start_min"]),
        river_start_max=int(terrain_data["river_start_max"]),
        river_min_col=int(terrain_data.get("river_min_col", 2)),
        river_max_col=int(terrain_data.get("river_max_col", board.cols - 2)),
        rocks_min=int(terrain_data["rocks_min"]),
        rocks_max=int(terrain_data["rocks_max"]),
        trees_min=int(terrain_data["trees_min"]),
        trees_max=int(terrain_data["trees_max"]),
        max_attempts=int(terrain_data.get("max_attempts", 100))
    )

    seeds_data = raw["seeds"]
    seeds = SeedConfig(
        tile_multiplier=int(seeds_data["tile_multiplier"]),
        grid_multiplier=int(seeds_data["grid_multiplier"]),
        grid_offset=int(seeds_data["grid_offset"]),
        epoch=_parse_epoch(seeds_data["epoch"]),
        variant_offset=int(seeds_data.get("variant_offset", 100000))
    )

    seq_data = raw["sequence"]
    sequence = SequenceConfig(
        policy=str(seq_data.get("policy", "coverage")),
        coverage_min=float(seq_data["coverage_min"]),
        coverage_max=float(seq_data["coverage_max"]),
        max_tiles=int(seq_data["max_tiles"]),
        legacy_length=int(seq_data.get("legacy_length", 22))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        tree_weight=int(scoring_data["tree_weight"]),
        rock_weight=int(scoring_data["rock_weight"]),
        skip_weight=int(scoring_data["skip_weight"]),
        open_weight=int(scoring_data.get("open_weight", 0))
    )

    stars = StarsConfig(
        thresholds=tuple(int(t) for t in raw["stars"]["thresholds"])
    )

    stats_data = raw.get("stats", {})
    stats = StatsConfig(
        history_size=int(stats_data.get("history_size", 30))
    )

    shapes = {
        str(key): _parse_offsets(str(key), cells)
        for key, cells in raw["shapes"].items()
    }

    legacy_shapes = {
        str(key): _parse_offsets(str(key), cells)
        for key, cells in (raw.get("legacy_shapes") or {}).items()
    }
    legacy_colors = {
        str(key): str(value)
        for key, value in (raw.get("legacy_colors") or {}).items()
    }

    legacy_pool = tuple(
        (str(entry[0]), str(entry[1])) for entry in raw.get("legacy_pool", [])
    )

    config = GameConfig(
        board=board,
        terrain=terrain,
        seeds=seeds,
        sequence=sequence,
        scoring=scoring,
        stars=stars,
        stats=stats,
        colors=tuple(str(c) for c in raw["colors"]),
        shapes=shapes,
        legacy_shapes=legacy_shapes,
        legacy_colors=legacy_colors,
        legacy_pool=legacy_pool
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
