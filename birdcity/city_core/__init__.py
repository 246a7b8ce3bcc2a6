"""
City Core - The puzzle engine.

This module provides deterministic daily generation (terrain and tile
sequence), the placement rules, scoring and the game session that ties
them together.

Main exports:
- GameSession: One player's game of one puzzle
- GameConfig: Configuration loaded from game_config.yaml
- create_grid / create_grid_rng: Terrain generation
- generate_tile_sequence: Tile sequence generation
- can_place / place_tile: Placement rules
- calculate_score / get_stars: Scoring
- GameStore: Stats and save-file persistence
- Leaderboard: Local per-puzzle score table
"""

from birdcity.city_core.config_loader import GameConfig, load_config, get_config
from birdcity.city_core.rng import Mulberry32, create_rng, create_grid_rng, create_tile_rng
from birdcity.city_core.terrain import Grid, create_grid
from birdcity.city_core.tile_catalog import (
    Tile,
    TileCatalog,
    get_shape,
    rotate_shape,
    flip_shape,
    shape_bounds,
)
from birdcity.city_core.sequence import TileSequence, generate_tile_sequence
from birdcity.city_core.rules import can_place, place_tile
from birdcity.city_core.scoring import ScoreResult, calculate_score, get_stars
from birdcity.city_core.game import GameSession, GameState, resume_session
from birdcity.city_core.daily import puzzle_number, day_number
from birdcity.city_core.share import generate_share_text
from birdcity.city_core.stats import GameStore, Stats
from birdcity.city_core.leaderboard import Leaderboard, LeaderboardEntry

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "Mulberry32",
    "create_rng",
    "create_grid_rng",
    "create_tile_rng",
    "Grid",
    "create_grid",
    "Tile",
    "TileCatalog",
    "get_shape",
    "rotate_shape",
    "flip_shape",
    "shape_bounds",
    "TileSequence",
    "generate_tile_sequence",
    "can_place",
    "place_tile",
    "ScoreResult",
    "calculate_score",
    "get_stars",
    "GameSession",
    "GameState",
    "resume_session",
    "puzzle_number",
    "day_number",
    "generate_share_text",
    "GameStore",
    "Stats",
    "Leaderboard",
    "LeaderboardEntry",
]
