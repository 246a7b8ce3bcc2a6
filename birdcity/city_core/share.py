"""
Share Text
==========

Spoiler-free result summary a player can paste elsewhere.
"""

from __future__ import annotations

from typing import Optional

from birdcity.city_core.config_loader import GameConfig, get_config
from birdcity.city_core.daily import day_number
from birdcity.city_core.scoring import calculate_score, get_stars
from birdcity.city_core.terrain import Grid

COLOR_EMOJI = {
    "rust": "\U0001F7E7",
    "sand": "\U0001F7E8",
    "sage": "\U0001F7E9",
}
DEFAULT_COLOR_EMOJI = "⬜"

TREE_EMOJI = "\U0001F332"
ROCK_EMOJI = "\U0001FAA8"
OPEN_EMOJI = "\U0001F7EB"
SKIP_EMOJI = "\U0001F6AB"
HARD_EMOJI = "\U0001F525"
CITY_EMOJI = "\U0001F3D9️"
STAR_FULL = "⭐"
STAR_EMPTY = "☆"

SHARE_URL = "bird-city.janschill.de"


def generate_share_text(
    grid: Grid,
    score: int,
    puzzle_number: int,
    board_variant: int = 1,
    skipped_count: int = 0,
    hard_mode: bool = False,
    config: Optional[GameConfig] = None
) -> str:
    """
    Build the share text for a finished game.

    Args:
        grid: Final board.
        score: Final total score.
        puzzle_number: Puzzle number including any variant offset.
        board_variant: 1 for the main board, n > 1 for extra board n - 1.
        skipped_count: Tiles skipped.
        hard_mode: Whether the game was played in hard mode.
        config: Game configuration. Uses default if None.
    """
    if config is None:
        config = get_config()

    stars = get_stars(score, config)
    star_bar = STAR_FULL * stars + STAR_EMPTY * (5 - stars)
    label = f" (Extra #{board_variant - 1})" if board_variant > 1 else ""
    hard_label = f" {HARD_EMOJI}" if hard_mode else ""

    result = calculate_score(grid, skipped_count, config)

    parts = []
    for color in config.colors:
        size = result.groups.get(color, 0)
        if size > 0:
            parts.append(f"{COLOR_EMOJI.get(color, DEFAULT_COLOR_EMOJI)}+{size}")
    if result.tree_bonus > 0:
        parts.append(f"{TREE_EMOJI}+{result.tree_bonus}")
    if result.rock_penalty > 0:
        parts.append(f"{ROCK_EMOJI}-{result.rock_penalty}")
    if result.open_penalty > 0:
        parts.append(f"{OPEN_EMOJI}-{result.open_penalty}")
    if result.skip_penalty > 0:
        parts.append(f"{SKIP_EMOJI}-{result.skip_penalty}")

    day = day_number(puzzle_number, config)
    return (
        f"Bird City #{day}{label}{hard_label} {CITY_EMOJI}\n"
        f"{star_bar} {score}pts\n"
        f"{' '.join(parts)}\n"
        f"{SHARE_URL}"
    )
