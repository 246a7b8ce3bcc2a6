"""
Daily Puzzles
=============

Maps calendar days to puzzle numbers.

Extra boards for the same day are offset by a large constant so they never
share seeds with the main sequence.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from birdcity.city_core.config_loader import GameConfig, get_config


def puzzle_number(
    today: Optional[date] = None,
    variant: int = 1,
    config: Optional[GameConfig] = None
) -> int:
    """
    Puzzle number for a local calendar day.

    Args:
        today: Local date. Uses date.today() if None.
        variant: Board variant, 1 for the main daily board.
        config: Game configuration. Uses default if None.
    """
    if config is None:
        config = get_config()
    if variant < 1:
        raise ValueError(f"Board variant must be >= 1, got {variant}")
    if today is None:
        today = date.today()

    days = (today - config.seeds.epoch).days
    return days + config.seeds.variant_offset * (variant - 1)


def day_number(puzzle: int, config: Optional[GameConfig] = None) -> int:
    """Day index of a puzzle number with any variant offset removed."""
    if config is None:
        config = get_config()
    offset = config.seeds.variant_offset
    return puzzle % offset if puzzle >= offset else puzzle


def board_variant(puzzle: int, config: Optional[GameConfig] = None) -> int:
    """Board variant encoded in a puzzle number (1 for the main board)."""
    if config is None:
        config = get_config()
    offset = config.seeds.variant_offset
    return puzzle // offset + 1 if puzzle >= offset else 1


def puzzle_date(today: Optional[date] = None) -> str:
    """Display date, e.g. 'Jan 5, 2025'."""
    if today is None:
        today = date.today()
    return f"{today:%b} {today.day}, {today.year}"
