"""
Stats Storage
=============

JSON-file persistence for player statistics, the game in progress and the
last completed board.

Corrupt or mismatched files are treated as "no saved state": loads fall
back to defaults and log a warning instead of raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from birdcity.city_core.config_loader import GameConfig, get_config
from birdcity.city_core.state_snapshot import CompletedRecord, GameRecord
from birdcity.city_core.terrain import Grid

logger = logging.getLogger(__name__)

STATS_FILE = "birdcity_stats.json"
GAME_STATE_FILE = "birdcity_game.json"
COMPLETED_FILE = "birdcity_completed.json"


@dataclass
class Stats:
    """Aggregate player statistics (camelCase keys on disk)."""
    games_played: int = 0
    current_streak: int = 0
    max_streak: int = 0
    best_score: int = 0
    total_score: int = 0
    last_puzzle: int = -1
    scores: List[Dict[str, int]] = field(default_factory=list)

    _KEYS = {
        "games_played": "gamesPlayed",
        "current_streak": "currentStreak",
        "max_streak": "maxStreak",
        "best_score": "bestScore",
        "total_score": "totalScore",
        "last_puzzle": "lastPuzzle",
        "scores": "scores",
    }

    @property
    def average_score(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.total_score / self.games_played

    def to_dict(self) -> Dict[str, Any]:
        return {self._KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Stats":
        """Merge stored values over defaults; unknown keys are ignored."""
        if not isinstance(data, dict):
            raise ValueError("Stats must be an object")
        stats = cls()
        for attr, key in cls._KEYS.items():
            if key not in data:
                continue
            value = data[key]
            if attr == "scores":
                if not isinstance(value, list):
                    raise ValueError("scores must be a list")
                value = [
                    {"puzzle": int(entry["puzzle"]), "score": int(entry["score"])}
                    for entry in value
                ]
            else:
                value = int(value)
            setattr(stats, attr, value)
        return stats

    def record(self, puzzle_number: int, score: int, history_size: int = 30) -> None:
        """
        Fold a finished game into the stats.

        The streak grows only when this puzzle directly follows the last one
        recorded; anything else resets it to 1.
        """
        self.games_played += 1
        self.total_score += score
        self.best_score = max(self.best_score, score)

        if self.last_puzzle == puzzle_number - 1:
            self.current_streak += 1
        else:
            self.current_streak = 1
        self.last_puzzle = puzzle_number
        self.max_streak = max(self.max_streak, self.current_streak)

        self.scores.append({"puzzle": puzzle_number, "score": score})
        if len(self.scores) > history_size:
            self.scores = self.scores[-history_size:]


class JsonStore:
    """JSON files under one directory, written atomically."""

    def __init__(self, directory: Union[str, Path], config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._config = config
        self._dir = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._dir

    def _read(self, name: str) -> Optional[Any]:
        path = self._dir / name
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", path, e)
            return None

    def _write(self, name: str, data: Any) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._dir / name
        tmp = path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f)
        tmp.replace(path)

    def _remove(self, name: str) -> None:
        path = self._dir / name
        if path.exists():
            path.unlink()


class GameStore(JsonStore):
    """
    Stats and save files under one directory.

    Example:
        store = GameStore("~/.birdcity")
        stats = store.record_game(puzzle, result.total)
    """

    # Stats ------------------------------------------------------------

    def load_stats(self) -> Stats:
        raw = self._read(STATS_FILE)
        if raw is None:
            return Stats()
        try:
            return Stats.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Resetting corrupt stats: %s", e)
            return Stats()

    def save_stats(self, stats: Stats) -> None:
        self._write(STATS_FILE, stats.to_dict())

    def record_game(self, puzzle_number: int, score: int) -> Stats:
        """Record a finished game and return the updated stats."""
        stats = self.load_stats()
        stats.record(puzzle_number, score, self._config.stats.history_size)
        self.save_stats(stats)
        return stats

    def has_completed(self, puzzle_number: int) -> bool:
        return any(s["puzzle"] == puzzle_number for s in self.load_stats().scores)

    # Game in progress -------------------------------------------------

    def save_game_state(self, record: GameRecord) -> None:
        self._write(GAME_STATE_FILE, record.to_dict(self._config.colors))

    def load_game_state(self, puzzle_number: Optional[int] = None) -> Optional[GameRecord]:
        """
        Load the saved game, if any.

        Args:
            puzzle_number: Only return a save for this puzzle.
        """
        raw = self._read(GAME_STATE_FILE)
        if raw is None:
            return None
        try:
            record = GameRecord.from_dict(raw, self._config.colors)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding corrupt game state: %s", e)
            return None
        if puzzle_number is not None and record.puzzle_number != puzzle_number:
            return None
        return record

    def clear_game_state(self) -> None:
        self._remove(GAME_STATE_FILE)

    # Completed game ---------------------------------------------------

    def save_completed_game(self, puzzle_number: int, grid: Grid, skipped_count: int) -> None:
        record = CompletedRecord(puzzle_number, grid, skipped_count)
        self._write(COMPLETED_FILE, record.to_dict(self._config.colors))

    def load_completed_game(self, puzzle_number: int) -> Optional[CompletedRecord]:
        raw = self._read(COMPLETED_FILE)
        if raw is None:
            return None
        try:
            record = CompletedRecord.from_dict(raw, self._config.colors)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding corrupt completed game: %s", e)
            return None
        if record.puzzle_number != puzzle_number:
            return None
        return record
