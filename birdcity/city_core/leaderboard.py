"""
Leaderboard
===========

Local score table: a remembered player name and one entry per player per
puzzle, stored as JSON next to the stats.

Entries carry everything a shared table would need (name, puzzle, score,
hard mode, date) but nothing here talks to a server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from birdcity.city_core.stats import JsonStore

logger = logging.getLogger(__name__)

USERNAME_FILE = "birdcity_username.json"
LEADERBOARD_FILE = "birdcity_leaderboard.json"


@dataclass(frozen=True)
class LeaderboardEntry:
    """One player's score for one puzzle."""
    username: str
    score: int
    puzzle_number: int
    hard_mode: bool
    date: str    # ISO day the score was recorded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "score": self.score,
            "puzzleNumber": self.puzzle_number,
            "hardMode": self.hard_mode,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaderboardEntry":
        """
        Decode a stored entry.

        Raises:
            ValueError: If fields are missing or mistyped.
        """
        if not isinstance(data, dict):
            raise ValueError("Leaderboard entry must be an object")
        username = data.get("username")
        score = data.get("score")
        puzzle = data.get("puzzleNumber")
        hard_mode = data.get("hardMode", False)
        if not isinstance(username, str) or not username:
            raise ValueError("Leaderboard entry needs a username")
        for key, value in (("score", score), ("puzzleNumber", puzzle)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Field '{key}' must be int")
        if not isinstance(hard_mode, bool):
            raise ValueError("Field 'hardMode' must be bool")
        return cls(
            username=username,
            score=score,
            puzzle_number=puzzle,
            hard_mode=hard_mode,
            date=str(data.get("date", ""))
        )


class Leaderboard(JsonStore):
    """
    Player name and score entries under one directory.

    Example:
        board = Leaderboard("~/.birdcity")
        board.add_score(board.load_username(), result.total, puzzle, hard_mode)
        for entry in board.scores_for_puzzle(puzzle):
            print(entry.username, entry.score)
    """

    # Player name ------------------------------------------------------

    def load_username(self) -> str:
        """Remembered player name, or '' if none is set."""
        raw = self._read(USERNAME_FILE)
        if not isinstance(raw, dict) or not isinstance(raw.get("username"), str):
            return ""
        return raw["username"]

    def save_username(self, name: str) -> str:
        """Remember a player name (surrounding whitespace removed)."""
        name = name.strip()
        self._write(USERNAME_FILE, {"username": name})
        return name

    # Entries ----------------------------------------------------------

    def load_entries(self) -> List[LeaderboardEntry]:
        raw = self._read(LEADERBOARD_FILE)
        if raw is None:
            return []
        try:
            if not isinstance(raw, list):
                raise ValueError("Leaderboard must be a list")
            return [LeaderboardEntry.from_dict(item) for item in raw]
        except ValueError as e:
            logger.warning("Resetting corrupt leaderboard: %s", e)
            return []

    def _save_entries(self, entries: List[LeaderboardEntry]) -> None:
        self._write(LEADERBOARD_FILE, [entry.to_dict() for entry in entries])

    def add_score(
        self,
        username: str,
        score: int,
        puzzle_number: int,
        hard_mode: bool = False,
        today: Optional[date] = None
    ) -> Optional[LeaderboardEntry]:
        """
        Record a score, replacing this player's earlier entry for the puzzle.

        Args:
            username: Player name. Nothing is recorded when empty.
            score: Final score.
            puzzle_number: Puzzle the score belongs to.
            hard_mode: Whether the game was played in hard mode.
            today: Day to stamp on the entry. Uses date.today() if None.

        Returns:
            The stored entry, or None when no name was given.
        """
        if not username:
            return None
        if today is None:
            today = date.today()

        entry = LeaderboardEntry(
            username=username,
            score=score,
            puzzle_number=puzzle_number,
            hard_mode=hard_mode,
            date=today.isoformat()
        )
        entries = self.load_entries()
        for i, existing in enumerate(entries):
            if existing.username == username and existing.puzzle_number == puzzle_number:
                entries[i] = entry
                break
        else:
            entries.append(entry)

        self._save_entries(entries)
        return entry

    def scores_for_puzzle(self, puzzle_number: int) -> List[LeaderboardEntry]:
        """Entries for one puzzle, best score first."""
        entries = [e for e in self.load_entries() if e.puzzle_number == puzzle_number]
        return sorted(entries, key=lambda e: e.score, reverse=True)

    def all_time_best(self) -> List[LeaderboardEntry]:
        """Each player's best entry, best score first. Ties keep the earlier entry."""
        best: Dict[str, LeaderboardEntry] = {}
        for entry in self.load_entries():
            current = best.get(entry.username)
            if current is None or entry.score > current.score:
                best[entry.username] = entry
        return sorted(best.values(), key=lambda e: e.score, reverse=True)
