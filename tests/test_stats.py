"""
Tests for stats bookkeeping and the JSON store.
"""

import json
from datetime import date

import pytest

from birdcity.city_core.config_loader import load_config
from birdcity.city_core.game import GameSession
from birdcity.city_core.leaderboard import (
    LEADERBOARD_FILE,
    USERNAME_FILE,
    Leaderboard,
    LeaderboardEntry,
)
from birdcity.city_core.stats import (
    COMPLETED_FILE,
    GAME_STATE_FILE,
    STATS_FILE,
    GameStore,
    Stats,
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store(tmp_path, config):
    return GameStore(tmp_path, config)


class TestStats:
    """Test streaks, bests and history."""

    def test_defaults(self):
        stats = Stats()
        assert stats.games_played == 0
        assert stats.average_score == 0.0

    def test_consecutive_days_extend_streak(self):
        stats = Stats()
        for puzzle in (10, 11, 12):
            stats.record(puzzle, 20)

        assert stats.current_streak == 3
        assert stats.max_streak == 3

    def test_gap_resets_streak(self):
        stats = Stats()
        stats.record(10, 20)
        stats.record(11, 20)
        stats.record(13, 20)

        assert stats.current_streak == 1
        assert stats.max_streak == 2
        assert stats.last_puzzle == 13

    def test_first_game_starts_streak(self):
        stats = Stats()
        stats.record(0, 5)
        assert stats.current_streak == 1

    def test_totals(self):
        stats = Stats()
        stats.record(1, 10)
        stats.record(2, 30)
        stats.record(3, -4)

        assert stats.games_played == 3
        assert stats.best_score == 30
        assert stats.total_score == 36
        assert stats.average_score == pytest.approx(12.0)

    def test_history_capped(self):
        stats = Stats()
        for puzzle in range(35):
            stats.record(puzzle, puzzle)

        assert len(stats.scores) == 30
        assert stats.scores[0] == {"puzzle": 5, "score": 5}
        assert stats.scores[-1] == {"puzzle": 34, "score": 34}

    def test_dict_layout(self):
        stats = Stats()
        stats.record(7, 12)
        data = stats.to_dict()

        assert data == {
            "gamesPlayed": 1,
            "currentStreak": 1,
            "maxStreak": 1,
            "bestScore": 12,
            "totalScore": 12,
            "lastPuzzle": 7,
            "scores": [{"puzzle": 7, "score": 12}],
        }
        assert Stats.from_dict(data) == stats

    def test_partial_dict_uses_defaults(self):
        stats = Stats.from_dict({"gamesPlayed": 4})
        assert stats.games_played == 4
        assert stats.scores == []


class TestGameStore:
    """Test JSON persistence."""

    def test_empty_directory(self, store):
        assert store.load_stats() == Stats()
        assert store.load_game_state() is None
        assert store.load_completed_game(1) is None
        assert not store.has_completed(1)

    def test_record_game_persists(self, store, tmp_path):
        store.record_game(3, 25)
        store.record_game(4, 15)

        stats = store.load_stats()
        assert stats.games_played == 2
        assert stats.current_streak == 2
        assert store.has_completed(3)
        assert not store.has_completed(5)

        raw = json.loads((tmp_path / STATS_FILE).read_text(encoding="utf-8"))
        assert raw["bestScore"] == 25

    def test_corrupt_stats_reset(self, store, tmp_path):
        (tmp_path / STATS_FILE).write_text("{not json", encoding="utf-8")
        assert store.load_stats() == Stats()

    def test_mistyped_stats_reset(self, store, tmp_path):
        (tmp_path / STATS_FILE).write_text('{"scores": 3}', encoding="utf-8")
        assert store.load_stats() == Stats()

    def test_game_state_round_trip(self, store, config):
        session = GameSession(9, config=config)
        session.skip()
        store.save_game_state(session.to_record())

        record = store.load_game_state(9)
        assert record.tile_index == 1
        assert record.skipped_count == 1
        assert record.grid == session.grid

    def test_game_state_other_puzzle(self, store, config):
        store.save_game_state(GameSession(9, config=config).to_record())

        assert store.load_game_state(10) is None
        assert store.load_game_state() is not None

    def test_corrupt_game_state(self, store, tmp_path):
        (tmp_path / GAME_STATE_FILE).write_text('{"puzzleNumber": 1}', encoding="utf-8")
        assert store.load_game_state(1) is None

    def test_clear_game_state(self, store, config, tmp_path):
        store.save_game_state(GameSession(9, config=config).to_record())
        store.clear_game_state()

        assert not (tmp_path / GAME_STATE_FILE).exists()
        store.clear_game_state()

    def test_completed_game(self, store, config, tmp_path):
        session = GameSession(9, config=config)
        session.end_early()
        store.save_completed_game(9, session.grid, session.skipped_count)

        record = store.load_completed_game(9)
        assert record.grid == session.grid
        assert record.skipped_count == 0
        assert store.load_completed_game(8) is None

        (tmp_path / COMPLETED_FILE).write_text("[]", encoding="utf-8")
        assert store.load_completed_game(9) is None

    def test_directory_created_on_write(self, tmp_path, config):
        store = GameStore(tmp_path / "nested" / "dir", config)
        store.record_game(1, 1)
        assert (tmp_path / "nested" / "dir" / STATS_FILE).exists()


class TestLeaderboard:
    """Test the local score table."""

    @pytest.fixture
    def board(self, tmp_path, config):
        return Leaderboard(tmp_path, config)

    def test_username(self, board):
        assert board.load_username() == ""

        assert board.save_username("  robin ") == "robin"
        assert board.load_username() == "robin"

    def test_empty_name_records_nothing(self, board):
        assert board.add_score("", 30, 5) is None
        assert board.load_entries() == []

    def test_one_entry_per_player_per_puzzle(self, board):
        board.add_score("robin", 20, 5, today=date(2025, 1, 6))
        board.add_score("robin", 34, 5, hard_mode=True, today=date(2025, 1, 7))
        board.add_score("robin", 12, 6)

        entries = board.load_entries()
        assert len(entries) == 2
        assert entries[0] == LeaderboardEntry("robin", 34, 5, True, "2025-01-07")

    def test_scores_for_puzzle_sorted(self, board):
        board.add_score("ash", 18, 5)
        board.add_score("robin", 40, 5)
        board.add_score("kit", 25, 5)
        board.add_score("kit", 99, 6)

        scores = board.scores_for_puzzle(5)

        assert [e.username for e in scores] == ["robin", "kit", "ash"]
        assert [e.score for e in scores] == [40, 25, 18]

    def test_all_time_best(self, board):
        board.add_score("ash", 18, 5)
        board.add_score("robin", 40, 5)
        board.add_score("ash", 45, 6)
        board.add_score("robin", 12, 6)

        best = board.all_time_best()

        assert [(e.username, e.score, e.puzzle_number) for e in best] == [
            ("ash", 45, 6),
            ("robin", 40, 5),
        ]

    def test_stored_layout(self, board, tmp_path):
        board.add_score("robin", 21, 7, today=date(2025, 1, 8))

        raw = json.loads((tmp_path / LEADERBOARD_FILE).read_text(encoding="utf-8"))
        assert raw == [{
            "username": "robin",
            "score": 21,
            "puzzleNumber": 7,
            "hardMode": False,
            "date": "2025-01-08",
        }]

    @pytest.mark.parametrize("content", [
        "{broken",
        '{"username": "robin"}',
        '[{"username": "robin", "score": "high", "puzzleNumber": 1}]',
        '[{"username": "robin", "score": 3, "puzzleNumber": 1, "hardMode": "no"}]',
    ])
    def test_corrupt_leaderboard_reset(self, board, tmp_path, content):
        (tmp_path / LEADERBOARD_FILE).write_text(content, encoding="utf-8")

        assert board.load_entries() == []
        board.add_score("robin", 10, 1)
        assert len(board.load_entries()) == 1

    def test_corrupt_username(self, board, tmp_path):
        (tmp_path / USERNAME_FILE).write_text("[1, 2]", encoding="utf-8")
        assert board.load_username() == ""

    def test_shares_directory_with_stats(self, store, board):
        store.record_game(5, 20)
        board.add_score("robin", 20, 5)

        assert store.load_stats().games_played == 1
        assert board.scores_for_puzzle(5)[0].score == 20
