"""
Terminal Play Mode
==================

Play today's Bird City puzzle in a terminal.

Commands:
    p ROW COL  - Place the tile in hand with its top-left offset at ROW, COL
    r          - Rotate the tile in hand
    f          - Flip the tile in hand
    s          - Skip the tile (penalty; disabled in hard mode)
    u          - Undo the last placement or skip (disabled in hard mode)
    e          - End the game now (remaining tiles are not penalized)
    q          - Quit (progress is saved)

Finished games are added to the local leaderboard under the name given
with --name (remembered for later sessions).

Usage:
    python -m tools.play_cli [--puzzle N] [--variant V] [--hard] [--save-dir DIR]
                             [--name NAME] [--debug]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from birdcity.city_core.config_loader import GameConfig, load_config
from birdcity.city_core.daily import board_variant, puzzle_number
from birdcity.city_core.game import GameSession, resume_session
from birdcity.city_core.leaderboard import Leaderboard
from birdcity.city_core.scoring import ScoreResult
from birdcity.city_core.share import generate_share_text
from birdcity.city_core.stats import GameStore
from tools.show_board import format_board, format_shape


class TerminalPlayer:
    """Read-eval loop driving one GameSession."""

    def __init__(
        self,
        session: GameSession,
        store: GameStore,
        config: GameConfig,
        leaderboard: Optional[Leaderboard] = None
    ):
        self._session = session
        self._store = store
        self._config = config
        self._leaderboard = leaderboard

    def _print_state(self) -> None:
        session = self._session
        print()
        print(format_board(session.grid, self._config))
        score = session.score()
        print(f"Score: {score.total}  Skipped: {session.skipped_count}")
        tile = session.current_tile
        if tile is not None:
            print(f"Tile {session.tile_index + 1} / {len(session.sequence)}: {tile.color}")
            print(format_shape(session.current_shape))

    def _print_result(self, result: ScoreResult) -> None:
        print()
        print("Game over!")
        for color, size in result.groups.items():
            print(f"  {color:6s} largest group: {size}")
        print(f"  trees uncovered: +{result.tree_bonus}")
        print(f"  rocks uncovered: -{result.rock_penalty}")
        if result.open_penalty:
            print(f"  open fields:     -{result.open_penalty}")
        print(f"  skipped tiles:   -{result.skip_penalty}")
        print(f"Final score: {result.total} ({self._session.stars()} stars)")

    def _print_leaderboard(self) -> None:
        scores = self._leaderboard.scores_for_puzzle(self._session.puzzle_number)
        if not scores:
            return
        print()
        print("Leaderboard:")
        for rank, entry in enumerate(scores, start=1):
            hard = " (hard)" if entry.hard_mode else ""
            print(f"  {rank:2d}. {entry.username:12s} {entry.score:4d}{hard}")

    def _handle(self, parts: List[str]) -> bool:
        """Run one command. Returns False to quit."""
        session = self._session
        cmd = parts[0].lower()
        try:
            if cmd == "q":
                return False
            if cmd == "r":
                session.rotate()
            elif cmd == "f":
                session.flip()
            elif cmd == "s":
                session.skip()
            elif cmd == "u":
                session.undo()
            elif cmd == "e":
                session.end_early()
            elif cmd == "p" and len(parts) == 3:
                row, col = int(parts[1]), int(parts[2])
                if not session.can_place(row, col):
                    print("Can't place there.")
                    return True
                session.place(row, col)
            else:
                print("Unknown command.")
                return True
        except (RuntimeError, ValueError) as e:
            print(f"Error: {e}")
        return True

    def run(self) -> Optional[int]:
        """Play until the game ends or the player quits. Returns the final score."""
        session = self._session
        while not session.is_over:
            self._print_state()
            try:
                line = input("> ").strip()
            except EOFError:
                line = "q"
            if not line:
                continue
            if not self._handle(line.split()):
                self._store.save_game_state(session.to_record())
                print("Progress saved.")
                return None
            if not session.is_over:
                self._store.save_game_state(session.to_record())

        result = session.score()
        self._print_result(result)
        self._store.record_game(session.puzzle_number, result.total)
        self._store.save_completed_game(
            session.puzzle_number, session.grid, session.skipped_count
        )
        self._store.clear_game_state()
        if self._leaderboard is not None:
            self._leaderboard.add_score(
                self._leaderboard.load_username(),
                result.total,
                session.puzzle_number,
                session.hard_mode
            )
            self._print_leaderboard()
        print()
        print(generate_share_text(
            session.grid,
            result.total,
            session.puzzle_number,
            board_variant(session.puzzle_number, self._config),
            session.skipped_count,
            session.hard_mode,
            self._config
        ))
        return result.total


def main():
    parser = argparse.ArgumentParser(description="Play Bird City in the terminal")
    parser.add_argument("--puzzle", type=int, default=None, help="Puzzle number (default: today)")
    parser.add_argument("--variant", type=int, default=1, help="Board variant (default: 1)")
    parser.add_argument("--hard", action="store_true", help="Hard mode: no skip, no undo")
    parser.add_argument("--save-dir", type=str, default="~/.birdcity", help="Stats directory")
    parser.add_argument("--name", type=str, default=None, help="Leaderboard name (remembered)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--debug", action="store_true", help="Verbose engine logging")

    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    config = load_config(args.config)
    store = GameStore(args.save_dir, config)
    leaderboard = Leaderboard(args.save_dir, config)
    if args.name is not None:
        leaderboard.save_username(args.name)
    puzzle = args.puzzle
    if puzzle is None:
        puzzle = puzzle_number(variant=args.variant, config=config)

    completed = store.load_completed_game(puzzle)
    if completed is not None and store.has_completed(puzzle):
        print(f"Puzzle #{puzzle} already completed.")
        print(format_board(completed.grid, config))
        return 0

    session = resume_session(store, puzzle, hard_mode=args.hard, config=config)
    score = TerminalPlayer(session, store, config, leaderboard).run()
    if score is not None:
        print(f"\nFinal Score: {score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
