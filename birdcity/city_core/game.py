"""
Game Session
============

One player's game of one puzzle: the board, the tile sequence, the tile in
hand and a single-slot undo.

The session owns its grid; nothing else mutates it. The engine functions
it calls are stateless, so any number of sessions can coexist.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from birdcity.city_core.config_loader import GameConfig, get_config
from birdcity.city_core.rng import create_grid_rng
from birdcity.city_core.rules import can_place, place_tile
from birdcity.city_core.scoring import ScoreResult, calculate_score, get_stars
from birdcity.city_core.sequence import TileSequence, generate_tile_sequence
from birdcity.city_core.state_snapshot import CompletedRecord, GameRecord, UndoSnapshot
from birdcity.city_core.stats import GameStore
from birdcity.city_core.terrain import Cell, Grid, create_grid
from birdcity.city_core.tile_catalog import Shape, Tile, flip_shape, rotate_shape

logger = logging.getLogger(__name__)


class GameState(enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass
class PlaceResult:
    """Result of placing the tile in hand."""
    cells: List[Cell]
    score: ScoreResult
    finished: bool


class GameSession:
    """
    Game session for one puzzle.

    Every drawn tile is either placed or skipped. Skipping costs a penalty;
    ending early does not. In hard mode skip and undo are unavailable.
    """

    def __init__(
        self,
        puzzle_number: int,
        hard_mode: bool = False,
        config: Optional[GameConfig] = None,
        grid: Optional[Grid] = None,
        tile_index: int = 0,
        skipped_count: int = 0
    ):
        """
        Initialize a session, fresh or resumed.

        Args:
            puzzle_number: Puzzle number (day index plus any variant offset).
            hard_mode: Disable skip and undo for this session.
            config: Game configuration. Uses default if None.
            grid: Board to resume from. Generated from the puzzle if None.
            tile_index: Index of the next tile to draw.
            skipped_count: Tiles already skipped.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._puzzle_number = puzzle_number
        self._hard_mode = hard_mode
        self._sequence: TileSequence = generate_tile_sequence(puzzle_number, config)

        if grid is None:
            grid = create_grid(create_grid_rng(puzzle_number, config), config)
        if grid.rows != config.board.rows or grid.cols != config.board.cols:
            raise ValueError(
                f"Grid is {grid.rows}x{grid.cols}, expected "
                f"{config.board.rows}x{config.board.cols}"
            )
        if not 0 <= tile_index <= len(self._sequence):
            raise ValueError(
                f"Tile index {tile_index} outside sequence of {len(self._sequence)}"
            )

        self._grid = grid
        self._tile_index = tile_index
        self._skipped_count = skipped_count
        self._ended_early = False
        self._undo: Optional[UndoSnapshot] = None
        self._shape: Optional[Shape] = self._load_shape()

        logger.debug(
            "Session for puzzle %d: %d tiles, index %d, hard_mode=%s",
            puzzle_number, len(self._sequence), tile_index, hard_mode
        )

    @classmethod
    def from_record(cls, record: GameRecord, config: Optional[GameConfig] = None) -> "GameSession":
        """Resume a session from a game-in-progress record."""
        return cls(
            puzzle_number=record.puzzle_number,
            hard_mode=record.hard_mode,
            config=config,
            grid=record.grid,
            tile_index=record.tile_index,
            skipped_count=record.skipped_count
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def puzzle_number(self) -> int:
        return self._puzzle_number

    @property
    def hard_mode(self) -> bool:
        return self._hard_mode

    @property
    def grid(self) -> Grid:
        """The live board. Treat as read-only; mutate through place()."""
        return self._grid

    @property
    def sequence(self) -> TileSequence:
        return self._sequence

    @property
    def tile_index(self) -> int:
        """Index of the next tile to draw."""
        return self._tile_index

    @property
    def skipped_count(self) -> int:
        return self._skipped_count

    @property
    def tiles_remaining(self) -> int:
        return len(self._sequence) - self._tile_index

    @property
    def is_over(self) -> bool:
        """True once the sequence is exhausted or the game was ended early."""
        return self._ended_early or self._tile_index >= len(self._sequence)

    @property
    def state(self) -> GameState:
        if self.is_over:
            return GameState.FINISHED
        if self._tile_index == 0 and self._grid.building_count() == 0:
            return GameState.NOT_STARTED
        return GameState.IN_PROGRESS

    @property
    def current_tile(self) -> Optional[Tile]:
        """Tile in hand, or None when the game is over."""
        if self.is_over:
            return None
        return self._sequence[self._tile_index]

    @property
    def current_shape(self) -> Optional[Shape]:
        """In-hand shape, including any rotations and flips."""
        return self._shape

    @property
    def can_undo(self) -> bool:
        return self._undo is not None and not self.is_over

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _load_shape(self) -> Optional[Shape]:
        tile = self.current_tile
        return tile.shape if tile is not None else None

    def _require_in_progress(self) -> None:
        if self.is_over:
            raise RuntimeError("Game is over")

    def _take_snapshot(self) -> None:
        if self._hard_mode:
            return
        self._undo = UndoSnapshot(
            grid=self._grid.copy(),
            tile_index=self._tile_index,
            skipped_count=self._skipped_count,
            shape=self._shape
        )

    def _advance(self) -> None:
        self._tile_index += 1
        self._shape = self._load_shape()
        if self.is_over:
            self._undo = None
            logger.debug("Puzzle %d finished", self._puzzle_number)

    def rotate(self) -> Shape:
        """Rotate the tile in hand 90 degrees."""
        self._require_in_progress()
        self._shape = rotate_shape(self._shape)
        return self._shape

    def flip(self) -> Shape:
        """Mirror the tile in hand."""
        self._require_in_progress()
        self._shape = flip_shape(self._shape)
        return self._shape

    def can_place(self, row: int, col: int) -> bool:
        """Check the tile in hand against an anchor."""
        if self.is_over:
            return False
        return can_place(self._grid, self._shape, row, col)

    def place(self, row: int, col: int) -> PlaceResult:
        """
        Place the tile in hand at an anchor and draw the next tile.

        Raises:
            RuntimeError: If the game is over.
            ValueError: If the placement is illegal (state unchanged).
        """
        self._require_in_progress()
        if not can_place(self._grid, self._shape, row, col):
            raise ValueError(f"Cannot place tile at ({row}, {col})")

        self._take_snapshot()
        color = self._config.color_index(self.current_tile.color)
        cells = place_tile(self._grid, self._shape, row, col, color)
        self._advance()

        return PlaceResult(cells=cells, score=self.score(), finished=self.is_over)

    def skip(self) -> None:
        """
        Discard the tile in hand for a penalty.

        Raises:
            RuntimeError: In hard mode or when the game is over.
        """
        if self._hard_mode:
            raise RuntimeError("Skip is disabled in hard mode")
        self._require_in_progress()

        self._take_snapshot()
        self._skipped_count += 1
        self._advance()

    def undo(self) -> None:
        """
        Restore the state before the last placement or skip.

        Only one step can be undone; the snapshot is cleared once used.

        Raises:
            RuntimeError: In hard mode, when the game is over, or with nothing to undo.
        """
        if self._hard_mode:
            raise RuntimeError("Undo is disabled in hard mode")
        if not self.can_undo:
            raise RuntimeError("Nothing to undo")

        snapshot = self._undo
        self._grid = snapshot.grid
        self._tile_index = snapshot.tile_index
        self._skipped_count = snapshot.skipped_count
        self._shape = snapshot.shape
        self._undo = None

    def end_early(self) -> None:
        """Stop before the sequence is exhausted; unused tiles are not penalized."""
        self._require_in_progress()
        self._ended_early = True
        self._undo = None
        logger.debug(
            "Puzzle %d ended early with %d tiles unused",
            self._puzzle_number, self.tiles_remaining
        )

    # ------------------------------------------------------------------
    # Scoring and records
    # ------------------------------------------------------------------

    def score(self) -> ScoreResult:
        """Score of the board as it stands."""
        return calculate_score(self._grid, self._skipped_count, self._config)

    def stars(self) -> int:
        return get_stars(self.score().total, self._config)

    def to_record(self) -> GameRecord:
        """Game-in-progress record for storage."""
        return GameRecord(
            puzzle_number=self._puzzle_number,
            grid=self._grid.copy(),
            tile_index=self._tile_index,
            skipped_count=self._skipped_count,
            hard_mode=self._hard_mode
        )

    def completed_record(self) -> CompletedRecord:
        """Completed-game record for storage."""
        return CompletedRecord(
            puzzle_number=self._puzzle_number,
            grid=self._grid.copy(),
            skipped_count=self._skipped_count
        )


def resume_session(
    store: GameStore,
    puzzle_number: int,
    hard_mode: bool = False,
    config: Optional[GameConfig] = None
) -> GameSession:
    """
    Resume the saved game for a puzzle, or start a fresh one.

    A save that decodes but does not fit this puzzle (wrong board size, tile
    index past the sequence) counts as no save.
    """
    record = store.load_game_state(puzzle_number)
    if record is not None:
        try:
            return GameSession.from_record(record, config)
        except ValueError as e:
            logger.warning("Saved game for puzzle %d unusable: %s", puzzle_number, e)
    return GameSession(puzzle_number, hard_mode=hard_mode, config=config)
