"""The puzzle session: one board, its solution and the player's input state (selection, note mode, clock)."""

# session.py
# A session is always passed explicitly; nothing here is module-global.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from types_sudoku import Board, GameRecord, Grid, Position, PuzzleRecord

from . import board_tools
from .codec import expand_board, flatten_board, string_to_grid
from .grid_core import SIZE, in_bounds, rc_to_key
from .progress import completed_digits, format_elapsed, progress_percent

logger = logging.getLogger(__name__)


@dataclass
class SessionStatus:
    completed: bool
    correct: bool
    conflicts: list[str]
    progress: float
    elapsed: str
    completed_digits: list[str]

    def to_dict(self) -> dict:
        return {
            "completed": self.completed,
            "correct": self.correct,
            "conflicts": self.conflicts,
            "progress": self.progress,
            "elapsed": self.elapsed,
            "completedDigits": self.completed_digits,
        }


@dataclass
class PuzzleSession:
    board: Board
    solution: Grid
    seed: Optional[str] = None
    difficulty: str = "easy"
    selection: Optional[Position] = None
    note_mode: bool = False
    seconds_elapsed: int = 0
    timer_active: bool = True
    game_id: Optional[str] = None
    recorded: bool = False
    finished: bool = field(default=False, init=False)

    def __post_init__(self):
        if len(self.board) != SIZE or any(len(row) != SIZE for row in self.board):
            raise ValueError("board must be 9x9")
        if len(self.solution) != SIZE or any(len(row) != SIZE for row in self.solution):
            raise ValueError("solution must be 9x9")
        if any(v == "" for row in self.solution for v in row):
            raise ValueError("solution must not contain blank cells")

    @classmethod
    def from_puzzle(cls, puzzle: Grid, solution: Grid, seed: Optional[str] = None, difficulty: str = "easy") -> "PuzzleSession":
        return cls(board=board_tools.build_board(puzzle), solution=solution, seed=seed, difficulty=difficulty)

    @classmethod
    def from_game_record(cls, record: GameRecord, puzzle: PuzzleRecord, game_id: Optional[str] = None) -> "PuzzleSession":
        """Rebuild a session from a saved game and the puzzle record it was played on."""
        session = cls(
            board=expand_board(record["board"]),
            solution=string_to_grid(puzzle["solution"]),
            seed=record.get("puzzleSeed"),
            difficulty=record.get("difficulty", puzzle.get("difficulty", "easy")),
            seconds_elapsed=int(record.get("secondsElapsed", 0)),
            game_id=game_id,
        )
        if record.get("completed"):
            session.recorded = True
        session.status()
        return session

    # --- input -------------------------------------------------------------

    def select(self, r: int, c: int) -> None:
        if in_bounds(r, c):
            self.selection = (r, c)

    def clear_selection(self) -> None:
        self.selection = None

    def toggle_note_mode(self) -> bool:
        self.note_mode = not self.note_mode
        return self.note_mode

    def input_digit(self, digit: str) -> bool:
        """Write a value or toggle a note on the selected cell. Returns True if the board changed."""
        if self.selection is None:
            return False
        r, c = self.selection
        if self.note_mode:
            updated = board_tools.toggle_note(self.board, r, c, digit)
        else:
            updated = board_tools.set_value(self.board, r, c, digit)
        changed = updated is not self.board
        self.board = updated
        return changed

    def erase_selected(self) -> bool:
        if self.selection is None:
            return False
        updated = board_tools.erase(self.board, *self.selection)
        changed = updated is not self.board
        self.board = updated
        return changed

    def selected_notes(self) -> list[str]:
        if not self.note_mode or self.selection is None:
            return []
        r, c = self.selection
        return sorted(self.board[r][c].notes)

    # --- clock & status ----------------------------------------------------

    def tick(self) -> None:
        if self.timer_active:
            self.seconds_elapsed += 1

    def status(self) -> SessionStatus:
        completed = board_tools.is_complete(self.board)
        correct = completed and board_tools.is_correct(self.board, self.solution)
        if correct and not self.finished:
            # the clock never restarts for this session
            self.finished = True
            self.timer_active = False
            logger.info("puzzle %s solved in %s", self.seed or "<unsaved>", format_elapsed(self.seconds_elapsed))
        conflicts = sorted(rc_to_key(r, c) for r, c in board_tools.conflict_cells(self.board))
        return SessionStatus(
            completed=completed,
            correct=correct,
            conflicts=conflicts,
            progress=progress_percent(self.board),
            elapsed=format_elapsed(self.seconds_elapsed),
            completed_digits=sorted(completed_digits(self.board)),
        )

    # --- persistence -------------------------------------------------------

    def to_game_record(self) -> GameRecord:
        return {
            "puzzleSeed": self.seed,
            "difficulty": self.difficulty,
            "board": flatten_board(self.board),
            "secondsElapsed": self.seconds_elapsed,
            "completed": self.finished,
        }
