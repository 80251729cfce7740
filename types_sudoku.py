# types_sudoku.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict

DIGITS = ("1", "2", "3", "4", "5", "6", "7", "8", "9")

Grid = list[list[str]]
"""A 9x9 Sudoku grid as rows of one-character digit strings ('' = empty)."""

Position = tuple[int, int]
"""A (row, col) pair, 0-based."""


@dataclass(frozen=True)
class Cell:
    """One board position: the player's value, pencil notes and the clue flag."""

    value: str = ""
    notes: frozenset[str] = field(default_factory=frozenset)
    fixed: bool = False


Board = list[list[Cell]]
"""A 9x9 matrix of cells. Board operations return new boards."""


class CellRecord(TypedDict):
    """Flat, storage-friendly form of a cell (see codec.flatten_board)."""

    value: str
    notes: list[str]
    fixed: bool


class PuzzleRecord(TypedDict, total=False):
    """A persisted puzzle, keyed by its seed id."""

    puzzle: str  # 81-char grid string, '-' for blanks
    solution: str  # 81-char grid string
    difficulty: str  # 'easy' | 'medium' | 'hard'
    createdAt: Any


class GameRecord(TypedDict, total=False):
    """A persisted game in progress (or finished)."""

    puzzleSeed: str
    difficulty: str
    board: list[CellRecord]
    secondsElapsed: int
    completed: bool
    completedAt: Any  # server timestamp once finished; True in a patch asks the server to stamp it
    createdAt: Any
