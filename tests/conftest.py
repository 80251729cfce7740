# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so "apps", "game" and "types_sudoku" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from game.board_tools import build_board, set_value  # noqa: E402
from game.codec import string_to_grid  # noqa: E402

PUZZLE = (
    "53--7----"
    "6--195---"
    "-98----6-"
    "8---6---3"
    "4--8-3--1"
    "7---2---6"
    "-6----28-"
    "---419--5"
    "----8--79"
)
SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)


class FixedSource:
    """Puzzle source that always hands out the same pair."""

    def __init__(self, puzzle=PUZZLE, solution=SOLUTION):
        self.puzzle = puzzle
        self.solution = solution
        self.calls = []

    def generate(self, difficulty="easy"):
        self.calls.append(difficulty)
        return {"puzzle": string_to_grid(self.puzzle), "solution": string_to_grid(self.solution)}


def fill_from(board, solution):
    """Set every empty free cell to its solution digit."""
    for r in range(9):
        for c in range(9):
            if not board[r][c].value:
                board = set_value(board, r, c, solution[r][c])
    return board


@pytest.fixture
def puzzle_grid():
    return string_to_grid(PUZZLE)


@pytest.fixture
def solution_grid():
    return string_to_grid(SOLUTION)


@pytest.fixture
def board(puzzle_grid):
    return build_board(puzzle_grid)
