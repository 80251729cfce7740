"""Puzzle source: returns a solved grid and the same grid with cells blanked, per difficulty."""

# puzzle_source.py
# The game treats a source as a black box: generate(difficulty) -> {"puzzle", "solution"}.
# RandomPuzzleSource is the default one: randomized backtracking fill, then
# blank a fixed number of cells per difficulty. Uniqueness is not enforced.

import random
from typing import Optional, Protocol

from types_sudoku import DIGITS, Grid

from .grid_core import SIZE, all_positions, box_of, clone_grid

DIFFICULTIES = ("easy", "medium", "hard")
HOLES = {"easy": 30, "medium": 40, "hard": 50}


class PuzzleSource(Protocol):
    def generate(self, difficulty: str) -> dict:
        ...


def check_difficulty(difficulty: str) -> str:
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"unknown difficulty {difficulty!r}; expected one of {', '.join(DIFFICULTIES)}")
    return difficulty


class RandomPuzzleSource:
    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def generate(self, difficulty: str = "easy") -> dict:
        check_difficulty(difficulty)
        solution = [[""] * SIZE for _ in range(SIZE)]
        self._fill(solution)
        puzzle = clone_grid(solution)
        cells = all_positions()
        self._rng.shuffle(cells)
        for r, c in cells[:HOLES[difficulty]]:
            puzzle[r][c] = ""
        return {"puzzle": puzzle, "solution": solution}

    def _fill(self, grid: Grid) -> bool:
        empty = self._find_empty(grid)
        if empty is None:
            return True
        r, c = empty
        digits = list(DIGITS)
        self._rng.shuffle(digits)
        for d in digits:
            if self._is_valid(grid, r, c, d):
                grid[r][c] = d
                if self._fill(grid):
                    return True
                grid[r][c] = ""
        return False

    @staticmethod
    def _find_empty(grid: Grid):
        for i in range(SIZE):
            for j in range(SIZE):
                if grid[i][j] == "":
                    return i, j
        return None

    @staticmethod
    def _is_valid(grid: Grid, r: int, c: int, d: str) -> bool:
        if d in grid[r]:
            return False
        if d in [grid[i][c] for i in range(SIZE)]:
            return False
        b = box_of(r, c)
        br, bc = 3 * (b // 3), 3 * (b % 3)
        for i in range(br, br + 3):
            for j in range(bc, bc + 3):
                if grid[i][j] == d:
                    return False
        return True
