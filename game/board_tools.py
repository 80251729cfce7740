from __future__ import annotations
"""Board construction and edit operations: set value (with peer note auto-clear), toggle note, erase, plus conflict, completion and correctness scans."""


# board_tools.py
# Every edit returns a new board. Untouched rows and cells are shared with the
# input; cells are frozen so sharing is safe. A rejected edit returns the input
# board object itself.
import logging
from dataclasses import replace
from typing import Dict

from types_sudoku import DIGITS, Board, Cell, Grid, Position

from .grid_core import SIZE, in_bounds, peers_of, rc_to_key, units

logger = logging.getLogger(__name__)


def build_board(grid: Grid) -> Board:
    """Map each clue to a fixed cell and each blank to an empty free cell."""
    if len(grid) != SIZE or any(len(row) != SIZE for row in grid):
        raise ValueError("grid must be 9x9")
    return [[Cell(value=v, fixed=v != "") for v in row] for row in grid]


def _editable(board: Board, r: int, c: int) -> bool:
    return in_bounds(r, c) and not board[r][c].fixed


def _with_cells(board: Board, changes: Dict[Position, Cell]) -> Board:
    rows = list(board)
    touched = {}
    for (r, c), cell in changes.items():
        if r not in touched:
            touched[r] = list(board[r])
        touched[r][c] = cell
    for r, row in touched.items():
        rows[r] = row
    return rows


def set_value(board: Board, r: int, c: int, digit: str) -> Board:
    if not _editable(board, r, c) or digit not in DIGITS:
        return board
    changes = {(r, c): replace(board[r][c], value=digit, notes=frozenset())}
    # write-clear stale candidates on peers
    for pr, pc in peers_of(r, c):
        peer = board[pr][pc]
        if not peer.fixed and digit in peer.notes:
            changes[(pr, pc)] = replace(peer, notes=peer.notes - {digit})
    logger.debug("set %s = %s (%d peer notes cleared)", rc_to_key(r, c), digit, len(changes) - 1)
    return _with_cells(board, changes)


def toggle_note(board: Board, r: int, c: int, digit: str) -> Board:
    if not _editable(board, r, c) or digit not in DIGITS:
        return board
    cell = board[r][c]
    return _with_cells(board, {(r, c): replace(cell, notes=cell.notes ^ {digit})})


def erase(board: Board, r: int, c: int) -> Board:
    if not _editable(board, r, c):
        return board
    return _with_cells(board, {(r, c): replace(board[r][c], value="", notes=frozenset())})


def has_conflict(board: Board, r: int, c: int) -> bool:
    if not in_bounds(r, c):
        return False
    val = board[r][c].value
    if not val:
        return False
    return any(board[pr][pc].value == val for pr, pc in peers_of(r, c))


def conflict_cells(board: Board) -> set:
    return {(r, c) for r in range(SIZE) for c in range(SIZE) if has_conflict(board, r, c)}


def sanity_check(board: Board) -> Dict:
    """List every unit holding the same digit twice, with the offending cells."""
    issues = []
    for label, cells in units():
        seen = set()
        dups = set()
        for r, c in cells:
            v = board[r][c].value
            if not v:
                continue
            if v in seen:
                dups.add(v)
            seen.add(v)
        if dups:
            bad = [rc_to_key(r, c) for r, c in cells if board[r][c].value in dups]
            issues.append({"type": "duplicate", "unit": label, "digits": sorted(dups), "cells": bad})
    return {"ok": len(issues) == 0, "issues": issues}


def is_complete(board: Board) -> bool:
    return all(cell.value for row in board for cell in row)


def is_correct(board: Board, solution: Grid) -> bool:
    # A blank solution cell can never be matched: a complete board has no blanks.
    if not is_complete(board):
        return False
    for r in range(SIZE):
        for c in range(SIZE):
            if board[r][c].value != solution[r][c]:
                return False
    return True


def digit_counts(board: Board) -> Dict[str, int]:
    counts = {d: 0 for d in DIGITS}
    for row in board:
        for cell in row:
            if cell.value in counts:
                counts[cell.value] += 1
    return counts

