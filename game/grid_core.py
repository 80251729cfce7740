"""Index math for the 9x9 grid: bounds, boxes, peers, unit iterators and cell labels."""

# grid_core.py
# Positions are 0-based (row, col). Labels ('r1c1', 'b5') are 1-based for humans.

from functools import lru_cache

from types_sudoku import Grid

SIZE = 9


def in_bounds(r: int, c: int) -> bool:
    return 0 <= r < SIZE and 0 <= c < SIZE


def rc_to_key(r: int, c: int) -> str:
    return f"r{r + 1}c{c + 1}"


def clone_grid(grid: Grid) -> Grid:
    return [row[:] for row in grid]


def box_of(r: int, c: int) -> int:
    return 3 * (r // 3) + (c // 3)


@lru_cache(maxsize=None)
def peers_of(r: int, c: int) -> frozenset:
    """Return the positions sharing a row, column or 3x3 box with (r, c), excluding (r, c)."""
    ps = set()
    for j in range(SIZE):
        if j != c:
            ps.add((r, j))
    for i in range(SIZE):
        if i != r:
            ps.add((i, c))
    r0 = 3 * (r // 3)
    c0 = 3 * (c // 3)
    for i in range(3):
        for j in range(3):
            rr = r0 + i
            cc = c0 + j
            if (rr, cc) != (r, c):
                ps.add((rr, cc))
    return frozenset(ps)


def unit_cells_row(r: int):
    return [(r, c) for c in range(SIZE)]


def unit_cells_col(c: int):
    return [(r, c) for r in range(SIZE)]


def unit_cells_box(b: int):
    r0 = 3 * (b // 3)
    c0 = 3 * (b % 3)
    return [(r0 + i, c0 + j) for i in range(3) for j in range(3)]


def units():
    """Yield (label, cells) for all 27 houses: rows r1..r9, columns c1..c9, boxes b1..b9."""
    for r in range(SIZE):
        yield f"r{r + 1}", unit_cells_row(r)
    for c in range(SIZE):
        yield f"c{c + 1}", unit_cells_col(c)
    for b in range(SIZE):
        yield f"b{b + 1}", unit_cells_box(b)


def all_positions():
    return [(r, c) for r in range(SIZE) for c in range(SIZE)]
