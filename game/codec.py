"""Storage codecs: grids as 81-character strings and boards as flat lists of cell records."""

# codec.py
# Grid strings are row-major with '-' for blanks, e.g. '53--7----6--195---...'.
# Boards are flattened because the document store cannot hold nested arrays.
# Decoding is strict: malformed data raises CodecError instead of being padded or cut.

from types_sudoku import DIGITS, Board, Cell, CellRecord, Grid

from .grid_core import SIZE

BLANK = "-"
CELLS = SIZE * SIZE


class CodecError(ValueError):
    """Persisted puzzle or board data that cannot be decoded."""


def grid_to_string(grid: Grid) -> str:
    if len(grid) != SIZE or any(len(row) != SIZE for row in grid):
        raise CodecError("grid must be 9x9")
    out = []
    for r, row in enumerate(grid):
        for c, v in enumerate(row):
            if v == "":
                out.append(BLANK)
            elif v in DIGITS:
                out.append(v)
            else:
                raise CodecError(f"invalid value {v!r} at r{r + 1}c{c + 1}")
    return "".join(out)


def string_to_grid(text: str) -> Grid:
    if not isinstance(text, str) or len(text) != CELLS:
        raise CodecError(f"grid string must be {CELLS} characters")
    bad = set(text) - set(DIGITS) - {BLANK}
    if bad:
        raise CodecError(f"invalid characters in grid string: {''.join(sorted(bad))}")
    return [[("" if ch == BLANK else ch) for ch in text[i * SIZE:(i + 1) * SIZE]] for i in range(SIZE)]


def cell_to_record(cell: Cell) -> CellRecord:
    return {"value": cell.value, "notes": sorted(cell.notes), "fixed": cell.fixed}


def record_to_cell(record: dict, index: int = 0) -> Cell:
    where = f"cell {index}"
    try:
        value = record["value"]
        notes = record["notes"]
        fixed = record["fixed"]
    except (KeyError, TypeError):
        raise CodecError(f"{where}: expected a record with value, notes and fixed")
    if value != "" and value not in DIGITS:
        raise CodecError(f"{where}: invalid value {value!r}")
    if not isinstance(notes, (list, tuple)) or any(n not in DIGITS for n in notes):
        raise CodecError(f"{where}: notes must be a list of digits")
    if not isinstance(fixed, bool):
        raise CodecError(f"{where}: fixed must be a boolean")
    if fixed and (value == "" or notes):
        raise CodecError(f"{where}: a fixed cell needs a value and no notes")
    return Cell(value=value, notes=frozenset(notes), fixed=fixed)


def flatten_board(board: Board) -> list[CellRecord]:
    return [cell_to_record(cell) for row in board for cell in row]


def expand_board(flat: list) -> Board:
    if not isinstance(flat, (list, tuple)) or len(flat) != CELLS:
        raise CodecError(f"flat board must hold {CELLS} cell records")
    cells = [record_to_cell(rec, i) for i, rec in enumerate(flat)]
    return [cells[r * SIZE:(r + 1) * SIZE] for r in range(SIZE)]
