"""Progress figures derived from a board: elapsed-time text, fill percentage, finished digits."""

# progress.py

from types_sudoku import Board

from .board_tools import digit_counts


def format_elapsed(seconds: int) -> str:
    """Render seconds as MM:SS. Minutes are not capped, so an hour reads '60:00'."""
    if seconds < 0:
        raise ValueError("elapsed seconds cannot be negative")
    m, s = divmod(int(seconds), 60)
    return f"{m:02d}:{s:02d}"


def progress_percent(board: Board) -> float:
    free = [cell for row in board for cell in row if not cell.fixed]
    if not free:
        return 0.0
    filled = sum(1 for cell in free if cell.value)
    return 100.0 * filled / len(free)


def completed_digits(board: Board) -> set:
    # nine placements, not necessarily nine correct ones
    return {d for d, n in digit_counts(board).items() if n == 9}


def newly_completed_digits(before: Board, after: Board) -> set:
    return completed_digits(after) - completed_digits(before)


def profile_summary(games: list) -> dict:
    total = len(games)
    completed = sum(1 for g in games if g.get("completedAt"))
    rate = round(completed / total * 100) if total else 0
    return {"total": total, "completed": completed, "completionRate": rate}
