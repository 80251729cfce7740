# tests/test_session.py
import pytest

from conftest import PUZZLE, SOLUTION
from game.codec import string_to_grid
from game.session import PuzzleSession


@pytest.fixture
def session(puzzle_grid, solution_grid):
    return PuzzleSession.from_puzzle(puzzle_grid, solution_grid, seed="abc", difficulty="easy")


def solve(session, solution_grid):
    for r in range(9):
        for c in range(9):
            if not session.board[r][c].fixed:
                session.select(r, c)
                session.input_digit(solution_grid[r][c])


def test_input_needs_a_selection(session):
    assert not session.input_digit("4")
    assert not session.erase_selected()


def test_value_and_note_modes(session):
    session.select(0, 2)
    assert session.input_digit("4")
    assert session.board[0][2].value == "4"

    session.select(0, 3)
    assert session.toggle_note_mode()
    assert session.input_digit("2")
    assert session.input_digit("6")
    assert session.board[0][3].value == ""
    assert session.selected_notes() == ["2", "6"]

    session.toggle_note_mode()
    assert session.selected_notes() == []


def test_edits_on_clues_report_no_change(session):
    session.select(0, 0)
    assert not session.input_digit("9")
    assert not session.erase_selected()
    assert session.board[0][0].value == "5"


def test_select_out_of_range_keeps_selection(session):
    session.select(4, 4)
    session.select(9, 9)
    assert session.selection == (4, 4)
    session.clear_selection()
    assert session.selection is None


def test_status_reports_conflicts_and_progress(session):
    session.select(0, 2)
    session.input_digit("5")
    status = session.status()
    assert status.conflicts == ["r1c1", "r1c3"]
    assert not status.completed
    assert status.progress == pytest.approx(100 / 51)
    assert status.elapsed == "00:00"


def test_clock_stops_for_good_once_solved(session, solution_grid):
    session.tick()
    session.tick()
    assert session.seconds_elapsed == 2
    solve(session, solution_grid)
    status = session.status()
    assert status.completed and status.correct
    assert status.progress == 100
    assert status.completed_digits == list("123456789")
    assert not session.timer_active
    session.tick()
    assert session.seconds_elapsed == 2
    assert session.to_game_record()["completed"] is True


def test_filled_but_wrong_keeps_clock_running(session, solution_grid):
    solve(session, solution_grid)
    session.select(0, 2)
    session.input_digit("1")
    status = session.status()
    assert status.completed and not status.correct
    assert session.timer_active


def test_solution_with_blanks_is_rejected(puzzle_grid):
    with pytest.raises(ValueError):
        PuzzleSession.from_puzzle(puzzle_grid, puzzle_grid)


def test_game_record_round_trip(session):
    session.select(0, 2)
    session.input_digit("4")
    session.toggle_note_mode()
    session.select(8, 0)
    session.input_digit("3")
    session.seconds_elapsed = 75
    record = session.to_game_record()
    assert record["puzzleSeed"] == "abc"
    assert len(record["board"]) == 81

    restored = PuzzleSession.from_game_record(
        record, {"puzzle": PUZZLE, "solution": SOLUTION, "difficulty": "easy"}, game_id="g1"
    )
    assert restored.board == session.board
    assert restored.solution == string_to_grid(SOLUTION)
    assert restored.seconds_elapsed == 75
    assert restored.game_id == "g1"
    assert restored.timer_active
