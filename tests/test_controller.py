# tests/test_controller.py
import time

import pytest
from fastapi.testclient import TestClient

from conftest import PUZZLE, SOLUTION, FixedSource, fill_from
from apps.api.client import PidokuClient
from apps.api.sudoku_game_api import create_app
from game.codec import flatten_board
from game.controller import GameController


def play_to_the_end(controller, solution):
    status = None
    for r in range(9):
        for c in range(9):
            if not controller.session.board[r][c].fixed:
                controller.apply("select", r, c)
                status = controller.apply("digit", solution[r][c])
    return status


def wait_for(check, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not check():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


@pytest.fixture
def offline():
    controller = GameController(source=FixedSource(), start_clock=False)
    yield controller
    controller.close()


@pytest.fixture
def service():
    app = create_app(settings={"auth": {"pbkdf2_iterations": 1000}})
    return PidokuClient("", session=TestClient(app))


@pytest.fixture
def online(service):
    assert service.register("me@example.com", "secret1").ok
    controller = GameController(source=FixedSource(), client=service, start_clock=False)
    yield controller
    controller.close()


def test_offline_game(offline, solution_grid):
    result = offline.new_game("medium")
    assert result.ok and result.error is None
    assert result.session.seed is None
    assert offline.source.calls == ["medium"]

    offline.apply("select", 0, 2)
    status = offline.apply("digit", "5")
    assert status.conflicts == ["r1c1", "r1c3"]
    offline.apply("erase")
    status = play_to_the_end(offline, solution_grid)
    assert status.correct
    assert not offline.session.timer_active


def test_apply_checks_its_input(offline):
    with pytest.raises(RuntimeError):
        offline.apply("select", 0, 0)
    offline.new_game()
    with pytest.raises(ValueError):
        offline.apply("undo")


def test_offline_controller_cannot_load_by_seed(offline):
    assert offline.load_puzzle("abc").error == "no game service configured"


def test_new_game_is_saved_and_autosaved(online, service, solution_grid):
    result = online.new_game("easy")
    session = result.session
    assert result.error is None
    assert session.seed and session.game_id

    online.apply("select", 0, 2)
    online.apply("digit", "4")
    online.flush(timeout=5)
    saved = service.get_game(session.game_id).data
    assert saved["board"][2]["value"] == "4"
    assert saved["completed"] is False

    play_to_the_end(online, solution_grid)
    online.flush(timeout=5)
    saved = service.get_game(session.game_id).data
    assert saved["completed"] is True
    assert saved["completedAt"]
    assert session.recorded


def test_new_game_without_login_still_plays(service):
    controller = GameController(source=FixedSource(), client=service, start_clock=False)
    try:
        result = controller.new_game()
        assert result.ok
        assert result.session.seed
        assert result.session.game_id is None
        assert "Missing token" in result.error
    finally:
        controller.close()


def test_load_puzzle_by_seed(online, service):
    seed = service.create_puzzle({"puzzle": PUZZLE, "solution": SOLUTION, "difficulty": "hard"}).data["id"]
    result = online.load_puzzle(seed)
    assert result.ok
    assert result.session.seed == seed
    assert result.session.difficulty == "hard"
    assert result.session.game_id

    missing = online.load_puzzle("missing")
    assert not missing.ok
    assert missing.error == "Not found"
    assert online.session is result.session


def test_resume_game_restores_board_and_time(online, service):
    first = online.new_game().session
    online.apply("select", 0, 2)
    online.apply("digit", "4")
    first.seconds_elapsed = 30
    online.flush(timeout=5)

    online.new_game()
    resumed = online.resume_game(first.game_id)
    assert resumed.ok
    assert resumed.session.board == first.board
    assert resumed.session.seconds_elapsed == 30
    assert resumed.session.game_id == first.game_id

    assert online.resume_game("missing").error == "Not found"


def test_replacing_the_session_abandons_old_saves(online):
    online.new_game()
    generation = online._saver.generation
    online.new_game()
    assert online._saver.generation == generation + 1


def test_resume_sends_a_missing_completion(online, service, solution_grid):
    session = online.new_game().session
    solved = fill_from(session.board, solution_grid)
    assert service.update_game(session.game_id, {"board": flatten_board(solved), "secondsElapsed": 42}).ok
    assert service.get_game(session.game_id).data["completed"] is False

    resumed = online.resume_game(session.game_id).session
    assert resumed.finished and resumed.recorded
    # saves run in order, so this one finishes after the completion patch
    online._saver.submit(lambda: None).result(timeout=5)
    saved = service.get_game(session.game_id).data
    assert saved["completed"] is True
    assert saved["completedAt"]
    assert saved["secondsElapsed"] == 42


@pytest.fixture
def ticking():
    controller = GameController(source=FixedSource(), tick_seconds=0.01)
    yield controller
    controller.close()


def test_new_session_freezes_the_old_clock(ticking):
    old = ticking.new_game().session
    assert wait_for(lambda: old.seconds_elapsed >= 3)
    new = ticking.new_game().session
    frozen = old.seconds_elapsed
    assert wait_for(lambda: new.seconds_elapsed >= 3)
    assert old.seconds_elapsed == frozen
    assert not old.finished


def test_clock_stops_for_good_once_solved(ticking, solution_grid):
    session = ticking.new_game().session
    assert wait_for(lambda: session.seconds_elapsed >= 2)
    assert play_to_the_end(ticking, solution_grid).correct
    stopped_at = session.seconds_elapsed
    time.sleep(0.1)
    assert session.seconds_elapsed == stopped_at
    assert ticking._clock is None or not ticking._clock.running


def test_clock_autosaves_every_few_seconds(service):
    assert service.register("me@example.com", "secret1").ok
    controller = GameController(source=FixedSource(), client=service, tick_seconds=0.01, autosave_every=5)
    try:
        session = controller.new_game().session
        assert session.game_id
        assert wait_for(lambda: service.get_game(session.game_id).data["secondsElapsed"] >= 5)
    finally:
        controller.close()
