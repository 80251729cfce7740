"""Game controller: owns the active session, its clock and background saves, and talks to the persistence client."""

# controller.py
# One session at a time. Replacing it (new game, load by seed, resume) stops
# the old clock and abandons its pending saves before the new session is
# installed. With no client the game runs offline and persistence is skipped.
# Collaborator failures come back as GameResult.error; they never break play.

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from .autosave import AutoSaver, GameClock
from .codec import CodecError, flatten_board, grid_to_string, string_to_grid
from .progress import newly_completed_digits
from .puzzle_source import PuzzleSource, RandomPuzzleSource, check_difficulty
from .session import PuzzleSession, SessionStatus

logger = logging.getLogger(__name__)

ACTIONS = ("select", "digit", "erase", "note_mode")


@dataclass
class GameResult:
    session: Optional[PuzzleSession] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.session is not None


class GameController:
    def __init__(
        self,
        source: Optional[PuzzleSource] = None,
        client: Any = None,
        tick_seconds: float = 1.0,
        autosave_every: int = 30,
        start_clock: bool = True,
    ):
        self.source = source if source is not None else RandomPuzzleSource()
        self.client = client
        self.tick_seconds = tick_seconds
        self.autosave_every = autosave_every
        self.start_clock = start_clock
        self.session: Optional[PuzzleSession] = None
        self.last_completed_digits: set = set()
        self._lock = threading.RLock()
        self._saver = AutoSaver()
        self._clock: Optional[GameClock] = None

    # --- session lifecycle -------------------------------------------------

    def _install(self, session: PuzzleSession) -> None:
        old_clock = self._clock
        if old_clock is not None:
            old_clock.stop()
        with self._lock:
            self._saver.abandon()
            self.session = session
            self.last_completed_digits = set()
            self._clock = None
            if self.start_clock and session.timer_active:
                self._clock = GameClock(lambda: self._tick(session), self.tick_seconds)
                self._clock.start()
        logger.info("session started: seed=%s game=%s difficulty=%s", session.seed, session.game_id, session.difficulty)

    def new_game(self, difficulty: str = "easy") -> GameResult:
        check_difficulty(difficulty)
        pair = self.source.generate(difficulty)
        session = PuzzleSession.from_puzzle(pair["puzzle"], pair["solution"], difficulty=difficulty)
        error = None
        if self.client is not None:
            res = self.client.create_puzzle({
                "puzzle": grid_to_string(pair["puzzle"]),
                "solution": grid_to_string(pair["solution"]),
                "difficulty": difficulty,
            })
            if res.ok:
                session.seed = res.data.get("id")
                error = self._create_game_record(session)
            else:
                error = f"puzzle not saved: {res.error}"
        self._install(session)
        return GameResult(session=session, error=error)

    def load_puzzle(self, seed: str) -> GameResult:
        """Start a fresh game on a shared puzzle."""
        if self.client is None:
            return GameResult(error="no game service configured")
        res = self.client.get_puzzle(seed)
        if not res.ok:
            return GameResult(error=res.error)
        try:
            puzzle = string_to_grid(res.data["puzzle"])
            solution = string_to_grid(res.data["solution"])
            session = PuzzleSession.from_puzzle(puzzle, solution, seed=seed, difficulty=res.data.get("difficulty", "easy"))
        except (KeyError, ValueError) as err:
            logger.warning("puzzle %s is unreadable: %s", seed, err)
            return GameResult(error=f"puzzle {seed} is unreadable: {err}")
        error = self._create_game_record(session)
        self._install(session)
        return GameResult(session=session, error=error)

    def resume_game(self, game_id: str) -> GameResult:
        if self.client is None:
            return GameResult(error="no game service configured")
        game = self.client.get_game(game_id)
        if not game.ok:
            return GameResult(error=game.error)
        seed = game.data.get("puzzleSeed")
        puzzle = self.client.get_puzzle(seed) if seed else None
        if puzzle is None or not puzzle.ok:
            return GameResult(error=f"puzzle for game {game_id} not found")
        try:
            session = PuzzleSession.from_game_record(game.data, puzzle.data, game_id=game_id)
        except (KeyError, CodecError, ValueError) as err:
            logger.warning("game %s is unreadable: %s", game_id, err)
            return GameResult(error=f"game {game_id} is unreadable: {err}")
        self._install(session)
        if session.finished and not session.recorded:
            # solved board whose completion patch never reached the store
            with self._lock:
                self._schedule_save(session)
        return GameResult(session=session)

    def _create_game_record(self, session: PuzzleSession) -> Optional[str]:
        if self.client is None or session.seed is None:
            return None
        res = self.client.create_game({
            "puzzleSeed": session.seed,
            "difficulty": session.difficulty,
            "board": flatten_board(session.board),
        })
        if not res.ok:
            return f"game not saved: {res.error}"
        session.game_id = res.data.get("id")
        return None

    # --- play --------------------------------------------------------------

    def apply(self, action: str, *args) -> SessionStatus:
        if action not in ACTIONS:
            raise ValueError(f"unknown action {action!r}")
        with self._lock:
            session = self.session
            if session is None:
                raise RuntimeError("no active game")
            before = session.board
            changed = False
            if action == "select":
                session.select(*args)
            elif action == "digit":
                changed = session.input_digit(*args)
            elif action == "erase":
                changed = session.erase_selected()
            else:
                session.toggle_note_mode()
            status = session.status()
            self.last_completed_digits = newly_completed_digits(before, session.board)
            if changed:
                self._schedule_save(session)
            clock = self._clock if session.finished else None
        if clock is not None:
            clock.stop()
        return status

    def _tick(self, session: PuzzleSession) -> None:
        with self._lock:
            if session is not self.session or not session.timer_active:
                return
            session.tick()
            if self.autosave_every and session.seconds_elapsed % self.autosave_every == 0:
                self._schedule_save(session)

    # --- persistence -------------------------------------------------------

    def _schedule_save(self, session: PuzzleSession):
        if self.client is None or session.game_id is None:
            return None
        patch = {"board": flatten_board(session.board), "secondsElapsed": session.seconds_elapsed}
        if session.finished and not session.recorded:
            patch["completed"] = True
            patch["completedAt"] = True
            session.recorded = True
        game_id = session.game_id
        logger.debug("saving game %s (%ds)", game_id, session.seconds_elapsed)
        return self._saver.submit(lambda: self.client.update_game(game_id, patch), on_done=self._saved)

    @staticmethod
    def _saved(result) -> None:
        if not result.ok:
            logger.warning("autosave failed: %s", result.error)

    def flush(self, timeout: Optional[float] = None):
        """Save the current board now and wait for the store to answer."""
        with self._lock:
            future = self._schedule_save(self.session) if self.session is not None else None
        return future.result(timeout=timeout) if future is not None else None

    def close(self) -> None:
        if self._clock is not None:
            self._clock.stop()
        self._saver.shutdown(wait=True)
        logger.info("controller closed")
