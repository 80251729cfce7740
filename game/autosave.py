"""Background helpers for a running game: the one-second clock and fire-and-forget saves."""

# autosave.py
# Saves run on a single worker thread. Each save is tagged with the generation
# it was scheduled under; abandon() moves to a new generation so results from
# an old session are dropped. Overlapping saves are not reordered or merged:
# whatever reaches the store last wins.

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class GameClock:
    def __init__(self, on_tick: Callable[[], None], tick_seconds: float = 1.0):
        self._on_tick = on_tick
        self._tick_seconds = tick_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="game-clock", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self._tick_seconds):
            self._on_tick()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._tick_seconds * 2)
        self._thread = None


class AutoSaver:
    def __init__(self):
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="autosave")
        self._lock = threading.Lock()
        self._generation = 0
        self.discarded = 0

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, save: Callable[[], object], on_done: Optional[Callable[[object], None]] = None) -> Future:
        """Schedule save() in the background. on_done(result) only runs if the session is still current."""
        with self._lock:
            generation = self._generation

        def run():
            with self._lock:
                if generation != self._generation:
                    self.discarded += 1
                    logger.debug("skipping save from abandoned generation %d", generation)
                    return None
            try:
                result = save()
            except Exception:
                logger.exception("save from generation %d failed", generation)
                return None
            with self._lock:
                stale = generation != self._generation
                if stale:
                    self.discarded += 1
            if stale:
                logger.warning("discarding save result from abandoned generation %d", generation)
                return None
            if on_done is not None:
                on_done(result)
            return result

        return self._pool.submit(run)

    def abandon(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def shutdown(self, wait: bool = True) -> None:
        self.abandon()
        self._pool.shutdown(wait=wait)
