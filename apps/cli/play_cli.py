"""Terminal front-end: play a puzzle from the keyboard, optionally saving to the game service."""

# play_cli.py
# - Generates (or loads by seed / resumes) a puzzle
# - Reads one command per line and applies it to the session
# - Prints the board with the selection and conflicts marked
#
# Usage:
#   python -m apps.cli.play_cli --difficulty medium --seed 123
#   python -m apps.cli.play_cli --api http://127.0.0.1:3001 --email me@example.com --password secret
#
# Commands: 's R C' select (1-based), '1'..'9' enter digit, 'n' note mode,
#           'x' erase, '?' status, 'new [difficulty]', 'q' quit

import argparse
import logging

from apps.api.client import PidokuClient
from apps.config import load_settings, setup_logging
from game.board_tools import conflict_cells
from game.controller import GameController
from game.puzzle_source import DIFFICULTIES, RandomPuzzleSource
from types_sudoku import DIGITS

logger = logging.getLogger(__name__)

HELP = "s R C = select, 1-9 = digit, n = note mode, x = erase, ? = status, new [difficulty], q = quit"


def _token(value: str, selected: bool, conflict: bool) -> str:
    ch = value or "."
    if selected:
        return f"[{ch}]"
    if conflict:
        return f"!{ch}!"
    return f" {ch} "


def render_board(board, selection=None, conflicts=None) -> str:
    """Text rendering of a board: 9 rows plus two box separators."""
    if conflicts is None:
        conflicts = conflict_cells(board)
    lines = []
    for r, row in enumerate(board):
        if r in (3, 6):
            lines.append("+".join(["-" * 9] * 3))
        groups = []
        for b in range(3):
            groups.append("".join(
                _token(row[c].value, selection == (r, c), (r, c) in conflicts) for c in range(3 * b, 3 * b + 3)
            ))
        lines.append("|".join(groups))
    return "\n".join(lines)


def parse_command(line: str):
    """Turn one input line into (action, args). Raises ValueError on anything unrecognised."""
    parts = line.strip().split()
    if not parts:
        raise ValueError("empty command")
    head = parts[0].lower()
    if head == "s" and len(parts) == 3:
        return "select", (int(parts[1]) - 1, int(parts[2]) - 1)
    if head in DIGITS and len(parts) == 1:
        return "digit", (head,)
    if head == "n":
        return "note_mode", ()
    if head == "x":
        return "erase", ()
    if head == "?":
        return "status", ()
    if head == "new":
        difficulty = parts[1] if len(parts) > 1 else None
        if difficulty is not None and difficulty not in DIFFICULTIES:
            raise ValueError(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
        return "new", (difficulty,)
    if head == "q":
        return "quit", ()
    raise ValueError(f"unknown command {line.strip()!r}")


def _connect(args, settings):
    if not args.api:
        return None
    client = PidokuClient(args.api, timeout=settings.api.timeout)
    if args.email:
        res = client.login(args.email, args.password or "")
        if not res.ok:
            res = client.register(args.email, args.password or "")
        if not res.ok:
            logger.warning("signed out, games will not be saved: %s", res.error)
    return client


def _show(controller: GameController, status=None):
    session = controller.session
    status = status or session.status()
    print(render_board(session.board, session.selection))
    mode = "notes" if session.note_mode else "values"
    print(f"time {status.elapsed}  progress {status.progress:.0f}%  mode {mode}  seed {session.seed or '-'}")
    if session.selected_notes():
        print("notes here: " + " ".join(session.selected_notes()))
    if controller.last_completed_digits:
        print("all nine placed: " + " ".join(sorted(controller.last_completed_digits)))
    if status.completed:
        print("You solved it!" if status.correct else "Puzzle is filled, but something's wrong!")


def main(args):
    settings = load_settings(args.config)
    setup_logging(settings, args.log_level)
    client = _connect(args, settings)
    controller = GameController(
        source=RandomPuzzleSource(args.seed),
        client=client,
        tick_seconds=settings.game.tick_seconds,
        autosave_every=settings.game.autosave_every,
    )
    difficulty = args.difficulty or settings.game.default_difficulty
    if args.game:
        result = controller.resume_game(args.game)
    elif args.puzzle:
        result = controller.load_puzzle(args.puzzle)
    else:
        result = controller.new_game(difficulty)
    if result.error:
        print(f"warning: {result.error}")
    if not result.ok:
        result = controller.new_game(difficulty)
    print(HELP)
    _show(controller)
    try:
        while True:
            try:
                line = input("> ")
            except EOFError:
                break
            try:
                action, params = parse_command(line)
            except ValueError as err:
                print(f"{err}. {HELP}")
                continue
            if action == "quit":
                break
            if action == "new":
                result = controller.new_game(params[0] or difficulty)
                if result.error:
                    print(f"warning: {result.error}")
                _show(controller)
                continue
            if action == "status":
                print(controller.session.status().to_dict())
                continue
            _show(controller, controller.apply(action, *params))
    finally:
        controller.flush(timeout=settings.api.timeout)
        controller.close()


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--difficulty", type=str, default=None, choices=list(DIFFICULTIES))
    ap.add_argument("--seed", type=int, default=None, help="RNG seed for the puzzle generator")
    ap.add_argument("--config", type=str, default=None)
    ap.add_argument("--api", type=str, default=None, help="game service base URL; offline when omitted")
    ap.add_argument("--email", type=str, default=None)
    ap.add_argument("--password", type=str, default=None)
    ap.add_argument("--puzzle", type=str, default=None, help="start a new game on a saved puzzle seed")
    ap.add_argument("--game", type=str, default=None, help="resume a saved game id")
    ap.add_argument("--log_level", type=str, default=None)
    args = ap.parse_args()
    main(args)
