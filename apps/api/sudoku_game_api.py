# sudoku_game_api.py
# FastAPI game service: auth, puzzle records (keyed by seed), per-user game
# records and a stateless board-status tool.
# Run with: python -m apps.api.sudoku_game_api --config config/pidoku.yaml
#      or: uvicorn apps.api.sudoku_game_api:app --reload

from __future__ import annotations

import argparse
import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.api.auth import AuthBackend, AuthError
from apps.api.documents import DocumentStore, NotFound, games_collection, server_timestamp
from apps.config import load_settings, setup_logging
from game.board_tools import conflict_cells, digit_counts, is_complete, is_correct, sanity_check
from game.codec import CodecError, expand_board, flatten_board, string_to_grid
from game.grid_core import rc_to_key
from game.progress import profile_summary, progress_percent
from game.puzzle_source import check_difficulty

logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    email: str
    password: str


class PuzzleModel(BaseModel):
    puzzle: str
    solution: str
    difficulty: str = "easy"


class CellModel(BaseModel):
    value: str = ""
    notes: list[str] = []
    fixed: bool = False


class NewGameRequest(BaseModel):
    puzzleSeed: str
    difficulty: str = "easy"
    board: list[CellModel]


class GamePatch(BaseModel):
    board: Optional[list[CellModel]] = None
    secondsElapsed: Optional[int] = None
    completed: Optional[bool] = None
    completedAt: Optional[bool] = None


class StatusRequest(BaseModel):
    board: list[CellModel]
    solution: str


def _checked_board(cells: list[CellModel]) -> list:
    """Decode then re-encode a posted board so only well-formed boards are stored."""
    return flatten_board(expand_board([c.model_dump() for c in cells]))


def create_app(settings=None, store: Optional[DocumentStore] = None, auth: Optional[AuthBackend] = None) -> FastAPI:
    settings = settings if settings is not None else load_settings()
    auth_cfg = settings.get("auth") or {}
    store = store if store is not None else DocumentStore()
    auth = auth if auth is not None else AuthBackend(
        token_bytes=auth_cfg.get("token_bytes", 32),
        iterations=auth_cfg.get("pbkdf2_iterations", 120_000),
    )

    app = FastAPI(title="Pidoku Game API")
    app.state.store = store
    app.state.auth = auth

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        problems = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
        return JSONResponse(status_code=422, content={"error": f"invalid request: {problems}"})

    @app.exception_handler(CodecError)
    async def codec_error(request: Request, exc: CodecError):
        return JSONResponse(status_code=422, content={"error": str(exc)})

    def current_uid(request: Request) -> str:
        header = request.headers.get("authorization", "")
        token = header[len("Bearer "):] if header.startswith("Bearer ") else None
        if not token:
            raise HTTPException(status_code=401, detail="Missing token")
        try:
            return auth.verify(token)
        except AuthError:
            raise HTTPException(status_code=401, detail="Invalid token")

    # --- public ------------------------------------------------------------

    @app.post("/api/login")
    def api_login(creds: Credentials):
        try:
            return {"idToken": auth.login(creds.email, creds.password)}
        except AuthError as err:
            raise HTTPException(status_code=400, detail=str(err))

    @app.post("/api/register")
    def api_register(creds: Credentials):
        try:
            token = auth.register(creds.email, creds.password)
        except AuthError as err:
            raise HTTPException(status_code=400, detail=str(err))
        logger.info("registered %s", creds.email)
        return {"idToken": token}

    @app.get("/api/puzzles/{seed}")
    def api_get_puzzle(seed: str):
        doc = store.get("puzzles", seed)
        if doc is None:
            raise HTTPException(status_code=404, detail="Not found")
        return doc

    @app.post("/api/puzzles")
    def api_create_puzzle(req: PuzzleModel):
        string_to_grid(req.puzzle)
        if "" in (v for row in string_to_grid(req.solution) for v in row):
            raise HTTPException(status_code=422, detail="solution must not contain blank cells")
        try:
            check_difficulty(req.difficulty)
        except ValueError as err:
            raise HTTPException(status_code=422, detail=str(err))
        seed = store.add("puzzles", req.model_dump())
        logger.info("puzzle %s stored (%s)", seed, req.difficulty)
        return {"id": seed}

    @app.post("/api/boards/status")
    def api_board_status(req: StatusRequest):
        board = expand_board([c.model_dump() for c in req.board])
        solution = string_to_grid(req.solution)
        return {
            "completed": is_complete(board),
            "correct": is_correct(board, solution),
            "conflicts": sorted(rc_to_key(r, c) for r, c in conflict_cells(board)),
            "issues": sanity_check(board)["issues"],
            "progress": progress_percent(board),
            "digitCounts": digit_counts(board),
        }

    # --- protected ---------------------------------------------------------

    @app.get("/api/profile")
    def api_profile(uid: str = Depends(current_uid)):
        games = store.list(games_collection(uid))
        return {"games": games, "summary": profile_summary(games)}

    @app.get("/api/games/{game_id}")
    def api_get_game(game_id: str, uid: str = Depends(current_uid)):
        doc = store.get(games_collection(uid), game_id)
        if doc is None:
            raise HTTPException(status_code=404, detail="Not found")
        return doc

    @app.post("/api/games")
    def api_create_game(req: NewGameRequest, uid: str = Depends(current_uid)):
        game_id = store.add(games_collection(uid), {
            "puzzleSeed": req.puzzleSeed,
            "difficulty": req.difficulty,
            "board": _checked_board(req.board),
            "secondsElapsed": 0,
            "completed": False,
        })
        logger.info("game %s created for %s on puzzle %s", game_id, uid, req.puzzleSeed)
        return {"id": game_id}

    @app.patch("/api/games/{game_id}")
    def api_update_game(game_id: str, patch: GamePatch, uid: str = Depends(current_uid)):
        data = patch.model_dump(exclude_none=True)
        if "board" in data:
            data["board"] = _checked_board(patch.board)
        if data.get("completedAt") is True:
            data["completedAt"] = server_timestamp()
        else:
            data.pop("completedAt", None)
        try:
            store.update(games_collection(uid), game_id, data)
        except NotFound:
            raise HTTPException(status_code=404, detail="Not found")
        logger.debug("game %s updated: %s", game_id, sorted(data))
        return {"ok": True}

    @app.get("/api/me")
    def api_me(uid: str = Depends(current_uid)):
        return {"uid": uid}

    return app


app = create_app()


def main(argv=None):
    import uvicorn

    ap = argparse.ArgumentParser(description="Run the Pidoku game service")
    ap.add_argument("--config", type=str, default=None)
    ap.add_argument("--host", type=str, default=None)
    ap.add_argument("--port", type=int, default=None)
    args = ap.parse_args(argv)
    settings = load_settings(args.config)
    setup_logging(settings)
    host = args.host or settings.server.host
    port = args.port or settings.server.port
    logger.info("serving on %s:%s", host, port)
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    main()
