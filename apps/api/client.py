# client.py
# Thin HTTP client for the game service. Failures never raise: every call
# returns an ApiResult carrying either the JSON body or an error message.
#
# Usage:
#   client = PidokuClient("http://localhost:3001")
#   client.login("me@example.com", "secret")
#   seed = client.create_puzzle({...}).data["id"]

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class ApiResult:
    ok: bool
    data: dict = field(default_factory=dict)
    error: Optional[str] = None
    status: Optional[int] = None


class PidokuClient:
    def __init__(self, base_url: str = "", session: Any = None, timeout: float = 10.0, token: Optional[str] = None):
        # session: anything with requests.Session.request()'s signature (a TestClient works too)
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.token = token

    def _request(self, method: str, path: str, payload: Optional[dict] = None, auth: bool = False) -> ApiResult:
        headers = {}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as err:
            logger.warning("%s %s failed: %s", method, path, err)
            return ApiResult(ok=False, error=str(err))
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}
        if resp.status_code >= 400:
            error = body.get("error") or f"HTTP {resp.status_code}"
            logger.warning("%s %s -> %d: %s", method, path, resp.status_code, error)
            return ApiResult(ok=False, data=body, error=error, status=resp.status_code)
        return ApiResult(ok=True, data=body, status=resp.status_code)

    # --- auth --------------------------------------------------------------

    def _authenticate(self, path: str, email: str, password: str) -> ApiResult:
        result = self._request("POST", path, {"email": email, "password": password})
        if result.ok:
            self.token = result.data.get("idToken")
        return result

    def register(self, email: str, password: str) -> ApiResult:
        return self._authenticate("/api/register", email, password)

    def login(self, email: str, password: str) -> ApiResult:
        return self._authenticate("/api/login", email, password)

    def me(self) -> ApiResult:
        return self._request("GET", "/api/me", auth=True)

    # --- puzzles (public) --------------------------------------------------

    def create_puzzle(self, record: dict) -> ApiResult:
        return self._request("POST", "/api/puzzles", record)

    def get_puzzle(self, seed: str) -> ApiResult:
        return self._request("GET", f"/api/puzzles/{seed}")

    # --- games (protected) -------------------------------------------------

    def create_game(self, record: dict) -> ApiResult:
        return self._request("POST", "/api/games", record, auth=True)

    def get_game(self, game_id: str) -> ApiResult:
        return self._request("GET", f"/api/games/{game_id}", auth=True)

    def update_game(self, game_id: str, patch: dict) -> ApiResult:
        return self._request("PATCH", f"/api/games/{game_id}", patch, auth=True)

    def profile(self) -> ApiResult:
        return self._request("GET", "/api/profile", auth=True)

    # --- tools -------------------------------------------------------------

    def board_status(self, board: list, solution: str) -> ApiResult:
        return self._request("POST", "/api/boards/status", {"board": board, "solution": solution})
