# auth.py
# Stand-in for the external auth provider: register/login hand out opaque
# bearer tokens, verify() maps a token back to a stable uid.

from __future__ import annotations

import hashlib
import hmac
import secrets
import threading
import uuid
from dataclasses import dataclass


class AuthError(Exception):
    """Rejected credentials or token. The message is safe to show to users."""


@dataclass
class _Account:
    uid: str
    salt: bytes
    digest: bytes


class AuthBackend:
    def __init__(self, token_bytes: int = 32, iterations: int = 120_000):
        self.token_bytes = token_bytes
        self.iterations = iterations
        self._accounts: dict[str, _Account] = {}
        self._tokens: dict[str, str] = {}
        self._lock = threading.Lock()

    def _hash(self, password: str, salt: bytes) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, self.iterations)

    def _issue(self, uid: str) -> str:
        token = secrets.token_urlsafe(self.token_bytes)
        self._tokens[token] = uid
        return token

    def register(self, email: str, password: str) -> str:
        email = (email or "").strip().lower()
        if "@" not in email:
            raise AuthError("INVALID_EMAIL")
        if not password or len(password) < 6:
            raise AuthError("WEAK_PASSWORD : Password should be at least 6 characters")
        salt = secrets.token_bytes(16)
        with self._lock:
            if email in self._accounts:
                raise AuthError("EMAIL_EXISTS")
            account = _Account(uid=uuid.uuid4().hex, salt=salt, digest=self._hash(password, salt))
            self._accounts[email] = account
            return self._issue(account.uid)

    def login(self, email: str, password: str) -> str:
        email = (email or "").strip().lower()
        with self._lock:
            account = self._accounts.get(email)
        if account is None or not hmac.compare_digest(account.digest, self._hash(password or "", account.salt)):
            raise AuthError("INVALID_LOGIN_CREDENTIALS")
        with self._lock:
            return self._issue(account.uid)

    def verify(self, token: str) -> str:
        with self._lock:
            uid = self._tokens.get(token)
        if uid is None:
            raise AuthError("Invalid token")
        return uid
