# documents.py
# In-memory document store with the shape the game service needs:
# top-level collections ('puzzles') and per-user sub-collections
# ('users/<uid>/games'). Ids are opaque random strings. Thread-safe, since
# FastAPI runs sync endpoints on a thread pool.

from __future__ import annotations

import copy
import secrets
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class NotFound(KeyError):
    """No document with that id in that collection."""


def server_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentStore:
    def __init__(self):
        self._collections: Dict[str, Dict[str, dict]] = {}
        self._lock = threading.Lock()
        self._seq = 0

    def add(self, collection: str, data: dict) -> str:
        doc_id = secrets.token_urlsafe(12)
        with self._lock:
            self._seq += 1
            doc = copy.deepcopy(data)
            doc.setdefault("createdAt", server_timestamp())
            doc["_seq"] = self._seq
            self._collections.setdefault(collection, {})[doc_id] = doc
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return _public(doc) if doc is not None else None

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                raise NotFound(f"{collection}/{doc_id}")
            doc.update(copy.deepcopy(fields))

    def list(self, collection: str, newest_first: bool = True) -> List[dict]:
        """Documents of a collection with their ids, ordered by creation."""
        with self._lock:
            docs = sorted(self._collections.get(collection, {}).items(), key=lambda kv: kv[1]["_seq"], reverse=newest_first)
            return [{"id": doc_id, **_public(doc)} for doc_id, doc in docs]


def _public(doc: dict) -> dict:
    return {k: copy.deepcopy(v) for k, v in doc.items() if not k.startswith("_")}


def games_collection(uid: str) -> str:
    return f"users/{uid}/games"
