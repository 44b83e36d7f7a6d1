"""
Per-user recent search terms.

The store is created once at startup, loaded from its backend, and persisted
back after every change. Backends only move a plain ``{user_key: [terms]}``
mapping, so tests can swap in ``InMemoryBackend``.
"""
import json
import logging
import threading
from pathlib import Path

from fastapi import Request

from myblog.config import settings

logger = logging.getLogger("uvicorn.error")


class InMemoryBackend:
    def __init__(self, data: dict | None = None):
        self.data = data or {}

    def read(self) -> dict:
        return json.loads(json.dumps(self.data))

    def write(self, data: dict):
        self.data = json.loads(json.dumps(data))


class JsonFileBackend:
    def __init__(self, path: str):
        self.path = Path(path)

    def read(self) -> dict:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8"))

    def write(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)


def _clean_terms(raw, limit: int) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [t for t in raw if isinstance(t, str)][:limit]


class RecentSearchStore:
    def __init__(self, backend, max_items: int | None = None):
        self.backend = backend
        self.max_items = max_items or settings.MAX_RECENT_SEARCHES
        self._data: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def load(self):
        """Read persisted terms; anything malformed loads as empty."""
        try:
            raw = self.backend.read()
        except (OSError, ValueError) as e:
            logger.warning(f"Recent searches unreadable, starting empty: {e}")
            raw = {}

        if not isinstance(raw, dict):
            raw = {}

        with self._lock:
            self._data = {
                str(key): _clean_terms(terms, self.max_items)
                for key, terms in raw.items()
            }

    def get(self, user_key: str) -> list[str]:
        with self._lock:
            return list(self._data.get(user_key, []))

    def add(self, user_key: str, query: str) -> list[str]:
        """Newest first, no duplicates, capped at max_items."""
        term = query.strip()
        if not term:
            return self.get(user_key)

        with self._lock:
            terms = [t for t in self._data.get(user_key, []) if t != term]
            terms.insert(0, term)
            self._data[user_key] = terms[:self.max_items]
            self._persist()
            return list(self._data[user_key])

    def remove(self, user_key: str, term: str) -> list[str]:
        with self._lock:
            terms = [t for t in self._data.get(user_key, []) if t != term]
            self._data[user_key] = terms
            self._persist()
            return list(terms)

    def clear(self, user_key: str):
        with self._lock:
            self._data.pop(user_key, None)
            self._persist()

    def _persist(self):
        self.backend.write(self._data)


def create_recent_search_store() -> RecentSearchStore:
    store = RecentSearchStore(JsonFileBackend(settings.RECENT_SEARCH_PATH))
    store.load()
    return store


def get_recent_search_store(request: Request) -> RecentSearchStore:
    return request.app.state.recent_searches
