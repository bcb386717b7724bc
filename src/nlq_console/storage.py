"""Key-value storage backends for session and durable state."""

from __future__ import annotations

import json
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class Storage(ABC):
    """String key-value store with JSON helpers.

    Session state (uploaded datasets) and durable state (query history) are
    both accessed through this interface so callers never touch a concrete
    backend directly.
    """

    @abstractmethod
    def load(self, key: str) -> str | None:
        """Return the raw stored value, or None when the key is absent."""

    @abstractmethod
    def save(self, key: str, value: str) -> None:
        """Store a raw value, replacing any previous one."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""

    def load_json(self, key: str) -> Any:
        """Decode a stored JSON value.

        Raises:
            ValueError: the stored text is not valid JSON.
        """
        raw = self.load(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save_json(self, key: str, value: Any) -> None:
        self.save(key, json.dumps(value, ensure_ascii=False, default=str))


class InMemoryStorage(Storage):
    """Process-lifetime storage; used as the session scope."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def load(self, key: str) -> str | None:
        return self._values.get(key)

    def save(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()


class SqliteStorage(Storage):
    """Durable storage in a local SQLite ``kv`` table."""

    def __init__(self, path: str | Path = "nlq_console.db") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        _ensure_kv_table(self.path)

    def load(self, key: str) -> str | None:
        with sqlite3.connect(self.path) as conn:
            cur = conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
        return row[0] if row else None

    def save(self, key: str, value: str) -> None:
        with sqlite3.connect(self.path) as conn:
            conn.execute(
                "INSERT INTO kv(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with sqlite3.connect(self.path) as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()


def _ensure_kv_table(db_path: Path) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        conn.commit()
