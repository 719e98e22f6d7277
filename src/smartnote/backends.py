"""
Key-value persistence backends for Smart Note.

The note store only needs two operations against one fixed key:
get_string and set_string. Both are async; blocking file and SQLite I/O
runs in a worker thread so callers on an event loop are never stalled.
"""

import asyncio
import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from smartnote.config import BACKENDS, get_db_path, get_prefs_path
from smartnote.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """Async string key-value store."""

    @abstractmethod
    async def get_string(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    async def set_string(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    def describe(self) -> str:
        """Human readable location, for health reports."""
        return type(self).__name__


class MemoryBackend(KeyValueBackend):
    """Dict-backed store. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get_string(self, key: str) -> str | None:
        return self.data.get(key)

    async def set_string(self, key: str, value: str) -> None:
        self.data[key] = value

    def describe(self) -> str:
        return "memory"


def atomic_write_text(path: Path, text: str) -> None:
    """Write to a temp file in the same directory, then os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class JsonFileBackend(KeyValueBackend):
    """
    Preferences-style file: one JSON object mapping keys to strings.

    Every write rewrites the whole file atomically, so readers see either
    the old or the new content, never a partial file.
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path else get_prefs_path()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Preferences file is not valid JSON: {self.path}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Preferences file root is not an object: {self.path}")
        return data

    def _get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise StorageError(f"Value under {key!r} is not a string")
        return value

    def _set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        atomic_write_text(self.path, json.dumps(data, ensure_ascii=False, indent=2))

    async def get_string(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._get, key)
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

    async def set_string(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._set, key, value)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e
        logger.debug("Wrote %d chars under %s to %s", len(value), key, self.path)

    def describe(self) -> str:
        return str(self.path)


SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL                -- ISO 8601
);
"""


class SqliteBackend(KeyValueBackend):
    """SQLite key-value table."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = Path(db_path) if db_path else get_db_path()
        self._ready = False

    def _ensure_db(self) -> None:
        """Ensure database exists and schema is current."""
        if self._ready:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
        self._ready = True

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _get(self, key: str) -> str | None:
        self._ensure_db()
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str) -> None:
        self._ensure_db()
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, now),
            )

    async def get_string(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._get, key)
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Failed to read {self.db_path}: {e}") from e

    async def set_string(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._set, key, value)
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Failed to write {self.db_path}: {e}") from e
        logger.debug("Wrote %d chars under %s to %s", len(value), key, self.db_path)

    def describe(self) -> str:
        return str(self.db_path)


def make_backend(config: dict[str, Any]) -> KeyValueBackend:
    """Build the backend named in the [storage] section."""
    name = config.get("storage", {}).get("backend", "json")
    if name == "json":
        return JsonFileBackend()
    if name == "sqlite":
        return SqliteBackend()
    if name == "memory":
        return MemoryBackend()
    raise ValueError(f"Unknown storage backend: {name!r} (expected one of {', '.join(BACKENDS)})")
