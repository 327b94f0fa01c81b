from __future__ import annotations

import os
import sqlite3
from datetime import datetime, timezone
from typing import Dict, Optional

HIGH_SCORE_KEY = 'highScore'
DIFFICULTY_KEY = 'difficultyLevel'
SOUND_MUTED_KEY = 'soundMuted'


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _resolve_db_path(db_path: str) -> str:
    """Resolves a potentially unwritable DB path to a writable one, creating the directory if needed."""
    try:
        _ensure_db_dir(db_path)
        return db_path
    except PermissionError:
        pass
    candidates = [
        os.getenv('MEMORY_DB_DIR'),
        os.path.join(os.getcwd(), 'data'),
        '/tmp',
    ]
    base = os.path.basename(db_path) or 'memory.db'
    for d in candidates:
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
            return os.path.join(d, base)
        except OSError:
            continue
    return base


class KeyValueStore:
    """Typed accessors over a string key/value store.

    Subclasses implement `_read` and `_write`. Values that fail to parse read
    back as the caller's default, the same as a missing key.
    """

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._read(key)
        return default if value is None else value

    def set_string(self, key: str, value: str) -> None:
        self._write(key, str(value))

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._read(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def set_int(self, key: str, value: int) -> None:
        self._write(key, str(int(value)))

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._read(key)
        if value is None:
            return default
        lowered = value.strip().lower()
        if lowered in ('true', '1'):
            return True
        if lowered in ('false', '0'):
            return False
        return default

    def set_bool(self, key: str, value: bool) -> None:
        self._write(key, 'true' if value else 'false')


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store; nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def _read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _write(self, key: str, value: str) -> None:
        self.data[key] = value


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the settings table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


class SqliteKeyValueStore(KeyValueStore):
    """Durable store backed by one SQLite table; opens a connection per call."""

    def __init__(self, db_path: str) -> None:
        self.db_path = _resolve_db_path(db_path)

    def _connect(self) -> sqlite3.Connection:
        _ensure_db_dir(self.db_path)
        conn = sqlite3.connect(self.db_path)
        _ensure_db(conn)
        return conn

    def _read(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def _write(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, datetime.now(timezone.utc).isoformat(timespec='seconds')),
            )
            conn.commit()
        finally:
            conn.close()
