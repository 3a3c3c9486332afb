from __future__ import annotations

import os
import sqlite3
from datetime import datetime
from typing import Dict, Optional

from chocoblitz.config import settings

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema.sql")


def _connect(db_path: str) -> sqlite3.Connection:
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Optional[str] = None) -> None:
    conn = _connect(db_path or settings.db_path)
    try:
        with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
            conn.executescript(f.read())
        conn.commit()
    finally:
        conn.close()


class SqliteStorage:
    """Key-value store kept in a single sqlite table.

    Values are plain strings; callers serialize JSON themselves. Every
    write overwrites the previous value, there is no history.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or settings.db_path
        init_db(self.db_path)

    def get(self, key: str) -> Optional[str]:
        conn = _connect(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        updated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        conn = _connect(self.db_path)
        try:
            conn.execute(
                "INSERT INTO kv_store(key, value, updated_at) VALUES(?,?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (key, value, updated_at),
            )
            conn.commit()
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        conn = _connect(self.db_path)
        try:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


class MemoryStorage:
    """Same contract as SqliteStorage, kept in a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return sorted(self._data)
