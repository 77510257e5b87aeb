"""
storage.py: Key-value persistence layer for settings, best score and leaderboard.
"""

import logging
import sqlite3
from typing import Dict, Optional

from .constants import DB_FILE

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The backing store could not be read or written."""


class KeyValueStore:
    """String keys to string values. Implementations raise StorageError on failure."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str):
        raise NotImplementedError

    def delete(self, key: str):
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Dict-backed store for tests and headless runs."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str):
        self.data[key] = value

    def delete(self, key: str):
        self.data.pop(key, None)


class SQLiteStore(KeyValueStore):
    """Handles all interaction with the SQLite database."""

    def __init__(self, db_file: str = DB_FILE):
        try:
            self.conn = sqlite3.connect(db_file)
            self.cur = self.conn.cursor()
            self.setup()
        except sqlite3.Error as e:
            raise StorageError(f"cannot open {db_file}: {e}") from e

    def setup(self):
        """Creates the table if it doesn't exist."""
        self.cur.execute("""
            CREATE TABLE IF NOT EXISTS KeyValues (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def get(self, key: str) -> Optional[str]:
        try:
            self.cur.execute("SELECT value FROM KeyValues WHERE key=?", (key,))
            row = self.cur.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"read of {key!r} failed: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str):
        try:
            self.cur.execute(
                "INSERT INTO KeyValues (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value", (key, value))
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"write of {key!r} failed: {e}") from e

    def delete(self, key: str):
        try:
            self.cur.execute("DELETE FROM KeyValues WHERE key=?", (key,))
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"delete of {key!r} failed: {e}") from e

    def close(self):
        self.conn.close()
