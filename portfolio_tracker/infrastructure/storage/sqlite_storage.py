"""SQLite implementation of the local key-value storage."""
import os
import sqlite3
from contextlib import contextmanager
from typing import Optional

from ...domain.repositories.key_value_storage import IKeyValueStorage
from ...shared.exceptions.storage import StorageError
from ...shared.logging import get_logger


class SqliteKeyValueStorage(IKeyValueStorage):
    """Key-value storage kept in a single SQLite table."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.logger = get_logger(__name__)
        self._ensure_tables()

    def _ensure_tables(self):
        """Create the storage table if it doesn't exist."""
        db_dir = os.path.dirname(self.db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS local_storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
            """)

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper cleanup.

        sqlite3 errors are re-raised as ``StorageError``.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open storage: {e}", {'path': self.db_path}) from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Storage operation failed: {e}", {'path': self.db_path}) from e
        finally:
            conn.close()

    def get_item(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM local_storage WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO local_storage (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
            ''', (key, value))
        self.logger.debug(f"Stored {len(value)} bytes under '{key}'")

    def remove_item(self, key: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
