"""SQLite-based state persistence for GrociSmart.

The state document is kept in a small key-value table, so the SQLite backend
stores exactly what the JSON backend stores.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from .data_store import STATE_KEY, PersistenceError, state_from_document, state_to_document
from .models import AppState

logger = logging.getLogger(__name__)


class SQLiteStateStore:
    """Manages SQLite persistence for the application state."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Path | None = None, key: str = STATE_KEY):
        """Initialize SQLite store.

        Args:
            db_path: Path to the SQLite database file. Defaults to ./data/grocismart.db
            key: Key the state document is stored under
        """
        if db_path is None:
            db_path = Path.cwd() / "data" / "grocismart.db"
        self.db_path = db_path
        self.key = key
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize database schema if not exists."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                );

                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
            """)
            conn.execute(
                "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    def load(self) -> AppState | None:
        """Load the persisted state.

        Returns:
            AppState, or None if nothing has been saved yet

        Raises:
            PersistenceError: If the stored document is unreadable or corrupt
        """
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (self.key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read {self.db_path}: {e}") from e

        if row is None:
            return None

        try:
            data = json.loads(row["value"])
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt state document in {self.db_path}: {e}") from e

        return state_from_document(data)

    def save(self, state: AppState) -> None:
        """Replace the persisted state with ``state``."""
        value = json.dumps(state_to_document(state))
        try:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (self.key, value, datetime.now().isoformat()),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not write {self.db_path}: {e}") from e

        logger.debug("state_saved", extra={"db_path": str(self.db_path)})
