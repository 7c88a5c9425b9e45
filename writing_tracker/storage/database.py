"""Simple SQLite storage for the plugin settings blob."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from writing_tracker.goals.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class SettingsDatabase:
    """Stores one opaque JSON settings blob per plugin id."""

    def __init__(self, db_path: str = "data/writing_tracker.db", plugin_id: str = "writing-tracker"):
        """Initialize database."""
        self.db_path = Path(db_path)
        self.plugin_id = plugin_id
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create database tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS plugin_data (
                    plugin_id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        logger.info(f"Settings database initialized at {self.db_path}")

    def load_settings(self) -> dict:
        """
        Load the settings blob.

        Returns:
            The stored blob, or an empty dict if nothing was saved yet

        Raises:
            PersistenceFailure: If the database cannot be read
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.row_factory = sqlite3.Row
                cursor = conn.execute(
                    "SELECT data FROM plugin_data WHERE plugin_id = ?", (self.plugin_id,)
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Could not load settings: {e}") from e

        if not row:
            return {}

        try:
            data = json.loads(row["data"])
        except json.JSONDecodeError as e:
            logger.error(f"Stored settings for {self.plugin_id} are not valid JSON: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Stored settings for {self.plugin_id} are not an object, ignoring")
            return {}

        return data

    def save_settings(self, data: dict):
        """
        Replace the settings blob.

        Raises:
            PersistenceFailure: If the write fails
        """
        try:
            payload = json.dumps(data)
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO plugin_data (plugin_id, data, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(plugin_id) DO UPDATE SET
                        data = excluded.data,
                        updated_at = excluded.updated_at
                    """,
                    (self.plugin_id, payload, datetime.utcnow().isoformat()),
                )
                conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceFailure(f"Could not save settings: {e}") from e

        logger.debug(f"Saved settings for {self.plugin_id} ({len(payload)} bytes)")
