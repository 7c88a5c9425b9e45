# tests/test_database.py
"""Tests for the SQLite settings blob storage."""

import sqlite3

import pytest

from writing_tracker.goals.errors import PersistenceFailure
from writing_tracker.storage.database import SettingsDatabase


class TestSettingsDatabase:
    """Tests for SettingsDatabase."""

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "settings.db"
        SettingsDatabase(str(db_path))
        assert db_path.exists()

    def test_load_empty(self, database):
        assert database.load_settings() == {}

    def test_save_and_load(self, database):
        database.save_settings({"writingGoals": {"a.md": {"dailyGoal": 1}}})
        assert database.load_settings() == {"writingGoals": {"a.md": {"dailyGoal": 1}}}

    def test_save_overwrites(self, database):
        database.save_settings({"v": 1})
        database.save_settings({"v": 2})
        assert database.load_settings() == {"v": 2}

    def test_plugins_are_isolated(self, db_path):
        first = SettingsDatabase(db_path, plugin_id="first")
        second = SettingsDatabase(db_path, plugin_id="second")

        first.save_settings({"owner": "first"})

        assert second.load_settings() == {}

    def test_corrupt_blob_loads_empty(self, database):
        with sqlite3.connect(database.db_path) as conn:
            conn.execute(
                "INSERT INTO plugin_data (plugin_id, data, updated_at) VALUES (?, ?, ?)",
                (database.plugin_id, "{not json", "2024-01-01T00:00:00"),
            )
            conn.commit()

        assert database.load_settings() == {}

    def test_unserializable_blob_raises(self, database):
        with pytest.raises(PersistenceFailure):
            database.save_settings({"bad": object()})

    def test_unwritable_database_raises(self, database):
        with sqlite3.connect(database.db_path) as conn:
            conn.execute("DROP TABLE plugin_data")
            conn.commit()

        with pytest.raises(PersistenceFailure):
            database.save_settings({"v": 1})
