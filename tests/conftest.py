# tests/conftest.py
"""
Shared fixtures for writing tracker tests.

Provides a temporary vault directory, a SQLite settings database and a
goal store / progress engine wired to them.
"""

from pathlib import Path

import pytest

from writing_tracker.goals.engine import ProgressEngine
from writing_tracker.goals.events import NotificationBus
from writing_tracker.goals.store import GoalStore
from writing_tracker.storage.database import SettingsDatabase
from writing_tracker.vault.local import LocalVault


@pytest.fixture
def vault_dir(tmp_path):
    """Empty vault directory."""
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def write_note(vault_dir):
    """Write a file into the vault, creating folders as needed."""

    def _write(relative_path: str, content: str) -> Path:
        file_path = vault_dir / relative_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        return file_path

    return _write


@pytest.fixture
def vault(vault_dir):
    """LocalVault over the temporary vault directory."""
    return LocalVault(str(vault_dir), poll_interval=0.05)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "settings.db")


@pytest.fixture
def database(db_path):
    return SettingsDatabase(db_path)


@pytest.fixture
def bus():
    return NotificationBus()


@pytest.fixture
def published(bus):
    """Snapshots published on the bus, in order."""
    snapshots = []
    bus.subscribe(snapshots.append)
    return snapshots


@pytest.fixture
def store(database, bus):
    goal_store = GoalStore(database, bus)
    goal_store.load()
    return goal_store


@pytest.fixture
def engine(store, vault):
    return ProgressEngine(store, vault)
