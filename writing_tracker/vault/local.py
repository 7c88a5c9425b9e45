"""Vault backed by a local directory."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from writing_tracker.goals.errors import NotFound

from .paths import ROOT_FOLDER, candidate_targets, get_parent_folder, normalize_path

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, Optional[str]], Awaitable[None]]


class LocalVault:
    """Reads markdown files from a directory and polls it for modifications."""

    def __init__(self, root: str, poll_interval: float = 2.0):
        """
        Initialize vault.

        Args:
            root: Vault directory
            poll_interval: Seconds between modification scans
        """
        self.root = Path(root).expanduser().resolve()
        self.poll_interval = poll_interval
        self._mtimes: dict[str, float] = {}

    def _resolve(self, path: str) -> Path:
        """Map a vault path to a filesystem path inside the root."""
        vault_path = normalize_path(path)
        if vault_path == ROOT_FOLDER:
            return self.root
        full_path = (self.root / vault_path).resolve()
        if not full_path.is_relative_to(self.root):
            raise NotFound(path)
        return full_path

    def _to_vault_path(self, file_path: Path) -> str:
        return file_path.relative_to(self.root).as_posix()

    async def read_file(self, path: str) -> str:
        """
        Read a file's content.

        Raises:
            NotFound: If the file does not exist
        """
        file_path = self._resolve(path)
        try:
            return file_path.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFound(path) from e

    async def list_markdown_files(self, folder_path: str) -> list[str]:
        """Markdown files directly inside a folder."""
        folder = self._resolve(folder_path)
        if not folder.is_dir():
            return []
        return sorted(
            self._to_vault_path(p) for p in folder.glob("*.md") if p.is_file()
        )

    async def list_files(self) -> list[str]:
        """Every file in the vault, skipping hidden directories."""
        if not self.root.is_dir():
            return []
        return sorted(
            self._to_vault_path(p)
            for p in self.root.rglob("*")
            if p.is_file() and not self._is_hidden(p)
        )

    def get_parent_folder(self, path: str) -> str:
        return get_parent_folder(path)

    async def list_targets(self) -> list[str]:
        """Files and folders that can be given a goal."""
        return candidate_targets(await self.list_files())

    def _is_hidden(self, file_path: Path) -> bool:
        return any(part.startswith(".") for part in file_path.relative_to(self.root).parts)

    def scan_changes(self) -> list[str]:
        """
        Compare markdown mtimes against the previous scan.

        Returns:
            Paths that are new or modified since the last call
        """
        current = {}
        for file_path in self.root.rglob("*.md"):
            if self._is_hidden(file_path):
                continue
            try:
                current[self._to_vault_path(file_path)] = file_path.stat().st_mtime
            except FileNotFoundError:
                continue  # Deleted between listing and stat

        changed = [
            path for path, mtime in current.items() if self._mtimes.get(path) != mtime
        ]
        self._mtimes = current
        return sorted(changed)

    async def watch(self, on_change: ChangeCallback):
        """
        Poll for modified markdown files until cancelled.

        The first scan only records a baseline.
        """
        logger.info(f"Watching {self.root} every {self.poll_interval}s")
        self.scan_changes()

        while True:
            await asyncio.sleep(self.poll_interval)
            for path in self.scan_changes():
                logger.debug(f"Detected change: {path}")
                await on_change(path, None)
