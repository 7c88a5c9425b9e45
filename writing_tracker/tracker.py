"""Wires the vault, goal store, engine and panel together."""

import asyncio
import logging
from typing import Optional

from .config import Settings
from .dashboard.renderer import DashboardRenderer, GoalsPanel
from .goals.debounce import ChangeDebouncer
from .goals.engine import ProgressEngine
from .goals.events import NotificationBus
from .goals.store import GoalStore
from .storage.database import SettingsDatabase
from .vault.client import HostClient
from .vault.local import LocalVault
from .vault.paths import normalize_path

logger = logging.getLogger(__name__)


class WritingTracker:
    """Runtime for the writing tracker: owns every component."""

    def __init__(self, config: Settings, vault=None):
        """
        Build components from settings.

        Args:
            config: Application settings
            vault: Vault adapter to use instead of the configured one
        """
        self.config = config
        self.bus = NotificationBus()
        self.database = SettingsDatabase(config.settings_db_path, config.plugin_id)
        self.store = GoalStore(self.database, self.bus)
        self.vault = vault if vault is not None else self._build_vault()
        self.engine = ProgressEngine(self.store, self.vault)
        self.debouncer = ChangeDebouncer(self._process_change, wait=config.debounce_seconds)
        self.panel = GoalsPanel(DashboardRenderer(config.dashboard_dir), self.bus)
        self._watch_task: Optional[asyncio.Task] = None

    def _build_vault(self):
        """Create the vault adapter named by VAULT_SOURCE."""
        source = self.config.vault_source.lower()
        if source == "local":
            return LocalVault(self.config.vault_path, poll_interval=self.config.poll_interval)
        if source == "host":
            return HostClient(self.config.host_url, self.config.host_token)
        raise ValueError(f"Unknown vault source: {self.config.vault_source}")

    @property
    def uses_host(self) -> bool:
        return isinstance(self.vault, HostClient)

    async def start(self):
        """Load saved goals, connect to the vault and start watching it."""
        self.store.load()
        self.panel.on_goals_changed(self.store.list_all())

        if self.uses_host:
            await self.vault.connect()

        if self.config.watch_vault:
            self._watch_task = asyncio.create_task(self._watch())

        logger.info(f"Writing tracker started with {len(self.store)} goals")

    async def stop(self):
        """Stop watching, finish pending recounts and disconnect."""
        if self._watch_task:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        await self.debouncer.flush()

        if self.uses_host:
            await self.vault.disconnect()

        self.panel.close()
        logger.info("Writing tracker stopped")

    async def _watch(self):
        """Forward vault modify events to the debouncer until cancelled."""
        try:
            await self.vault.watch(self.handle_change)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Vault watcher stopped: {e}", exc_info=True)

    async def handle_change(self, path: str, content: Optional[str] = None):
        """Entry point for modify events."""
        self.debouncer.submit(normalize_path(path), content)

    async def _process_change(self, path: str, content: Optional[str]):
        """Debounced handler: recount using the event's content when it has one."""
        read_content = None
        if content is not None:
            async def read_content(member_path: str) -> str:
                if member_path == path:
                    return content
                return await self.vault.read_file(member_path)

        await self.engine.on_content_changed(path, read_content)
