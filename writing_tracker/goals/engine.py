"""Progress calculation from vault content changes."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from writing_tracker.vault.paths import is_markdown, normalize_path

from .errors import NotFound
from .models import ChangeTarget, FileTarget, FolderTarget, Goal, parse_goal_input
from .store import GoalStore
from .wordcount import count_words

logger = logging.getLogger(__name__)

ReadContent = Callable[[str], Awaitable[str]]


class ProgressEngine:
    """Turns word-count observations into goal progress."""

    def __init__(self, store: GoalStore, vault):
        """
        Initialize engine.

        Args:
            store: Goal store to read and update
            vault: Vault adapter (LocalVault or HostClient)
        """
        self.store = store
        self.vault = vault

    async def set_goal(self, path: str, daily_goal, total_goal) -> Goal:
        """
        Create or replace the goal for a file or folder.

        The path is normalized first ("book/" and "/book" both become "book")
        so it matches the paths change events carry. The initial word count
        is taken from the file's current content. Folders start from 0; their
        progress is the sum of their members'.

        Raises:
            InvalidGoalInput: If the goal numbers are not non-negative integers
            NotFound: If a markdown file target does not exist
        """
        goal_input = parse_goal_input(daily_goal, total_goal)
        path = normalize_path(path)

        initial_word_count = 0
        if is_markdown(path):
            initial_word_count = count_words(await self.vault.read_file(path))

        return self.store.create(
            path,
            daily_goal=goal_input.daily_goal,
            total_goal=goal_input.total_goal,
            initial_word_count=initial_word_count,
        )

    def get_goal(self, path: str) -> Optional[Goal]:
        return self.store.get(normalize_path(path))

    def remove_goal(self, path: str) -> bool:
        return self.store.delete(normalize_path(path))

    def clear_all_goals(self) -> None:
        self.store.clear_all()

    def resolve_target(self, path: str) -> Optional[ChangeTarget]:
        """
        Find the goal a change to path counts towards.

        A goal on the file itself wins over a goal on its parent folder.
        Folder goals only match the exact parent folder path.
        """
        path = normalize_path(path)
        if path in self.store:
            return FileTarget(path)

        folder_path = self.vault.get_parent_folder(path)
        if folder_path in self.store:
            return FolderTarget(folder_path, changed_path=path)

        return None

    async def on_content_changed(
        self, path: str, read_content: Optional[ReadContent] = None
    ) -> Optional[Goal]:
        """
        Update progress after a file's content changed.

        Args:
            path: Vault path of the changed file
            read_content: Async reader for file content, defaults to the vault

        Returns:
            The updated goal, or None if nothing was tracked or updated
        """
        read_content = read_content or self.vault.read_file
        target = self.resolve_target(path)

        match target:
            case FileTarget(path=file_path):
                return await self._update_file_goal(file_path, read_content)
            case FolderTarget(path=folder_path):
                return await self._update_folder_goal(folder_path, read_content)
            case None:
                logger.debug(f"No goal tracks {path}")
                return None

    async def _update_file_goal(self, path: str, read_content: ReadContent) -> Optional[Goal]:
        """Apply the word-count delta since the last observation."""
        try:
            content = await read_content(path)
        except NotFound:
            logger.warning(f"Tracked file {path} no longer exists, skipping update")
            return None

        current_word_count = count_words(content)

        # Read the goal after the await so a concurrent edit is not overwritten
        goal = self.store.get(path)
        if goal is None:
            logger.debug(f"Goal for {path} was removed during read")
            return None

        delta = current_word_count - goal.baseline_word_count()

        updated = self.store.update_progress(
            path,
            daily_progress=goal.daily_progress + delta,
            total_progress=goal.total_progress + delta,
            previous_word_count=current_word_count,
        )

        logger.info(
            f"  {path}: {current_word_count} words ({delta:+d}), "
            f"daily {updated.daily_progress}/{updated.daily_goal}, "
            f"total {updated.total_progress}/{updated.total_goal}"
        )
        return updated

    async def _update_folder_goal(self, folder_path: str, read_content: ReadContent) -> Optional[Goal]:
        """
        Recompute a folder's aggregate from its member files.

        The daily figure is replaced with the fresh aggregate; the total
        accumulates the difference from the previous aggregate.
        """
        members = await self.vault.list_markdown_files(folder_path)

        # Members without their own goal contribute nothing, so they are not read
        tracked = [member for member in members if member in self.store]

        contributions = await asyncio.gather(
            *(self._member_contribution(member, read_content) for member in tracked)
        )
        aggregate = sum(contributions)

        goal = self.store.get(folder_path)
        if goal is None:
            logger.debug(f"Goal for {folder_path} was removed during aggregation")
            return None

        change = aggregate - goal.daily_progress

        updated = self.store.update_progress(
            folder_path,
            daily_progress=aggregate,
            total_progress=goal.total_progress + change,
        )

        logger.info(
            f"  {folder_path}/: {len(tracked)} tracked of {len(members)} files ({change:+d}), "
            f"daily {updated.daily_progress}/{updated.daily_goal}, "
            f"total {updated.total_progress}/{updated.total_goal}"
        )
        return updated

    async def _member_contribution(self, path: str, read_content: ReadContent) -> int:
        """Words a member file has gained since its own goal was set."""
        try:
            content = await read_content(path)
        except NotFound:
            logger.warning(f"Folder member {path} no longer exists, counting it as 0")
            return 0

        goal = self.store.get(path)
        if goal is None:
            return 0

        return count_words(content) - goal.initial_word_count
