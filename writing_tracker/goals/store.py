"""Goal store backed by the settings blob."""

import logging
from dataclasses import replace
from typing import Optional

from writing_tracker.storage.database import SettingsDatabase

from .events import GoalsSnapshot, NotificationBus
from .models import Goal

logger = logging.getLogger(__name__)

GOALS_KEY = "writingGoals"


class GoalStore:
    """
    Owns every Goal record.

    Each mutation rewrites the whole settings blob and then publishes a
    snapshot on the notification bus. If the write fails the in-memory
    change is kept, nothing is published and PersistenceFailure propagates;
    the next successful save writes the reconciled state.
    """

    def __init__(self, database: SettingsDatabase, bus: NotificationBus):
        self.database = database
        self.bus = bus
        self._goals: dict[str, Goal] = {}
        self._extra_settings: dict = {}

    def load(self) -> None:
        """Load goals from the settings blob, replacing what is in memory."""
        data = self.database.load_settings()

        raw_goals = data.get(GOALS_KEY) or {}
        self._extra_settings = {k: v for k, v in data.items() if k != GOALS_KEY}

        goals = {}
        for path, record in raw_goals.items():
            try:
                goals[path] = Goal.from_dict(path, record)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed goal for {path}: {e}")
        self._goals = goals

        logger.info(f"Loaded {len(self._goals)} writing goals")

    def create(
        self,
        path: str,
        daily_goal: int,
        total_goal: int,
        initial_word_count: int,
    ) -> Goal:
        """Insert or replace the goal at path with zeroed progress."""
        goal = Goal(
            target_path=path,
            daily_goal=daily_goal,
            total_goal=total_goal,
            daily_progress=0,
            total_progress=0,
            initial_word_count=initial_word_count,
            previous_word_count=initial_word_count,
        )
        # A replaced goal keeps its position in list_all
        self._goals[path] = goal
        logger.info(
            f"Set goal for {path}: daily={daily_goal}, total={total_goal}, "
            f"initial words={initial_word_count}"
        )
        self._commit()
        return replace(goal)

    def get(self, path: str) -> Optional[Goal]:
        """Exact-path lookup. Returns a copy."""
        goal = self._goals.get(path)
        return replace(goal) if goal else None

    def __contains__(self, path: str) -> bool:
        return path in self._goals

    def __len__(self) -> int:
        return len(self._goals)

    def update_progress(
        self,
        path: str,
        daily_progress: int,
        total_progress: int,
        previous_word_count: Optional[int] = None,
    ) -> Goal:
        """
        Overwrite the progress counters of an existing goal.

        Raises:
            KeyError: If there is no goal at path
        """
        goal = self._goals[path]
        goal.daily_progress = daily_progress
        goal.total_progress = total_progress
        if previous_word_count is not None:
            goal.previous_word_count = previous_word_count

        self._commit()
        return replace(goal)

    def delete(self, path: str) -> bool:
        """
        Remove the goal at path. Returns False if there was none.

        The blob is saved and a snapshot published either way, so a listener
        can always treat a remove command as a change.
        """
        removed = self._goals.pop(path, None) is not None
        if removed:
            logger.info(f"Removed goal for {path}")
        else:
            logger.debug(f"No goal to remove for {path}")

        self._commit()
        return removed

    def clear_all(self) -> None:
        """Remove every goal."""
        count = len(self._goals)
        self._goals = {}
        logger.info(f"Cleared {count} writing goals")
        self._commit()

    def list_all(self) -> GoalsSnapshot:
        """Snapshot of (path, goal) pairs in insertion order."""
        return [(path, replace(goal)) for path, goal in self._goals.items()]

    def to_settings(self) -> dict:
        """Build the settings blob for the current state."""
        return {
            **self._extra_settings,
            GOALS_KEY: {path: goal.to_dict() for path, goal in self._goals.items()},
        }

    def _commit(self) -> None:
        """Persist the whole blob, then notify listeners."""
        self.database.save_settings(self.to_settings())
        self.bus.publish(self.list_all())
