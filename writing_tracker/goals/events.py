"""Goals-changed notification bus."""

import logging
from typing import Callable

from .models import Goal

logger = logging.getLogger(__name__)

GoalsSnapshot = list[tuple[str, Goal]]
GoalsListener = Callable[[GoalsSnapshot], None]


class NotificationBus:
    """Announces "goals changed" to whoever is listening right now."""

    def __init__(self):
        self._listeners: list[GoalsListener] = []

    def subscribe(self, listener: GoalsListener) -> None:
        """Register a listener for goal snapshots."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: GoalsListener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, snapshot: GoalsSnapshot) -> None:
        """
        Deliver a snapshot to every current listener.

        Nothing is queued: listeners that subscribe later never see it.
        """
        logger.debug(f"Publishing {len(snapshot)} goals to {len(self._listeners)} listeners")

        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Goals listener {listener!r} failed: {e}")
