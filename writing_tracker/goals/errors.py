"""Errors raised by the writing tracker."""


class WritingTrackerError(Exception):
    """Base class for writing tracker errors."""


class NotFound(WritingTrackerError):
    """A vault path no longer exists."""

    def __init__(self, path: str):
        super().__init__(f"Path not found: {path}")
        self.path = path


class InvalidGoalInput(WritingTrackerError):
    """User supplied a goal value that is not a non-negative integer."""


class PersistenceFailure(WritingTrackerError):
    """Settings blob could not be written or read."""


class HostError(WritingTrackerError):
    """Host application rejected a command or broke the protocol."""
