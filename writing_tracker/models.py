"""HTTP API models."""

from typing import Optional, Union

from pydantic import BaseModel

from .goals.models import Goal


class GoalRequest(BaseModel):
    """Body for PUT /api/goals.

    Goal numbers arrive as typed into the goal form, so strings are
    accepted here and validated by the engine.
    """

    path: str
    daily_goal: Union[int, str] = 0
    total_goal: Union[int, str] = 0


class GoalResponse(BaseModel):
    """A goal as shown to the panel."""

    path: str
    daily_goal: int
    total_goal: int
    daily_progress: int
    total_progress: int
    initial_word_count: int
    previous_word_count: Optional[int] = None

    @classmethod
    def from_goal(cls, goal: Goal) -> "GoalResponse":
        return cls(
            path=goal.target_path,
            daily_goal=goal.daily_goal,
            total_goal=goal.total_goal,
            daily_progress=goal.daily_progress,
            total_progress=goal.total_progress,
            initial_word_count=goal.initial_word_count,
            previous_word_count=goal.previous_word_count,
        )


class ChangeEvent(BaseModel):
    """Body for POST /api/changes, sent by hosts that push modify events."""

    path: str
    content: Optional[str] = None


class ChangeResponse(BaseModel):
    """Acknowledgement for a queued change event."""

    status: str = "queued"
    path: str
    tracked: bool
    debounce_seconds: float
