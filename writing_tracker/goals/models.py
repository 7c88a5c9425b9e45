"""Data models for writing goals."""

from dataclasses import dataclass
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .errors import InvalidGoalInput


@dataclass
class Goal:
    """A word-count goal for a file or folder."""
    target_path: str
    daily_goal: int
    total_goal: int

    # Progress data
    daily_progress: int = 0
    total_progress: int = 0
    initial_word_count: int = 0
    previous_word_count: Optional[int] = None  # None for records saved before it was tracked

    def baseline_word_count(self) -> int:
        """Word count the next delta is measured from."""
        if self.previous_word_count is None:
            return self.initial_word_count
        return self.previous_word_count

    def to_dict(self) -> dict:
        """Serialize to the settings blob layout."""
        data = {
            "dailyGoal": self.daily_goal,
            "totalGoal": self.total_goal,
            "dailyProgress": self.daily_progress,
            "totalProgress": self.total_progress,
            "initialWordCount": self.initial_word_count,
        }
        if self.previous_word_count is not None:
            data["previousWordCount"] = self.previous_word_count
        return data

    @classmethod
    def from_dict(cls, target_path: str, data: dict) -> "Goal":
        """Deserialize a record from the settings blob."""
        previous = data.get("previousWordCount")
        return cls(
            target_path=target_path,
            daily_goal=int(data.get("dailyGoal", 0)),
            total_goal=int(data.get("totalGoal", 0)),
            daily_progress=int(data.get("dailyProgress", 0)),
            total_progress=int(data.get("totalProgress", 0)),
            initial_word_count=int(data.get("initialWordCount", 0)),
            previous_word_count=int(previous) if previous is not None else None,
        )


@dataclass(frozen=True)
class FileTarget:
    """Change resolved to a goal on the changed file itself."""
    path: str


@dataclass(frozen=True)
class FolderTarget:
    """Change resolved to a goal on the changed file's parent folder."""
    path: str
    changed_path: str


ChangeTarget = Union[FileTarget, FolderTarget]


class GoalInput(BaseModel):
    """Goal numbers entered by the user."""

    daily_goal: int = Field(ge=0)
    total_goal: int = Field(ge=0)


def parse_goal_input(daily_goal, total_goal) -> GoalInput:
    """
    Validate user-entered goal numbers.

    Accepts ints or integer strings (as typed into a form field).

    Raises:
        InvalidGoalInput: If either value is not a non-negative integer
    """
    if isinstance(daily_goal, str):
        daily_goal = daily_goal.strip()
    if isinstance(total_goal, str):
        total_goal = total_goal.strip()

    try:
        return GoalInput(daily_goal=daily_goal, total_goal=total_goal)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise InvalidGoalInput(f"Goals must be non-negative integers ({fields})") from e
